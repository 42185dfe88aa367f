"""SheetQuery

An in-memory query engine for spreadsheet-like tables.

SheetQuery allows to filter, group, aggregate, sort and project
the rows of a table using declarative queries expressed as plain
Python structures, and to reconcile the results back into
inserts, updates and deletions of the same table.

The platform is constituted by multiple components, each isolated within its own
package and each self documented:

* The Compute Engine, in charge of executing query plans on the data.
* The Query layer, which converts queries into plans and exposes
  the ``select``, ``insert``, ``bulk_insert``, ``update`` and ``remove``
  operations.
* The Table Stores, which provide access to the tables being queried.

>>> from sheetquery import MemoryTableStore, select
>>> store = MemoryTableStore(["name", "age"], [["Alice", 30], ["Bob", 25]])
>>> select(store, {"where": {"name": ("LIKE", "A%")}})
[{'name': 'Alice', 'age': 30}]
"""

from . import compute
from .errors import (
    ConflictingFilter,
    DuplicateColumn,
    IncomparableValues,
    InvalidAggregation,
    InvalidOperand,
    InvalidOperator,
    InvalidRecordKey,
    QueryError,
    UnknownColumn,
)
from .query import Options, Query, bulk_insert, insert, remove, select, update
from .stores import MemoryTableStore, TableStore

__all__ = (
    "compute",
    "select",
    "insert",
    "bulk_insert",
    "update",
    "remove",
    "Query",
    "Options",
    "TableStore",
    "MemoryTableStore",
    "QueryError",
    "UnknownColumn",
    "InvalidRecordKey",
    "InvalidOperator",
    "InvalidOperand",
    "InvalidAggregation",
    "ConflictingFilter",
    "DuplicateColumn",
    "IncomparableValues",
)
