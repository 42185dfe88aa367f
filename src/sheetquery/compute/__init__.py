"""The SheetQuery Compute Engine

The compute engine defines the in-memory
format for query plans and the plan nodes
supported.

The engine deals with :class:`Table` objects, a list
of column names and a list of rows of plain Python values,
and each node emits new tables as the result of its execution.

This allows to easily build compute pipelines like::

    (Table)-->Node1--(Table)-->Node2--(Table)-->...

The query plan nodes themselves are in charge of their execution,
this keeps the behavior near to the node and thus makes easy to
know how a Node is actually executed without having to look around too much.

Building a query plan requires to combine the nodes that we want
to be executed starting with a ``DataSource`` node as the
leaf node of a query:

>>> from sheetquery.compute import Table, TableDataSource, FilterNode, Condition
>>> data = Table(["animals", "n_legs"], [
...    ["Flamingo", 2], ["Horse", 4], ["Brittle stars", 5], ["Centipede", 100]
... ])
>>> # where n_legs >= 5
>>> query = FilterNode(Condition("n_legs", ">=", 5), child=TableDataSource(data))
>>> for batch in query.batches():
...     print(batch.rows)
[['Brittle stars', 5], ['Centipede', 100]]
"""

from .aggregate import (
    AggregateNode,
    CountAggregation,
    MaxAggregation,
    MeanAggregation,
    MinAggregation,
    SumAggregation,
    aggregate,
    make_aggregation,
)
from .base import ColumnRef, Table, col
from .datasources import (
    CSVDataSource,
    ParquetDataSource,
    PyArrowTableDataSource,
    TableDataSource,
)
from .expressions import Condition, Conjunction, evaluate, wildcard_to_regex
from .filtering import FilterNode, filter_rows
from .rownum import ROWNUM, RowNumberNode, strip_rownum
from .selection import ProjectNode, project
from .sorting import SortNode, order_rows

__all__ = (
    "Table",
    "CSVDataSource",
    "ParquetDataSource",
    "PyArrowTableDataSource",
    "TableDataSource",
    "FilterNode",
    "Condition",
    "Conjunction",
    "evaluate",
    "wildcard_to_regex",
    "filter_rows",
    "col",
    "ColumnRef",
    "SortNode",
    "order_rows",
    "ProjectNode",
    "project",
    "RowNumberNode",
    "ROWNUM",
    "strip_rownum",
    "AggregateNode",
    "aggregate",
    "make_aggregation",
    "CountAggregation",
    "MaxAggregation",
    "MeanAggregation",
    "MinAggregation",
    "SumAggregation",
)
