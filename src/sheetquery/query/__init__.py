"""Declarative queries over tables.

This module provides support for running queries
described as plain Python structures and for reconciling
their results with the table store through inserts,
updates and deletions.

The query support is constituted by three components:

1. Model
2. Planner
3. Operations

The :mod:`sheetquery.query.model` converts a query dictionary
into a typed :class:`Query`, validating it.

The :class:`sheetquery.query.planner.QueryPlanner` is responsible for
taking the query and generating a query plan for the compute engine to execute.
This is done by generating an equivalent tree of
:class:`sheetquery.compute.base.QueryPlanNode` objects, see the
:mod:`sheetquery.compute` module for more details.

The :mod:`sheetquery.query.operations` module exposes the public
``select``, ``insert``, ``bulk_insert``, ``update`` and ``remove``
operations which load the table from a :class:`sheetquery.stores.TableStore`,
run the plan and write back any change.
"""

from .model import GroupBy, Options, Query
from .operations import bulk_insert, insert, remove, select, update
from .planner import QueryPlanner, execute, records_from_matrix

__all__ = (
    "Query",
    "GroupBy",
    "Options",
    "QueryPlanner",
    "execute",
    "records_from_matrix",
    "select",
    "insert",
    "bulk_insert",
    "update",
    "remove",
)
