"""Manages creation of a query plan from a query.

The :class:`QueryPlanner` class is responsible for creating a compute engine
query plan from a :class:`sheetquery.query.model.Query`.

Example:

    >>> from sheetquery.compute import Table, TableDataSource
    >>> from sheetquery.query.model import Query
    >>> query = Query.from_dict({"columns": ["name"], "where": {"age": (">", 18)}})
    >>> plan = QueryPlanner(query).plan(TableDataSource(Table(["name", "age"])))
    >>> str(plan)
    "ProjectNode(select=['name'], child=FilterNode(filter=ALL(Condition(age > 18)), child=TableDataSource(columns=['name', 'age'], rows=0)))"
"""

import logging
from typing import Any

from ..compute import (
    AggregateNode,
    FilterNode,
    ProjectNode,
    RowNumberNode,
    SortNode,
    Table,
)
from ..compute.base import QueryPlanNode
from ..compute.expressions import Conjunction
from ..compute.sorting import parse_direction
from .model import Options, Query

log = logging.getLogger(__name__)


class QueryPlanner:
    """Create a compute engine query plan from a query."""

    def __init__(
        self, query: Query, options: Options | None = None, header_rows: int = 1
    ) -> None:
        """
        :param query: The query to plan.
        :param options: The options of the query, only ``with_rownum`` affects the plan.
        :param header_rows: How many rows precede the data in the table store,
                            used to compute the ``ROWNUM`` values.
        """
        self.query = query
        self.options = options or Options()
        self.header_rows = header_rows

    def plan(self, source: QueryPlanNode) -> QueryPlanNode:
        """Generate a query plan reading the data from ``source``.

        The plan has the following structure, where each node
        is only present when the query requires it::

            - ProjectNode
                - SortNode
                    - AggregateNode
                        - FilterNode
                            - RowNumberNode
                                - DataSource

        The structure is based on the fact that:

        - Row numbers must be computed on the data as it is in the store,
          before any row is discarded or moved.
        - Then we filter the rows as that reduces the amount of data
          we have to deal with and groups must only contain matching rows.
        - Grouping happens before sorting, so that the query can be
          sorted by the aggregated columns.
        - Finally the projection picks the requested columns,
          which might be aggregated columns too.
        """
        query = self.query
        plan = self._parse_order_by(
            query.order_by,
            child=self._parse_group_by(
                query,
                child=self._parse_where(
                    query, child=self._parse_rownum(source)
                ),
            ),
        )
        plan = self._parse_columns(query.columns, child=plan)
        log.debug("Planned query: %s", plan)
        return plan

    def _parse_rownum(self, child: QueryPlanNode) -> QueryPlanNode:
        if not self.options.with_rownum:
            return child
        return RowNumberNode(self.header_rows, child)

    def _parse_where(self, query: Query, child: QueryPlanNode) -> QueryPlanNode:
        conditions = query.conditions
        if not conditions:
            return child
        return FilterNode(Conjunction(conditions, query.filter_mode), child)

    def _parse_group_by(self, query: Query, child: QueryPlanNode) -> QueryPlanNode:
        if query.group_by is None:
            return child
        return AggregateNode(
            query.group_by.keys, query.group_by.build_aggregations(), child
        )

    def _parse_order_by(
        self, order_by: dict[str, str] | None, child: QueryPlanNode
    ) -> QueryPlanNode:
        if not order_by:
            return child
        return SortNode(
            list(order_by.keys()),
            [parse_direction(direction) for direction in order_by.values()],
            child,
        )

    def _parse_columns(
        self, columns: list[str] | None, child: QueryPlanNode
    ) -> QueryPlanNode:
        if columns is None:
            return child
        return ProjectNode(columns, child)


def shape_result(table: Table, options: Options) -> Any:
    """Convert the result of a query to the shape requested by the options.

    Returns ``(columns, rows)`` when ``as_array`` is set,
    otherwise a list of ``{column: value}`` records.
    """
    if options.as_array:
        return table.columns, table.rows
    return table.to_records()


def records_from_matrix(columns: list[str], rows: list[list[Any]]) -> list[dict[str, Any]]:
    """Rebuild the records from the ``(columns, rows)`` shape of a result.

    >>> records_from_matrix(["name", "age"], [["Alice", 30]])
    [{'name': 'Alice', 'age': 30}]
    """
    return Table(columns, rows).to_records()


def execute(
    source: QueryPlanNode,
    query: Query | dict | None = None,
    options: Options | dict | None = None,
    header_rows: int = 1,
) -> Any:
    """Run a query against the data emitted by ``source``.

    >>> from sheetquery.compute import TableDataSource
    >>> data = Table(["name", "age"], [["Alice", 30], ["Bob", 25]])
    >>> execute(TableDataSource(data), {"orderBy": {"age": "ASC"}}, {"asArray": True})
    (['name', 'age'], [['Bob', 25], ['Alice', 30]])
    """
    query = Query.from_dict(query)
    options = Options.from_dict(options)
    result = QueryPlanner(query, options, header_rows).plan(source).collect()
    log.debug("Query returned %d rows", result.num_rows)
    return shape_result(result, options)
