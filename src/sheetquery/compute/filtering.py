"""Query plan nodes that implement filtering of rows.

A common request in queries is to filter the data to
pick only the rows that respect a specific filter.
An example is the ``where`` part of a query.

This module implements the basic filtering capabilities.
"""

from typing import Iterable

from .base import Expression, QueryPlanNode, Table
from .expressions import Condition, Conjunction


def filter_rows(
    table: Table, conditions: Iterable[Condition], mode: str = "all"
) -> Table:
    """Keep only the rows of the table matching the conditions.

    The relative order of the rows is preserved.

    >>> table = Table(["name", "age"], [["Alice", 30], ["Bob", 25], ["Carol", 41]])
    >>> filter_rows(table, [Condition("age", ">", 26)]).rows
    [['Alice', 30], ['Carol', 41]]
    >>> filter_rows(table, [Condition("age", ">", 40), Condition("name", "=", "Bob")], "any").rows
    [['Bob', 25], ['Carol', 41]]

    :param table: The table to filter.
    :param conditions: The conditions rows have to satisfy.
    :param mode: ``"all"`` when every condition must be satisfied,
                 ``"any"`` when a single one is enough.
    """
    mask = Conjunction(conditions, mode).apply(table)
    return Table(table.columns, (row for row, keep in zip(table.rows, mask) if keep))


class FilterNode(QueryPlanNode):
    """Filter data based on a predicate expression.

    The filter expects an expression that when applied
    to the batch of data being filtered returns ``True``
    or ``False`` for each row in the data to mark which
    rows have to be preserved and which rows have to be discarded.

    >>> from sheetquery.compute import TableDataSource
    >>> data = Table(["values"], [[1], [2], [3], [4], [5]])
    >>> predicate = Condition("values", ">", 3)
    >>> # predicate returns true for values greater than 3
    >>> predicate.apply(data)
    [False, False, False, True, True]
    >>> next(FilterNode(predicate, TableDataSource(data)).batches()).rows
    [[4], [5]]
    """

    def __init__(self, expression: Expression, child: QueryPlanNode) -> None:
        """
        :param expression: The predicate expression to filter with.
        :param child: The node emitting the data to be filtered.
        """
        self.expression = expression
        self.child = child

    def __str__(self) -> str:
        return f"FilterNode(filter={self.expression}, child={self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Apply the filtering to the child node.

        For each batch yielded by the child node,
        apply the expression and get back a mask
        (a list of only true/false values).

        Based on the mask filter the rows of the batch
        and return only those matching the filter.
        """
        for batch in self.child.batches():
            mask = self.expression.apply(batch)
            yield Table(
                batch.columns, (row for row, keep in zip(batch.rows, mask) if keep)
            )
