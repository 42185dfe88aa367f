"""Query plan nodes that implement projection of columns.

A common request in queries is to select specific columns,
possibly in a different order than the one of the table.
An example is the ``columns`` part of a query.

This module implements the basic projection capabilities.
"""

from typing import Iterator

from .base import QueryPlanNode, Table
from .datasources import TableDataSource


class ProjectNode(QueryPlanNode):
    """Project data by selecting specific columns.

    The projection expects a list of column names to select,
    the emitted batches will only have those columns in the
    requested order.

    >>> data = Table(["a", "b", "c"], [[1, 4, 7], [2, 5, 8]])
    >>> batch = next(ProjectNode(["c", "a"], TableDataSource(data)).batches())
    >>> batch.columns, batch.rows
    (['c', 'a'], [[7, 1], [8, 2]])
    """

    def __init__(self, select: list[str] | None, child: QueryPlanNode) -> None:
        """
        :param select: The list of column names to select.
                       ``None`` means select all columns.
        :param child: The node emitting the data to be projected.
        """
        self.select = None if select is None else list(select)
        self.child = child

    def __str__(self) -> str:
        return f"ProjectNode(select={self.select}, child={self.child})"

    def batches(self) -> Iterator[Table]:
        """Apply the projection to the child node.

        For each batch yielded by the child node,
        pick the cells of the selected columns.
        """
        for batch in self.child.batches():
            if self.select is None:
                yield batch
                continue

            indices = [batch.column_index(name) for name in self.select]
            yield Table(self.select, ([row[idx] for idx in indices] for row in batch.rows))


def project(table: Table, columns: list[str]) -> Table:
    """Restrict and reorder the columns of a table.

    :raises sheetquery.errors.UnknownColumn: if any of the columns doesn't exist.
    """
    return next(ProjectNode(columns, TableDataSource(table)).batches())
