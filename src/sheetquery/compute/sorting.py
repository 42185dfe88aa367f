"""Query plan nodes that perform sorting of data.

When computing ranks or looking for most significant
values, it's often necessary to sort the data based
on one or more columns.

Sorting is stable: rows that are equal on all the
sorting keys preserve their original relative order.

This module implements the sorting capabilities.
"""

from typing import Any, Iterator, Mapping, Self

from ..errors import QueryError
from . import values
from .base import QueryPlanNode, Table
from .datasources import TableDataSource

DIRECTIONS = {"ASC": False, "DESC": True}


class SortNode(QueryPlanNode):
    """Sort data in-memory based on one or more columns.

    The node expects a list of columns and a list of
    sort directions. The data will be sorted based on
    the columns in the order they are provided.

    The sort directions are used to specify if the
    sorting should be ascending or descending.

    >>> from sheetquery.compute import TableDataSource
    >>> data = Table(["values"], [[1], [2], [3], [4], [5]])
    >>> # Sort the data in descending order
    >>> sort = SortNode(["values"], [True], TableDataSource(data))
    >>> next(sort.batches()).rows
    [[5], [4], [3], [2], [1]]
    """

    def __init__(
        self, keys: list[str], descending: list[bool], child: QueryPlanNode
    ) -> None:
        """
        :param keys: The columns to sort by in the order they should be sorted.
        :param descending: If each columns should be sorted in a descending order.
        :param child: The node emitting the data to be sorted.
        """
        if len(keys) != len(descending):
            raise ValueError("Keys and descending must have the same length")

        self.sorting_keys = list(keys)
        self.descending_orders = list(descending)
        self.sorting = list(
            zip(keys, ("descending" if desc else "ascending" for desc in descending))
        )
        self.child = child

    def __str__(self) -> str:
        return f"SortNode(sorting={self.sorting}, {self.child})"

    def batches(self) -> Iterator[Table]:
        """The sorting to the child node.

        Batches provided by child node are accumulated
        until they are all loaded in memory, than they
        are merged and sorted as an unique table.
        """
        first_batch = None
        rows: list[list[Any]] = []
        for batch in self.child.batches():
            if first_batch is None:
                first_batch = batch
            rows.extend(batch.rows)

        if first_batch is None:
            return

        sorting_keys_indices = [first_batch.column_index(k) for k in self.sorting_keys]
        yield Table(
            first_batch.columns,
            sorted(
                rows,
                key=lambda row: SortKey(row, sorting_keys_indices, self.descending_orders),
            ),
        )


class SortKey:
    """Makes table rows sortable by Python functions.

    This implements the rich comparison methods to allow
    sorting of rows based on the values of the
    columns in the order they are provided.

    Values are compared with :func:`sheetquery.compute.values.sort_compare`
    so that columns mixing numbers, text and empty cells can be sorted too.
    """

    def __init__(
        self,
        row: list[Any],
        keys_indices: list[int],
        descending_orders: list[bool],
    ) -> None:
        """
        :param row: The row to compare.
        :param key_indices: The indices of the column to use for comparison
        :param descending_orders: Which of the values are compared for descending order
        """
        self.descending_orders = descending_orders
        self.values = [row[colidx] for colidx in keys_indices]

    def __lt__(self, other: Self) -> bool:
        for v1, v2, desc in zip(self.values, other.values, self.descending_orders):
            result = values.sort_compare(v1, v2)
            if result == 0:
                continue
            if desc:
                return result > 0
            else:
                return result < 0
        return False  # All keys are equal


def parse_direction(direction: Any) -> bool:
    """Convert ``ASC`` and ``DESC`` to the descending flag of :class:`SortNode`.

    >>> parse_direction("desc")
    True
    """
    try:
        return DIRECTIONS[direction.upper()]
    except (KeyError, AttributeError):
        raise QueryError(f'Invalid sort direction "{direction}"') from None


def order_rows(table: Table, order_by: Mapping[str, str]) -> Table:
    """Sort the rows of the table.

    The first entry of ``order_by`` is the primary sorting key,
    following entries are used to break ties.

    >>> table = Table(["age", "name"], [[30, "B"], [25, "A"], [30, "A"]])
    >>> order_rows(table, {"age": "ASC", "name": "DESC"}).rows
    [[25, 'A'], [30, 'B'], [30, 'A']]
    """
    keys = list(order_by.keys())
    descending = [parse_direction(d) for d in order_by.values()]
    return next(SortNode(keys, descending, TableDataSource(table)).batches())
