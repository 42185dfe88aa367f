"""Track the physical position of rows through a query.

Filtering, sorting and grouping change which rows are
part of the data and in which order they are emitted,
so after a query there is no way to know where each row
was in the original table.

The :class:`RowNumberNode` addresses that by prepending
a ``ROWNUM`` column that holds the physical position of
each row in the table store. Updates and deletions rely on
it to know which rows of the store have to be modified.

Physical positions are 1-based and count the header rows
that precede the data, like row numbers in a spreadsheet::

    1 | name  | age     <- header
    2 | Alice | 30      <- ROWNUM 2
    3 | Bob   | 25      <- ROWNUM 3
"""

from typing import Any, Iterator

from ..errors import DuplicateColumn
from .base import QueryPlanNode, Table

ROWNUM = "ROWNUM"


class RowNumberNode(QueryPlanNode):
    """Prepend the ``ROWNUM`` column to the emitted batches.

    Rows are numbered starting at ``offset + 1``
    and the numbering continues across batches.

    >>> from sheetquery.compute import TableDataSource
    >>> data = Table(["name"], [["Alice"], ["Bob"]])
    >>> batch = next(RowNumberNode(1, TableDataSource(data)).batches())
    >>> batch.columns, batch.rows
    (['ROWNUM', 'name'], [[2, 'Alice'], [3, 'Bob']])
    """

    def __init__(self, offset: int, child: QueryPlanNode) -> None:
        """
        :param offset: How many rows precede the first row of data, usually
                       the number of header rows.
        :param child: The node emitting the data to be numbered.
        """
        self.offset = offset
        self.child = child

    def __str__(self) -> str:
        return f"RowNumberNode(offset={self.offset}, {self.child})"

    def batches(self) -> Iterator[Table]:
        position = self.offset
        for batch in self.child.batches():
            if ROWNUM in batch.columns:
                raise DuplicateColumn(ROWNUM)
            rows = []
            for row in batch.rows:
                position += 1
                rows.append([position] + row)
            yield Table([ROWNUM] + batch.columns, rows)


def strip_rownum(record: dict[str, Any]) -> tuple[int | None, dict[str, Any]]:
    """Split the ``ROWNUM`` from the rest of the record.

    >>> strip_rownum({"ROWNUM": 2, "name": "Alice"})
    (2, {'name': 'Alice'})
    """
    record = dict(record)
    rownum = record.pop(ROWNUM, None)
    return rownum, record
