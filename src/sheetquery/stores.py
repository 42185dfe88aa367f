"""Table stores the queries read from and write to.

The query engine does not perform any I/O by itself,
it relies on a :class:`TableStore` to load the current
content of the table and to write back the changes.

A store addresses rows by their *physical position*: the 1-based
index of the row counting the header rows, like row numbers in
a spreadsheet. With a single header row, the first row of data
is at position 2.

:class:`MemoryTableStore` keeps the table in memory and can be
loaded from any data source of the compute engine, for example
a CSV file:

>>> from sheetquery.compute import Table, TableDataSource
>>> store = MemoryTableStore.from_source(TableDataSource(Table(["name"], [["Alice"]])))
>>> store.append_rows([["Bob"]])
>>> store.delete_row(2)
>>> store.read().rows
[['Bob']]
"""

import abc
import logging
from typing import Any, Iterable

from .compute.base import QueryPlanNode, Table

log = logging.getLogger(__name__)


class TableStore(abc.ABC):
    """A backing store holding one table.

    Subclasses provide access to spreadsheets, files or any other
    place where a table can be stored.
    """

    #: How many rows precede the first row of data.
    header_rows: int = 1

    @abc.abstractmethod
    def read(self) -> Table:
        """Load the current content of the table."""
        ...

    @abc.abstractmethod
    def append_rows(self, rows: list[list[Any]]) -> None:
        """Add new rows at the end of the table."""
        ...

    @abc.abstractmethod
    def overwrite_row(self, position: int, cells: list[Any]) -> None:
        """Replace the cells of the row at the given physical position."""
        ...

    @abc.abstractmethod
    def delete_row(self, position: int) -> None:
        """Remove the row at the given physical position.

        All the following rows shift up by one position.
        """
        ...


class MemoryTableStore(TableStore):
    """Store a table in memory."""

    def __init__(
        self,
        columns: Iterable[str],
        rows: Iterable[Iterable[Any]] = (),
        header_rows: int = 1,
    ) -> None:
        """
        :param columns: The names of the columns of the table.
        :param rows: The initial rows of the table.
        :param header_rows: How many rows precede the data, affects physical positions.
        """
        table = Table(columns, rows)
        self.columns = table.columns
        self.rows = table.rows
        self.header_rows = header_rows

    @classmethod
    def from_source(cls, source: QueryPlanNode, header_rows: int = 1) -> "MemoryTableStore":
        """Load the store with all the data emitted by a query plan node."""
        table = source.collect()
        return cls(table.columns, table.rows, header_rows=header_rows)

    def __str__(self) -> str:
        return f"MemoryTableStore(columns={self.columns}, rows={len(self.rows)})"

    def to_table(self) -> Table:
        """Snapshot of the current content."""
        return Table(self.columns, self.rows)

    def read(self) -> Table:
        return self.to_table()

    def append_rows(self, rows: list[list[Any]]) -> None:
        new_rows = Table(self.columns, rows).rows
        self.rows.extend(new_rows)
        log.debug("Appended %d rows", len(new_rows))

    def overwrite_row(self, position: int, cells: list[Any]) -> None:
        index = self._row_index(position)
        self.rows[index] = Table(self.columns, [cells]).rows[0]
        log.debug("Overwritten row %d", position)

    def delete_row(self, position: int) -> None:
        index = self._row_index(position)
        del self.rows[index]
        log.debug("Deleted row %d", position)

    def _row_index(self, position: int) -> int:
        index = position - self.header_rows - 1
        if not 0 <= index < len(self.rows):
            raise IndexError(f"No row at position {position}")
        return index
