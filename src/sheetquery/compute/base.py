"""Base classes and interfaces for Compute Engine

This module defines the base components that are
necessary to represent a query plan and execute it,
and the :class:`Table` format that flows through the plan.
"""

import abc
from typing import Any, Iterable, Iterator, Self

import pyarrow as pa

from ..errors import UnknownColumn


class Table:
    """A rectangular set of cells with named columns.

    The table is row major: it's a list of column names
    and a list of rows, where each row has exactly one cell
    for each column, in the same order as the columns.

    This mimics how data is stored in spreadsheets, where each
    row can hold values of different types and a single column
    might mix numbers, text and empty cells.

    >>> table = Table(["name", "age"], [["Alice", 30], ["Bob", 25]])
    >>> table.column_index("age")
    1
    >>> table.to_records()
    [{'name': 'Alice', 'age': 30}, {'name': 'Bob', 'age': 25}]
    """

    def __init__(self, columns: Iterable[str], rows: Iterable[Iterable[Any]] = ()) -> None:
        """
        :param columns: The names of the columns, must be unique.
        :param rows: The rows, each one a sequence of cells aligned to the columns.
        """
        self.columns = list(columns)
        self.rows = [list(row) for row in rows]

        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"Duplicate column names in {self.columns}")

        width = len(self.columns)
        for idx, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {idx} has {len(row)} cells, expected {width}"
                )

    @classmethod
    def from_records(cls, columns: Iterable[str], records: Iterable[dict]) -> Self:
        """Build a table from ``{column: value}`` records.

        Keys missing from a record are filled with ``None``.
        """
        columns = list(columns)
        return cls(columns, ([record.get(c) for c in columns] for record in records))

    @classmethod
    def from_arrow(cls, data: pa.Table | pa.RecordBatch) -> Self:
        """Build a table from a :class:`pyarrow.Table` or :class:`pyarrow.RecordBatch`."""
        columns = data.column_names
        pydata = data.to_pydict()
        return cls(columns, zip(*(pydata[c] for c in columns)))

    def to_arrow(self) -> pa.Table:
        """Convert the table to a :class:`pyarrow.Table`.

        This requires every column to hold values of a single type,
        as arrow columns are typed.
        """
        return pa.table(
            {
                name: pa.array([row[idx] for row in self.rows])
                for idx, name in enumerate(self.columns)
            }
        )

    def column_index(self, name: str) -> int:
        """Index of the column with the given name.

        :raises sheetquery.errors.UnknownColumn: if the column doesn't exist.
        """
        try:
            return self.columns.index(name)
        except ValueError:
            raise UnknownColumn(name) from None

    def to_records(self) -> list[dict[str, Any]]:
        """Convert each row to a ``{column: value}`` dictionary."""
        return [dict(zip(self.columns, row)) for row in self.rows]

    @property
    def num_rows(self) -> int:
        return len(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return self.columns == other.columns and self.rows == other.rows

    def __repr__(self) -> str:
        return f"Table(columns={self.columns}, rows={len(self.rows)})"


class QueryPlanNode(abc.ABC):
    """A node of a query execution plan.

    The Query plan is represented as a tree
    of nodes. Each node is a step in the execution
    and all previous steps are children of the
    last one.

    For example a simple plan might involve
    loading data and filtering it::

        LoadDataNode -> FilterNode(conditions)

    That would be a plan where the last step
    is filtering, and the LoadDataNode is a child
    of the filter node.

    Each Node accepts :class:`Table` batches as its
    input and emits new :class:`Table` batches as its output.

    For example a simple node that takes data
    and just forwards it as is after printing
    its content can be implemented as::

        class DebugDataNode(QueryPlanNode):
            def __init__(self, child):
                self.child = child

            def batches(self):
                for b in self.child.batches():
                    print(b)
                    yield b

            def __str__(self):
                return f"DebugDataNode()"
    """

    RecordBatchesGenerator = Iterator[Table]

    @abc.abstractmethod
    def batches(self) -> Iterator[Table]:
        """Emits the batches for the next node.

        Each QueryPlan node is expected to be able to
        generate data that has to be provided to the next
        node in the plan.

        Usually this happens by consuming data from its
        child nodes, transforming it somehow, and yielding
        it back to the next consumer.
        """
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Human readable representation of the node."""
        ...

    def collect(self) -> Table:
        """Execute the plan and merge all the emitted batches in a single table.

        When the plan emits no batches at all, the result is an empty
        table with no columns.
        """
        columns = None
        rows: list[list[Any]] = []
        for batch in self.batches():
            if columns is None:
                columns = batch.columns
            rows.extend(batch.rows)
        return Table(columns or [], rows)


class Expression(abc.ABC):
    """Expression to apply to a Table.

    Expressions are some form of operation that
    has to be applied to the rows of a :class:`Table`
    to create new data.

    The typical example of expression is a predicate
    like ``age > 18`` which computes ``True`` or ``False``
    for every row of the table.
    """

    @abc.abstractmethod
    def apply(self, batch: Table) -> list[Any]:
        """Apply the expression to a Table.

        Returns one value for each row of the table.
        """
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Human readable representation of the expression."""
        ...


class ColumnRef(Expression):
    """References a column in a table.

    When another expression or the engine need
    to operate on a specific column, we will
    need a way to reference that column and its data.

    This expression is aware of the column and when
    applied to a table returns the cells of that column.

    >>> col("age").apply(Table(["name", "age"], [["Alice", 30], ["Bob", 25]]))
    [30, 25]
    """

    def __init__(self, name: str) -> None:
        """
        :param name: The name of the column being referenced.
        """
        self.name = name

    def apply(self, batch: Table) -> list[Any]:
        """Get the cells of the column."""
        idx = batch.column_index(self.name)
        return [row[idx] for row in batch.rows]

    def __str__(self) -> str:
        return f"ColumnRef({self.name})"


col = ColumnRef
