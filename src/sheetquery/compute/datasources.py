"""Query Plan nodes that load data

The datasource nodes are expected to fetch the data from some source,
convert it into the :class:`sheetquery.compute.base.Table` format
accepted by the compute engine and forward it to the next node in the plan.

They are used to do things like loading
data from CSV files or equivalent operations.
Loading from files relies on ``pyarrow`` readers, the
typed arrow columns are converted to plain Python values.
"""

from abc import abstractmethod

import pyarrow as pa
import pyarrow.csv
import pyarrow.parquet

from .base import QueryPlanNode, Table


class DataSourceNode(QueryPlanNode):
    """Base class for nodes that load data from a source."""

    @abstractmethod
    def poll_schema(self) -> list[str]:
        """Poll the column names of the data source without loading its content."""
        ...


class TableDataSource(DataSourceNode):
    """Emit an in-memory :class:`Table`.

    The table is always emitted, even when it has no rows,
    so that the following nodes know its columns.
    """

    def __init__(self, table: Table) -> None:
        """
        :param table: The table with the data to emit.
        """
        self.table = table

    def __str__(self) -> str:
        return f"TableDataSource(columns={self.table.columns}, rows={self.table.num_rows})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        yield self.table

    def poll_schema(self) -> list[str]:
        return list(self.table.columns)


class CSVDataSource(DataSourceNode):
    """Load data from a CSV file.

    Given a local CSV file path, load the content,
    convert it from Arrow format to a Table, and emit it
    for the next nodes of the query plan to consume.
    """

    def __init__(self, filename: str, block_size: int | None = None) -> None:
        """
        :param filename: The path of the local CSV file.
        :param block_size: How big to make batches of data,
                           Influences how many batches will be produced
        """
        self.filename = filename
        self.block_size = block_size

    def __str__(self) -> str:
        return f"CSVDataSource({self.filename}, block_size={self.block_size})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Open CSV file and emit the batches."""
        with pa.csv.open_csv(
            self.filename, read_options=pa.csv.ReadOptions(block_size=self.block_size)
        ) as reader:
            emitted = False
            for batch in reader:
                emitted = True
                yield Table.from_arrow(batch)
            if not emitted:
                # A file with only the header, still emit its columns.
                yield Table(reader.schema.names)

    def poll_schema(self) -> list[str]:
        """Poll the column names of the CSV file."""
        with pa.csv.open_csv(self.filename) as reader:
            return reader.schema.names


class ParquetDataSource(DataSourceNode):
    """Load data from a Parquet file.

    Given a local parquet file path, load the content,
    convert it from Arrow format to a Table, and emit it
    for the next nodes of the query plan to consume.
    """

    def __init__(self, filename: str, batch_size: int | None = None) -> None:
        """
        :param filename: The path of the local parquet file.
        :param batch_size: How big to make batches of data,
                           Influences how many batches will be produced
        """
        self.filename = filename
        self.batch_size = batch_size or 65536

    def __str__(self) -> str:
        return f"ParquetDataSource({self.filename}, batch_size={self.batch_size})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Open Parquet file and emit the batches."""
        with pa.parquet.ParquetFile(self.filename) as reader:
            emitted = False
            for batch in reader.iter_batches(batch_size=self.batch_size):
                emitted = True
                yield Table.from_arrow(batch)
            if not emitted:
                yield Table(reader.schema_arrow.names)

    def poll_schema(self) -> list[str]:
        """Poll the column names of the Parquet file."""
        with pa.parquet.ParquetFile(self.filename) as reader:
            return reader.schema_arrow.names


class PyArrowTableDataSource(DataSourceNode):
    """Load data from an in-memory pyarrow.Table or pyarrow.RecordBatch.

    Given a :class:`pyarrow.Table` or `pyarrow.RecordBatch` object,
    allow to use its data in a query plan.
    """

    def __init__(self, table: pa.Table | pa.RecordBatch) -> None:
        """
        :param table: The table or recordbatch with the data to read.
        """
        self.table = table
        self.is_recordbatch = isinstance(table, pa.RecordBatch)

    def __str__(self) -> str:
        return f"PyArrowTableDataSource(columns={self.table.column_names}, rows={self.table.num_rows})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Emit the data contained in the Table for consumption by other node."""
        if self.is_recordbatch:
            yield Table.from_arrow(self.table)
            return

        batches = self.table.to_batches()
        if not batches:
            yield Table(self.table.column_names)
        for batch in batches:
            yield Table.from_arrow(batch)

    def poll_schema(self) -> list[str]:
        """Poll the column names of the Table."""
        return list(self.table.schema.names)
