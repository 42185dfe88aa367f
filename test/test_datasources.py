import datetime
import os
import tempfile

import pyarrow as pa
import pyarrow.csv as csv
import pyarrow.parquet as pq
import pytest

from sheetquery.compute import Table, values
from sheetquery.compute.datasources import (
    CSVDataSource,
    ParquetDataSource,
    PyArrowTableDataSource,
    TableDataSource,
)

# Mock data for testing
MOCK_PYARROW_TABLE = pa.table({"col1": [1, 4, 7], "col2": [2, 5, 8], "col3": [3, 6, 9]})
EXPECTED_TABLE = Table(["col1", "col2", "col3"], [[1, 2, 3], [4, 5, 6], [7, 8, 9]])

MOCK_CSV_FILE = tempfile.NamedTemporaryFile(delete=False, mode="w+")
MOCK_PARQUET_FILE = tempfile.NamedTemporaryFile(delete=False, mode="w+")


def setup_module():
    csv.write_csv(MOCK_PYARROW_TABLE, MOCK_CSV_FILE.name)
    MOCK_CSV_FILE.close()
    pq.write_table(MOCK_PYARROW_TABLE, MOCK_PARQUET_FILE.name)
    MOCK_PARQUET_FILE.close()


def teardown_module():
    os.unlink(MOCK_CSV_FILE.name)
    os.unlink(MOCK_PARQUET_FILE.name)


@pytest.mark.parametrize(
    "data_source_class, init_args, expected_str",
    [
        (
            CSVDataSource,
            (MOCK_CSV_FILE.name, None),
            f"CSVDataSource({MOCK_CSV_FILE.name}, block_size=None)",
        ),
        (
            ParquetDataSource,
            (MOCK_PARQUET_FILE.name, None),
            f"ParquetDataSource({MOCK_PARQUET_FILE.name}, batch_size=65536)",
        ),
        (
            PyArrowTableDataSource,
            (MOCK_PYARROW_TABLE,),
            "PyArrowTableDataSource(columns=['col1', 'col2', 'col3'], rows=3)",
        ),
        (
            PyArrowTableDataSource,
            (MOCK_PYARROW_TABLE.to_batches()[0],),
            "PyArrowTableDataSource(columns=['col1', 'col2', 'col3'], rows=3)",
        ),
        (
            TableDataSource,
            (EXPECTED_TABLE,),
            "TableDataSource(columns=['col1', 'col2', 'col3'], rows=3)",
        ),
    ],
)
def test_init_and_str(data_source_class, init_args, expected_str):
    data_source = data_source_class(*init_args)
    assert str(data_source) == expected_str


@pytest.mark.parametrize(
    "data_source_class, init_args",
    [
        (CSVDataSource, (MOCK_CSV_FILE.name, None)),
        (ParquetDataSource, (MOCK_PARQUET_FILE.name, None)),
        (PyArrowTableDataSource, (MOCK_PYARROW_TABLE,)),
        (PyArrowTableDataSource, (MOCK_PYARROW_TABLE.to_batches()[0],)),
        (TableDataSource, (EXPECTED_TABLE,)),
    ],
)
def test_batches(data_source_class, init_args):
    data_source = data_source_class(*init_args)
    batches = list(data_source.batches())
    assert len(batches) == 1
    assert batches[0] == EXPECTED_TABLE


@pytest.mark.parametrize(
    "data_source_class, init_args",
    [
        (CSVDataSource, (MOCK_CSV_FILE.name, None)),
        (ParquetDataSource, (MOCK_PARQUET_FILE.name, None)),
        (PyArrowTableDataSource, (MOCK_PYARROW_TABLE,)),
        (TableDataSource, (EXPECTED_TABLE,)),
    ],
)
def test_poll_schema(data_source_class, init_args):
    data_source = data_source_class(*init_args)
    assert data_source.poll_schema() == ["col1", "col2", "col3"]


def test_parquet_small_batches():
    data_source = ParquetDataSource(MOCK_PARQUET_FILE.name, batch_size=2)
    batches = list(data_source.batches())
    assert len(batches) == 2
    assert data_source.collect() == EXPECTED_TABLE


def test_empty_pyarrow_table():
    empty = pa.table({"a": pa.array([], type=pa.int64())})
    batches = list(PyArrowTableDataSource(empty).batches())
    assert batches == [Table(["a"])]


def test_csv_converts_values(tmp_path):
    filename = tmp_path / "people.csv"
    filename.write_text("name,age,joined\nAlice,30,2024-01-15\nBob,,2023-06-01\n")
    table = CSVDataSource(str(filename)).collect()
    assert table.columns == ["name", "age", "joined"]
    assert table.rows[0][:2] == ["Alice", 30]
    assert table.rows[1][1] is None
    # pyarrow infers either a date or a timestamp, both are the same instant.
    assert values.equals(table.rows[0][2], datetime.date(2024, 1, 15))


def test_table_to_arrow_roundtrip():
    assert Table.from_arrow(EXPECTED_TABLE.to_arrow()) == EXPECTED_TABLE
