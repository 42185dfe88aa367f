import json

import pytest

from sheetquery.commands.fquery import main, open_datasource
from sheetquery.compute import CSVDataSource, ParquetDataSource
from sheetquery.query.operations import remove, select, update
from sheetquery.stores import MemoryTableStore

SALES_CSV = """Product,Quantity,Price,City
Videogame,8,66.5,Rome
Laptop,8,38.72,Paris
Laptop,7,77.46,Rome
Phone,3,250.0,Berlin
Videogame,2,59.99,Paris
Headphones,12,19.9,Rome
Phone,1,245.5,Rome
"""


@pytest.fixture
def sales_csv(tmp_path):
    path = tmp_path / "sales.csv"
    path.write_text(SALES_CSV)
    return str(path)


def test_open_datasource():
    assert isinstance(open_datasource("data.csv"), CSVDataSource)
    assert isinstance(open_datasource("data.PARQUET"), ParquetDataSource)


def test_fquery_as_array(sales_csv, capsys):
    query = {
        "where": {"City": ["=", "Rome"]},
        "groupBy": [["Product"], {"total": ["Quantity", "SUM"]}],
        "orderBy": {"total": "DESC"},
    }
    assert main(["-t", sales_csv, json.dumps(query), "--as-array"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output == [
        ["Product", "total"],
        ["Headphones", 12],
        ["Videogame", 8],
        ["Laptop", 7],
        ["Phone", 1],
    ]


def test_fquery_with_rownum(sales_csv, capsys):
    query = {"columns": ["ROWNUM", "Product"], "where": {"City": ["=", "Berlin"]}}
    assert main(["-t", sales_csv, json.dumps(query), "--as-array", "--with-rownum"]) == 0
    assert json.loads(capsys.readouterr().out) == [["ROWNUM", "Product"], [5, "Phone"]]


def test_fquery_tabulate(sales_csv, capsys):
    query = {"columns": ["Product", "Price"], "where": {"Product": ["LIKE", "V%"]}}
    assert main(["-t", sales_csv, json.dumps(query)]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "Product   | Price",
        "--------- | -----",
        "Videogame | 66.50",
        "Videogame | 59.99",
    ]


def test_fquery_max_rows(sales_csv, capsys):
    assert main(["-t", sales_csv, "--max-rows", "2"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 5
    assert lines[-1] == "... and 5 more rows"


@pytest.mark.parametrize(
    "query",
    [
        "{not json",
        '{"where": {"Country": ["=", "Italy"]}}',
        '{"where": {"City": ["~", "Rome"]}}',
        '{"where": {}, "whereOr": {}}',
        '{"where": ["City", "=", "Rome"]}',
        '{"columns": ["City", "City"]}',
    ],
)
def test_fquery_invalid_query(sales_csv, capsys, query):
    assert main(["-t", sales_csv, query]) == 1
    assert capsys.readouterr().out.startswith("Invalid query,")


def test_csv_store_round_trip(sales_csv):
    store = MemoryTableStore.from_source(CSVDataSource(sales_csv))

    changes = update(
        store, {"set": {"Price": 0.0}, "where": {"Product": ["=", "Phone"]}}
    )
    assert [c["before"]["City"] for c in changes] == ["Berlin", "Rome"]

    removed = remove(store, {"whereOr": {"City": ["=", "Paris"], "Price": ["<", 20]}})
    assert [r["Product"] for r in removed] == [
        "Laptop",
        "Phone",
        "Videogame",
        "Headphones",
        "Phone",
    ]

    assert select(store, {"columns": ["Product"]}) == [
        {"Product": "Videogame"},
        {"Product": "Laptop"},
    ]
