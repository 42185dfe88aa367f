import pytest

from sheetquery.compute import Table, TableDataSource
from sheetquery.compute.expressions import Condition
from sheetquery.compute.filtering import FilterNode, filter_rows
from sheetquery.errors import UnknownColumn

PEOPLE = Table(
    ["name", "age", "city"],
    [
        ["Alice", 30, "Rome"],
        ["Bob", 25, "Paris"],
        ["Carol", 41, "Rome"],
        ["Dave", "", "Berlin"],
        ["Eve", 25, "Rome"],
    ],
)

CONDITIONS = [
    Condition("age", ">=", 25),
    Condition("city", "=", "Rome"),
    Condition("name", "LIKE", "%e"),
]


def _names(table):
    return [row[0] for row in table.rows]


def test_filter_node():
    node = FilterNode(Condition("city", "=", "Rome"), TableDataSource(PEOPLE))
    batches = list(node.batches())
    assert len(batches) == 1
    assert _names(batches[0]) == ["Alice", "Carol", "Eve"]
    assert batches[0].columns == PEOPLE.columns


def test_filter_node_str():
    node = FilterNode(Condition("city", "=", "Rome"), TableDataSource(PEOPLE))
    assert str(node) == (
        "FilterNode(filter=Condition(city = 'Rome'), "
        "child=TableDataSource(columns=['name', 'age', 'city'], rows=5))"
    )


def test_filter_preserves_order():
    result = filter_rows(PEOPLE, [Condition("age", "IN", [25, 41])])
    assert _names(result) == ["Bob", "Carol", "Eve"]


def test_all_is_intersection_of_single_filters():
    expected = set(_names(PEOPLE))
    for condition in CONDITIONS:
        expected &= set(_names(filter_rows(PEOPLE, [condition])))

    result = filter_rows(PEOPLE, CONDITIONS, "all")
    assert set(_names(result)) == expected
    assert _names(result) == ["Alice", "Eve"]


def test_any_is_union_of_single_filters():
    expected = set()
    for condition in CONDITIONS:
        expected |= set(_names(filter_rows(PEOPLE, [condition])))

    result = filter_rows(PEOPLE, CONDITIONS, "any")
    assert set(_names(result)) == expected
    assert _names(result) == ["Alice", "Bob", "Carol", "Dave", "Eve"]


def test_no_conditions_returns_all_rows():
    assert filter_rows(PEOPLE, []) == PEOPLE
    assert filter_rows(PEOPLE, [], "any") == PEOPLE


def test_filter_unknown_column():
    with pytest.raises(UnknownColumn) as err:
        filter_rows(PEOPLE, [Condition("country", "=", "Italy")])
    assert err.value.column == "country"


def test_empty_cells_never_match_ordering():
    result = filter_rows(PEOPLE, [Condition("age", "<", 100)])
    assert "Dave" not in _names(result)
