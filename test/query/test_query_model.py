import pytest

from sheetquery.compute.aggregate import MeanAggregation, SumAggregation
from sheetquery.compute.expressions import Condition
from sheetquery.errors import (
    ConflictingFilter,
    DuplicateColumn,
    InvalidAggregation,
    InvalidOperator,
    QueryError,
)
from sheetquery.query.model import (
    GroupBy,
    Options,
    Query,
    parse_conditions,
    strip_suffix,
)


@pytest.mark.parametrize(
    "key,expected",
    [
        ("age", "age"),
        ("age#1", "age"),
        ("age#12", "age"),
        ("a#b#3", "a#b"),
        ("age#", "age#"),
        ("age#x", "age#x"),
        ("#1", "#1"),
    ],
)
def test_strip_suffix(key, expected):
    assert strip_suffix(key) == expected


def test_parse_conditions():
    conditions = parse_conditions({"age": (">", 18), "city": ["IN", ["Rome", "Paris"]]})
    assert [str(c) for c in conditions] == [
        "Condition(age > 18)",
        "Condition(city IN ['Rome', 'Paris'])",
    ]


def test_parse_conditions_with_suffix():
    conditions = parse_conditions({"age#1": (">=", 18), "age#2": ("<", 65)})
    assert [c.column.name for c in conditions] == ["age", "age"]
    assert [c.operator for c in conditions] == [">=", "<"]


def test_parse_conditions_list_of_pairs():
    conditions = parse_conditions({"age": [(">=", 18), ["<", 65]]})
    assert [str(c) for c in conditions] == ["Condition(age >= 18)", "Condition(age < 65)"]


@pytest.mark.parametrize(
    "conditions",
    [
        {"age": 18},
        {"age": (">", 18, 20)},
        {"age": []},
        {"age": [(">", 1), ("<",)]},
        [("age", ">", 18)],
    ],
)
def test_parse_invalid_conditions(conditions):
    with pytest.raises(QueryError):
        parse_conditions(conditions)


def test_parse_conditions_invalid_operator():
    with pytest.raises(InvalidOperator):
        parse_conditions({"age": ("=>", 18)})


def test_query_from_dict():
    query = Query.from_dict(
        {
            "columns": ["city", "total"],
            "where": {"age": (">=", 18)},
            "groupBy": (["city"], {"total": ("sales", "SUM")}),
            "orderBy": {"total": "DESC"},
        }
    )
    assert query.columns == ["city", "total"]
    assert all(isinstance(c, Condition) for c in query.where)
    assert query.where_or is None
    assert query.group_by == GroupBy(["city"], {"total": ("sales", "SUM")})
    assert query.order_by == {"total": "DESC"}
    assert query.filter_mode == "all"


def test_query_from_dict_snake_case():
    query = Query.from_dict({"where_or": {"a": ("=", 1)}, "order_by": {"a": "asc"}})
    assert query.filter_mode == "any"
    assert len(query.conditions) == 1


def test_query_from_none():
    query = Query.from_dict(None)
    assert query == Query()
    assert query.conditions == []


def test_query_from_query():
    query = Query(columns=["a"])
    assert Query.from_dict(query) is query


def test_conflicting_filter():
    with pytest.raises(ConflictingFilter):
        Query.from_dict({"where": {"a": ("=", 1)}, "whereOr": {"b": ("=", 2)}})


def test_conflicting_filter_even_when_empty():
    with pytest.raises(ConflictingFilter):
        Query(where={}, where_or={"b": ("=", 2)})


def test_null_keys_are_ignored():
    query = Query.from_dict({"where": None, "whereOr": {"b": ("=", 2)}})
    assert query.filter_mode == "any"


@pytest.mark.parametrize(
    "data",
    [
        {"select": ["a"]},
        {"columns": "a"},
        {"orderBy": ["a"]},
        {"orderBy": {"a": "UP"}},
        {"groupBy": "a"},
        {"groupBy": ("a", {})},
        {"groupBy": (["a"], {"n": "a"})},
        {"groupBy": (["a"], ["n"])},
        {"set": ["a", 1]},
        ["columns"],
        {"where": ["name", "=", "Bob"]},
        {"where": "age > 3"},
        {"whereOr": "x"},
        {"whereOr": [("name", "=", "Bob")]},
    ],
)
def test_invalid_query(data):
    with pytest.raises(QueryError):
        Query.from_dict(data)


def test_group_by_from_mapping():
    group_by = GroupBy.from_value({"keys": ["a"], "aggregations": {"n": ["b", "avg"]}})
    assert group_by.aggregations == {"n": ("b", "avg")}
    aggregations = group_by.build_aggregations()
    assert isinstance(aggregations["n"], MeanAggregation)
    assert aggregations["n"].column == "b"


def test_group_by_invalid_function():
    with pytest.raises(InvalidAggregation):
        GroupBy(["a"], {"n": ("b", "MEDIAN")})


def test_group_by_build_aggregations_keeps_order():
    group_by = GroupBy([], {"z": ("b", "SUM"), "a": ("b", "AVG")})
    aggregations = group_by.build_aggregations()
    assert list(aggregations) == ["z", "a"]
    assert isinstance(aggregations["z"], SumAggregation)


def test_options_from_dict():
    assert Options.from_dict({"withRowNum": True}) == Options(with_rownum=True)
    assert Options.from_dict({"asArray": 1, "with_rownum": 0}) == Options(as_array=True)
    assert Options.from_dict(None) == Options()
    assert Options.from_dict({"asArray": None}) == Options()


def test_invalid_option():
    with pytest.raises(QueryError):
        Options.from_dict({"limit": 3})


def test_query_keeps_parsed_conditions():
    conditions = [Condition("age", ">", 18)]
    assert Query(where=conditions).where is conditions
    assert Query(where_or=[]).conditions == []


def test_duplicate_columns():
    with pytest.raises(DuplicateColumn) as err:
        Query.from_dict({"columns": ["name", "age", "name"]})
    assert err.value.column == "name"


@pytest.mark.parametrize(
    "group_by",
    [
        (["name"], {"name": ("age", "COUNT")}),
        (["name", "name"], {"n": ("age", "COUNT")}),
    ],
)
def test_group_by_duplicate_output_columns(group_by):
    with pytest.raises(DuplicateColumn, match='"name"'):
        Query.from_dict({"groupBy": group_by})


@pytest.mark.parametrize("data", [["asArray"], "asArray", 1])
def test_options_must_be_a_mapping(data):
    with pytest.raises(QueryError):
        Options.from_dict(data)


@pytest.mark.parametrize("value", ["false", "true", [True], 0.5])
def test_options_must_be_booleans(value):
    with pytest.raises(QueryError, match="asArray"):
        Options.from_dict({"asArray": value})
