"""Structures describing a query and the options to run it.

Queries are provided by callers as plain dictionaries, like::

    {
        "columns": ["city", "total"],
        "where": {"age": (">=", 18), "city": ("IN", ["Rome", "Paris"])},
        "groupBy": (["city"], {"total": ("sales", "SUM")}),
        "orderBy": {"total": "DESC"},
    }

:meth:`Query.from_dict` converts them to a :class:`Query`
validating their shape, so that the rest of the engine can
rely on typed fields instead of probing for keys.

Multiple conditions on the same column can be expressed
by suffixing the column name with ``#`` and a number,
which is stripped when resolving the column::

    {"where": {"age#1": (">=", 18), "age#2": ("<", 65)}}

or by providing a list of ``(operator, operand)`` pairs::

    {"where": {"age": [(">=", 18), ("<", 65)]}}
"""

import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..compute.aggregate import Aggregation, make_aggregation
from ..compute.expressions import Condition
from ..compute.sorting import parse_direction
from ..errors import ConflictingFilter, DuplicateColumn, QueryError

SUFFIX_DELIMITER = "#"

_SUFFIXED_COLUMN = re.compile(rf"^(?P<column>.+){SUFFIX_DELIMITER}\d+$", re.DOTALL)


def strip_suffix(key: str) -> str:
    """Remove the disambiguation suffix from a condition key.

    >>> strip_suffix("age#2")
    'age'
    >>> strip_suffix("age")
    'age'
    """
    match = _SUFFIXED_COLUMN.match(key)
    if match is None:
        return key
    return match.group("column")


def _is_pair(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and len(value) == 2


def _check_unique(names: list[str]) -> None:
    seen = set()
    for name in names:
        if name in seen:
            raise DuplicateColumn(name)
        seen.add(name)


def _parse_filter(conditions: Any) -> list[Condition]:
    """Parse ``where`` or ``where_or`` unless they are already conditions."""
    if isinstance(conditions, list) and all(
        isinstance(condition, Condition) for condition in conditions
    ):
        return conditions
    return parse_conditions(conditions)


def parse_conditions(conditions: Mapping[str, Any]) -> list[Condition]:
    """Convert a ``{column: (operator, operand)}`` mapping to a list of conditions.

    >>> parse_conditions({"age#1": (">", 18), "age#2": ("<", 65)})
    [Condition(age > 18), Condition(age < 65)]
    """
    if not isinstance(conditions, Mapping):
        raise QueryError(f"Conditions must be a mapping, got {conditions!r}")

    parsed = []
    for key, definition in conditions.items():
        column = strip_suffix(key)
        if isinstance(definition, (list, tuple)) and definition and all(
            isinstance(item, (list, tuple)) for item in definition
        ):
            pairs = definition
        else:
            pairs = [definition]

        for pair in pairs:
            if not _is_pair(pair):
                raise QueryError(
                    f'Condition for "{key}" must be an (operator, operand) pair, got {pair!r}'
                )
            operator, operand = pair
            parsed.append(Condition(column, operator, operand))
    return parsed


@dataclass
class GroupBy:
    """Group rows by ``keys`` and compute ``aggregations`` for each group.

    ``aggregations`` maps the name of each output column
    to a ``(source_column, function)`` pair, where function is
    one of ``COUNT``, ``SUM``, ``AVG``, ``MIN``, ``MAX``.
    """

    keys: list[str]
    aggregations: dict[str, tuple[str, str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.keys, str):
            raise QueryError(f"groupBy keys must be a list of columns, got {self.keys!r}")
        self.keys = list(self.keys)
        if not isinstance(self.aggregations, Mapping):
            raise QueryError(
                f"groupBy aggregations must be a mapping, got {self.aggregations!r}"
            )
        for name, definition in self.aggregations.items():
            if not _is_pair(definition):
                raise QueryError(
                    f'Aggregation "{name}" must be a (column, function) pair, got {definition!r}'
                )
        self.aggregations = {
            name: tuple(definition) for name, definition in self.aggregations.items()
        }
        _check_unique(self.keys + list(self.aggregations))
        # Fail early on unknown aggregation functions.
        self.build_aggregations()

    @classmethod
    def from_value(cls, value: Any) -> "GroupBy":
        """Accept a ``(keys, aggregations)`` pair or a ``{"keys", "aggregations"}`` mapping."""
        if isinstance(value, GroupBy):
            return value
        if isinstance(value, Mapping):
            return cls(value.get("keys", []), value.get("aggregations", {}))
        if _is_pair(value):
            return cls(value[0], value[1])
        raise QueryError(f"Invalid groupBy {value!r}")

    def build_aggregations(self) -> dict[str, Aggregation]:
        return {
            name: make_aggregation(function, column)
            for name, (column, function) in self.aggregations.items()
        }


@dataclass
class Query:
    """A query to run against a table.

    All parts are optional, a query with no parts returns the whole table.
    ``where`` (every condition must match) and ``where_or``
    (any condition must match) are mutually exclusive.
    ``assignments`` holds the values that an update sets.

    Conditions can be provided as a ``{column: (operator, operand)}``
    mapping and are converted to a list of :class:`Condition`.
    """

    columns: list[str] | None = None
    where: list[Condition] | None = None
    where_or: list[Condition] | None = None
    group_by: GroupBy | None = None
    order_by: dict[str, str] | None = None
    assignments: dict[str, Any] | None = None

    KEYS = {
        "columns": "columns",
        "where": "where",
        "whereOr": "where_or",
        "where_or": "where_or",
        "groupBy": "group_by",
        "group_by": "group_by",
        "orderBy": "order_by",
        "order_by": "order_by",
        "set": "assignments",
    }

    def __post_init__(self) -> None:
        if self.where is not None and self.where_or is not None:
            raise ConflictingFilter()

        if self.where is not None:
            self.where = _parse_filter(self.where)
        if self.where_or is not None:
            self.where_or = _parse_filter(self.where_or)

        if self.columns is not None:
            if isinstance(self.columns, str):
                raise QueryError(f"columns must be a list, got {self.columns!r}")
            self.columns = list(self.columns)
            _check_unique(self.columns)

        if self.group_by is not None:
            self.group_by = GroupBy.from_value(self.group_by)

        if self.order_by is not None:
            if not isinstance(self.order_by, Mapping):
                raise QueryError(f"orderBy must be a mapping, got {self.order_by!r}")
            self.order_by = dict(self.order_by)
            for direction in self.order_by.values():
                parse_direction(direction)

        if self.assignments is not None and not isinstance(self.assignments, Mapping):
            raise QueryError(f"set must be a mapping, got {self.assignments!r}")

    @classmethod
    def from_dict(cls, data: "Mapping[str, Any] | Query | None") -> "Query":
        """Build a query from its dictionary form.

        Accepts both the camelCase keys (``whereOr``, ``groupBy``, ``orderBy``)
        and their snake_case equivalent. Keys set to ``None`` are ignored.
        """
        if data is None:
            return cls()
        if isinstance(data, Query):
            return data
        if not isinstance(data, Mapping):
            raise QueryError(f"A query must be a mapping, got {data!r}")

        fields = {}
        for key, value in data.items():
            if key not in cls.KEYS:
                raise QueryError(f'Unknown query key "{key}"')
            if value is None:
                continue
            fields[cls.KEYS[key]] = value
        return cls(**fields)

    @property
    def conditions(self) -> list[Condition]:
        """The conditions of either ``where`` or ``where_or``."""
        if self.where is not None:
            return self.where
        return self.where_or or []

    @property
    def filter_mode(self) -> str:
        """``"any"`` for ``where_or`` queries, ``"all"`` otherwise."""
        return "any" if self.where_or is not None else "all"


@dataclass(frozen=True)
class Options:
    """How to run a query and shape its result.

    :param with_rownum: Prepend a ``ROWNUM`` column with the physical
                        position of each row in the table store.
    :param as_array: Return ``(columns, rows)`` instead of a list of records.
    """

    with_rownum: bool = False
    as_array: bool = False

    KEYS = {
        "withRowNum": "with_rownum",
        "with_rownum": "with_rownum",
        "asArray": "as_array",
        "as_array": "as_array",
    }

    @classmethod
    def from_dict(cls, data: "Mapping[str, Any] | Options | None") -> "Options":
        if data is None:
            return cls()
        if isinstance(data, Options):
            return data
        if not isinstance(data, Mapping):
            raise QueryError(f"Options must be a mapping, got {data!r}")

        fields = {}
        for key, value in data.items():
            if key not in cls.KEYS:
                raise QueryError(f'Unknown option "{key}"')
            if value is None:
                continue
            # Flags are booleans or 0/1, a string like "false" is rejected.
            if not isinstance(value, (bool, int)):
                raise QueryError(f'Option "{key}" must be a boolean, got {value!r}')
            fields[cls.KEYS[key]] = bool(value)
        return cls(**fields)
