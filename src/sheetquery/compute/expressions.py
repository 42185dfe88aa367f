"""Expressions executed by compute engine nodes.

The Compute Engine will sometimes need to filter data.
This will be performed by nodes that need to know
how the data must be filtered, thus they need a ``predicate``,
an expression that returns ``True`` or ``False`` for each row.

The predicates supported by the engine are conditions in the form
``(column, operator, operand)`` like ``("age", ">=", 18)``.
The supported operators are:

- Equality: ``=``, ``<>`` (also spelled ``!=``)
- Ordering: ``>``, ``>=``, ``<``, ``<=``
- Ranges: ``BETWEEN``, ``NOT BETWEEN`` with a ``(low, high)`` operand
- Membership: ``IN``, ``NOT IN`` with a list operand
- Wildcards: ``LIKE``, ``NOT LIKE`` where ``%`` matches any
  sequence of characters and ``_`` matches exactly one character.

>>> evaluate("ABC", "LIKE", "A%")
True
>>> evaluate("BA", "LIKE", "A%")
False
>>> evaluate(30, "BETWEEN", (10, 30))
True
"""

import re
from typing import Any, Callable, Iterable

from ..errors import InvalidOperand, InvalidOperator
from . import values
from .base import ColumnRef, Expression, Table, col


def wildcard_to_regex(pattern: str) -> str:
    """Translate a ``LIKE`` wildcard pattern to a regular expression.

    Every character that is not a wildcard is escaped,
    so that characters like ``.`` or ``*`` in the pattern
    match themselves.

    >>> wildcard_to_regex("a.c_%")
    'a\\\\.c..*'
    """
    translated = []
    for char in pattern:
        if char == "%":
            translated.append(".*")
        elif char == "_":
            translated.append(".")
        else:
            translated.append(re.escape(char))
    return "".join(translated)


def _equal(value: Any, operand: Any) -> bool:
    return values.equals(value, operand)


def _not_equal(value: Any, operand: Any) -> bool:
    return not values.equals(value, operand)


def _ordering(check: Callable[[int], bool]) -> Callable[[Any, Any], bool]:
    def _compare(value: Any, operand: Any) -> bool:
        if values.is_empty(value):
            # Empty cells have no position in any ordering.
            return False
        return check(values.compare(value, operand))

    return _compare


def _between(value: Any, operand: tuple[Any, Any]) -> bool:
    if values.is_empty(value):
        return False
    low, high = operand
    return values.compare(low, value) <= 0 and values.compare(value, high) <= 0


def _not_between(value: Any, operand: tuple[Any, Any]) -> bool:
    return not _between(value, operand)


def _in(value: Any, operand: tuple[Any, ...]) -> bool:
    return any(values.equals(value, candidate) for candidate in operand)


def _not_in(value: Any, operand: tuple[Any, ...]) -> bool:
    return not _in(value, operand)


def _like(value: Any, operand: re.Pattern) -> bool:
    text = "" if values.is_empty(value) else str(value)
    return operand.fullmatch(text) is not None


def _not_like(value: Any, operand: re.Pattern) -> bool:
    return not _like(value, operand)


OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "=": _equal,
    "<>": _not_equal,
    "!=": _not_equal,
    ">": _ordering(lambda c: c > 0),
    ">=": _ordering(lambda c: c >= 0),
    "<": _ordering(lambda c: c < 0),
    "<=": _ordering(lambda c: c <= 0),
    "BETWEEN": _between,
    "NOT BETWEEN": _not_between,
    "IN": _in,
    "NOT IN": _not_in,
    "LIKE": _like,
    "NOT LIKE": _not_like,
}


def normalize_operator(operator: Any) -> str:
    """Uppercase the operator and collapse the spaces, so ``not  like`` is ``NOT LIKE``.

    :raises sheetquery.errors.InvalidOperator: if the operator is not supported.
    """
    if not isinstance(operator, str):
        raise InvalidOperator(operator)
    normalized = " ".join(operator.upper().split())
    if normalized not in OPERATORS:
        raise InvalidOperator(operator)
    return normalized


class Predicate:
    """An operator bound to its operand.

    Calling the predicate with the value of a cell
    returns if the cell satisfies the condition.

    The operand is validated and prepared once, when the predicate
    is created, so that ``LIKE`` patterns are compiled only once
    regardless of how many rows are evaluated.
    """

    def __init__(self, operator: str, operand: Any) -> None:
        """
        :param operator: One of the operators in :data:`OPERATORS`.
        :param operand: The value the cells are checked against.
        """
        self.operator = normalize_operator(operator)
        self.operand = operand
        self._check = OPERATORS[self.operator]
        self._prepared_operand = self._prepare_operand(self.operator, operand)

    @staticmethod
    def _prepare_operand(operator: str, operand: Any) -> Any:
        if operator in ("BETWEEN", "NOT BETWEEN"):
            if isinstance(operand, (str, bytes)) or not isinstance(operand, Iterable):
                raise InvalidOperand(operator, operand)
            operand = tuple(operand)
            if len(operand) != 2:
                raise InvalidOperand(operator, operand)
            return operand
        elif operator in ("IN", "NOT IN"):
            if isinstance(operand, (str, bytes)) or not isinstance(operand, Iterable):
                raise InvalidOperand(operator, operand)
            return tuple(operand)
        elif operator in ("LIKE", "NOT LIKE"):
            if not isinstance(operand, str):
                raise InvalidOperand(operator, operand)
            return re.compile(wildcard_to_regex(operand), re.DOTALL)
        return operand

    def __call__(self, value: Any) -> bool:
        return self._check(value, self._prepared_operand)

    def __str__(self) -> str:
        return f"{self.operator} {self.operand!r}"


def evaluate(value: Any, operator: str, operand: Any) -> bool:
    """Check if a single value satisfies ``value <operator> operand``."""
    return Predicate(operator, operand)(value)


class Condition(Expression):
    """Check the cells of a column against a predicate.

    >>> table = Table(["name", "age"], [["Alice", 30], ["Bob", 25]])
    >>> Condition("age", ">", 26).apply(table)
    [True, False]
    """

    def __init__(self, column: str | ColumnRef, operator: str, operand: Any) -> None:
        """
        :param column: The name of the column holding the values to check.
        :param operator: The comparison operator, see :data:`OPERATORS`.
        :param operand: The value the cells are compared to.
        """
        self.column = column if isinstance(column, ColumnRef) else col(column)
        self.predicate = Predicate(operator, operand)

    @property
    def operator(self) -> str:
        return self.predicate.operator

    @property
    def operand(self) -> Any:
        return self.predicate.operand

    def apply(self, batch: Table) -> list[bool]:
        """Evaluate the predicate against every cell of the column."""
        return [self.predicate(value) for value in self.column.apply(batch)]

    def __str__(self) -> str:
        return f"Condition({self.column.name} {self.predicate})"

    __repr__ = __str__


class Conjunction(Expression):
    """Combine multiple conditions.

    In ``all`` mode a row must satisfy every condition (``AND``),
    in ``any`` mode a row must satisfy at least one (``OR``).
    A conjunction with no conditions accepts every row.
    """

    MODES = {"all": all, "any": any}

    def __init__(self, conditions: Iterable[Expression], mode: str = "all") -> None:
        """
        :param conditions: The expressions to combine, each returning a bool per row.
        :param mode: ``"all"`` or ``"any"``.
        """
        if mode not in self.MODES:
            raise ValueError(f"Invalid conjunction mode: {mode}")
        self.conditions = list(conditions)
        self.mode = mode

    def apply(self, batch: Table) -> list[bool]:
        if not self.conditions:
            return [True] * batch.num_rows
        combine = self.MODES[self.mode]
        masks = [condition.apply(batch) for condition in self.conditions]
        return [combine(row_mask) for row_mask in zip(*masks)]

    def __str__(self) -> str:
        return f"{self.mode.upper()}({', '.join(map(str, self.conditions))})"
