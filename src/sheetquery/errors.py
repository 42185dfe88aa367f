"""Errors raised by the query engine.

All errors derive from :class:`QueryError`, which is itself
a :class:`ValueError`, as every failure of the engine is caused
by an invalid query or record provided by the caller.

Errors are always raised before any row is written back
to the table store, so a failing operation never leaves
the table partially modified.
"""

from typing import Any


class QueryError(ValueError):
    """Base class for all the errors of the query engine."""


class UnknownColumn(QueryError):
    """A query referenced a column that is not part of the table."""

    def __init__(self, column: str) -> None:
        self.column = column
        super().__init__(f'Column "{column}" does not exist')


class InvalidRecordKey(UnknownColumn):
    """A record to insert or update has a key that is not a column of the table."""

    def __init__(self, column: str) -> None:
        super().__init__(column)
        self.args = (f'Record key "{column}" is not a column of the table',)


class DuplicateColumn(QueryError):
    """A query would produce two columns with the same name.

    For example selecting the same column twice or naming an
    aggregation like one of the grouping keys.
    """

    def __init__(self, column: str) -> None:
        self.column = column
        super().__init__(f'Column "{column}" is produced more than once')


class InvalidOperator(QueryError):
    """A condition used an operator that is not supported."""

    def __init__(self, operator: Any) -> None:
        self.operator = operator
        super().__init__(f'Invalid operator "{operator}"')


class InvalidOperand(QueryError):
    """The operand of a condition has the wrong shape for its operator.

    For example ``BETWEEN`` requires a ``(low, high)`` pair
    and ``IN`` requires a list of values.
    """

    def __init__(self, operator: str, operand: Any) -> None:
        self.operator = operator
        self.operand = operand
        super().__init__(f"Invalid operand {operand!r} for operator {operator}")


class InvalidAggregation(QueryError):
    """A groupBy clause used an unknown aggregation function."""

    def __init__(self, function: Any) -> None:
        self.function = function
        super().__init__(f'Invalid aggregation function "{function}"')


class ConflictingFilter(QueryError):
    """A query provided both ``where`` and ``whereOr``."""

    def __init__(self) -> None:
        super().__init__("A query can't provide both where and whereOr")


class IncomparableValues(QueryError):
    """Two values of different types were compared for ordering."""

    def __init__(self, left: Any, right: Any) -> None:
        self.left = left
        self.right = right
        super().__init__(
            f"Can't compare {type(left).__name__} {left!r} "
            f"with {type(right).__name__} {right!r}"
        )
