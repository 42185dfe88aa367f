"""Rules to compare the values of table cells.

The cells of a table are plain Python scalars and a single
column can contain values of different types, as it happens in
spreadsheets where a column of numbers might have some empty cells
or some text notes.

To deal with that, every value belongs to a *family*:

* ``number``: ``int``, ``float`` and other real numbers, but not ``bool``.
* ``string``: any non empty ``str``.
* ``date``: ``datetime.date`` and ``datetime.datetime``.
* ``boolean``: ``True`` and ``False``.
* ``empty``: ``None`` and the empty string.

Values are only considered equal when they belong to the same family,
so ``1`` and ``True`` are different values even though Python
considers them equal:

>>> equals(1, True)
False
>>> equals(1, 1.0)
True

Ordering comparisons are only possible between values of the same family:

>>> compare(3, 5)
-1
>>> compare("b", "a")
1
>>> compare(3, "a")
Traceback (most recent call last):
...
sheetquery.errors.IncomparableValues: Can't compare int 3 with str 'a'
"""

import datetime
import math
import numbers
from typing import Any

from ..errors import IncomparableValues

EMPTY = "empty"
NUMBER = "number"
STRING = "string"
DATE = "date"
BOOLEAN = "boolean"

# Position of each family when sorting columns of mixed types.
FAMILIES_SORT_ORDER = {NUMBER: 0, STRING: 1, DATE: 2, BOOLEAN: 3, EMPTY: 4}


def family(value: Any) -> str:
    """Return the family the value belongs to."""
    if value is None or value == "":
        return EMPTY
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, numbers.Real):
        return NUMBER
    if isinstance(value, datetime.date):
        return DATE
    return STRING


def is_empty(value: Any) -> bool:
    """If the cell has no value, either ``None`` or an empty string."""
    return value is None or value == ""


def is_number(value: Any) -> bool:
    """If the value is a finite number, booleans are not numbers.

    >>> is_number(3.5), is_number(True), is_number(float("nan")), is_number("3")
    (True, False, False, False)
    """
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def to_instant(value: datetime.date) -> datetime.datetime:
    """Convert dates to datetimes, so that they can be compared by instant."""
    if isinstance(value, datetime.datetime):
        return value
    return datetime.datetime.combine(value, datetime.time())


def equals(cell: Any, operand: Any) -> bool:
    """Strict equality between a cell and an operand.

    Dates are compared by the instant they represent, so
    ``date(2024, 1, 1)`` equals ``datetime(2024, 1, 1, 0, 0)``.
    A value that is not a date is never equal to a date.
    """
    cell_family = family(cell)
    if cell_family != family(operand):
        return False
    if cell_family == EMPTY:
        return True
    if cell_family == DATE:
        try:
            return to_instant(cell) == to_instant(operand)
        except TypeError:
            # naive and aware datetimes never represent the same instant.
            return False
    return cell == operand


def compare(left: Any, right: Any) -> int:
    """Compare two values of the same family.

    Returns ``-1``, ``0`` or ``1`` like the classic ``cmp`` function.
    Raises :class:`sheetquery.errors.IncomparableValues` when the
    values belong to different families or can't be ordered.
    """
    left_family = family(left)
    if left_family != family(right) or left_family == EMPTY:
        raise IncomparableValues(left, right)
    if left_family == DATE:
        left, right = to_instant(left), to_instant(right)
    try:
        return (left > right) - (left < right)
    except TypeError as e:
        raise IncomparableValues(left, right) from e


def _is_nan(value: Any) -> bool:
    return family(value) == NUMBER and math.isnan(value)


def _sort_rank(value: Any) -> float:
    rank = FAMILIES_SORT_ORDER[family(value)]
    if _is_nan(value):
        return rank + 0.5
    return rank


def sort_compare(left: Any, right: Any) -> int:
    """Compare two values imposing a total order on all families.

    Unlike :func:`compare` this never fails, values of different
    families are sorted by their family (numbers first, empty values last).
    ``NaN`` has no place among the numbers and sorts right after them.

    >>> import functools
    >>> sorted([2, float("nan"), "a", 1], key=functools.cmp_to_key(sort_compare))
    [1, 2, nan, 'a']
    """
    left_rank, right_rank = _sort_rank(left), _sort_rank(right)
    if left_rank != right_rank:
        return (left_rank > right_rank) - (left_rank < right_rank)
    if family(left) == EMPTY or _is_nan(left):
        return 0
    try:
        return compare(left, right)
    except IncomparableValues:
        # For example naive and aware datetimes, sort them as equal.
        return 0


def group_key(value: Any) -> tuple[str, Any]:
    """Key identifying the value when grouping rows.

    Includes the family, so that ``1`` and ``True`` end up in different groups.
    """
    return (family(value), value)
