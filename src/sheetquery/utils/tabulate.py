"""Format tabular data into a text table for print.

the `tabulate` function takes a :class:`sheetquery.compute.Table` and formats it into a text table.
It will truncate long strings, format floats to 2 decimal places, and limit the number of rows to display.
The function is used to display the result of a query by the ``sheetquery-fquery`` command.

Example:

    >>> from sheetquery.compute import Table
    >>> table = Table(["Product", "Quantity", "Price"], [
    ...     ["Videogame", 8, 66.5],
    ...     ["Laptop", 8, 38.72],
    ...     ["Laptop", 7, None],
    ... ])
    >>> print(tabulate(table))
    Product   | Quantity | Price
    --------- | -------- | -----
    Videogame | 8        | 66.50
    Laptop    | 8        | 38.72
    Laptop    | 7        |
"""

import datetime
from typing import Any

from ..compute import Table


def tabulate(table: Table, max_rows: int = 20) -> str:
    """Format a Table into a text table.

    Will produce a string like::

        Product   | Quantity | Price | Total
        --------- | -------- | ----- | ------
        Videogame | 8        | 66.50 | 532.00
        Laptop    | 8        | 38.72 | 309.76
        Laptop    | 7        | 77.46 | 542.22
    """
    cols = table.columns
    rows = [[format_value(v) for v in row] for row in table.rows[:max_rows]]

    colsizes = compute_max_colsize(cols, rows)
    header = [maketablerow(cols, colsizes=colsizes)]
    separator = [maketablerow(["-"] * len(cols), colsizes=colsizes, fillvalue="-")]
    textrows = [maketablerow(row, colsizes=colsizes) for row in rows]

    text = "\n".join(header + separator + textrows)
    if table.num_rows > max_rows:
        text += f"\n... and {table.num_rows - max_rows} more rows"
    return text


def compute_max_colsize(cols: list[str], rows: list[list[str]]) -> list[int]:
    """Compute the maximum size of each column in a table."""
    return [
        max([len(row[colidx]) for row in rows] + [len(cols[colidx])])
        for colidx, _ in enumerate(cols)
    ]


def maketablerow(cols: list[str], colsizes: list[int], fillvalue: str = " ") -> str:
    """Make a table row with the given column sizes."""
    return " | ".join(
        [col.ljust(colsizes[idx], fillvalue) for idx, col in enumerate(cols)]
    ).rstrip()


def format_value(v: Any) -> str:
    """Format a value to be printed in the table.

    This function will format floats to 2 decimal places,
    dates in ISO format, empty cells as blanks and truncate long strings.
    """
    if v is None:
        return ""
    elif isinstance(v, bool):
        return "true" if v else "false"
    elif isinstance(v, float):
        return f"{v:.2f}"
    elif isinstance(v, datetime.date):
        return v.isoformat()

    v = str(v)
    if len(v) > 30:
        v = v[:27] + "..."
    return v
