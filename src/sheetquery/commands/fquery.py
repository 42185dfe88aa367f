"""Command line interface for executing queries on files.

This module provides a command line interface for executing queries,
expressed in JSON, on CSV and Parquet files based on
:func:`sheetquery.query.execute`.

The results of the execution are then printed to the console in a tabular format
using the :class:`sheetquery.utils.tabulate` module.
"""

import argparse
import json
import logging
import sys

from sheetquery.compute import CSVDataSource, ParquetDataSource, Table
from sheetquery.compute.datasources import DataSourceNode
from sheetquery.errors import QueryError
from sheetquery.query import execute
from sheetquery.utils import tabulate


def open_datasource(path: str) -> DataSourceNode:
    """Pick the data source for a file based on its extension."""
    if path.lower().endswith((".parquet", ".pq")):
        return ParquetDataSource(path)
    return CSVDataSource(path)


def main(argv: list[str] | None = None) -> int:
    """Parse the command line arguments and execute the query."""
    parser = argparse.ArgumentParser(description="Run a JSON query on a CSV or Parquet file.")
    parser.add_argument(
        "-t", "--table", required=True, help="Path of the CSV or Parquet file to query."
    )
    parser.add_argument(
        "query",
        type=str,
        nargs="?",
        default="{}",
        help='The query to execute, as JSON. For example {"where": {"age": [">=", 18]}}',
    )
    parser.add_argument(
        "--with-rownum", action="store_true", help="Prepend the ROWNUM column."
    )
    parser.add_argument(
        "--as-array", action="store_true", help="Print the result as a JSON array."
    )
    parser.add_argument(
        "--max-rows", type=int, default=20, help="How many rows to print at most."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log the query plan.")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        query = json.loads(args.query)
    except json.JSONDecodeError as e:
        print(f"Invalid query, {e}")
        return 1

    options = {"with_rownum": args.with_rownum, "as_array": True}
    try:
        columns, rows = execute(open_datasource(args.table), query, options)
    except QueryError as e:
        print(f"Invalid query, {e}")
        return 1

    if args.as_array:
        print(json.dumps([columns, *rows], default=str))
    else:
        print(tabulate.tabulate(Table(columns, rows), max_rows=args.max_rows))
    return 0


if __name__ == "__main__":
    sys.exit(main())
