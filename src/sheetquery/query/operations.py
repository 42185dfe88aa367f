"""Read and modify the content of a table store.

These are the public operations of the engine:

- :func:`select` runs a query and returns its result.
- :func:`insert` and :func:`bulk_insert` append new records.
- :func:`update` changes the records matching a filter.
- :func:`remove` deletes the records matching a filter.

Each operation reads the table fresh from the store, no state
is kept across calls. Updates and deletions run the filter
with row numbers enabled, so that every matching row can be
tracked back to its physical position in the store.

Every record and query is validated before the first write happens,
so an invalid request never leaves the store partially modified.

>>> from sheetquery.stores import MemoryTableStore
>>> store = MemoryTableStore(["name", "age"], [["Alice", 30], ["Bob", 25]])
>>> insert(store, {"name": "Carol"})
{'name': 'Carol', 'age': None}
>>> update(store, {"set": {"age": 26}, "where": {"name": ("=", "Bob")}})
[{'before': {'name': 'Bob', 'age': 25}, 'after': {'name': 'Bob', 'age': 26}}]
>>> remove(store, {"where": {"age": ("=", None)}})
[{'name': 'Carol', 'age': None}]
>>> select(store, {"columns": ["name"]})
[{'name': 'Alice'}, {'name': 'Bob'}]
"""

import logging
from typing import Any, Iterable, Mapping

from ..compute import Table, TableDataSource, strip_rownum
from ..errors import InvalidRecordKey, QueryError
from ..stores import TableStore
from .model import Options, Query
from .planner import QueryPlanner, execute

log = logging.getLogger(__name__)


def select(
    store: TableStore,
    query: Query | dict | None = None,
    options: Options | dict | None = None,
) -> Any:
    """Run a query against the table of the store.

    :param store: The store holding the table.
    :param query: The query to run, ``None`` returns the whole table.
    :param options: ``with_rownum`` and ``as_array`` options.
    :returns: A list of records or, when ``as_array`` is set,
              a ``(columns, rows)`` pair.
    """
    return execute(
        TableDataSource(store.read()), query, options, header_rows=store.header_rows
    )


def _complete_record(columns: list[str], record: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a record and fill the missing columns with ``None``."""
    if not isinstance(record, Mapping):
        raise QueryError(f"A record must be a mapping, got {record!r}")
    for key in record:
        if key not in columns:
            raise InvalidRecordKey(key)
    return {column: record.get(column) for column in columns}


def insert(store: TableStore, record: Mapping[str, Any]) -> dict[str, Any]:
    """Append a record to the table.

    :returns: The inserted record, with ``None`` for the missing columns.
    :raises sheetquery.errors.InvalidRecordKey: if the record has keys
                                                that are not columns.
    """
    return bulk_insert(store, [record])[0]


def bulk_insert(
    store: TableStore, records: Iterable[Mapping[str, Any]]
) -> list[dict[str, Any]]:
    """Append multiple records to the table.

    All records are validated before any of them is written.
    """
    columns = store.read().columns
    inserted = [_complete_record(columns, record) for record in records]
    if inserted:
        store.append_rows([[record[c] for c in columns] for record in inserted])
    log.info("Inserted %d records", len(inserted))
    return inserted


def _locate(store: TableStore, table: Table, query: Query) -> list[dict[str, Any]]:
    """Find the records matching the filter of the query, with their ``ROWNUM``."""
    if query.columns is not None or query.group_by is not None or query.order_by:
        raise QueryError("Updates and deletions only support where and whereOr")

    filter_query = Query(where=query.where, where_or=query.where_or)
    options = Options(with_rownum=True)
    plan = QueryPlanner(filter_query, options, store.header_rows).plan(
        TableDataSource(table)
    )
    return plan.collect().to_records()


def update(store: TableStore, query: Query | dict) -> list[dict[str, dict[str, Any]]]:
    """Change the records matching the filter of the query.

    The values to change are provided by the ``set`` part of the query,
    the other columns of the matching records keep their value.

    :returns: A ``{"before": record, "after": record}`` pair for each
              changed record.
    """
    query = Query.from_dict(query)
    if query.assignments is None:
        raise QueryError("An update requires the values to set")

    table = store.read()
    for key in query.assignments:
        if key not in table.columns:
            raise InvalidRecordKey(key)

    changes = []
    writes = []
    for target in _locate(store, table, query):
        position, before = strip_rownum(target)
        after = {**before, **query.assignments}
        writes.append((position, [after.get(c) for c in table.columns]))
        changes.append({"before": before, "after": after})

    for position, cells in writes:
        store.overwrite_row(position, cells)
    log.info("Updated %d records", len(changes))
    return changes


def remove(store: TableStore, query: Query | dict | None = None) -> list[dict[str, Any]]:
    """Delete the records matching the filter of the query.

    Rows are deleted starting from the last one, because
    deleting a row shifts up all the rows that follow it
    and would invalidate their positions.

    :returns: The removed records, in table order.
    """
    query = Query.from_dict(query)
    if query.assignments is not None:
        raise QueryError("Deletions don't accept values to set")

    table = store.read()
    positions = []
    removed = []
    for target in _locate(store, table, query):
        position, record = strip_rownum(target)
        positions.append(position)
        removed.append(record)

    for position in sorted(positions, reverse=True):
        store.delete_row(position)
    log.info("Removed %d records", len(removed))
    return removed

