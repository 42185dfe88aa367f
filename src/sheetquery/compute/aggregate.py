"""Query plan nodes that compute aggregations.

Frequently when analysing data is necessary
to compute statistics like the min, max, average, etc...
of the data stored in tables.

The aggregate node is in charge of computing
those aggregations and projecting them as new
columns in a query pipeline.

Typically the aggregate node will group the data
by a set of columns and then compute the aggregations

For example, given the following data::

    city, shop, n_employees
    New York, Shop A, 10
    New York, Shop B, 15
    Los Angeles, Shop C, 8
    Los Angeles, Shop D, 12
    New York, Shop E, 20

We could group by city and compute the sum of the employees
to get::

    city, total_employees
    New York, 45
    Los Angeles, 20

As tables come from spreadsheets, the aggregated columns
might contain text or empty cells. Numeric aggregations
(``SUM``, ``AVG``, ``MIN``, ``MAX``) ignore any value that
is not a finite number, while ``COUNT`` counts the cells
that are not empty.
"""

import abc
from typing import Any, Iterable, Mapping

from ..errors import InvalidAggregation
from . import values
from .base import QueryPlanNode, Table
from .datasources import TableDataSource

__all__ = (
    "AggregateNode",
    "Aggregation",
    "CountAggregation",
    "SumAggregation",
    "MinAggregation",
    "MaxAggregation",
    "MeanAggregation",
    "AGGREGATIONS",
    "make_aggregation",
    "aggregate",
)


class AggregateNode(QueryPlanNode):
    """Group data and compute aggregations.

    Groups are emitted in the order their key was first seen.

    >>> from sheetquery.compute import TableDataSource
    >>> data = Table(["city", "shop", "n_employees"], [
    ...     ["New York", "Shop A", 10],
    ...     ["New York", "Shop B", 15],
    ...     ["Los Angeles", "Shop C", 8],
    ...     ["Los Angeles", "Shop D", 12],
    ...     ["New York", "Shop E", 20],
    ... ])
    >>> aggregate = AggregateNode(["city"], {"total_employees": SumAggregation("n_employees")}, TableDataSource(data))
    >>> result = next(aggregate.batches())
    >>> result.columns
    ['city', 'total_employees']
    >>> result.rows
    [['New York', 45], ['Los Angeles', 20]]
    """

    def __init__(
        self,
        keys: list[str],
        aggregations: dict[str, "Aggregation"],
        child: QueryPlanNode,
    ) -> None:
        """
        :param keys: The columns to group by, can be empty to aggregate all rows together.
        :param aggregations: The aggregations to compute in the form of {"new_col_name": Aggregation}.
        :param child: The child node that will provide the data to aggregate.
        """
        self.keys = list(keys)
        self.aggregations = aggregations
        self.child = child

    def __str__(self) -> str:
        return f"AggregateNode(keys={self.keys}, aggregations={self.aggregations}, {self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Group the rows of all the child batches and aggregate them.

        For each batch, the rows are split in groups by their key
        and each aggregation computes a partial result for the group.
        Once all batches were consumed the partial results are
        reduced to the final value of each aggregation.
        """
        # chunks_data = {group_key: {aggr_name: [chunk1, chunk2, ...]}}
        # group_values keeps the values of the key as they were first seen.
        chunks_data: dict[tuple, dict[str, list[Any]]] = {}
        group_values: dict[tuple, list[Any]] = {}
        for batch in self.child.batches():
            key_indices = [batch.column_index(k) for k in self.keys]
            source_indices = {
                name: batch.column_index(aggregation.column)
                for name, aggregation in self.aggregations.items()
            }

            # Partition the rows in groups, dicts preserve
            # insertion order so groups are in first seen order.
            groups: dict[tuple, list[list[Any]]] = {}
            for row in batch.rows:
                row_key_values = [row[idx] for idx in key_indices]
                row_key = tuple(values.group_key(v) for v in row_key_values)
                groups.setdefault(row_key, []).append(row)
                group_values.setdefault(row_key, row_key_values)

            for group_key, rows in groups.items():
                group_chunks = chunks_data.setdefault(group_key, {})
                for name, aggregation in self.aggregations.items():
                    column_values = [row[source_indices[name]] for row in rows]
                    group_chunks.setdefault(name, []).append(
                        aggregation.compute_chunk(column_values)
                    )

        if not self.keys and not chunks_data:
            # Aggregating without keys always produces one row,
            # like SELECT COUNT(*) on an empty table does.
            chunks_data[()] = {}
            group_values[()] = []

        yield self.reduce_aggregations(chunks_data, group_values)

    def reduce_aggregations(
        self,
        chunks_data: dict[tuple, dict[str, list[Any]]],
        group_values: dict[tuple, list[Any]],
    ) -> Table:
        """Reduce the partial aggregation results to the final aggregation results.

        For example if we had 3 chunks and the chunks_data is::

            {"New York": {"total_employees": [10, 20, 30]}}

        The result will be::

            {"New York": {"total_employees": 60}}
        """
        rows = []
        for group_key, aggregated_values in chunks_data.items():
            row = list(group_values[group_key])
            for aggrname, aggregation in self.aggregations.items():
                row.append(aggregation.reduce(aggregated_values.get(aggrname, [])))
            rows.append(row)
        return Table(self.keys + list(self.aggregations.keys()), rows)


class Aggregation(abc.ABC):
    """Base class for aggregations.

    Every aggregation is expected to implement
    a method to compute any needed intermediate results
    on a single chunk of data and then provide a reduce method
    to combine the intermediate results into a final result.
    """

    function: str = ""

    def __init__(self, column: str) -> None:
        self.column = column

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.column})"

    __repr__ = __str__

    @abc.abstractmethod
    def compute_chunk(self, data: list[Any]) -> Any: ...

    @abc.abstractmethod
    def reduce(self, chunks: list[Any]) -> Any: ...


class NumericAggregation(Aggregation):
    """Provide a base implementation for numeric aggregations like min,max,sum.

    The function applied to compute intermediate results for a single
    chunk of data is the same as the function applied to combine
    the intermediate results into the final.

    For example ``sum([1, 2, 3])`` is the same as ``sum([sum([1, 2]), 3])``.

    Values that are not finite numbers are skipped, and the result
    of aggregating no numbers at all is :attr:`empty_result`.
    """

    empty_result: Any = None

    @abc.abstractmethod
    def _aggregate(self, data: list[Any]) -> Any: ...

    def compute_chunk(self, data: list[Any]) -> Any:
        numbers = [v for v in data if values.is_number(v)]
        if not numbers:
            return None
        return self._aggregate(numbers)

    def reduce(self, chunks: list[Any]) -> Any:
        partials = [c for c in chunks if c is not None]
        if not partials:
            return self.empty_result
        return self._aggregate(partials)


class SumAggregation(NumericAggregation):
    """Compute the sum of an aggregated column."""

    function = "SUM"
    empty_result = 0

    def _aggregate(self, data: list[Any]) -> Any:
        return sum(data)


class MinAggregation(NumericAggregation):
    """Compute the min of an aggregated column."""

    function = "MIN"

    def _aggregate(self, data: list[Any]) -> Any:
        return min(data)


class MaxAggregation(NumericAggregation):
    """Compute the max of an aggregated column."""

    function = "MAX"

    def _aggregate(self, data: list[Any]) -> Any:
        return max(data)


class CountAggregation(Aggregation):
    """Compute the count of the non empty cells of an aggregated column.

    This is based on computing the counts for each intermediate batch
    and then sum them to compute the final result.
    """

    function = "COUNT"

    def compute_chunk(self, data: list[Any]) -> int:
        """Count the non empty values in a single batch."""
        return sum(1 for v in data if not values.is_empty(v))

    def reduce(self, chunks: list[int]) -> int:
        """Sum the counts of all intermediate results to the final count."""
        return sum(chunks)


class MeanAggregation(Aggregation):
    """Compute the mean of an aggregated column.

    This is based by computing count and sum of the numbers
    for each intermediate batch and then dividing
    the sum of all intermediate results by the count
    of all intermediate results.

    When there are no numbers the mean is ``None``.
    """

    function = "AVG"

    def compute_chunk(self, data: list[Any]) -> tuple[int, Any]:
        """Compute the count and sum of the numbers in a single batch."""
        numbers = [v for v in data if values.is_number(v)]
        return (len(numbers), sum(numbers))

    def reduce(self, chunks: list[tuple[int, Any]]) -> Any:
        """Compute the mean of the column from the intermediate sums and counts."""
        count = sum(chunk[0] for chunk in chunks)
        if not count:
            return None
        total = sum(chunk[1] for chunk in chunks)
        return total / count


AGGREGATIONS: dict[str, type[Aggregation]] = {
    aggregation.function: aggregation
    for aggregation in (
        CountAggregation,
        SumAggregation,
        MeanAggregation,
        MinAggregation,
        MaxAggregation,
    )
}


def make_aggregation(function: str, column: str) -> Aggregation:
    """Create the aggregation for the given function name.

    >>> make_aggregation("avg", "price")
    MeanAggregation(price)

    :raises sheetquery.errors.InvalidAggregation: for unknown functions.
    """
    try:
        aggregation_class = AGGREGATIONS[function.upper()]
    except (KeyError, AttributeError):
        raise InvalidAggregation(function) from None
    return aggregation_class(column)


def aggregate(
    table: Table,
    keys: Iterable[str],
    aggregations: Mapping[str, Aggregation | tuple[str, str]],
) -> Table:
    """Group the rows of a table and aggregate each group.

    The aggregations can be provided as :class:`Aggregation` objects
    or as ``(source_column, function)`` pairs.

    >>> table = Table(["city", "sales"], [["Rome", 10], ["Paris", 5], ["Rome", ""]])
    >>> result = aggregate(table, ["city"], {"n": ("sales", "COUNT"), "avg": ("sales", "AVG")})
    >>> result.columns, result.rows
    (['city', 'n', 'avg'], [['Rome', 1, 10.0], ['Paris', 1, 5.0]])
    """
    resolved = {
        name: (
            aggregation
            if isinstance(aggregation, Aggregation)
            else make_aggregation(aggregation[1], aggregation[0])
        )
        for name, aggregation in aggregations.items()
    }
    return next(AggregateNode(list(keys), resolved, TableDataSource(table)).batches())
