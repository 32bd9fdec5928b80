"""
BizDash Analytics - Group Aggregator

Generic group-by/reduce over heterogeneous flat records, in two flavours:
- GroupAggregator: materializes each group, then reduces
- StreamingAggregator: single pass with running state per group
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List

from bizdash.calculators.statistics_calculator import (
    calculate_mean,
    calculate_median,
    calculate_stddev,
    numeric_values,
    to_number
)
from bizdash.models.records import (
    AggregatedRow,
    AggregationOperator,
    AggregationSpec,
    Record
)


logger = logging.getLogger(__name__)


def _min_or_zero(values: List[float]) -> float:
    return min(values) if values else 0.0


def _max_or_zero(values: List[float]) -> float:
    return max(values) if values else 0.0


# Reducers over the numeric values of one field; COUNT is handled separately
# because it reports the raw group size.
REDUCERS: Dict[AggregationOperator, Callable[[List[float]], float]] = {
    AggregationOperator.SUM: sum,
    AggregationOperator.AVG: calculate_mean,
    AggregationOperator.MIN: _min_or_zero,
    AggregationOperator.MAX: _max_or_zero,
    AggregationOperator.MEDIAN: calculate_median,
    AggregationOperator.STDDEV: calculate_stddev
}


class GroupAggregator:
    """
    Groups records by one or more fields and reduces numeric fields.

    Never raises on dirty data: non-numeric values are excluded from the
    operator's input and empty inputs reduce to 0.
    """

    def __init__(self, spec: AggregationSpec):
        """
        Initialize the aggregator.

        Args:
            spec: Group-by fields and per-field operators
        """
        self.spec = spec

    def aggregate(self, records: Iterable[Record]) -> List[AggregatedRow]:
        """
        Aggregate records into one row per distinct group key.

        Rows come out in first-seen key order. Each aggregated field
        overwrites the field of the same name; `count` reports the raw
        group size, not the number of numeric values.

        Args:
            records: Flat records

        Returns:
            List of aggregated rows
        """
        groups: Dict[str, List[Record]] = {}
        group_values: Dict[str, Dict[str, str]] = {}

        for record in records:
            key = self.spec.group_key(record)
            if key not in groups:
                groups[key] = []
                group_values[key] = self.spec.group_values(record)
            groups[key].append(record)

        rows = [
            self._reduce_group(group_values[key], items)
            for key, items in groups.items()
        ]
        logger.debug(f"Aggregated {sum(len(items) for items in groups.values())} records into {len(rows)} groups")
        return rows

    def _reduce_group(self, key_values: Dict[str, str], items: List[Record]) -> AggregatedRow:
        """Apply every configured operator to one group."""
        row: AggregatedRow = dict(key_values)

        for field_name, operator in self.spec.aggregations.items():
            if operator == AggregationOperator.COUNT:
                row[field_name] = len(items)
                continue
            values = numeric_values(item.get(field_name) for item in items)
            row[field_name] = REDUCERS[operator](values)

        return row


@dataclass
class _RunningGroup:
    """Running state for one group of the streaming aggregator."""
    key_values: Dict[str, str]
    count: int = 0
    sums: Dict[str, float] = field(default_factory=lambda: defaultdict(float))
    numeric_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    mins: Dict[str, float] = field(default_factory=dict)
    maxs: Dict[str, float] = field(default_factory=dict)
    buffers: Dict[str, List[float]] = field(default_factory=lambda: defaultdict(list))


class StreamingAggregator:
    """
    Memory-bounded, single-pass variant of GroupAggregator.

    Keeps running count/sum/min/max per group. median and stddev cannot be
    computed without seeing every value, so those fields are buffered per
    group; O(1) memory per group holds only for sum/avg/min/max/count.

    Usage:
        aggregator = StreamingAggregator(spec)
        for record in source:
            aggregator.add(record)
        rows = list(aggregator.finalize())

    No row is final until the source is exhausted, so output is only
    available after finalize().
    """

    BUFFERED_OPERATORS = (AggregationOperator.MEDIAN, AggregationOperator.STDDEV)

    def __init__(self, spec: AggregationSpec):
        """
        Initialize the streaming aggregator.

        Args:
            spec: Group-by fields and per-field operators
        """
        self.spec = spec
        self._groups: Dict[str, _RunningGroup] = {}
        self._records_seen = 0

    @property
    def records_seen(self) -> int:
        """Number of records consumed so far."""
        return self._records_seen

    def add(self, record: Record) -> None:
        """Fold one record into its group's running state."""
        key = self.spec.group_key(record)
        group = self._groups.get(key)
        if group is None:
            group = _RunningGroup(key_values=self.spec.group_values(record))
            self._groups[key] = group

        group.count += 1
        self._records_seen += 1

        for field_name, operator in self.spec.aggregations.items():
            if operator == AggregationOperator.COUNT:
                continue
            value = to_number(record.get(field_name))
            if value is None:
                continue

            if operator in (AggregationOperator.SUM, AggregationOperator.AVG):
                group.sums[field_name] += value
                group.numeric_counts[field_name] += 1
            elif operator == AggregationOperator.MIN:
                current = group.mins.get(field_name)
                group.mins[field_name] = value if current is None else min(current, value)
            elif operator == AggregationOperator.MAX:
                current = group.maxs.get(field_name)
                group.maxs[field_name] = value if current is None else max(current, value)
            elif operator in self.BUFFERED_OPERATORS:
                group.buffers[field_name].append(value)

    def finalize(self) -> Iterator[AggregatedRow]:
        """Yield one aggregated row per group, in first-seen key order."""
        logger.debug(f"Streaming aggregation finalized: {self._records_seen} records, {len(self._groups)} groups")
        for group in self._groups.values():
            yield self._build_row(group)

    def _build_row(self, group: _RunningGroup) -> AggregatedRow:
        """Turn a group's running state into an output row."""
        row: AggregatedRow = dict(group.key_values)

        for field_name, operator in self.spec.aggregations.items():
            if operator == AggregationOperator.SUM:
                row[field_name] = group.sums.get(field_name, 0.0)
            elif operator == AggregationOperator.AVG:
                included = group.numeric_counts.get(field_name, 0)
                row[field_name] = group.sums[field_name] / included if included else 0.0
            elif operator == AggregationOperator.MIN:
                row[field_name] = group.mins.get(field_name, 0.0)
            elif operator == AggregationOperator.MAX:
                row[field_name] = group.maxs.get(field_name, 0.0)
            elif operator == AggregationOperator.COUNT:
                row[field_name] = group.count
            elif operator == AggregationOperator.MEDIAN:
                row[field_name] = calculate_median(group.buffers.get(field_name, []))
            elif operator == AggregationOperator.STDDEV:
                row[field_name] = calculate_stddev(group.buffers.get(field_name, []))

        return row


def aggregate(records: Iterable[Record], spec: AggregationSpec) -> List[AggregatedRow]:
    """Group and reduce records; see GroupAggregator.aggregate."""
    return GroupAggregator(spec).aggregate(records)


def stream_aggregate(records: Iterable[Any], spec: AggregationSpec) -> Iterator[AggregatedRow]:
    """
    Lazily aggregate an iterable in a single pass.

    The source is consumed once when the generator is first advanced; rows
    are yielded only after it is exhausted.
    """
    aggregator = StreamingAggregator(spec)
    for record in records:
        aggregator.add(record)
    yield from aggregator.finalize()
