"""
BizDash Analytics - Computation Engine

Facade over the aggregators and calculators. Route handlers and the
dashboard data provider call the engine through this single entry point.
"""

import logging
from typing import Iterable, Iterator, List, Sequence

from bizdash.aggregators.group_aggregator import GroupAggregator, stream_aggregate
from bizdash.aggregators.time_aggregator import TimeBucketer
from bizdash.calculators.statistics_calculator import calculate_percentile
from bizdash.calculators.trend_calculator import SeriesPoint, TrendCalculator
from bizdash.models.records import (
    AggregatedRow,
    AggregationSpec,
    GrowthPoint,
    Record,
    TimeBucket,
    TimeSeriesSpec
)


logger = logging.getLogger(__name__)


class ComputationEngine:
    """
    Facade class for analytical computations.

    Provides a unified interface to GroupAggregator, StreamingAggregator,
    TimeBucketer, TrendCalculator, and the percentile calculator. All
    methods are synchronous and never raise on dirty data.
    """

    def aggregate(self, records: Iterable[Record], spec: AggregationSpec) -> List[AggregatedRow]:
        """Group records and reduce numeric fields."""
        return GroupAggregator(spec).aggregate(records)

    def stream_aggregate(self, records: Iterable[Record], spec: AggregationSpec) -> Iterator[AggregatedRow]:
        """Single-pass aggregation over a lazy iterable."""
        return stream_aggregate(records, spec)

    def bucket(self, records: Iterable[Record], spec: TimeSeriesSpec) -> List[TimeBucket]:
        """Bucket records by calendar interval."""
        return TimeBucketer(spec).bucket(records)

    def growth_rates(self, series: Sequence[SeriesPoint]) -> List[GrowthPoint]:
        """Period-over-period growth for an ordered series."""
        return TrendCalculator.calculate_growth_rates(series)

    def moving_average(self, values: Sequence[float], window: int) -> List[float]:
        """Trailing moving average, same length as the input."""
        return TrendCalculator.calculate_moving_average(values, window)

    def percentile(self, values: Iterable[float], percentile: float) -> float:
        """Nearest-rank percentile."""
        return calculate_percentile(values, percentile)
