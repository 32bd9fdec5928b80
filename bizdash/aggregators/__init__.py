"""
BizDash Analytics - Aggregators Package

Group-by, streaming, and time-based aggregation modules.
"""

from bizdash.aggregators.group_aggregator import (
    GroupAggregator,
    StreamingAggregator,
    aggregate,
    stream_aggregate
)
from bizdash.aggregators.time_aggregator import (
    IntervalKeys,
    TimeBucketer,
    bucket_time_series,
    get_iso_week,
    parse_datetime
)
from bizdash.aggregators.parallel import process_in_parallel

__all__ = [
    "GroupAggregator",
    "StreamingAggregator",
    "aggregate",
    "stream_aggregate",
    "IntervalKeys",
    "TimeBucketer",
    "bucket_time_series",
    "get_iso_week",
    "parse_datetime",
    "process_in_parallel"
]
