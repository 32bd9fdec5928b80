"""
BizDash Analytics - Data Models Package

Dataclasses for engine records, specs, and results.
"""

from bizdash.models.records import (
    Record,
    AggregatedRow,
    AggregationOperator,
    AggregationSpec,
    TimeInterval,
    TimeSeriesSpec,
    TimeBucket,
    GrowthPoint,
    CacheEntry
)

__all__ = [
    "Record",
    "AggregatedRow",
    "AggregationOperator",
    "AggregationSpec",
    "TimeInterval",
    "TimeSeriesSpec",
    "TimeBucket",
    "GrowthPoint",
    "CacheEntry"
]
