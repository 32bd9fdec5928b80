"""
BizDash Analytics - Record and Spec Models

Data models for engine inputs (records, aggregation and time-series specs)
and engine outputs (time buckets, growth points, cache entries).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Union


# Flat field name -> scalar value mapping; no nested paths
Record = Dict[str, Any]
AggregatedRow = Dict[str, Any]

GROUP_KEY_SEPARATOR = "|"


class AggregationOperator(str, Enum):
    """Reduction applied to a numeric field within a group."""
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"
    COUNT = "count"
    MEDIAN = "median"
    STDDEV = "stddev"


class TimeInterval(str, Enum):
    """Calendar interval used to bucket time-stamped records."""
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


def _parse_operator(operator: Union[str, AggregationOperator]) -> AggregationOperator:
    """Convert an operator name to AggregationOperator."""
    try:
        return AggregationOperator(operator)
    except ValueError:
        valid = ", ".join(op.value for op in AggregationOperator)
        raise ValueError(
            f"Unknown aggregation operator '{operator}' (expected one of: {valid})"
        ) from None


@dataclass
class AggregationSpec:
    """
    Declarative grouping and reduction config.

    group_by_fields may be given as a single field name; it is normalized
    to a list. Operators may be given by name.
    """
    group_by_fields: List[str]
    aggregations: Dict[str, AggregationOperator] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.group_by_fields, str):
            self.group_by_fields = [self.group_by_fields]
        else:
            self.group_by_fields = list(self.group_by_fields)
        self.aggregations = {
            field_name: _parse_operator(operator)
            for field_name, operator in self.aggregations.items()
        }

    def group_values(self, record: Record) -> Dict[str, str]:
        """
        Extract the group-by values of a record as strings.

        Missing and None values become empty strings so grouping stays stable.
        """
        return {
            field_name: _key_part(record.get(field_name))
            for field_name in self.group_by_fields
        }

    def group_key(self, record: Record) -> str:
        """Build the composite group key for a record."""
        return GROUP_KEY_SEPARATOR.join(self.group_values(record).values())


def _key_part(value: Any) -> str:
    """Render one group-by value the way it appears in the key."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class TimeSeriesSpec:
    """
    Time-series bucketing config.

    fill_missing is accepted for interface compatibility and has no effect:
    periods without records produce no bucket.
    """
    date_field: str
    value_field: str
    interval: TimeInterval = TimeInterval.DAY
    fill_missing: bool = False

    def __post_init__(self):
        try:
            self.interval = TimeInterval(self.interval)
        except ValueError:
            valid = ", ".join(item.value for item in TimeInterval)
            raise ValueError(
                f"Unknown time interval '{self.interval}' (expected one of: {valid})"
            ) from None


@dataclass
class TimeBucket:
    """
    One calendar-interval bucket of a time series.

    timestamp is the bucket start in epoch milliseconds (UTC);
    value is the mean of the bucket's values.
    """
    date: str
    timestamp: int
    value: float
    count: int
    min: float
    max: float
    sum: float

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "date": self.date,
            "timestamp": self.timestamp,
            "value": self.value,
            "count": self.count,
            "min": self.min,
            "max": self.max,
            "sum": self.sum
        }


@dataclass
class GrowthPoint:
    """Period-over-period change for one point of an ordered series."""
    date: str
    value: float
    growth: float = 0.0
    growth_rate: float = 0.0  # percent vs previous point

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "date": self.date,
            "value": self.value,
            "growth": self.growth,
            "growthRate": self.growth_rate
        }


@dataclass
class CacheEntry:
    """
    A cached payload with its insertion time and validity window.

    Both timestamp and ttl are in milliseconds.
    """
    data: Any
    timestamp: float
    ttl: float

    def age(self, now_ms: float) -> float:
        """Return entry age in milliseconds."""
        return now_ms - self.timestamp

    def is_expired(self, now_ms: float) -> bool:
        """Entry is valid while its age does not exceed the ttl."""
        return self.age(now_ms) > self.ttl
