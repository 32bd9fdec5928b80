"""
BizDash Analytics - Time Aggregator

Buckets time-stamped records into calendar intervals
(hour/day/week/month/quarter/year) and reduces a numeric field per bucket.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from bizdash.calculators.statistics_calculator import to_number
from bizdash.models.records import Record, TimeBucket, TimeInterval, TimeSeriesSpec


logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a record date value into an aware UTC datetime.

    Accepts ISO-8601 strings (trailing "Z" allowed), datetime, date, and
    epoch milliseconds. Naive values are treated as UTC.

    Returns:
        UTC datetime, or None if the value is empty or unparseable
    """
    if not value or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            parsed = EPOCH + timedelta(milliseconds=value)
        except (OverflowError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def get_iso_week(moment: datetime) -> Tuple[int, int]:
    """
    Get the ISO-8601 (year, week) for a date.

    Weeks start Monday; week 1 is the week containing the year's first
    Thursday, so 2021-01-01 (a Friday) is week 53 of 2020.
    """
    iso_year, iso_week, _ = moment.isocalendar()
    return iso_year, iso_week


def to_epoch_ms(moment: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return int((moment - EPOCH) / timedelta(milliseconds=1))


class IntervalKeys:
    """
    Interval key and bucket-start functions, one pair per TimeInterval.

    Every function expects an aware UTC datetime.
    """

    @staticmethod
    def hour(moment: datetime) -> Tuple[str, datetime]:
        start = moment.replace(minute=0, second=0, microsecond=0)
        return start.strftime("%Y-%m-%dT%H:00:00"), start

    @staticmethod
    def day(moment: datetime) -> Tuple[str, datetime]:
        start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
        return start.strftime("%Y-%m-%d"), start

    @staticmethod
    def week(moment: datetime) -> Tuple[str, datetime]:
        iso_year, iso_week = get_iso_week(moment)
        day_start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
        start = day_start - timedelta(days=day_start.weekday())
        return f"{iso_year}-W{iso_week}", start

    @staticmethod
    def month(moment: datetime) -> Tuple[str, datetime]:
        start = moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        return f"{moment.year}-{moment.month:02d}", start

    @staticmethod
    def quarter(moment: datetime) -> Tuple[str, datetime]:
        quarter = (moment.month - 1) // 3 + 1
        start = moment.replace(
            month=(quarter - 1) * 3 + 1, day=1,
            hour=0, minute=0, second=0, microsecond=0
        )
        return f"{moment.year}-Q{quarter}", start

    @staticmethod
    def year(moment: datetime) -> Tuple[str, datetime]:
        start = moment.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        return str(moment.year), start


INTERVAL_KEY_FUNCTIONS: Dict[TimeInterval, Callable[[datetime], Tuple[str, datetime]]] = {
    TimeInterval.HOUR: IntervalKeys.hour,
    TimeInterval.DAY: IntervalKeys.day,
    TimeInterval.WEEK: IntervalKeys.week,
    TimeInterval.MONTH: IntervalKeys.month,
    TimeInterval.QUARTER: IntervalKeys.quarter,
    TimeInterval.YEAR: IntervalKeys.year
}


class TimeBucketer:
    """
    Maps records onto calendar-interval buckets.

    Records with an unparseable date or non-numeric value are dropped, so
    periods without data produce no bucket (no zero-filling).
    """

    def __init__(self, spec: TimeSeriesSpec):
        """
        Initialize the bucketer.

        Args:
            spec: Date field, value field and interval
        """
        self.spec = spec
        self._key_function = INTERVAL_KEY_FUNCTIONS[spec.interval]
        if spec.fill_missing:
            logger.debug("fill_missing requested but gap filling is not supported; ignoring")

    def bucket(self, records: Iterable[Record]) -> List[TimeBucket]:
        """
        Bucket records and reduce the value field per bucket.

        Args:
            records: Flat records

        Returns:
            TimeBuckets sorted ascending by bucket-start timestamp
        """
        grouped: Dict[str, Tuple[datetime, List[float]]] = {}
        dropped = 0

        for record in records:
            moment = parse_datetime(record.get(self.spec.date_field))
            if moment is None:
                dropped += 1
                continue

            value = to_number(record.get(self.spec.value_field))
            if value is None:
                dropped += 1
                continue

            interval_key, bucket_start = self._key_function(moment)
            if interval_key not in grouped:
                grouped[interval_key] = (bucket_start, [])
            grouped[interval_key][1].append(value)

        if dropped:
            logger.debug(f"Dropped {dropped} records with unparseable date or value")

        buckets = [
            self._build_bucket(interval_key, bucket_start, values)
            for interval_key, (bucket_start, values) in grouped.items()
        ]
        buckets.sort(key=lambda bucket: bucket.timestamp)
        return buckets

    @staticmethod
    def _build_bucket(interval_key: str, bucket_start: datetime, values: List[float]) -> TimeBucket:
        """Summarize one bucket's values."""
        total = sum(values)
        return TimeBucket(
            date=interval_key,
            timestamp=to_epoch_ms(bucket_start),
            value=total / len(values),
            count=len(values),
            min=min(values),
            max=max(values),
            sum=total
        )


def bucket_time_series(records: Iterable[Record], spec: TimeSeriesSpec) -> List[TimeBucket]:
    """Bucket records by calendar interval; see TimeBucketer.bucket."""
    return TimeBucketer(spec).bucket(records)
