"""
BizDash Analytics - Time Aggregator Tests

Unit tests for calendar-interval bucketing and date parsing.
"""

import unittest
from datetime import date, datetime, timezone, timedelta

from bizdash.aggregators.time_aggregator import (
    IntervalKeys,
    TimeBucketer,
    bucket_time_series,
    get_iso_week,
    parse_datetime,
    to_epoch_ms
)
from bizdash.models.records import TimeInterval, TimeSeriesSpec


class TestParseDatetime(unittest.TestCase):
    """Test cases for record date parsing."""

    def test_iso_string_with_z(self):
        """Trailing Z is read as UTC."""
        parsed = parse_datetime("2024-03-05T10:30:00Z")
        self.assertEqual(parsed, datetime(2024, 3, 5, 10, 30, tzinfo=timezone.utc))

    def test_offset_converted_to_utc(self):
        """Offsets are normalized to UTC."""
        parsed = parse_datetime("2024-03-05T01:00:00+02:00")
        self.assertEqual(parsed, datetime(2024, 3, 4, 23, 0, tzinfo=timezone.utc))

    def test_naive_treated_as_utc(self):
        """Naive strings and datetimes are UTC."""
        self.assertEqual(parse_datetime("2024-03-05").tzinfo, timezone.utc)
        self.assertEqual(
            parse_datetime(datetime(2024, 3, 5, 12)),
            datetime(2024, 3, 5, 12, tzinfo=timezone.utc)
        )

    def test_date_and_epoch_ms(self):
        """date objects and epoch milliseconds are accepted."""
        self.assertEqual(parse_datetime(date(2024, 1, 2)), datetime(2024, 1, 2, tzinfo=timezone.utc))
        self.assertEqual(parse_datetime(86400000), datetime(1970, 1, 2, tzinfo=timezone.utc))

    def test_invalid_values(self):
        """Unparseable values return None."""
        for value in [None, "", "not a date", "2024-13-45", True, [], {}]:
            self.assertIsNone(parse_datetime(value), value)


class TestIntervalKeys(unittest.TestCase):
    """Test cases for interval key functions."""

    def setUp(self):
        """Set up test fixtures."""
        self.moment = datetime(2024, 8, 14, 15, 42, 7, tzinfo=timezone.utc)

    def test_hour(self):
        key, start = IntervalKeys.hour(self.moment)
        self.assertEqual(key, "2024-08-14T15:00:00")
        self.assertEqual(start, datetime(2024, 8, 14, 15, tzinfo=timezone.utc))

    def test_day(self):
        key, start = IntervalKeys.day(self.moment)
        self.assertEqual(key, "2024-08-14")
        self.assertEqual(start, datetime(2024, 8, 14, tzinfo=timezone.utc))

    def test_week(self):
        """Week key uses the ISO week; start is the Monday."""
        key, start = IntervalKeys.week(self.moment)
        self.assertEqual(key, "2024-W33")
        self.assertEqual(start, datetime(2024, 8, 12, tzinfo=timezone.utc))

    def test_month(self):
        key, start = IntervalKeys.month(self.moment)
        self.assertEqual(key, "2024-08")
        self.assertEqual(start, datetime(2024, 8, 1, tzinfo=timezone.utc))

    def test_quarter(self):
        key, start = IntervalKeys.quarter(self.moment)
        self.assertEqual(key, "2024-Q3")
        self.assertEqual(start, datetime(2024, 7, 1, tzinfo=timezone.utc))

    def test_year(self):
        key, start = IntervalKeys.year(self.moment)
        self.assertEqual(key, "2024")
        self.assertEqual(start, datetime(2024, 1, 1, tzinfo=timezone.utc))


class TestIsoWeek(unittest.TestCase):
    """ISO-8601 week numbering around year boundaries."""

    def test_first_of_january_2021_is_week_53_of_2020(self):
        """2021-01-01 (a Friday) belongs to week 53 of 2020."""
        moment = datetime(2021, 1, 1, tzinfo=timezone.utc)
        self.assertEqual(get_iso_week(moment), (2020, 53))

        key, start = IntervalKeys.week(moment)
        self.assertEqual(key, "2020-W53")
        self.assertEqual(start, datetime(2020, 12, 28, tzinfo=timezone.utc))

    def test_late_december_can_be_week_1(self):
        """2024-12-30 (a Monday) is week 1 of 2025."""
        self.assertEqual(get_iso_week(datetime(2024, 12, 30, tzinfo=timezone.utc)), (2025, 1))

    def test_single_digit_week_not_padded(self):
        """Week numbers are not zero-padded."""
        key, _ = IntervalKeys.week(datetime(2024, 1, 10, tzinfo=timezone.utc))
        self.assertEqual(key, "2024-W2")


class TestTimeBucketer(unittest.TestCase):
    """Test cases for TimeBucketer."""

    def _daily_records(self, start: datetime, values):
        return [
            {"date": (start + timedelta(days=i)).isoformat(), "amount": value}
            for i, value in enumerate(values)
        ]

    def test_day_buckets_reduce_values(self):
        """Each bucket carries count/sum/min/max and mean value."""
        records = [
            {"date": "2024-01-01T08:00:00Z", "amount": 10},
            {"date": "2024-01-01T20:00:00Z", "amount": 30},
            {"date": "2024-01-02T09:00:00Z", "amount": "5"},
        ]
        buckets = bucket_time_series(records, TimeSeriesSpec("date", "amount", TimeInterval.DAY))

        self.assertEqual([b.date for b in buckets], ["2024-01-01", "2024-01-02"])
        first = buckets[0]
        self.assertEqual(first.count, 2)
        self.assertEqual(first.sum, 40)
        self.assertEqual(first.value, 20)
        self.assertEqual(first.min, 10)
        self.assertEqual(first.max, 30)
        self.assertEqual(first.timestamp, to_epoch_ms(datetime(2024, 1, 1, tzinfo=timezone.utc)))

    def test_sorted_by_timestamp(self):
        """Buckets come out in ascending time order regardless of input order."""
        records = self._daily_records(datetime(2024, 1, 1, tzinfo=timezone.utc), range(90))
        records.reverse()

        buckets = TimeBucketer(TimeSeriesSpec("date", "amount", "month")).bucket(records)

        self.assertEqual([b.date for b in buckets], ["2024-01", "2024-02", "2024-03"])
        timestamps = [b.timestamp for b in buckets]
        self.assertEqual(timestamps, sorted(timestamps))

    def test_week_buckets_sort_across_year_boundary(self):
        """2020-W53 sorts before 2021-W1."""
        records = self._daily_records(datetime(2020, 12, 28, tzinfo=timezone.utc), [1] * 14)
        buckets = bucket_time_series(records, TimeSeriesSpec("date", "amount", TimeInterval.WEEK))
        self.assertEqual([b.date for b in buckets], ["2020-W53", "2021-W1"])
        self.assertEqual([b.count for b in buckets], [7, 7])

    def test_quarter_and_year(self):
        """Coarse intervals group whole quarters and years."""
        records = [
            {"date": "2023-11-15", "amount": 1},
            {"date": "2024-02-01", "amount": 2},
            {"date": "2024-03-31", "amount": 3},
            {"date": "2024-04-01", "amount": 4},
        ]
        quarters = bucket_time_series(records, TimeSeriesSpec("date", "amount", TimeInterval.QUARTER))
        years = bucket_time_series(records, TimeSeriesSpec("date", "amount", TimeInterval.YEAR))

        self.assertEqual([(b.date, b.sum) for b in quarters], [("2023-Q4", 1), ("2024-Q1", 5), ("2024-Q2", 4)])
        self.assertEqual([(b.date, b.count) for b in years], [("2023", 1), ("2024", 3)])

    def test_hour_buckets(self):
        records = [
            {"ts": "2024-05-01T10:05:00Z", "v": 1},
            {"ts": "2024-05-01T10:55:00Z", "v": 3},
            {"ts": "2024-05-01T11:00:00Z", "v": 5},
        ]
        buckets = bucket_time_series(records, TimeSeriesSpec("ts", "v", TimeInterval.HOUR))
        self.assertEqual([(b.date, b.value) for b in buckets], [
            ("2024-05-01T10:00:00", 2),
            ("2024-05-01T11:00:00", 5)
        ])

    def test_bad_records_dropped(self):
        """Unparseable dates and non-numeric values are skipped."""
        records = [
            {"date": "garbage", "amount": 1},
            {"amount": 2},
            {"date": "2024-01-01", "amount": "n/a"},
            {"date": "2024-01-01", "amount": None},
            {"date": "2024-01-01", "amount": 7},
        ]
        buckets = bucket_time_series(records, TimeSeriesSpec("date", "amount"))
        self.assertEqual(len(buckets), 1)
        self.assertEqual(buckets[0].count, 1)
        self.assertEqual(buckets[0].sum, 7)

    def test_fill_missing_has_no_effect(self):
        """Gaps stay gaps even when fill_missing is requested."""
        records = [
            {"date": "2024-01-01", "amount": 1},
            {"date": "2024-01-05", "amount": 2},
        ]
        buckets = bucket_time_series(records, TimeSeriesSpec("date", "amount", "day", fill_missing=True))
        self.assertEqual(len(buckets), 2)

    def test_empty_input(self):
        self.assertEqual(bucket_time_series([], TimeSeriesSpec("date", "amount")), [])

    def test_invalid_interval(self):
        with self.assertRaises(ValueError):
            TimeSeriesSpec("date", "amount", "fortnight")

    def test_bucket_to_dict(self):
        records = [{"date": "2024-01-01", "amount": 4}]
        payload = bucket_time_series(records, TimeSeriesSpec("date", "amount"))[0].to_dict()
        self.assertEqual(
            set(payload),
            {"date", "timestamp", "value", "count", "min", "max", "sum"}
        )


if __name__ == "__main__":
    unittest.main()
