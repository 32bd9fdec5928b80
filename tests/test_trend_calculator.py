"""
BizDash Analytics - Trend Calculator Tests

Unit tests for growth rates and moving averages.
"""

import unittest

from bizdash.calculators.trend_calculator import TrendCalculator
from bizdash.models.records import GrowthPoint, TimeBucket


class TestGrowthRates(unittest.TestCase):
    """Test cases for period-over-period growth."""

    def test_growth_and_rate(self):
        """Growth is the difference; rate is percent of the previous value."""
        series = [
            {"date": "2024-01", "value": 100},
            {"date": "2024-02", "value": 150},
            {"date": "2024-03", "value": 120},
        ]
        points = TrendCalculator.calculate_growth_rates(series)

        self.assertEqual(len(points), 3)
        self.assertEqual((points[0].growth, points[0].growth_rate), (0.0, 0.0))
        self.assertEqual(points[1].growth, 50)
        self.assertAlmostEqual(points[1].growth_rate, 50.0)
        self.assertEqual(points[2].growth, -30)
        self.assertAlmostEqual(points[2].growth_rate, -20.0)

    def test_zero_previous_value(self):
        """A zero previous value gives rate 0, never inf or nan."""
        series = [{"date": "a", "value": 0}, {"date": "b", "value": 25}]
        points = TrendCalculator.calculate_growth_rates(series)
        self.assertEqual(points[1].growth, 25)
        self.assertEqual(points[1].growth_rate, 0.0)

    def test_idempotent_on_own_output(self):
        """Feeding the output back in reproduces growth and rate."""
        series = [{"date": str(i), "value": v} for i, v in enumerate([5, 8, 0, 3, 3, 12])]
        first = TrendCalculator.calculate_growth_rates(series)
        second = TrendCalculator.calculate_growth_rates(
            [{"date": point.date, "value": point.value} for point in first]
        )
        self.assertEqual(first, second)
        self.assertEqual(TrendCalculator.calculate_growth_rates(first), first)

    def test_accepts_time_buckets(self):
        """TimeBuckets are read by date and value."""
        buckets = [
            TimeBucket("2024-01", 0, 10.0, 1, 10.0, 10.0, 10.0),
            TimeBucket("2024-02", 1, 20.0, 1, 20.0, 20.0, 20.0),
        ]
        points = TrendCalculator.calculate_growth_rates(buckets)
        self.assertEqual(points[1], GrowthPoint("2024-02", 20.0, 10.0, 100.0))

    def test_non_numeric_value_treated_as_zero(self):
        series = [{"date": "a", "value": "x"}, {"date": "b", "value": 4}]
        points = TrendCalculator.calculate_growth_rates(series)
        self.assertEqual(points[0].value, 0.0)
        self.assertEqual(points[1].growth_rate, 0.0)

    def test_empty_series(self):
        self.assertEqual(TrendCalculator.calculate_growth_rates([]), [])

    def test_to_dict_uses_camel_case_rate(self):
        payload = GrowthPoint("2024-01", 1.0, 0.5, 2.0).to_dict()
        self.assertEqual(payload, {"date": "2024-01", "value": 1.0, "growth": 0.5, "growthRate": 2.0})


class TestMovingAverage(unittest.TestCase):
    """Test cases for the trailing moving average."""

    def test_window_longer_than_series(self):
        """Early points average over the values available so far."""
        self.assertEqual(TrendCalculator.calculate_moving_average([10, 20, 30], 5), [10, 15, 20])

    def test_full_windows(self):
        result = TrendCalculator.calculate_moving_average([1, 2, 3, 4, 5], 2)
        self.assertEqual(result, [1, 1.5, 2.5, 3.5, 4.5])

    def test_window_of_one_is_identity(self):
        values = [3.0, 1.0, 4.0, 1.0, 5.0]
        self.assertEqual(TrendCalculator.calculate_moving_average(values, 1), values)

    def test_same_length_as_input(self):
        values = list(range(37))
        self.assertEqual(len(TrendCalculator.calculate_moving_average(values, 7)), 37)

    def test_empty_input(self):
        self.assertEqual(TrendCalculator.calculate_moving_average([], 3), [])

    def test_invalid_window(self):
        for window in (0, -2):
            with self.assertRaises(ValueError):
                TrendCalculator.calculate_moving_average([1, 2, 3], window)


if __name__ == "__main__":
    unittest.main()
