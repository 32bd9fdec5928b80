"""
BizDash Analytics - Trend Calculator

Period-over-period growth and trailing moving averages for ordered series.
"""

import logging
from typing import Any, List, Mapping, Sequence, Union

from bizdash.calculators.statistics_calculator import to_number
from bizdash.models.records import GrowthPoint, TimeBucket


logger = logging.getLogger(__name__)

SeriesPoint = Union[Mapping[str, Any], TimeBucket, GrowthPoint]


class TrendCalculator:
    """
    Derives trends from an ordered value series.

    Handles:
    - Absolute and percentage growth vs the previous point
    - Fixed-window trailing moving averages
    """

    @staticmethod
    def calculate_growth_rates(series: Sequence[SeriesPoint]) -> List[GrowthPoint]:
        """
        Calculate period-over-period growth for each point.

        The first point has growth and growth_rate 0. A previous value of 0
        yields growth_rate 0 rather than Infinity/NaN.

        Args:
            series: Ordered points with date and value (dicts, TimeBuckets or
                GrowthPoints)

        Returns:
            List of GrowthPoint, same length and order as the input
        """
        points = [TrendCalculator._date_value(point) for point in series]
        result: List[GrowthPoint] = []

        for index, (date, value) in enumerate(points):
            if index == 0:
                result.append(GrowthPoint(date=date, value=value))
                continue

            previous_value = points[index - 1][1]
            growth = value - previous_value
            growth_rate = (growth / previous_value) * 100 if previous_value != 0 else 0.0
            result.append(GrowthPoint(
                date=date,
                value=value,
                growth=growth,
                growth_rate=growth_rate
            ))

        return result

    @staticmethod
    def calculate_moving_average(values: Sequence[float], window: int) -> List[float]:
        """
        Calculate a trailing moving average.

        output[i] is the mean of values[max(0, i - window + 1) .. i], so the
        first window - 1 outputs average over a shorter window.

        Args:
            values: Ordered numeric values
            window: Window size (>= 1)

        Returns:
            List of averages, same length as values

        Raises:
            ValueError: If window is less than 1
        """
        if window < 1:
            raise ValueError(f"Moving average window must be >= 1, got {window}")

        result: List[float] = []

        for index in range(len(values)):
            start = max(0, index - window + 1)
            window_values = values[start:index + 1]
            result.append(sum(window_values) / len(window_values))

        return result

    @staticmethod
    def _date_value(point: SeriesPoint) -> tuple:
        """Extract (date, value) from a series point."""
        if isinstance(point, (TimeBucket, GrowthPoint)):
            return point.date, point.value
        value = to_number(point.get("value"))
        return point.get("date"), value if value is not None else 0.0
