"""
BizDash Analytics - Statistics Calculator

Numeric coercion and descriptive statistics shared by the aggregators.
All functions degrade to 0 on empty input instead of raising.
"""

import math
import statistics
from typing import Any, Iterable, List, Optional


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a record value to a float.

    Empty and whitespace-only strings coerce to 0. Integers too large for
    a float coerce to signed infinity.

    Args:
        value: Raw record value (number, numeric string, bool, None, ...)

    Returns:
        The float value, or None when the value is missing, NaN, or not numeric
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return 1.0 if value else 0.0

    if isinstance(value, int):
        try:
            number = float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    elif isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if math.isnan(number):
        return None
    return number


def numeric_values(values: Iterable[Any]) -> List[float]:
    """Keep only the numeric-coercible values, converted to float."""
    result = []
    for value in values:
        number = to_number(value)
        if number is not None:
            result.append(number)
    return result


def calculate_mean(values: List[float]) -> float:
    """Arithmetic mean, 0 for empty input."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def calculate_median(values: List[float]) -> float:
    """Median (mean of the two middle values for even length), 0 for empty input."""
    if not values:
        return 0.0
    return float(statistics.median(values))


def calculate_stddev(values: List[float]) -> float:
    """Population standard deviation (divides by n), 0 for empty input."""
    if not values:
        return 0.0
    # Infinite inputs have no defined spread
    if not all(math.isfinite(value) for value in values):
        return math.nan
    return float(statistics.pstdev(values))


def calculate_percentile(values: Iterable[Any], percentile: float) -> float:
    """
    Nearest-rank percentile.

    Returns an observed value, never an interpolated one:
    index = ceil(p / 100 * n) - 1, clamped to the valid range.

    Args:
        values: Unordered values (non-numeric entries are ignored)
        percentile: Percentile rank (0-100)

    Returns:
        Value at the percentile rank, or 0 for empty input
    """
    sorted_values = sorted(numeric_values(values))
    if not sorted_values:
        return 0.0

    index = math.ceil((percentile / 100) * len(sorted_values)) - 1
    index = min(max(0, index), len(sorted_values) - 1)
    return sorted_values[index]
