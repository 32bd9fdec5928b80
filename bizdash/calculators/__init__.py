"""
BizDash Analytics - Calculators Package

Statistics and trend calculation modules.
"""

from bizdash.calculators.statistics_calculator import (
    to_number,
    numeric_values,
    calculate_mean,
    calculate_median,
    calculate_stddev,
    calculate_percentile
)
from bizdash.calculators.trend_calculator import TrendCalculator

__all__ = [
    "to_number",
    "numeric_values",
    "calculate_mean",
    "calculate_median",
    "calculate_stddev",
    "calculate_percentile",
    "TrendCalculator"
]
