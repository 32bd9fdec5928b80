"""
BizDash Analytics - Business Intelligence Dashboard

This package provides the in-process computation engine (aggregation,
time-series bucketing, trends, percentiles), the TTL result cache that
memoizes per-request results, and the dashboard/API layer built on them.
"""

__version__ = "26.10.19"
__author__ = "BizDash Analytics Team"
