"""
BizDash Analytics - Dashboard Data Provider

Builds the JSON payloads served by the API and rendered by the dashboard.
Raw records come from the mock data generator; every payload is computed
by the engine and memoized in the result cache under the request signature.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional

from bizdash.aggregators.time_aggregator import parse_datetime
from bizdash.cache.result_cache import BaseResultCache
from bizdash.engine import ComputationEngine
from bizdash.generators.mock_data import DEFAULT_HISTORY_DAYS, MockDataGenerator
from bizdash.models.records import (
    AggregationSpec,
    Record,
    TimeBucket,
    TimeInterval,
    TimeSeriesSpec
)
from bizdash.utils.performance import timed


logger = logging.getLogger(__name__)


def _share(part: float, total: float) -> float:
    """Percentage of total, 0 when total is 0."""
    return (part / total) * 100 if total else 0.0


def filter_by_date_range(
    records: Iterable[Record],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    date_field: str = "date"
) -> Iterator[Record]:
    """
    Lazily keep records whose date falls within [start, end].

    Records with an unparseable date are passed through; the engine drops
    them where it needs a date.
    """
    start_utc = parse_datetime(start) if start else None
    end_utc = parse_datetime(end) if end else None

    for record in records:
        moment = parse_datetime(record.get(date_field))
        if moment is not None:
            if start_utc and moment < start_utc:
                continue
            if end_utc and moment > end_utc:
                continue
        yield record


class DashboardDataProvider:
    """
    Data provider for the BizDash API and dashboard.

    Aggregates generated records through the computation engine and
    provides JSON-ready data structures for chart consumption.
    """

    def __init__(
        self,
        cache: BaseResultCache,
        engine: Optional[ComputationEngine] = None,
        generator: Optional[MockDataGenerator] = None,
        seed: Optional[int] = None,
        history_days: int = DEFAULT_HISTORY_DAYS,
        moving_average_window: int = 3,
        ttl_ms: Optional[float] = None
    ):
        """
        Initialize the data provider.

        Args:
            cache: Result cache used to memoize payloads
            engine: Computation engine (creates default if None)
            generator: Record generator (creates a seeded one if None)
            seed: Seed for the default generator
            history_days: Days of history for the default generator
            moving_average_window: Window for score moving averages
            ttl_ms: Payload TTL (cache default if None)
        """
        self.cache = cache
        self.engine = engine or ComputationEngine()
        self.seed = seed
        self.history_days = history_days
        self._generator = generator
        self.moving_average_window = moving_average_window
        self.ttl_ms = ttl_ms
        logger.debug("DashboardDataProvider initialized")

    @property
    def generator(self) -> MockDataGenerator:
        """Record generator; a fresh reference date per payload unless injected."""
        if self._generator is not None:
            return self._generator
        return MockDataGenerator(seed=self.seed, days=self.history_days)

    # ==================== Cached payloads ====================

    def get_sales_data(
        self,
        cache_key: str = "/api/sales",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Sales payload, memoized under cache_key."""
        return self.cache.get_or_compute(
            cache_key, lambda: self.compute_sales_data(start, end), self.ttl_ms
        )

    def get_performance_data(
        self,
        cache_key: str = "/api/performance",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Performance payload, memoized under cache_key."""
        return self.cache.get_or_compute(
            cache_key, lambda: self.compute_performance_data(start, end), self.ttl_ms
        )

    def get_financial_data(
        self,
        cache_key: str = "/api/financial",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Financial payload, memoized under cache_key."""
        return self.cache.get_or_compute(
            cache_key, lambda: self.compute_financial_data(start, end), self.ttl_ms
        )

    def get_dashboard_data(self) -> Dict[str, Any]:
        """
        Summary for the dashboard page, built from the cached sales and
        performance payloads.
        """
        sales = self.get_sales_data()
        performance = self.get_performance_data()
        return {
            "overview": sales["overview"],
            "sales_over_time": sales["totalSalesOverTime"],
            "by_region": sales["byRegion"],
            "moving_averages": performance["trends"]["movingAverages"],
            "cache": self.cache.get_stats()
        }

    # ==================== Payload computation ====================

    @timed("data_provider.compute_sales_data")
    def compute_sales_data(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Compute the sales analytics payload.

        Args:
            start: Optional range start
            end: Optional range end

        Returns:
            Dictionary with overview, trends, and per-dimension breakdowns
        """
        logger.info("[...] Computing sales data")
        generator = self.generator
        sales = list(filter_by_date_range(generator.generate_sales(), start, end))

        monthly = self.engine.bucket(sales, TimeSeriesSpec("date", "amount", TimeInterval.MONTH))
        monthly_growth = self.engine.growth_rates(monthly)
        daily = self.engine.bucket(sales, TimeSeriesSpec("date", "amount", TimeInterval.DAY))
        weekly = self.engine.bucket(sales, TimeSeriesSpec("date", "amount", TimeInterval.WEEK))
        orders_daily = self.engine.bucket(sales, TimeSeriesSpec("date", "orders", TimeInterval.DAY))

        by_payment = self.engine.aggregate(
            sales, AggregationSpec("paymentMethod", {"amount": "sum", "orders": "sum"})
        )
        by_region = self.engine.aggregate(
            sales, AggregationSpec("region", {"amount": "sum", "orders": "sum"})
        )
        by_product = self.engine.aggregate(
            sales, AggregationSpec("product", {"amount": "sum", "units": "sum"})
        )
        by_rep = list(self.engine.stream_aggregate(
            iter(sales),
            AggregationSpec("salesRep", {"amount": "sum", "orders": "sum"})
        ))

        total_sales = sum(row["amount"] for row in by_region)
        total_orders = sum(row["orders"] for row in by_region)
        average_order_value = total_sales / total_orders if total_orders else 0.0
        payment_total = sum(row["amount"] for row in by_payment)

        daily_amounts = [record["amount"] for record in sales]

        result = {
            "overview": {
                "totalSales": total_sales,
                "totalOrders": total_orders,
                "averageOrderValue": average_order_value,
                "salesGrowth": monthly_growth[-1].growth_rate if monthly_growth else 0.0,
                "recordCount": len(sales)
            },
            "totalSalesOverTime": [
                {"date": bucket.date, "sales": bucket.value, "revenue": bucket.sum}
                for bucket in daily
            ],
            "ordersOverTime": [
                {"date": bucket.date, "orders": bucket.sum, "value": bucket.value}
                for bucket in orders_daily
            ],
            "revenueByPaymentMethod": [
                {
                    "method": row["paymentMethod"],
                    "revenue": row["amount"],
                    "orders": row["orders"],
                    "percentage": _share(row["amount"], payment_total)
                }
                for row in by_payment
            ],
            "byTimePeriod": [
                {
                    "period": point.date,
                    "sales": point.value,
                    "growth": point.growth_rate
                }
                for point in monthly_growth
            ],
            "byRegion": [
                {
                    "region": row["region"],
                    "sales": row["amount"],
                    "orders": row["orders"],
                    "percentage": _share(row["amount"], total_sales)
                }
                for row in by_region
            ],
            "byProduct": [
                {"product": row["product"], "sales": row["amount"], "units": row["units"]}
                for row in by_product
            ],
            "bySalesRep": [
                {"rep": row["salesRep"], "sales": row["amount"], "orders": row["orders"]}
                for row in by_rep
            ],
            "distribution": {
                "p50": self.engine.percentile(daily_amounts, 50),
                "p90": self.engine.percentile(daily_amounts, 90),
                "p95": self.engine.percentile(daily_amounts, 95)
            },
            "trends": {
                "daily": self._series(daily, "date", "sales"),
                "weekly": self._series(weekly, "week", "sales"),
                "monthly": self._series(monthly, "month", "sales")
            }
        }

        logger.info(f"[OK] Sales data computed from {len(sales)} records")
        return result

    @timed("data_provider.compute_performance_data")
    def compute_performance_data(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Compute the performance scorecard payload.

        Monthly score trend with a trailing moving average and growth rates.
        """
        logger.info("[...] Computing performance data")
        metrics = list(filter_by_date_range(self.generator.generate_performance(), start, end))

        trend = self.engine.bucket(metrics, TimeSeriesSpec("date", "overallScore", TimeInterval.MONTH))
        trend_values = [bucket.value for bucket in trend]
        moving_average = self.engine.moving_average(trend_values, self.moving_average_window)
        growth = self.engine.growth_rates(trend)

        scores = [record["overallScore"] for record in metrics]

        result = {
            "scorecard": {
                "overall": self.engine.percentile(scores, 50),
                "trends": [{"period": point.date, "score": point.value} for point in growth]
            },
            "distribution": {
                "p25": self.engine.percentile(scores, 25),
                "p50": self.engine.percentile(scores, 50),
                "p75": self.engine.percentile(scores, 75),
                "p95": self.engine.percentile(scores, 95)
            },
            "trends": {
                "growth": [point.to_dict() for point in growth],
                "movingAverages": [
                    {"period": bucket.date, "value": bucket.value, "movingAvg": average}
                    for bucket, average in zip(trend, moving_average)
                ],
                "window": self.moving_average_window
            }
        }

        logger.info(f"[OK] Performance data computed from {len(metrics)} records")
        return result

    @timed("data_provider.compute_financial_data")
    def compute_financial_data(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Compute the financial payload: revenue trend with growth, expense
        breakdowns, and segment statistics.
        """
        logger.info("[...] Computing financial data")
        financial = self.generator.generate_financial()
        revenue = list(filter_by_date_range(financial["revenue"], start, end))
        expenses = list(filter_by_date_range(financial["expenses"], start, end))

        revenue_monthly = self.engine.bucket(revenue, TimeSeriesSpec("date", "amount", TimeInterval.MONTH))
        revenue_growth = self.engine.growth_rates(
            [{"date": bucket.date, "value": bucket.sum} for bucket in revenue_monthly]
        )
        expenses_monthly = self.engine.bucket(expenses, TimeSeriesSpec("date", "amount", TimeInterval.MONTH))
        revenue_quarterly = self.engine.bucket(revenue, TimeSeriesSpec("date", "amount", TimeInterval.QUARTER))
        discounts = self.engine.bucket(revenue, TimeSeriesSpec("date", "discount", TimeInterval.MONTH))

        by_category = self.engine.aggregate(
            expenses, AggregationSpec("category", {"amount": "sum", "date": "count"})
        )
        by_segment = self.engine.aggregate(
            revenue,
            AggregationSpec("segment", {"amount": "sum", "discount": "avg"})
        )
        segment_spread = {
            row["segment"]: row
            for row in self.engine.aggregate(
                revenue, AggregationSpec("segment", {"amount": "median", "discount": "stddev"})
            )
        }

        total_revenue = sum(row["amount"] for row in by_segment)
        total_expenses = sum(row["amount"] for row in by_category)
        net_profit = total_revenue - total_expenses

        result = {
            "summary": {
                "totalRevenue": total_revenue,
                "totalExpenses": total_expenses,
                "netProfit": net_profit,
                "profitMargin": _share(net_profit, total_revenue),
                "revenueGrowth": revenue_growth[-1].growth_rate if revenue_growth else 0.0
            },
            "revenueByPeriod": [point.to_dict() for point in revenue_growth],
            "revenueByQuarter": [
                {"quarter": bucket.date, "revenue": bucket.sum} for bucket in revenue_quarterly
            ],
            "expensesByPeriod": [
                {"period": bucket.date, "expenses": bucket.sum} for bucket in expenses_monthly
            ],
            "expensesByCategory": [
                {
                    "category": row["category"],
                    "amount": row["amount"],
                    "entries": row["date"],
                    "percentage": _share(row["amount"], total_expenses)
                }
                for row in by_category
            ],
            "revenueBySegment": [
                {
                    "segment": row["segment"],
                    "revenue": row["amount"],
                    "averageDiscount": row["discount"],
                    "medianDeal": segment_spread[row["segment"]]["amount"],
                    "discountStdDev": segment_spread[row["segment"]]["discount"]
                }
                for row in by_segment
            ],
            "discountTrend": [
                {"period": bucket.date, "averageDiscount": bucket.value, "totalDiscount": bucket.sum}
                for bucket in discounts
            ]
        }

        logger.info(f"[OK] Financial data computed from {len(revenue)} revenue / {len(expenses)} expense records")
        return result

    @staticmethod
    def _series(buckets: List[TimeBucket], period_name: str, value_name: str) -> List[Dict[str, Any]]:
        """Render buckets as chart points."""
        return [{period_name: bucket.date, value_name: bucket.value} for bucket in buckets]
