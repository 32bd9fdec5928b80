"""
BizDash Analytics - Data Provider Tests

Payload computation over seeded mock data, and result caching.
"""

import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from bizdash.cache.result_cache import ResultCache
from bizdash.dashboard.data_provider import DashboardDataProvider, filter_by_date_range
from bizdash.generators.mock_data import REGIONS, MockDataGenerator


REFERENCE_DATE = datetime(2024, 7, 1, tzinfo=timezone.utc)


def make_provider(days: int = 120) -> DashboardDataProvider:
    generator = MockDataGenerator(seed=7, days=days, reference_date=REFERENCE_DATE)
    return DashboardDataProvider(cache=ResultCache(), generator=generator, moving_average_window=3)


class TestMockDataGenerator(unittest.TestCase):
    """Seeded generators are reproducible."""

    def test_same_seed_same_records(self):
        first = MockDataGenerator(seed=1, days=10, reference_date=REFERENCE_DATE)
        second = MockDataGenerator(seed=1, days=10, reference_date=REFERENCE_DATE)
        self.assertEqual(first.generate_sales(), second.generate_sales())
        self.assertEqual(first.generate_financial(), second.generate_financial())

    def test_unseeded_generator_is_self_consistent(self):
        """Without a seed, one generator still yields the same records on every pass."""
        generator = MockDataGenerator(days=10, reference_date=REFERENCE_DATE)
        self.assertIsNotNone(generator.seed)
        self.assertEqual(list(generator.iter_sales()), generator.generate_sales())

    def test_one_record_per_day(self):
        generator = MockDataGenerator(seed=1, days=30, reference_date=REFERENCE_DATE)
        sales = generator.generate_sales()
        self.assertEqual(len(sales), 30)
        self.assertEqual(len(generator.generate_performance()), 30)
        self.assertTrue(sales[0]["date"] < sales[-1]["date"])
        self.assertIn(sales[0]["region"], REGIONS)


class TestFilterByDateRange(unittest.TestCase):

    def test_inclusive_range(self):
        records = [{"date": f"2024-01-0{day}"} for day in range(1, 6)]
        kept = list(filter_by_date_range(
            records,
            datetime(2024, 1, 2, tzinfo=timezone.utc),
            datetime(2024, 1, 4, tzinfo=timezone.utc)
        ))
        self.assertEqual([r["date"] for r in kept], ["2024-01-02", "2024-01-03", "2024-01-04"])

    def test_unparseable_dates_pass_through(self):
        records = [{"date": "unknown"}, {"date": "2020-01-01"}]
        kept = list(filter_by_date_range(records, start=datetime(2023, 1, 1, tzinfo=timezone.utc)))
        self.assertEqual(kept, [{"date": "unknown"}])


class TestSalesPayload(unittest.TestCase):
    """Sales payload structure and internal consistency."""

    def setUp(self):
        self.provider = make_provider()
        self.data = self.provider.compute_sales_data()

    def test_sections_present(self):
        for section in [
            "overview", "totalSalesOverTime", "ordersOverTime", "revenueByPaymentMethod",
            "byTimePeriod", "byRegion", "byProduct", "bySalesRep", "distribution", "trends"
        ]:
            self.assertIn(section, self.data)

    def test_overview_matches_breakdowns(self):
        overview = self.data["overview"]
        self.assertEqual(overview["recordCount"], 120)
        self.assertAlmostEqual(
            overview["totalSales"], sum(row["sales"] for row in self.data["byRegion"])
        )
        self.assertAlmostEqual(
            overview["totalSales"], sum(row["sales"] for row in self.data["bySalesRep"])
        )
        self.assertAlmostEqual(
            overview["averageOrderValue"], overview["totalSales"] / overview["totalOrders"]
        )

    def test_unseeded_overview_matches_breakdowns(self):
        """Every section of an unseeded payload is built from the same records."""
        provider = DashboardDataProvider(cache=ResultCache(), seed=None, history_days=60)
        data = provider.compute_sales_data()
        overview = data["overview"]
        self.assertEqual(overview["recordCount"], 60)
        self.assertAlmostEqual(
            overview["totalSales"], sum(row["sales"] for row in data["bySalesRep"])
        )
        self.assertAlmostEqual(
            overview["totalSales"], sum(row["sales"] for row in data["byRegion"])
        )

    def test_region_percentages_sum_to_100(self):
        self.assertAlmostEqual(sum(row["percentage"] for row in self.data["byRegion"]), 100.0)

    def test_daily_trend_has_one_point_per_day(self):
        self.assertEqual(len(self.data["totalSalesOverTime"]), 120)
        dates = [point["date"] for point in self.data["trends"]["daily"]]
        self.assertEqual(dates, sorted(dates))

    def test_distribution_is_ordered(self):
        distribution = self.data["distribution"]
        self.assertLessEqual(distribution["p50"], distribution["p90"])
        self.assertLessEqual(distribution["p90"], distribution["p95"])

    def test_date_range_limits_records(self):
        data = self.provider.compute_sales_data(
            start=datetime(2024, 6, 1, tzinfo=timezone.utc),
            end=datetime(2024, 6, 30, 23, 59, tzinfo=timezone.utc)
        )
        self.assertEqual(data["overview"]["recordCount"], 30)
        self.assertEqual([p["period"] for p in data["byTimePeriod"]], ["2024-06"])


class TestPerformanceAndFinancialPayloads(unittest.TestCase):

    def setUp(self):
        self.provider = make_provider()

    def test_performance_moving_average(self):
        data = self.provider.compute_performance_data()
        points = data["trends"]["movingAverages"]

        self.assertEqual(data["trends"]["window"], 3)
        self.assertEqual(points[0]["movingAvg"], points[0]["value"])
        expected = sum(p["value"] for p in points[:3]) / 3
        self.assertAlmostEqual(points[2]["movingAvg"], expected)

    def test_performance_scores_in_range(self):
        distribution = self.provider.compute_performance_data()["distribution"]
        for key in ["p25", "p50", "p75", "p95"]:
            self.assertTrue(80 <= distribution[key] <= 90)

    def test_financial_summary(self):
        data = self.provider.compute_financial_data()
        summary = data["summary"]

        self.assertAlmostEqual(
            summary["netProfit"], summary["totalRevenue"] - summary["totalExpenses"]
        )
        self.assertEqual(sum(row["entries"] for row in data["expensesByCategory"]), 120)
        self.assertAlmostEqual(
            summary["totalRevenue"], sum(row["revenue"] for row in data["revenueBySegment"])
        )
        for row in data["revenueBySegment"]:
            self.assertGreaterEqual(row["discountStdDev"], 0)

    def test_financial_growth_series(self):
        periods = self.provider.compute_financial_data()["revenueByPeriod"]
        self.assertEqual(periods[0]["growthRate"], 0.0)
        self.assertTrue(all("growth" in point for point in periods))


class TestProviderCaching(unittest.TestCase):
    """Payloads are memoized under the request signature."""

    def test_second_call_served_from_cache(self):
        provider = make_provider(days=30)
        with patch.object(provider, "compute_sales_data", wraps=provider.compute_sales_data) as compute:
            first = provider.get_sales_data(cache_key="/api/sales")
            second = provider.get_sales_data(cache_key="/api/sales")

        self.assertIs(first, second)
        compute.assert_called_once()

    def test_distinct_keys_computed_separately(self):
        provider = make_provider(days=30)
        with patch.object(provider, "compute_sales_data", wraps=provider.compute_sales_data) as compute:
            provider.get_sales_data(cache_key="/api/sales")
            provider.get_sales_data(cache_key="/api/sales?startDate=2024-06-15")

        self.assertEqual(compute.call_count, 2)

    def test_dashboard_summary(self):
        provider = make_provider(days=60)
        summary = provider.get_dashboard_data()

        self.assertEqual(set(summary), {"overview", "sales_over_time", "by_region", "moving_averages", "cache"})
        self.assertEqual(summary["cache"]["entries"], 2)


if __name__ == "__main__":
    unittest.main()
