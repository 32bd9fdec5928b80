"""
BizDash Analytics - API Route Tests

Exercises the /api blueprint through Flask's test client.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from flask import Flask

from bizdash.cache.background_cleanup import CacheCleanupWorker
from bizdash.cache.result_cache import ResultCache
from bizdash.dashboard.api_routes import ApiError, create_api_blueprint, validate_date_range
from bizdash.dashboard.data_provider import DashboardDataProvider
from bizdash.generators.mock_data import MockDataGenerator


@pytest.fixture
def cache():
    return ResultCache()


@pytest.fixture
def provider(cache):
    generator = MockDataGenerator(
        seed=3, days=90, reference_date=datetime(2024, 4, 1, tzinfo=timezone.utc)
    )
    return DashboardDataProvider(cache=cache, generator=generator)


@pytest.fixture
def client(provider, cache):
    app = Flask(__name__)
    app.register_blueprint(create_api_blueprint(provider, cache, CacheCleanupWorker(cache)))
    return app.test_client()


class TestValidateDateRange:
    """Test suite for query date validation."""

    def test_missing_dates(self):
        assert validate_date_range(None, None) == (None, None)

    def test_valid_range(self):
        start, end = validate_date_range("2024-01-01", "2024-02-01T00:00:00Z")
        assert start < end

    @pytest.mark.parametrize("start,end,message", [
        ("yesterday", None, "Invalid start date format"),
        (None, "2024-99-01", "Invalid end date format"),
        ("2024-03-01", "2024-02-01", "Start date must be before end date"),
    ])
    def test_invalid(self, start, end, message):
        with pytest.raises(ApiError) as error:
            validate_date_range(start, end)
        assert error.value.status_code == 400
        assert error.value.message == message


class TestPayloadRoutes:
    """Test suite for the payload endpoints."""

    @pytest.mark.parametrize("path,section", [
        ("/api/sales", "overview"),
        ("/api/performance", "scorecard"),
        ("/api/financial", "summary"),
    ])
    def test_returns_payload(self, client, path, section):
        response = client.get(path)
        assert response.status_code == 200
        assert section in response.get_json()

    def test_date_filter_applied(self, client):
        response = client.get("/api/sales?startDate=2024-03-01&endDate=2024-03-31T23:59:59Z")
        assert response.get_json()["overview"]["recordCount"] == 31

    def test_identical_requests_share_cache_entry(self, client, cache):
        client.get("/api/sales?startDate=2024-03-01")
        client.get("/api/sales?startDate=2024-03-01")
        client.get("/api/sales")

        assert cache.has("/api/sales?startDate=2024-03-01")
        assert cache.has("/api/sales")
        assert cache.get_stats()["entries"] == 2

    def test_bad_date_returns_400(self, client):
        response = client.get("/api/sales?startDate=not-a-date")

        assert response.status_code == 400
        assert response.get_json() == {
            "error": "API Error",
            "message": "Invalid start date format",
            "statusCode": 400
        }

    def test_reversed_range_returns_400(self, client):
        response = client.get("/api/financial?startDate=2024-03-01&endDate=2024-01-01")
        assert response.status_code == 400
        assert response.get_json()["message"] == "Start date must be before end date"

    def test_unexpected_error_returns_500(self, cache):
        provider = MagicMock()
        provider.get_performance_data.side_effect = RuntimeError("engine exploded")
        app = Flask(__name__)
        app.register_blueprint(create_api_blueprint(provider, cache))

        response = app.test_client().get("/api/performance")

        assert response.status_code == 500
        assert response.get_json()["statusCode"] == 500
        assert response.get_json()["message"] == "engine exploded"

    def test_post_not_allowed(self, client):
        response = client.post("/api/sales")
        assert response.status_code == 405


class TestCacheStatusRoute:
    """Test suite for /api/cache/status."""

    def test_reports_cache_and_worker(self, client):
        client.get("/api/sales")
        body = client.get("/api/cache/status").get_json()

        assert body["cache"]["backend"] == "memory"
        assert body["cache"]["entries"] == 1
        assert body["cleanup"]["mode"] == "thread"
        assert "data_provider.compute_sales_data" in body["performance"]
