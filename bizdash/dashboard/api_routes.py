"""
BizDash Analytics - JSON API Routes

Flask blueprint serving the analytics payloads. Mounted on the Dash app's
Flask server under /api.

Every payload is memoized in the result cache under the request signature
(path plus query string). Errors are returned as
{"error": "API Error", "message": ..., "statusCode": ...}.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import HTTPException

from bizdash.aggregators.time_aggregator import parse_datetime
from bizdash.utils.performance import get_metrics


logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Request error with an HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def create_error_response(message: str, status_code: int = 500):
    """Build the JSON error body and status."""
    return jsonify({
        "error": "API Error",
        "message": message,
        "statusCode": status_code
    }), status_code


def get_cache_key() -> str:
    """Request signature: path plus query string."""
    query = request.query_string.decode("utf-8")
    return f"{request.path}?{query}" if query else request.path


def validate_date_range(
    start_date: Optional[str],
    end_date: Optional[str]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Parse and validate optional startDate/endDate query values.

    Returns:
        (start, end) as UTC datetimes, None where not given

    Raises:
        ApiError: 400 if a date is unparseable or start is after end
    """
    start = parse_datetime(start_date) if start_date else None
    end = parse_datetime(end_date) if end_date else None

    if start_date and start is None:
        raise ApiError("Invalid start date format", 400)
    if end_date and end is None:
        raise ApiError("Invalid end date format", 400)
    if start and end and start > end:
        raise ApiError("Start date must be before end date", 400)

    return start, end


def create_api_blueprint(data_provider, cache, cleanup_worker=None) -> Blueprint:
    """
    Create the /api blueprint.

    Args:
        data_provider: DashboardDataProvider building the payloads
        cache: Result cache (for the status endpoint)
        cleanup_worker: Optional cache sweep worker (for the status endpoint)

    Returns:
        Flask Blueprint
    """
    api = Blueprint("api", __name__, url_prefix="/api")

    def serve_payload(loader: Callable[..., Dict[str, Any]]):
        start, end = validate_date_range(
            request.args.get("startDate"),
            request.args.get("endDate")
        )
        data = loader(cache_key=get_cache_key(), start=start, end=end)
        return jsonify(data)

    @api.route("/sales", methods=["GET"])
    def get_sales():
        """
        GET /api/sales?startDate=...&endDate=...

        Sales overview, trends, and breakdowns by region/product/rep/payment.
        """
        return serve_payload(data_provider.get_sales_data)

    @api.route("/performance", methods=["GET"])
    def get_performance():
        """GET /api/performance - score trend, moving averages, percentiles."""
        return serve_payload(data_provider.get_performance_data)

    @api.route("/financial", methods=["GET"])
    def get_financial():
        """GET /api/financial - revenue growth, expenses, segment statistics."""
        return serve_payload(data_provider.get_financial_data)

    @api.route("/cache/status", methods=["GET"])
    def get_cache_status():
        """GET /api/cache/status - cache, sweep worker, and timing stats."""
        return jsonify({
            "cache": cache.get_stats(),
            "cleanup": cleanup_worker.get_status() if cleanup_worker else None,
            "performance": get_metrics().get_all_stats()
        })

    @api.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        return create_error_response(error.message, error.status_code)

    @api.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        if isinstance(error, HTTPException):
            return create_error_response(error.description or error.name, error.code or 500)
        logger.error(f"[ERROR] {request.path} failed: {error}", exc_info=True)
        return create_error_response(str(error) or "Internal server error", 500)

    return api
