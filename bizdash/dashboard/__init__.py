"""
BizDash Analytics - Dashboard Package

Dash/Plotly page and JSON API over the computation engine.
"""

from bizdash.dashboard.app import BizDashboard
from bizdash.dashboard.data_provider import DashboardDataProvider
from bizdash.dashboard.server import ServerComponents, create_result_cache, create_server

__all__ = [
    "BizDashboard",
    "DashboardDataProvider",
    "ServerComponents",
    "create_result_cache",
    "create_server"
]
