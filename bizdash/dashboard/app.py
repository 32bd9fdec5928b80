"""
BizDash Analytics - Dashboard Application

Dash/Plotly page over the analytics payloads.
Shows KPI cards, sales over time, revenue by region, and the score
moving average, refreshed on an interval. The JSON API is mounted on the
same Flask server.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import dash
from dash import dcc, html, Input, Output
import dash_bootstrap_components as dbc  # type: ignore[import-untyped]
import plotly.graph_objects as go

from bizdash.dashboard.api_routes import create_api_blueprint


logger = logging.getLogger(__name__)


class BizDashboard:
    """
    Business analytics dashboard.

    Features:
    - KPI cards (total sales, orders, average order value, growth)
    - Daily sales line chart
    - Revenue by region bar chart
    - Monthly score with trailing moving average
    - /api/* JSON endpoints on the underlying Flask server
    """

    # Refresh interval in milliseconds
    REFRESH_INTERVAL_MS = 60000  # 1 minute

    COLORS = {
        "primary": "#375a7f",
        "positive": "#28a745",
        "negative": "#dc3545",
        "neutral": "#6c757d",
        "accent": "#f39c12",
        "info": "#17a2b8"
    }

    def __init__(
        self,
        data_provider: Any,
        cache: Any,
        cleanup_worker: Optional[Any] = None,
        app_name: str = "BizDash Analytics",
        refresh_interval_ms: Optional[int] = None
    ):
        """
        Initialize the dashboard.

        Args:
            data_provider: DashboardDataProvider building the payloads
            cache: Result cache shared with the provider
            cleanup_worker: Optional cache sweep worker, reported by /api/cache/status
            app_name: Application name for title
            refresh_interval_ms: Page refresh interval (class default if None)
        """
        self.app_name = app_name
        self.data_provider = data_provider
        self.cache = cache
        self.refresh_interval_ms = refresh_interval_ms or self.REFRESH_INTERVAL_MS

        self.app = dash.Dash(
            __name__,
            external_stylesheets=[dbc.themes.DARKLY],
            title=app_name,
            suppress_callback_exceptions=True
        )

        self.app.server.register_blueprint(
            create_api_blueprint(data_provider, cache, cleanup_worker)
        )

        self.app.layout = self._build_layout()
        self._register_callbacks()

        logger.info(f"[OK] Dashboard initialized: {app_name}")

    @property
    def server(self):
        """Underlying Flask server (WSGI entry point)."""
        return self.app.server

    def _build_layout(self) -> dbc.Container:
        """Build the page layout."""
        return dbc.Container([
            dbc.Row([
                dbc.Col([
                    html.H1(self.app_name, className="text-primary"),
                    html.P(
                        "Sales, performance, and financial analytics",
                        className="text-muted"
                    )
                ], width=8),
                dbc.Col([
                    html.Div(id="last-updated", className="text-end text-muted"),
                    html.Div(id="cache-summary", className="text-end text-muted small"),
                    dcc.Interval(
                        id="refresh-interval",
                        interval=self.refresh_interval_ms,
                        n_intervals=0
                    )
                ], width=4)
            ], className="mb-4 mt-3"),

            dbc.Row([
                dbc.Col(self._build_kpi_card("total-sales", "Total Sales", "$0"), width=3),
                dbc.Col(self._build_kpi_card("total-orders", "Orders", "0"), width=3),
                dbc.Col(self._build_kpi_card("average-order-value", "Avg Order Value", "$0"), width=3),
                dbc.Col(self._build_kpi_card("sales-growth", "Monthly Growth", "0.0%"), width=3),
            ], className="mb-4"),

            dbc.Row([
                dbc.Col([
                    dbc.Card([
                        dbc.CardHeader("Daily Sales"),
                        dbc.CardBody([dcc.Graph(id="sales-chart", config={"displayModeBar": False})])
                    ])
                ], width=8),
                dbc.Col([
                    dbc.Card([
                        dbc.CardHeader("Revenue by Region"),
                        dbc.CardBody([dcc.Graph(id="region-chart", config={"displayModeBar": False})])
                    ])
                ], width=4)
            ], className="mb-4"),

            dbc.Row([
                dbc.Col([
                    dbc.Card([
                        dbc.CardHeader("Performance Score - Moving Average"),
                        dbc.CardBody([dcc.Graph(id="moving-average-chart", config={"displayModeBar": False})])
                    ])
                ], width=12)
            ], className="mb-4")
        ], fluid=True)

    def _build_kpi_card(self, card_id: str, title: str, value: str) -> dbc.Card:
        """Build a KPI overview card."""
        return dbc.Card([
            dbc.CardBody([
                html.H4(id=card_id, children=value, style={"color": self.COLORS["info"]}),
                html.P(title, className="text-muted mb-0")
            ])
        ], className="text-center")

    def _register_callbacks(self):
        """Register the refresh callback."""

        @self.app.callback(
            [
                Output("last-updated", "children"),
                Output("cache-summary", "children"),
                Output("total-sales", "children"),
                Output("total-orders", "children"),
                Output("average-order-value", "children"),
                Output("sales-growth", "children"),
                Output("sales-growth", "style"),
                Output("sales-chart", "figure"),
                Output("region-chart", "figure"),
                Output("moving-average-chart", "figure")
            ],
            [Input("refresh-interval", "n_intervals")]
        )
        def update_dashboard(n_intervals):
            """Update all dashboard components."""
            timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
            data = self.data_provider.get_dashboard_data()
            return self.render(data, timestamp)

    def render(self, data: Dict[str, Any], timestamp: str) -> List[Any]:
        """
        Map a dashboard summary to the callback outputs.

        Args:
            data: Result of DashboardDataProvider.get_dashboard_data()
            timestamp: Display timestamp

        Returns:
            Values in callback output order
        """
        overview = data.get("overview", {})
        cache_stats = data.get("cache", {})
        growth = overview.get("salesGrowth", 0.0)
        growth_color = self.COLORS["positive"] if growth >= 0 else self.COLORS["negative"]

        return [
            f"Last updated: {timestamp}",
            f"Cache: {cache_stats.get('hits', 0)} hits / {cache_stats.get('misses', 0)} misses",
            f"${overview.get('totalSales', 0):,.0f}",
            f"{overview.get('totalOrders', 0):,.0f}",
            f"${overview.get('averageOrderValue', 0):,.2f}",
            f"{growth:+.1f}%",
            {"color": growth_color},
            self._build_sales_chart(data.get("sales_over_time", [])),
            self._build_region_chart(data.get("by_region", [])),
            self._build_moving_average_chart(data.get("moving_averages", []))
        ]

    def _build_sales_chart(self, points: List[Dict]) -> go.Figure:
        """Build daily sales line chart."""
        fig = go.Figure()

        if points:
            fig.add_trace(go.Scatter(
                x=[p.get("date") for p in points],
                y=[p.get("revenue", 0) for p in points],
                mode="lines",
                name="Sales",
                line=dict(color=self.COLORS["info"])
            ))

        fig.update_layout(
            template="plotly_dark",
            margin=dict(l=40, r=20, t=20, b=40),
            xaxis_title="Date",
            yaxis_title="Sales ($)"
        )

        return fig

    def _build_region_chart(self, region_data: List[Dict]) -> go.Figure:
        """Build revenue by region bar chart."""
        if not region_data:
            region_data = [{"region": "No Data", "sales": 0, "percentage": 0}]

        fig = go.Figure(data=[
            go.Bar(
                x=[r.get("region", "Unknown") for r in region_data],
                y=[r.get("sales", 0) for r in region_data],
                customdata=[r.get("percentage", 0) for r in region_data],
                marker_color=self.COLORS["primary"],
                hovertemplate="<b>%{x}</b><br>Sales: $%{y:,.0f}<br>Share: %{customdata:.1f}%<extra></extra>"
            )
        ])

        fig.update_layout(
            template="plotly_dark",
            margin=dict(l=40, r=20, t=20, b=40),
            xaxis_title="Region",
            yaxis_title="Sales ($)"
        )

        return fig

    def _build_moving_average_chart(self, points: List[Dict]) -> go.Figure:
        """Build monthly score chart with its moving average overlay."""
        fig = go.Figure()

        if points:
            periods = [p.get("period") for p in points]

            fig.add_trace(go.Bar(
                x=periods,
                y=[p.get("value", 0) for p in points],
                name="Monthly Score",
                marker_color=self.COLORS["neutral"]
            ))

            fig.add_trace(go.Scatter(
                x=periods,
                y=[p.get("movingAvg", 0) for p in points],
                mode="lines+markers",
                name="Moving Average",
                line=dict(color=self.COLORS["accent"])
            ))

        fig.update_layout(
            template="plotly_dark",
            margin=dict(l=40, r=20, t=20, b=40),
            xaxis_title="Month",
            yaxis_title="Score",
            legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1)
        )

        return fig

    def run(self, host: str = "127.0.0.1", port: int = 8050, debug: bool = False):
        """
        Run the dashboard server.

        Args:
            host: Host address to bind
            port: Port number
            debug: Enable debug mode
        """
        logger.info(f"[...] Starting dashboard on http://{host}:{port}")

        # Dash 3.x uses app.run() instead of app.run_server()
        self.app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
