"""
BizDash Analytics - Server Assembly

Wires configuration into a running stack: result cache (memory or Redis),
background sweep worker, data provider, and the Dash app with its API.
Shared by the CLI launcher and the WSGI entry point.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from bizdash.cache.background_cleanup import CacheCleanupWorker
from bizdash.cache.redis_cache import RedisResultCache
from bizdash.cache.result_cache import BaseResultCache, ResultCache
from bizdash.dashboard.app import BizDashboard
from bizdash.dashboard.data_provider import DashboardDataProvider
from bizdash.utils.config import Config


logger = logging.getLogger(__name__)


@dataclass
class ServerComponents:
    """Everything create_server() started, for shutdown."""
    dashboard: BizDashboard
    cache: BaseResultCache
    data_provider: DashboardDataProvider
    cleanup_worker: Optional[CacheCleanupWorker] = None

    def shutdown(self) -> None:
        """Stop background work and release the cache connection."""
        if self.cleanup_worker:
            logger.info("[SHUTDOWN] Stopping cache cleanup worker...")
            self.cleanup_worker.stop()
        if isinstance(self.cache, RedisResultCache):
            self.cache.close()


def create_result_cache(config: Config) -> BaseResultCache:
    """
    Build the configured result cache.

    A Redis backend that cannot be reached falls back to the in-memory
    cache so the dashboard still serves requests.
    """
    if config.cache.backend == "redis":
        try:
            return RedisResultCache(
                redis_url=config.cache.redis_url,
                default_ttl_ms=config.cache.default_ttl_ms
            )
        except ConnectionError as error:
            logger.warning(f"[WARN] Redis unavailable, using in-memory cache: {error}")

    logger.info(f"[OK] Using in-memory result cache (ttl {config.cache.default_ttl_ms} ms)")
    return ResultCache(default_ttl_ms=config.cache.default_ttl_ms)


def create_server(config: Optional[Config] = None, start_workers: bool = True) -> ServerComponents:
    """
    Assemble the dashboard stack.

    Args:
        config: Configuration (loaded from environment if None)
        start_workers: Start the background cache sweep

    Returns:
        ServerComponents with the dashboard and its collaborators
    """
    config = config or Config()
    config.ensure_directories()

    cache = create_result_cache(config)

    cleanup_worker = None
    if isinstance(cache, ResultCache):
        cleanup_worker = CacheCleanupWorker(cache, config.cache.cleanup_interval_seconds)
        if start_workers:
            cleanup_worker.start()

    data_provider = DashboardDataProvider(
        cache=cache,
        seed=config.analytics.mock_data_seed,
        history_days=config.analytics.history_days,
        moving_average_window=config.analytics.moving_average_window
    )

    dashboard = BizDashboard(
        data_provider=data_provider,
        cache=cache,
        cleanup_worker=cleanup_worker,
        refresh_interval_ms=config.dashboard.refresh_interval_ms
    )

    return ServerComponents(
        dashboard=dashboard,
        cache=cache,
        data_provider=data_provider,
        cleanup_worker=cleanup_worker
    )
