"""
BizDash Analytics - Cache Module

Provides TTL result caching for per-request engine computations, backed by
process memory (default) or Redis, plus background sweep workers.
"""

from bizdash.cache.result_cache import DEFAULT_TTL_MS, BaseResultCache, ResultCache
from bizdash.cache.redis_cache import RedisResultCache
from bizdash.cache.background_cleanup import (
    DEFAULT_CLEANUP_INTERVAL,
    CacheCleanupWorker,
    AsyncCacheCleanupWorker,
)

__all__ = [
    "DEFAULT_TTL_MS",
    "BaseResultCache",
    "ResultCache",
    "RedisResultCache",
    "DEFAULT_CLEANUP_INTERVAL",
    "CacheCleanupWorker",
    "AsyncCacheCleanupWorker",
]
