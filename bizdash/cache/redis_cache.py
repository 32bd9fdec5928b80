"""
BizDash Analytics - Redis Result Cache

Redis-backed implementation of the result cache, for deployments that run
several gunicorn workers and want them to share computed payloads.

Payloads are stored as JSON with a millisecond TTL (SET ... PX), so Redis
expires entries itself and cleanup() has nothing to do.
"""

import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

import redis

from bizdash.cache.result_cache import DEFAULT_TTL_MS, BaseResultCache


logger = logging.getLogger(__name__)


class RedisResultCache(BaseResultCache):
    """
    Result cache stored in Redis.

    Read errors degrade to cache misses and write errors are logged, so a
    Redis outage slows requests down instead of failing them.
    """

    # Cache key prefix
    PREFIX = "bizdash:cache:"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        default_ttl_ms: float = DEFAULT_TTL_MS,
        client: Optional[Any] = None
    ):
        """
        Initialize Redis connection.

        Args:
            redis_url: Redis connection URL (default: from environment variables)
            default_ttl_ms: TTL used when set() is given no ttl
            client: Pre-built Redis client (mainly for tests)

        Connection priority:
            1. Explicit redis_url parameter
            2. REDIS_URL environment variable
            3. Build from REDIS_HOST and REDIS_PORT
            4. Default: redis://localhost:6379

        Raises:
            ConnectionError: If cannot connect to Redis
        """
        super().__init__(default_ttl_ms)

        if redis_url:
            self.redis_url = redis_url
        elif os.environ.get("REDIS_URL"):
            self.redis_url = os.environ["REDIS_URL"]
        else:
            redis_host = os.environ.get("REDIS_HOST", "localhost")
            redis_port = os.environ.get("REDIS_PORT", "6379")
            self.redis_url = f"redis://{redis_host}:{redis_port}"

        self.client: Any = client or redis.from_url(self.redis_url, decode_responses=True)

        try:
            self.client.ping()
            logger.info(f"[OK] Connected to Redis at {self._safe_url()}")
        except redis.ConnectionError as error:
            logger.error(f"[ERROR] Failed to connect to Redis: {error}")
            raise ConnectionError(f"Cannot connect to Redis: {error}")

    def _safe_url(self) -> str:
        """Return URL with password masked for logging."""
        if "@" in self.redis_url:
            parts = self.redis_url.split("@")
            return f"***@{parts[-1]}"
        return self.redis_url

    def _key(self, key: str) -> str:
        return f"{self.PREFIX}{key}"

    def _serialize(self, data: Any) -> str:
        """Serialize data to JSON string."""
        return json.dumps(data, default=str)

    def _lookup(self, key: str) -> Tuple[bool, Any]:
        try:
            raw = self.client.get(self._key(key))
        except redis.RedisError as error:
            logger.error(f"Error reading cache key {key}: {error}")
            return False, None

        if raw is None:
            return False, None
        return True, json.loads(raw)

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        try:
            self.client.set(
                self._key(key),
                self._serialize(data),
                px=int(self._resolve_ttl(ttl))
            )
        except redis.RedisError as error:
            logger.error(f"Error writing cache key {key}: {error}")

    def has(self, key: str) -> bool:
        try:
            return bool(self.client.exists(self._key(key)))
        except redis.RedisError as error:
            logger.error(f"Error checking cache key {key}: {error}")
            return False

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except redis.RedisError as error:
            logger.error(f"Error deleting cache key {key}: {error}")

    def clear(self) -> None:
        try:
            keys = list(self.client.scan_iter(match=f"{self.PREFIX}*"))
            if keys:
                self.client.delete(*keys)
                logger.info(f"[OK] Cleared {len(keys)} cache keys")
        except redis.RedisError as error:
            logger.error(f"Error clearing cache: {error}")

    def cleanup(self) -> int:
        # Redis expires keys on its own
        return 0

    def get_stats(self) -> Dict[str, Any]:
        try:
            entries = sum(1 for _ in self.client.scan_iter(match=f"{self.PREFIX}*"))
            connected = True
        except redis.RedisError as error:
            logger.error(f"Error reading cache stats: {error}")
            entries = 0
            connected = False

        return {
            "backend": "redis",
            "connected": connected,
            "entries": entries,
            "default_ttl_ms": self.default_ttl_ms,
            "inflight": len(self._inflight)
        }

    def close(self) -> None:
        """Close the Redis connection."""
        try:
            self.client.close()
            logger.debug("Redis connection closed")
        except redis.RedisError as error:
            logger.debug(f"Error closing Redis connection: {error}")
