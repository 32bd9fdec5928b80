"""
BizDash Analytics - Result Cache

TTL-keyed memo store for per-request computation results. Callers key
entries by request signature (path plus query string) so identical requests
within the refresh window reuse one computation.

Entry lifecycle:
    Fresh (age <= ttl) -> Expired (age > ttl) -> evicted on the next
    get/has/cleanup, or by the background sweep.
"""

import asyncio
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from bizdash.models.records import CacheEntry


logger = logging.getLogger(__name__)

# Default TTL: 5 minutes, in milliseconds
DEFAULT_TTL_MS = 5 * 60 * 1000


def _system_clock_ms() -> float:
    return time.time() * 1000


class BaseResultCache(ABC):
    """
    Interface shared by the in-memory and Redis result caches.

    Subclasses implement storage; this class provides the cache consumer
    contract (get_or_compute / get_or_fetch) on top of it.
    """

    def __init__(self, default_ttl_ms: float = DEFAULT_TTL_MS):
        self.default_ttl_ms = default_ttl_ms
        self._inflight: Dict[str, "asyncio.Task[Any]"] = {}

    @abstractmethod
    def _lookup(self, key: str) -> Tuple[bool, Any]:
        """Return (hit, value); a hit may carry a cached None."""

    @abstractmethod
    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        """Store data under key for ttl milliseconds (default TTL if falsy)."""

    @abstractmethod
    def has(self, key: str) -> bool:
        """Check whether key holds a fresh entry."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries."""

    @abstractmethod
    def cleanup(self) -> int:
        """Evict expired entries, returning how many were removed."""

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Return cache statistics for monitoring."""

    def get(self, key: str) -> Optional[Any]:
        """
        Get a cached value.

        Returns:
            Cached data, or None on miss or expiry
        """
        _, value = self._lookup(key)
        return value

    def _resolve_ttl(self, ttl: Optional[float]) -> float:
        return ttl or self.default_ttl_ms

    def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Any],
        ttl: Optional[float] = None
    ) -> Any:
        """
        Return the cached value for key, computing and storing it on a miss.

        Concurrent misses on the same key each run compute; the last write
        wins. An exception from compute propagates and nothing is cached.
        """
        hit, value = self._lookup(key)
        if hit:
            logger.debug(f"Cache hit: {key}")
            return value

        logger.debug(f"Cache miss: {key}")
        value = compute()
        self.set(key, value, ttl)
        return value

    async def get_or_fetch(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[Any]],
        ttl: Optional[float] = None
    ) -> Any:
        """
        Async cache-or-fetch with single-flight per key.

        Concurrent callers that miss on the same key share one in-flight
        fetch instead of each running the fetcher. If the fetcher raises,
        every waiting caller sees the exception and nothing is cached.
        Must be used from a single event loop.
        """
        hit, value = self._lookup(key)
        if hit:
            logger.debug(f"Cache hit: {key}")
            return value

        task = self._inflight.get(key)
        if task is None:
            logger.debug(f"Cache miss: {key} (fetching)")
            task = asyncio.ensure_future(self._fetch_and_store(key, fetcher, ttl))
            self._inflight[key] = task
        else:
            logger.debug(f"Cache miss: {key} (joining in-flight fetch)")

        return await asyncio.shield(task)

    async def _fetch_and_store(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[Any]],
        ttl: Optional[float]
    ) -> Any:
        try:
            value = await fetcher()
            self.set(key, value, ttl)
            return value
        finally:
            self._inflight.pop(key, None)


class ResultCache(BaseResultCache):
    """
    In-process TTL cache.

    Constructed once at startup and injected into the data provider and API
    routes. The store is shared between request threads and the sweep
    worker, so reads-then-writes happen under a lock; no lock is held while
    a compute/fetch function runs.
    """

    def __init__(
        self,
        default_ttl_ms: float = DEFAULT_TTL_MS,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize the cache.

        Args:
            default_ttl_ms: TTL used when set() is given no ttl
            clock: Returns the current time in milliseconds (default: wall clock)
        """
        super().__init__(default_ttl_ms)
        self._clock = clock or _system_clock_ms
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        logger.debug(f"ResultCache initialized (default TTL: {default_ttl_ms}ms)")

    def _lookup(self, key: str) -> Tuple[bool, Any]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return False, None

            if entry.is_expired(self._clock()):
                del self._store[key]
                self._evictions += 1
                self._misses += 1
                return False, None

            self._hits += 1
            return True, entry.data

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        entry = CacheEntry(data=data, timestamp=self._clock(), ttl=self._resolve_ttl(ttl))
        with self._lock:
            self._store[key] = entry

    def has(self, key: str) -> bool:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return False
            if entry.is_expired(self._clock()):
                del self._store[key]
                self._evictions += 1
                return False
            return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def cleanup(self) -> int:
        now = self._clock()
        with self._lock:
            expired_keys = [key for key, entry in self._store.items() if entry.is_expired(now)]
            for key in expired_keys:
                del self._store[key]
            self._evictions += len(expired_keys)

        if expired_keys:
            logger.debug(f"Evicted {len(expired_keys)} expired cache entries")
        return len(expired_keys)

    @property
    def size(self) -> int:
        """Number of stored entries, including expired ones not yet evicted."""
        with self._lock:
            return len(self._store)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "backend": "memory",
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "default_ttl_ms": self.default_ttl_ms,
                "inflight": len(self._inflight)
            }
