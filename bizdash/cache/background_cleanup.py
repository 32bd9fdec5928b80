"""
BizDash Analytics - Background Cache Cleanup

Periodically sweeps expired entries out of the result cache so memory stays
bounded even for keys that are never read again.

Supports both a daemon thread (for the threaded WSGI server) and an asyncio
task (for hosts that own an event loop). The host process starts the worker
at startup and stops it at shutdown.
"""

import asyncio
import logging
import threading
import time
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)

# Sweep interval: 60 seconds
DEFAULT_CLEANUP_INTERVAL = 60


class CacheCleanupWorker:
    """
    Background thread that calls cache.cleanup() on a fixed interval.
    """

    def __init__(self, cache, interval_seconds: float = DEFAULT_CLEANUP_INTERVAL):
        """
        Initialize the cleanup worker.

        Args:
            cache: Result cache instance (anything with cleanup() -> int)
            interval_seconds: Seconds between sweeps
        """
        self.cache = cache
        self.interval_seconds = interval_seconds

        self._running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._sweep_count = 0
        self._total_evicted = 0
        self._last_sweep_time: Optional[float] = None

    def start(self) -> None:
        """Start the cleanup worker thread."""
        if self._running:
            logger.warning("[WARN] Cache cleanup already running")
            return

        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._cleanup_loop,
            name="CacheCleanupWorker",
            daemon=True  # Thread stops when main program exits
        )
        self._thread.start()
        logger.info(f"[OK] Cache cleanup started (interval: {self.interval_seconds}s)")

    def stop(self) -> None:
        """Stop the cleanup worker."""
        if not self._running:
            return

        self._running = False
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5)

        logger.info(
            f"[OK] Cache cleanup stopped "
            f"(sweeps: {self._sweep_count}, evicted: {self._total_evicted})"
        )

    def _cleanup_loop(self) -> None:
        """Main loop - sweeps until stop() is called."""
        # Event.wait returns True once stop() sets the event
        while not self._stop_event.wait(self.interval_seconds):
            self.run_sweep()

    def run_sweep(self) -> int:
        """
        Run one sweep.

        Returns:
            Number of entries evicted (0 if the sweep failed)
        """
        try:
            evicted = self.cache.cleanup()
        except Exception as error:
            logger.error(f"[ERROR] Cache cleanup failed: {error}", exc_info=True)
            return 0

        self._sweep_count += 1
        self._total_evicted += evicted
        self._last_sweep_time = time.time()
        if evicted:
            logger.debug(f"Cache sweep {self._sweep_count}: evicted {evicted} entries")
        return evicted

    def get_status(self) -> Dict[str, Any]:
        """Get current worker status for monitoring."""
        return {
            "running": self._running,
            "mode": "thread",
            "interval_seconds": self.interval_seconds,
            "sweep_count": self._sweep_count,
            "total_evicted": self._total_evicted,
            "last_sweep_time": self._last_sweep_time
        }

    @property
    def is_running(self) -> bool:
        """Check if worker is currently running."""
        return self._running


class AsyncCacheCleanupWorker:
    """
    Asyncio variant of CacheCleanupWorker.

    The sweep runs on the event loop; cleanup() is quick and never awaits,
    so it completes without interleaving with request handlers.
    """

    def __init__(self, cache, interval_seconds: float = DEFAULT_CLEANUP_INTERVAL):
        """
        Initialize the async cleanup worker.

        Args:
            cache: Result cache instance
            interval_seconds: Seconds between sweeps
        """
        self.cache = cache
        self.interval_seconds = interval_seconds

        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._sweep_count = 0
        self._total_evicted = 0

    async def start(self) -> None:
        """Schedule the cleanup loop on the running event loop."""
        if self._running:
            logger.warning("[WARN] Async cache cleanup already running")
            return

        self._running = True
        self._task = asyncio.get_running_loop().create_task(self._cleanup_loop())
        logger.info(f"[OK] Async cache cleanup started (interval: {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Cancel the cleanup loop and wait for it to finish."""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("[OK] Async cache cleanup stopped")

    async def _cleanup_loop(self) -> None:
        """Main async cleanup loop."""
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)
                evicted = self.cache.cleanup()
                self._sweep_count += 1
                self._total_evicted += evicted
            except asyncio.CancelledError:
                break
            except Exception as error:
                logger.error(f"[ERROR] Async cache cleanup failed: {error}", exc_info=True)

    def get_status(self) -> Dict[str, Any]:
        """Get current worker status for monitoring."""
        return {
            "running": self._running,
            "mode": "async",
            "interval_seconds": self.interval_seconds,
            "sweep_count": self._sweep_count,
            "total_evicted": self._total_evicted
        }

    @property
    def is_running(self) -> bool:
        """Check if worker is currently running."""
        return self._running
