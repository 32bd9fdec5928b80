"""
Performance Timing Utilities for BizDash Analytics

Provides a decorator and context manager for measuring how long payload
computations take, so slow engine calls show up in the logs.

Usage:
    from bizdash.utils.performance import timed, PerformanceTimer

    @timed("data_provider.get_sales_data")
    def get_sales_data(self):
        ...

    with PerformanceTimer("operation_name") as timer:
        ...
    # timer.elapsed_ms available after context exits
"""

import logging
import threading
import time
from collections import deque
from functools import wraps
from typing import Any, Callable, Deque, Dict, Optional

logger = logging.getLogger(__name__)

# Measurements kept per operation
MAX_SAMPLES = 100


class PerformanceMetrics:
    """
    Collects timing measurements per operation name.

    A single shared instance is returned by get_metrics().
    """

    _instance: Optional["PerformanceMetrics"] = None

    def __new__(cls) -> "PerformanceMetrics":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._metrics = {}
            instance._lock = threading.Lock()
            cls._instance = instance
        return cls._instance

    def record(self, operation: str, elapsed_ms: float) -> None:
        """Record a timing measurement."""
        with self._lock:
            samples: Deque[float] = self._metrics.setdefault(operation, deque(maxlen=MAX_SAMPLES))
            samples.append(elapsed_ms)

    def get_stats(self, operation: str) -> Dict[str, float]:
        """
        Get statistics for an operation.

        Returns:
            Dict with count, avg, min, max, last
        """
        with self._lock:
            measurements = list(self._metrics.get(operation, ()))
        if not measurements:
            return {"count": 0, "avg": 0, "min": 0, "max": 0, "last": 0}

        return {
            "count": len(measurements),
            "avg": sum(measurements) / len(measurements),
            "min": min(measurements),
            "max": max(measurements),
            "last": measurements[-1]
        }

    def get_all_stats(self) -> Dict[str, Dict[str, float]]:
        """Get statistics for all recorded operations."""
        with self._lock:
            operations = list(self._metrics)
        return {operation: self.get_stats(operation) for operation in operations}

    def clear(self) -> None:
        """Clear all metrics."""
        with self._lock:
            self._metrics.clear()


def get_metrics() -> PerformanceMetrics:
    """Get the global PerformanceMetrics instance."""
    return PerformanceMetrics()


class PerformanceTimer:
    """
    Context manager for timing code blocks.

    Usage:
        with PerformanceTimer("operation_name") as timer:
            do_work()
        print(f"Took {timer.elapsed_ms:.1f}ms")
    """

    def __init__(self, operation: str, log_threshold_ms: float = 100.0):
        """
        Initialize timer.

        Args:
            operation: Name of the operation being timed
            log_threshold_ms: Log warning if execution exceeds this (ms)
        """
        self.operation = operation
        self.log_threshold_ms = log_threshold_ms
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self) -> "PerformanceTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000
        get_metrics().record(self.operation, self.elapsed_ms)

        if self.elapsed_ms >= self.log_threshold_ms:
            logger.warning(
                f"[PERF] {self.operation}: {self.elapsed_ms:.1f}ms (threshold: {self.log_threshold_ms}ms)"
            )
        else:
            logger.debug(f"[PERF] {self.operation}: {self.elapsed_ms:.1f}ms")


def timed(operation: str, log_threshold_ms: float = 100.0) -> Callable:
    """
    Decorator to time function execution.

    Args:
        operation: Name for this operation in metrics
        log_threshold_ms: Log warning if execution exceeds this (ms)
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            with PerformanceTimer(operation, log_threshold_ms):
                return func(*args, **kwargs)
        return wrapper
    return decorator
