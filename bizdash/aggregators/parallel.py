"""
BizDash Analytics - Parallel Processing

Bounded-concurrency async processing for per-item I/O such as fetching
several upstream payloads before aggregating them.
"""

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Iterable, List, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def process_in_parallel(
    items: Iterable[T],
    processor: Callable[[T], Awaitable[R]],
    concurrency: int = 10
) -> List[R]:
    """
    Run an async processor over items with bounded concurrency.

    A fixed pool of workers drains a shared queue, so at most `concurrency`
    items are in flight. Results are returned in completion order, not input
    order. The first processor exception cancels the remaining workers and
    propagates.

    Args:
        items: Items to process
        processor: Async callable applied to each item
        concurrency: Maximum number of concurrent processor calls

    Returns:
        Processor results in completion order

    Raises:
        ValueError: If concurrency is less than 1
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    queue = deque(items)
    results: List[R] = []
    worker_count = min(concurrency, len(queue))

    async def worker() -> None:
        while queue:
            item = queue.popleft()
            results.append(await processor(item))

    if worker_count == 0:
        return results

    logger.debug(f"[...] Processing {len(queue)} items with {worker_count} workers")
    tasks = [asyncio.ensure_future(worker()) for _ in range(worker_count)]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise
    return results
