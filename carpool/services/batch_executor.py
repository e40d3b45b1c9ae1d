"""
Bounded-concurrency async mapping.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def map_with_concurrency(
    items: Sequence[T],
    limit: int,
    mapper: Callable[[T], Awaitable[R]],
) -> List[R]:
    """
    Apply ``mapper`` to every item with at most ``limit`` calls in flight.

    Items are processed in consecutive chunks of ``limit``: a chunk runs
    concurrently and the next one starts only after the whole chunk finished,
    so one slow call holds back the following chunk. Results follow input
    order. The first mapper exception propagates to the caller.
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")

    results: List[R] = []
    for start in range(0, len(items), limit):
        chunk = items[start:start + limit]
        logger.debug(f"[Batch] Running items {start}-{start + len(chunk) - 1}")
        chunk_results = await asyncio.gather(*(mapper(item) for item in chunk))
        results.extend(chunk_results)
    return results
