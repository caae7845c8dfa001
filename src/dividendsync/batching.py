"""Fixed-window batched fan-out for I/O-bound async work."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


async def run_in_batches(
    items: Sequence[T],
    fn: Callable[[T], Awaitable[R]],
    batch_size: int = 10,
    delay: float = 0.5,
) -> list[R | BaseException]:
    """Apply ``fn`` to every item, ``batch_size`` at a time.

    Each batch runs concurrently and settles fully: an exception from one item
    is returned in that item's slot and never cancels its siblings. ``delay``
    seconds are slept between batches (not after the last one). Results come
    back in input order.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")

    results: list[R | BaseException] = []
    for start in range(0, len(items), batch_size):
        if start and delay > 0:
            await asyncio.sleep(delay)
        batch = items[start:start + batch_size]
        settled = await asyncio.gather(*(fn(item) for item in batch), return_exceptions=True)
        for item, outcome in zip(batch, settled):
            if isinstance(outcome, BaseException):
                logger.warning("Batch item %r failed: %s", item, outcome)
        results.extend(settled)
    return results
