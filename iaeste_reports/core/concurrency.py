"""
Bounded-concurrency fan-out for coroutine work.
"""

import asyncio
from typing import Awaitable, Callable, Iterable, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def map_bounded(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    limit: int,
) -> list[R]:
    """
    Run `func` over `items` with at most `limit` calls in flight.

    Results keep the order of `items`. The first failure propagates to the
    caller; sibling calls are not cancelled and finish on their own.

    Args:
        func: Coroutine function applied to every item
        items: Inputs
        limit: Maximum number of concurrent calls

    Returns:
        List of results
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    semaphore = asyncio.Semaphore(limit)

    async def run(item: T) -> R:
        async with semaphore:
            return await func(item)

    return list(await asyncio.gather(*(run(item) for item in items)))
