from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def run_bounded(
    items: Sequence[T],
    handler: Callable[[T], Awaitable[R]],
    limit: int,
) -> list[R]:
    """Run ``handler`` over ``items`` with at most ``limit`` calls in flight.

    ``min(limit, len(items))`` workers pull from one shared cursor until it is
    exhausted, so every item is handled exactly once. Results are returned in
    completion order, not input order.

    Handlers report failures as return values. An exception escaping a handler
    is a contract violation: the remaining workers are cancelled and the
    exception propagates out of the whole run.
    """
    if limit < 1:
        raise ValueError(f"concurrency limit must be >= 1, got {limit}")

    cursor = iter(items)
    results: list[R] = []

    async def worker() -> None:
        # next() runs on the event loop thread between awaits, so workers never
        # receive the same item.
        for item in cursor:
            results.append(await handler(item))

    tasks = [asyncio.ensure_future(worker()) for _ in range(min(limit, len(items)))]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return results
