"""Fan-out over independent coroutines."""

from __future__ import annotations

import asyncio
from typing import Awaitable, List, TypeVar

T = TypeVar("T")


async def gather_or_cancel(*awaitables: Awaitable[T]) -> List[T]:
    """Await ``awaitables`` concurrently and return their results in order.

    When one of them fails, the others are cancelled and awaited before the
    error propagates, so no branch keeps running after the caller gave up.
    """
    tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


__all__ = ["gather_or_cancel"]
