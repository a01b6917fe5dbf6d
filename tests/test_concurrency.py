"""Tests for compgen.concurrency."""

from __future__ import annotations

import asyncio
from typing import List

import pytest

from compgen.concurrency import gather_or_cancel


@pytest.mark.anyio
async def test_results_keep_argument_order() -> None:
    async def delayed(value: int, delay: float) -> int:
        await asyncio.sleep(delay)
        return value

    assert await gather_or_cancel(delayed(1, 0.02), delayed(2, 0)) == [1, 2]


@pytest.mark.anyio
async def test_failure_cancels_pending_siblings() -> None:
    events: List[str] = []

    async def slow() -> None:
        try:
            await asyncio.sleep(10)
            events.append("finished")
        except asyncio.CancelledError:
            events.append("cancelled")
            raise

    async def failing() -> None:
        await asyncio.sleep(0)
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        await gather_or_cancel(slow(), failing())

    assert events == ["cancelled"]
