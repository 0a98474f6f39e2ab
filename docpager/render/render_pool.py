"""Rendering slot handles shared with the renderer's owner."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Protocol


class RenderSlotPool(Protocol):
    """Handle on a pool of renderer instances owned by the collaborator."""

    async def acquire(self) -> None:
        """Wait for a free rendering slot."""

    def release(self) -> None:
        """Return a slot taken with ``acquire``."""


class SemaphoreSlotPool:
    """Bounded slot pool backed by an ``asyncio.Semaphore``.

    Args:
        size: Number of renderer instances that may be used at once.
    """

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError("Pool size must be at least 1")
        self.size = size
        self._semaphore = asyncio.Semaphore(size)
        self.in_use = 0
        self.peak = 0

    async def acquire(self) -> None:
        await self._semaphore.acquire()
        self.in_use += 1
        self.peak = max(self.peak, self.in_use)

    def release(self) -> None:
        self.in_use -= 1
        self._semaphore.release()


@asynccontextmanager
async def render_slot(pool: RenderSlotPool | None) -> AsyncIterator[None]:
    """Hold one slot for the duration of the block; always released."""

    if pool is None:
        yield
        return
    await pool.acquire()
    try:
        yield
    finally:
        pool.release()
