"""
Concurrency utilities: a counting limiter for remote checks.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class ConcurrencyLimiter:
    """
    Counting token pool with a fixed capacity.

    One limiter is shared by reference between all check tasks of a run.
    At most `capacity` slots are held at any time; acquire() suspends the
    caller until a slot frees. Waiters are not served in any guaranteed
    order.

    Prefer slot(), which releases on every exit path, over paired
    acquire()/release() calls.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"limiter capacity must be at least 1, got {capacity}")

        self._capacity = capacity
        self._in_use = 0
        self._semaphore = asyncio.BoundedSemaphore(capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_use(self) -> int:
        return self._in_use

    async def acquire(self) -> None:
        await self._semaphore.acquire()
        self._in_use += 1

    def release(self) -> None:
        if self._in_use == 0:
            raise RuntimeError("release() called without a matching acquire()")
        self._in_use -= 1
        self._semaphore.release()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        await self.acquire()
        try:
            yield
        finally:
            self.release()

    def __repr__(self) -> str:
        return f"ConcurrencyLimiter(capacity={self._capacity}, in_use={self._in_use})"
