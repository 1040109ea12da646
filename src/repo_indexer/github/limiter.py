"""Bounded concurrency for outbound GitHub requests."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")


class ConcurrencyLimiter:
    """Caps the number of tasks running at once.

    One limiter is shared by every fetch in a job, so at most ``limit``
    requests are in flight regardless of where they were started. Waiters
    are admitted in FIFO order.
    """

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError(f"Concurrency limit must be at least 1, got {limit}")
        self._limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self._active = 0
        self._peak = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def active(self) -> int:
        """Tasks currently holding a slot."""
        return self._active

    @property
    def peak(self) -> int:
        """Highest number of tasks that ever held a slot at once."""
        return self._peak

    async def run(self, task: Callable[[], Awaitable[T]]) -> T:
        """Wait for a free slot, run ``task`` and release the slot.

        The task's result or exception is passed through unchanged.
        """
        async with self._semaphore:
            self._active += 1
            self._peak = max(self._peak, self._active)
            try:
                return await task()
            finally:
                self._active -= 1
