from __future__ import annotations

import asyncio
from collections import deque
from typing import AsyncIterator, Generic, Optional

from gzslice.errors import RelayCancelledError, RelayClosedError

from .types import BackpressureCallback, T


class RelayQueue(Generic[T]):
    """Bounded FIFO between one producer and one consumer.

    ``put`` suspends while the queue is full, ``get`` while it is empty.
    ``close`` ends the stream once drained; ``cancel`` aborts both sides,
    including a producer already waiting on a full queue.
    """

    def __init__(
        self,
        capacity: int,
        high_watermark: int | None = None,
        low_watermark: int | None = None,
        *,
        on_high: Optional[BackpressureCallback] = None,
        on_low: Optional[BackpressureCallback] = None,
    ):
        if capacity <= 0:
            raise ValueError("capacity must be > 0")

        self._capacity = capacity
        self._items: deque[T] = deque()
        self._cond = asyncio.Condition()

        self._high_wm = (
            high_watermark if high_watermark is not None else max(1, int(0.8 * capacity))
        )
        self._low_wm = low_watermark if low_watermark is not None else int(0.5 * capacity)
        self._on_high = on_high
        self._on_low = on_low
        self._high_fired = False  # avoid duplicate signals

        self._closed = False
        self._cancelled = False
        self._cancel_reason: BaseException | None = None

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        return len(self._items)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def put(self, item: T) -> None:
        """Append item, waiting for room; emits high watermark once."""
        async with self._cond:
            await self._cond.wait_for(
                lambda: self._cancelled or self._closed or len(self._items) < self._capacity
            )
            if self._cancelled:
                raise RelayCancelledError(self._cancel_reason)
            if self._closed:
                raise RelayClosedError("put on closed relay queue")
            self._items.append(item)
            self._cond.notify_all()
        await self._maybe_signal_high()

    async def get(self) -> T:
        """Pop the oldest item, waiting while empty; emits low watermark when recovering.

        Raises RelayClosedError once the queue is closed and drained.
        """
        async with self._cond:
            await self._cond.wait_for(lambda: self._cancelled or self._closed or self._items)
            if self._cancelled:
                raise RelayCancelledError(self._cancel_reason)
            if not self._items:
                raise RelayClosedError("relay queue closed")
            item = self._items.popleft()
            self._cond.notify_all()
        await self._maybe_signal_low()
        return item

    async def close(self) -> None:
        """Signal that no more items will be put. Safe to call more than once."""
        async with self._cond:
            self._closed = True
            self._cond.notify_all()

    async def cancel(self, reason: BaseException | None = None) -> None:
        """Abort the queue: every pending and future put/get raises RelayCancelledError."""
        async with self._cond:
            if not self._cancelled:
                self._cancelled = True
                self._cancel_reason = reason
                self._items.clear()
            self._cond.notify_all()

    def __aiter__(self) -> AsyncIterator[T]:
        return self._drain()

    async def _drain(self) -> AsyncIterator[T]:
        while True:
            try:
                item = await self.get()
            except RelayClosedError:
                return
            yield item

    async def _maybe_signal_high(self) -> None:
        if not self._high_fired and len(self._items) >= self._high_wm:
            self._high_fired = True
            if self._on_high:
                await self._on_high()

    async def _maybe_signal_low(self) -> None:
        if self._high_fired and len(self._items) <= self._low_wm:
            self._high_fired = False
            if self._on_low:
                await self._on_low()
