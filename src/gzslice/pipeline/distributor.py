from __future__ import annotations

from contextlib import aclosing
from typing import Callable, Optional

from loguru import logger

from gzslice.errors import RelayCancelledError, SinkWriteError
from gzslice.metrics import metrics_registry

from .queue import RelayQueue
from .types import LineRecord, ShardWriter

ErrorCallback = Callable[[BaseException], None]


class Distributor:
    """Round-robins relay queue records across shards.

    The k-th record received (0-based) goes to shard ``k % len(sinks)``.
    `on_error` is called with a failure the moment it happens, before the
    queue is cancelled.
    """

    def __init__(
        self,
        queue: RelayQueue[LineRecord],
        sinks: ShardWriter,
        *,
        on_error: Optional[ErrorCallback] = None,
    ):
        if len(sinks) < 1:
            raise ValueError("at least one shard is required")
        self._queue = queue
        self._sinks = sinks
        self._on_error = on_error
        self.distributed = 0

    async def run(self) -> int:
        """Drain the queue until it closes. Returns the number of records written.

        If anything goes wrong while writing, the queue is cancelled, which
        wakes a producer blocked on a full queue, and the error is re-raised.
        """
        out_idx = 0
        out_mod = len(self._sinks)
        try:
            async with aclosing(aiter(self._queue)) as records:
                async for record in records:
                    metrics_registry.relay_queue_depth.set(self._queue.size)
                    try:
                        self._sinks.write(out_idx, record)
                    except SinkWriteError as exc:
                        logger.error(f"couldn't write to output {out_idx}: {exc.cause}")
                        metrics_registry.shard_errors_total.labels(kind="write").inc()
                        raise
                    self.distributed += 1
                    metrics_registry.lines_distributed_total.inc()
                    out_idx = (out_idx + 1) % out_mod
        except RelayCancelledError:
            # producer side gave up; nothing more to write
            logger.debug(f"relay cancelled after {self.distributed} records")
        except BaseException as exc:
            if self._on_error is not None and isinstance(exc, Exception):
                self._on_error(exc)
            await self._queue.cancel(exc)
            raise
        return self.distributed
