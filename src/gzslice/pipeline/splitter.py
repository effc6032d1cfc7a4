"""
Split orchestration.

Opens the input, creates the shards, runs the Line Source and the
Distributor concurrently through a bounded relay queue, then closes every
resource exactly once no matter how the run ended.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from pathlib import Path
from time import monotonic
from typing import Optional

from loguru import logger

from gzslice.config import SliceSettings, get_settings
from gzslice.errors import (
    CloseError,
    CreateError,
    DecompressionError,
    RelayCancelledError,
    SinkWriteError,
    SliceError,
)
from gzslice.metrics import metrics_registry
from gzslice.progress import NullProgress, ProgressReporter, TqdmProgress, format_size

from .distributor import Distributor
from .queue import RelayQueue
from .sinks import ShardSinkSet
from .source import LineSource
from .types import LineRecord


@dataclass
class SplitResult:
    """Outcome of a split.

    Attributes:
        filenames: Output files in shard order; present even when the run failed
        error: First fatal error of the run, or None
        close_errors: Every failure hit while finalizing shards
        lines_per_shard: Records written to each shard
        lines_read: Records decoded from the input
        bytes_read: Compressed bytes consumed
        bytes_decoded: Decompressed bytes produced
        elapsed: Wall time in seconds
    """

    filenames: list[str]
    error: SliceError | None = None
    close_errors: list[CloseError] = field(default_factory=list)
    lines_per_shard: list[int] = field(default_factory=list)
    lines_read: int = 0
    bytes_read: int = 0
    bytes_decoded: int = 0
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def lines_written(self) -> int:
        return sum(self.lines_per_shard)

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


async def _on_backpressure_high() -> None:
    logger.debug("relay queue above high watermark; reader waiting on shard writers")
    metrics_registry.backpressure_events_total.labels(level="high").inc()


async def _on_backpressure_low() -> None:
    logger.debug("relay queue recovered below low watermark")
    metrics_registry.backpressure_events_total.labels(level="low").inc()


async def split(
    input_path: str | Path,
    shard_count: int,
    *,
    output_dir: str | Path | None = None,
    settings: Optional[SliceSettings] = None,
    progress: Optional[ProgressReporter] = None,
) -> SplitResult:
    """Split the gzip file at `input_path` into `shard_count` round-robin gzip shards.

    Shard files are named ``{index}_{basename}`` inside `output_dir` (default:
    current directory).

    Raises:
        ValueError: shard_count < 1
        OpenError: the input can't be opened
        CreateError: a shard file can't be created (nothing has been read yet)

    Failures after the pipeline started (DecompressionError, SinkWriteError)
    are returned on ``SplitResult.error`` once every file is closed; when both
    sides fail, the one that happened first wins. A CloseError is reported
    only if nothing else failed. Any other exception from the shard writer
    propagates after teardown.
    """
    if shard_count < 1:
        raise ValueError(f"shard_count must be >= 1, got {shard_count}")
    settings = settings or get_settings()
    if progress is None:
        progress = (
            TqdmProgress(desc=os.path.basename(input_path))
            if settings.show_progress
            else NullProgress()
        )

    start = monotonic()
    source = LineSource.open(input_path, chunk_size=settings.read_chunk_size, progress=progress)
    try:
        sinks = ShardSinkSet.create(
            input_path,
            shard_count,
            output_dir=output_dir,
            buffer_size=settings.write_buffer_size,
            compress_level=settings.compress_level,
        )
    except CreateError:
        _close_source(source)
        raise

    result = SplitResult(filenames=sinks.names)
    # pipeline failures in the order they happened; the first one is reported
    failures: list[SliceError] = []
    queue = RelayQueue[LineRecord](
        settings.queue_capacity(shard_count),
        on_high=_on_backpressure_high,
        on_low=_on_backpressure_low,
    )

    def _on_write_error(exc: BaseException) -> None:
        if isinstance(exc, SliceError):
            failures.append(exc)

    distributor = Distributor(queue, sinks, on_error=_on_write_error)
    writer = asyncio.create_task(distributor.run(), name="gzslice-distributor")

    try:
        logger.info(f"reading lines from {source.path!r} ({format_size(source.size)})")
        try:
            await source.pump(queue)
        except DecompressionError as exc:
            logger.error(f"reading lines from input failed: {exc}")
            failures.append(exc)
        except RelayCancelledError:
            pass  # the distributor stopped; it recorded its own failure
        logger.info(f"done reading lines in {monotonic() - start:.2f}s")

        try:
            await writer
        except SinkWriteError:
            pass  # already in failures
        logger.info(f"done writing to outputs in {monotonic() - start:.2f}s")

        result.error = failures[0] if failures else None
    finally:
        if not writer.done():
            writer.cancel()
            await asyncio.wait([writer])
        result.close_errors = sinks.close_all()
        _close_source(source)

        result.lines_per_shard = sinks.lines_written
        result.lines_read = source.lines_read
        result.bytes_read = source.bytes_read
        result.bytes_decoded = source.bytes_decoded
        result.elapsed = monotonic() - start

    if result.error is None and result.close_errors:
        result.error = result.close_errors[0]

    logger.info(f"total decompressed size {format_size(result.bytes_decoded)}")
    metrics_registry.split_duration_seconds.observe(result.elapsed)
    metrics_registry.splits_total.labels(outcome="success" if result.ok else "failure").inc()
    return result


def split_file(
    input_path: str | Path,
    shard_count: int,
    *,
    output_dir: str | Path | None = None,
    settings: Optional[SliceSettings] = None,
    progress: Optional[ProgressReporter] = None,
) -> SplitResult:
    """Blocking wrapper around :func:`split` for callers without an event loop."""
    return asyncio.run(
        split(
            input_path,
            shard_count,
            output_dir=output_dir,
            settings=settings,
            progress=progress,
        )
    )


def _close_source(source: LineSource) -> None:
    try:
        source.close()
    except OSError as exc:
        logger.warning(f"closing input {source.path!r} failed: {exc}")
