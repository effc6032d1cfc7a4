"""
Shard sinks: one gzip stream per output file.

Each shard owns a write chain of gzip compressor -> buffered writer -> file.
Closing walks that chain outward and keeps going past failures so no file
descriptor or gzip trailer is lost because an earlier step broke.
"""

from __future__ import annotations

import gzip
import io
import os
from pathlib import Path
from typing import Callable, Sequence

from loguru import logger

from gzslice.errors import CloseError, CreateError, SinkWriteError
from gzslice.metrics import metrics_registry

from .types import LineRecord

# 1MB buffer for efficient I/O.
BUFFER_SIZE = 1024 * 1024

DEFAULT_COMPRESS_LEVEL = 6


def shard_name(index: int, input_path: str | Path) -> str:
    """Output file name for shard `index`: ``{index}_{basename}``."""
    return f"{index}_{os.path.basename(input_path)}"


class ShardSink:
    """Single gzip output. Only the Distributor writes to it."""

    def __init__(
        self,
        index: int,
        path: str | Path,
        *,
        buffer_size: int = BUFFER_SIZE,
        compress_level: int = DEFAULT_COMPRESS_LEVEL,
    ):
        self.index = index
        self.path = str(path)
        self.lines_written = 0
        self._closed = False

        try:
            self._file = open(self.path, "wb", buffering=0)  # noqa: SIM115
        except OSError as exc:
            raise CreateError(self.path, exc) from exc
        self._buffer = io.BufferedWriter(self._file, buffer_size)
        self._gz = gzip.GzipFile(
            filename=os.path.basename(self.path),
            mode="wb",
            compresslevel=compress_level,
            fileobj=self._buffer,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, record: LineRecord) -> None:
        if self._closed:
            raise SinkWriteError(self.index, ValueError("write to closed shard"))
        try:
            self._gz.write(record)
        except (OSError, ValueError) as exc:
            raise SinkWriteError(self.index, exc) from exc
        self.lines_written += 1

    def close(self) -> list[CloseError]:
        """Finalize compressor, flush buffer, close file. Returns every failure."""
        if self._closed:
            return []
        self._closed = True

        errors: list[CloseError] = []
        steps: Sequence[tuple[str, Callable[[], None]]] = (
            ("closing gzip stream", self._gz.close),
            ("flushing buffered stream", self._buffer.flush),
            ("closing file", self._buffer.close),
        )
        for step, action in steps:
            try:
                action()
            except (OSError, ValueError) as exc:
                errors.append(CloseError(self.index, self.path, step, exc))

        # BufferedWriter.close may give up before reaching the raw file.
        if not self._file.closed:
            try:
                self._file.close()
            except OSError as exc:
                errors.append(CloseError(self.index, self.path, "closing file", exc))
        return errors


class ShardSinkSet:
    """The N shard outputs of one split, indexed 0..N-1."""

    def __init__(self, sinks: Sequence[ShardSink]):
        self._sinks = list(sinks)

    @classmethod
    def create(
        cls,
        input_path: str | Path,
        count: int,
        *,
        output_dir: str | Path | None = None,
        buffer_size: int = BUFFER_SIZE,
        compress_level: int = DEFAULT_COMPRESS_LEVEL,
    ) -> "ShardSinkSet":
        """Create `count` shard files named after `input_path`.

        Raises CreateError if any file can't be created; shards created
        before the failure are closed first.
        """
        if count < 1:
            raise ValueError("count must be >= 1")
        out_dir = Path(output_dir) if output_dir is not None else Path(".")

        logger.info(f"creating {count} output files")
        sinks: list[ShardSink] = []
        try:
            for i in range(count):
                path = out_dir / shard_name(i, input_path)
                sinks.append(
                    ShardSink(i, path, buffer_size=buffer_size, compress_level=compress_level)
                )
                logger.debug(f"\toutput file {i}: {str(path)!r}")
        except CreateError:
            cls(sinks).close_all()
            raise
        return cls(sinks)

    def __len__(self) -> int:
        return len(self._sinks)

    def __getitem__(self, index: int) -> ShardSink:
        return self._sinks[index]

    @property
    def names(self) -> list[str]:
        return [s.path for s in self._sinks]

    @property
    def lines_written(self) -> list[int]:
        return [s.lines_written for s in self._sinks]

    def write(self, index: int, record: LineRecord) -> None:
        self._sinks[index].write(record)

    def close_all(self) -> list[CloseError]:
        """Close every shard, last to first, collecting (not raising) each failure."""
        errors: list[CloseError] = []
        for sink in reversed(self._sinks):
            for err in sink.close():
                logger.warning(str(err))
                metrics_registry.shard_errors_total.labels(kind="close").inc()
                errors.append(err)
        return errors
