"""
Line Source: streams a gzip file as newline-terminated records.

The compressed file is decompressed one chunk at a time on a worker thread;
records are cut on b"\\n" as soon as each delimiter arrives, so at most one
chunk plus the unfinished line is held in memory.
"""

from __future__ import annotations

import asyncio
import gzip
import os
import zlib
from contextlib import aclosing
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Optional

from loguru import logger

from gzslice.errors import DecompressionError, OpenError
from gzslice.metrics import metrics_registry
from gzslice.progress import NullProgress, ProgressReporter

from .queue import RelayQueue
from .types import LineRecord

DEFAULT_CHUNK_SIZE = 1024 * 1024
DELIMITER = b"\n"


class LineSource:
    """Decompressing, line-splitting reader over one input file.

    Use ``LineSource.open`` to build one. ``records()`` may be consumed once.

    Attributes:
        path: Input file path
        size: Compressed size in bytes, from file metadata
        bytes_read: Compressed bytes consumed so far
        bytes_decoded: Decompressed bytes produced so far
        lines_read: Records yielded so far
    """

    def __init__(
        self,
        path: str | Path,
        handle: BinaryIO,
        size: int,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress: Optional[ProgressReporter] = None,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        self.path = str(path)
        self.size = size
        self._handle = handle
        self._reader = gzip.GzipFile(fileobj=handle, mode="rb")
        self._chunk_size = chunk_size
        self._progress = progress or NullProgress()

        self.bytes_read = 0
        self.bytes_decoded = 0
        self.lines_read = 0
        self._started = False
        self._closed = False

    @classmethod
    def open(
        cls,
        path: str | Path,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress: Optional[ProgressReporter] = None,
    ) -> "LineSource":
        """Open `path` for reading. Raises OpenError if it can't be opened or stat'ed."""
        try:
            handle = open(path, "rb")  # noqa: SIM115
        except OSError as exc:
            raise OpenError(path, exc) from exc
        try:
            size = os.fstat(handle.fileno()).st_size
        except OSError as exc:
            handle.close()
            raise OpenError(path, exc) from exc
        return cls(path, handle, size, chunk_size=chunk_size, progress=progress)

    async def records(self) -> AsyncIterator[LineRecord]:
        """Yield each decoded line, delimiter included, in input order.

        A final line without a trailing delimiter is yielded as-is. Raises
        DecompressionError on a corrupt or truncated stream; records already
        yielded stay valid.
        """
        if self._started:
            raise RuntimeError("line source can only be read once")
        self._started = True

        self._progress.start(self.size)
        try:
            # pieces of the unfinished line, joined once its delimiter arrives
            pending: list[bytes] = []
            while True:
                chunk, consumed = await asyncio.to_thread(self._read_chunk)
                self._progress.update(consumed)
                metrics_registry.bytes_read_total.labels(stream="compressed").inc(consumed)
                if not chunk:
                    break
                metrics_registry.bytes_read_total.labels(stream="decompressed").inc(len(chunk))

                start = 0
                while True:
                    end = chunk.find(DELIMITER, start)
                    if end < 0:
                        break
                    line = chunk[start : end + 1]
                    if pending:
                        pending.append(line)
                        line = b"".join(pending)
                        pending = []
                    self.lines_read += 1
                    yield line
                    start = end + 1
                if start < len(chunk):
                    pending.append(chunk[start:])

            if pending:
                # unterminated last line
                self.lines_read += 1
                yield b"".join(pending)
        finally:
            self._progress.close()

    async def pump(self, queue: RelayQueue[LineRecord]) -> int:
        """Put every record on `queue`, then close it. Returns the number of records put.

        The queue is closed on every exit so the consumer drains what was
        already sent, even when decompression fails part way.
        """
        try:
            async with aclosing(self.records()) as records:
                async for record in records:
                    await queue.put(record)
        finally:
            await queue.close()
        logger.debug(f"line source exhausted after {self.lines_read} lines")
        return self.lines_read

    def close(self) -> None:
        """Release the decompressor and the file. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._reader.close()
        finally:
            self._handle.close()

    # --------------------------- internals

    def _read_chunk(self) -> tuple[bytes, int]:
        """Runs on a worker thread. Returns (decompressed chunk, compressed bytes consumed)."""
        try:
            chunk = self._reader.read(self._chunk_size)
        except (OSError, EOFError, zlib.error) as exc:
            raise DecompressionError(self.path, exc) from exc
        self.bytes_decoded += len(chunk)
        pos = self._handle.tell()
        consumed = max(0, pos - self.bytes_read)
        self.bytes_read = pos
        return chunk, consumed
