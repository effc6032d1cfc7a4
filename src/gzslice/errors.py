"""
Custom exceptions for gzslice.

Setup failures (OpenError, CreateError) are raised to the caller. Failures
that happen while the pipeline runs are reported on the SplitResult so that
teardown always completes first.
"""

from __future__ import annotations

from pathlib import Path


class SliceError(Exception):
    """Base error for gzslice."""

    pass


class OpenError(SliceError):
    """The input file could not be opened or stat'ed."""

    def __init__(self, path: str | Path, cause: BaseException):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"couldn't open file {self.path!r}: {cause}")


class CreateError(SliceError):
    """An output shard file could not be created."""

    def __init__(self, path: str | Path, cause: BaseException):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"couldn't create file {self.path!r}: {cause}")


class DecompressionError(SliceError):
    """The input is not a valid gzip stream or ended early."""

    def __init__(self, path: str | Path, cause: BaseException):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"decompressing {self.path!r} failed: {cause}")


class SinkWriteError(SliceError):
    """Writing a record to shard `index` failed."""

    def __init__(self, index: int, cause: BaseException):
        self.index = index
        self.cause = cause
        super().__init__(f"couldn't write to output {index}: {cause}")


class CloseError(SliceError):
    """Finalizing shard `index` failed at `step` (compressor, buffer or file)."""

    def __init__(self, index: int, name: str, step: str, cause: BaseException):
        self.index = index
        self.name = name
        self.step = step
        self.cause = cause
        super().__init__(f"{step} for file {name!r} (output {index}) failed: {cause}")


class RelayClosedError(SliceError):
    """The relay queue was closed; no more records will arrive."""

    pass


class RelayCancelledError(SliceError):
    """The relay queue was cancelled; `reason` holds what caused it, if known."""

    def __init__(self, reason: BaseException | None = None):
        self.reason = reason
        msg = "relay queue cancelled"
        if reason is not None:
            msg += f": {reason}"
        super().__init__(msg)
