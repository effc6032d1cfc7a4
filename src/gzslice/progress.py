"""
Progress reporting for bytes consumed from the compressed input.

Purely cosmetic: the pipeline behaves the same with NullProgress.
"""

from __future__ import annotations

from typing import Protocol

from tqdm import tqdm


class ProgressReporter(Protocol):
    def start(self, total: int) -> None: ...

    def update(self, n: int) -> None: ...

    def close(self) -> None: ...


class NullProgress:
    """Reporter that ignores everything."""

    def start(self, total: int) -> None:
        pass

    def update(self, n: int) -> None:
        pass

    def close(self) -> None:
        pass


class TqdmProgress:
    """Byte progress bar drawn on stderr."""

    def __init__(self, desc: str = "reading", leave: bool = True):
        self._desc = desc
        self._leave = leave
        self._bar: tqdm | None = None

    def start(self, total: int) -> None:
        self._bar = tqdm(
            total=total,
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
            desc=self._desc,
            leave=self._leave,
        )

    def update(self, n: int) -> None:
        if self._bar is not None:
            self._bar.update(n)

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None


def format_size(num_bytes: int) -> str:
    """Human-readable byte count, e.g. ``1.50MB``."""
    return tqdm.format_sizeof(num_bytes, "B", 1024)
