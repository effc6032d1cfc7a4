from __future__ import annotations

from typing import Awaitable, Callable, Protocol, Sequence, TypeVar

T = TypeVar("T")

# One decoded input line, delimiter included (absent only on a final partial line).
LineRecord = bytes

BackpressureCallback = Callable[[], Awaitable[None]]


class ShardWriter(Protocol):
    """Indexed set of outputs the Distributor writes into."""

    def __len__(self) -> int: ...

    def write(self, index: int, record: LineRecord) -> None: ...

    @property
    def lines_written(self) -> Sequence[int]: ...
