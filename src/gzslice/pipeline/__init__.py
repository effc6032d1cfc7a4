"""Split pipeline

Line Source -> RelayQueue -> Distributor -> ShardSinkSet, wired by `split`:
- LineSource: chunked gzip decompression cut into line records
- RelayQueue: bounded FIFO with backpressure, close and cancel
- ShardSinkSet: N gzip outputs closed in order, collecting failures
- Distributor: strict round-robin by arrival order
- split / split_file: orchestration, teardown and error aggregation
"""

from .types import LineRecord, ShardWriter, BackpressureCallback
from .queue import RelayQueue
from .source import LineSource
from .sinks import ShardSink, ShardSinkSet, shard_name
from .distributor import Distributor
from .splitter import SplitResult, split, split_file

__all__ = [
    # types
    "LineRecord",
    "ShardWriter",
    "BackpressureCallback",
    "SplitResult",
    # components
    "RelayQueue",
    "LineSource",
    "ShardSink",
    "ShardSinkSet",
    "shard_name",
    "Distributor",
    # orchestration
    "split",
    "split_file",
]
