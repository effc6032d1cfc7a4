from .registry import (
    BACKPRESSURE_EVENTS_TOTAL,
    BYTES_READ_TOTAL,
    LINES_DISTRIBUTED_TOTAL,
    RELAY_QUEUE_DEPTH,
    SHARD_ERRORS_TOTAL,
    SPLIT_DURATION_SECONDS,
    SPLITS_TOTAL,
    MetricsRegistry,
    metrics_registry,
)

__all__ = [
    "BACKPRESSURE_EVENTS_TOTAL",
    "BYTES_READ_TOTAL",
    "LINES_DISTRIBUTED_TOTAL",
    "RELAY_QUEUE_DEPTH",
    "SHARD_ERRORS_TOTAL",
    "SPLIT_DURATION_SECONDS",
    "SPLITS_TOTAL",
    "MetricsRegistry",
    "metrics_registry",
]
