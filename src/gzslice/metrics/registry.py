"""
Prometheus collectors for split runs, registered in the global REGISTRY.
Expose them with prometheus_client.start_http_server (see gzslice.cli).
"""

from prometheus_client import Counter, Gauge, Histogram

LINES_DISTRIBUTED_TOTAL = Counter(
    "gzslice_lines_distributed_total",
    "Total number of line records written to shards",
)

BYTES_READ_TOTAL = Counter(
    "gzslice_bytes_read_total",
    "Bytes read from split inputs",
    ["stream"],  # compressed | decompressed
)

SHARD_ERRORS_TOTAL = Counter(
    "gzslice_shard_errors_total",
    "Shard write/close failures",
    ["kind"],  # write | close
)

RELAY_QUEUE_DEPTH = Gauge(
    "gzslice_relay_queue_depth",
    "Line records waiting in the relay queue",
)

BACKPRESSURE_EVENTS_TOTAL = Counter(
    "gzslice_backpressure_events_total",
    "Relay queue watermark crossings",
    ["level"],  # high | low
)

SPLIT_DURATION_SECONDS = Histogram(
    "gzslice_split_duration_seconds",
    "Wall time of a split run in seconds",
    buckets=[0.1, 0.5, 1, 5, 10, 30, 60, 300, 900, 1800, 3600],
)

SPLITS_TOTAL = Counter(
    "gzslice_splits_total",
    "Split runs by outcome",
    ["outcome"],  # success | failure
)


class MetricsRegistry:
    """Centralized access to gzslice metrics."""

    lines_distributed_total = LINES_DISTRIBUTED_TOTAL
    bytes_read_total = BYTES_READ_TOTAL
    shard_errors_total = SHARD_ERRORS_TOTAL
    relay_queue_depth = RELAY_QUEUE_DEPTH
    backpressure_events_total = BACKPRESSURE_EVENTS_TOTAL
    split_duration_seconds = SPLIT_DURATION_SECONDS
    splits_total = SPLITS_TOTAL


# Singleton instance
metrics_registry = MetricsRegistry()
