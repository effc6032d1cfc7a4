"""
gzslice

Split one large gzip-compressed, line-delimited file into N gzip shards,
dealing lines round-robin so every shard gets the same number of lines
(to within one).

Usage:
    from gzslice import split_file

    result = split_file("corpus.json.gz", 8)
    result.raise_for_error()
    print(result.filenames)  # ["0_corpus.json.gz", ..., "7_corpus.json.gz"]
"""

from .config import SliceSettings, get_settings
from .errors import (
    CloseError,
    CreateError,
    DecompressionError,
    OpenError,
    SinkWriteError,
    SliceError,
)
from .pipeline import SplitResult, split, split_file

__version__ = "1.0.0"
__all__ = [
    "split",
    "split_file",
    "SplitResult",
    "SliceSettings",
    "get_settings",
    "SliceError",
    "OpenError",
    "CreateError",
    "DecompressionError",
    "SinkWriteError",
    "CloseError",
]
