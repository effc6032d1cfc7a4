"""
Pytest configuration and fixtures for gzslice.

Provides gzip input builders and shard readers.
"""

import gzip
from pathlib import Path
from typing import Callable, Sequence

import pytest

from gzslice.config import SliceSettings


def read_gz_lines(path) -> list[bytes]:
    """Decompress `path` and return its lines, delimiters kept."""
    data = gzip.decompress(Path(path).read_bytes())
    return data.splitlines(keepends=True)


def interleave(shards: Sequence[Sequence[bytes]]) -> list[bytes]:
    """Undo round-robin: take one line from each shard in turn."""
    out: list[bytes] = []
    longest = max((len(s) for s in shards), default=0)
    for row in range(longest):
        for shard in shards:
            if row < len(shard):
                out.append(shard[row])
    return out


@pytest.fixture
def make_gz(tmp_path) -> Callable[..., Path]:
    """Write `lines` gzip-compressed to tmp_path/`name` and return the path."""

    def _make(lines: Sequence[bytes], name: str = "input.json.gz") -> Path:
        p = tmp_path / name
        p.write_bytes(gzip.compress(b"".join(lines)))
        return p

    return _make


@pytest.fixture
def out_dir(tmp_path) -> Path:
    d = tmp_path / "out"
    d.mkdir()
    return d


@pytest.fixture
def settings() -> SliceSettings:
    """Small chunks and buffers so tests cross every boundary."""
    return SliceSettings(
        read_chunk_size=7,
        write_buffer_size=64,
        compress_level=1,
        queue_factor=2,
        show_progress=False,
    )


@pytest.fixture
def gz_lines() -> Callable[..., list[bytes]]:
    return read_gz_lines


@pytest.fixture
def unshard() -> Callable[..., list[bytes]]:
    return interleave
