"""
Unit tests for ShardSink / ShardSinkSet.
"""

import gzip

import pytest

from gzslice.errors import CreateError, SinkWriteError
from gzslice.pipeline import ShardSinkSet, shard_name


def test_shard_name_uses_input_basename():
    assert shard_name(3, "/data/in/corpus.json.gz") == "3_corpus.json.gz"
    assert shard_name(0, "corpus.json.gz") == "0_corpus.json.gz"


def test_create_write_close(out_dir, gz_lines):
    sinks = ShardSinkSet.create("/somewhere/in.gz", 3, output_dir=out_dir, buffer_size=16)
    assert len(sinks) == 3
    assert sinks.names == [str(out_dir / f"{i}_in.gz") for i in range(3)]

    sinks.write(0, b"a\n")
    sinks.write(2, b"b\n")
    sinks.write(0, b"c")
    assert sinks.lines_written == [2, 0, 1]

    assert sinks.close_all() == []
    assert gz_lines(sinks.names[0]) == [b"a\n", b"c"]
    assert gz_lines(sinks.names[1]) == []
    assert gz_lines(sinks.names[2]) == [b"b\n"]

    # second close is a no-op
    assert sinks.close_all() == []


def test_write_after_close_fails(out_dir):
    sinks = ShardSinkSet.create("in.gz", 2, output_dir=out_dir)
    sinks.close_all()
    with pytest.raises(SinkWriteError) as ei:
        sinks.write(1, b"late\n")
    assert ei.value.index == 1


def test_create_in_missing_directory(tmp_path):
    with pytest.raises(CreateError) as ei:
        ShardSinkSet.create("in.gz", 2, output_dir=tmp_path / "missing")
    assert ei.value.path.endswith("0_in.gz")


def test_create_failure_closes_earlier_shards(out_dir):
    """A failing shard leaves the ones before it finalized as valid gzip."""
    (out_dir / "1_in.gz").mkdir()
    with pytest.raises(CreateError):
        ShardSinkSet.create("in.gz", 3, output_dir=out_dir)

    assert gzip.decompress((out_dir / "0_in.gz").read_bytes()) == b""
    assert not (out_dir / "2_in.gz").exists()


def test_close_continues_past_failures(out_dir, monkeypatch):
    """One shard failing to finalize doesn't stop the others from closing."""
    sinks = ShardSinkSet.create("in.gz", 3, output_dir=out_dir)
    for i in range(3):
        sinks.write(i, f"{i}\n".encode())

    broken = sinks[1]
    real_close = broken._gz.close

    def failing_close():
        real_close()
        raise OSError("disk full")

    monkeypatch.setattr(broken._gz, "close", failing_close)

    errors = sinks.close_all()
    assert len(errors) == 1
    assert errors[0].index == 1
    assert errors[0].step == "closing gzip stream"
    assert errors[0].name == sinks.names[1]

    assert all(sinks[i].closed for i in range(3))
    assert all(sinks[i]._file.closed for i in range(3))
    assert gzip.decompress((out_dir / "0_in.gz").read_bytes()) == b"0\n"
    assert gzip.decompress((out_dir / "2_in.gz").read_bytes()) == b"2\n"


def test_count_must_be_positive(out_dir):
    with pytest.raises(ValueError):
        ShardSinkSet.create("in.gz", 0, output_dir=out_dir)
