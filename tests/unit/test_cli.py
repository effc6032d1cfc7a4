"""
Unit tests for the gzslice CLI.
"""

import gzip
import sys

import pytest
from loguru import logger
from typer.testing import CliRunner

from gzslice.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    # the CLI binds loguru to the runner's temporary stderr
    logger.remove()
    logger.add(sys.stderr)


def shard_paths(out_dir, base, n):
    return [str(out_dir / f"{i}_{base}") for i in range(n)]


def test_split_prints_created_files(make_gz, out_dir):
    path = make_gz([b"a\n", b"b\n", b"c\n"], name="in.gz")

    result = runner.invoke(
        app,
        ["--log-level", "ERROR", "split", str(path), "2", "-o", str(out_dir), "--no-progress"],
    )

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == shard_paths(out_dir, "in.gz", 2)
    assert gzip.decompress((out_dir / "0_in.gz").read_bytes()) == b"a\nc\n"
    assert gzip.decompress((out_dir / "1_in.gz").read_bytes()) == b"b\n"


def test_split_with_options(make_gz, out_dir):
    path = make_gz([b"%d\n" % i for i in range(20)], name="in.gz")

    result = runner.invoke(
        app,
        [
            "--log-level",
            "DEBUG",
            "split",
            str(path),
            "4",
            "--output-dir",
            str(out_dir),
            "--compress-level",
            "1",
            "--chunk-size",
            "5",
            "--buffer-size",
            "32",
            "--no-progress",
        ],
    )

    assert result.exit_code == 0, result.output
    printed = result.stdout.splitlines()
    for name in shard_paths(out_dir, "in.gz", 4):
        assert name in printed
    assert gzip.decompress((out_dir / "3_in.gz").read_bytes()) == b"3\n7\n11\n15\n19\n"


def test_missing_input_exits_1(tmp_path, out_dir):
    result = runner.invoke(app, ["split", str(tmp_path / "nope.gz"), "2", "-o", str(out_dir)])
    assert result.exit_code == 1
    assert list(out_dir.iterdir()) == []


def test_corrupt_input_exits_1_but_lists_files(tmp_path, out_dir):
    bad = tmp_path / "bad.gz"
    bad.write_bytes(b"plain text\n")

    result = runner.invoke(app, ["split", str(bad), "3", "-o", str(out_dir), "--no-progress"])

    assert result.exit_code == 1
    printed = result.stdout.splitlines()
    for name in shard_paths(out_dir, "bad.gz", 3):
        assert name in printed


def test_zero_shards_is_usage_error(make_gz):
    result = runner.invoke(app, ["split", str(make_gz([b"a\n"])), "0"])
    assert result.exit_code == 2
