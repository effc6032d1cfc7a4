"""
Demo script for gzslice.

Builds a synthetic NDJSON.gz corpus, splits it into shards with backpressure
logging turned on, and checks the round-robin line counts.
"""

import asyncio
import gzip
import json
import tempfile
from pathlib import Path

from loguru import logger

from gzslice import SliceSettings, split


def make_corpus(path: Path, n: int) -> None:
    with gzip.open(path, "wb") as gz:
        for i in range(n):
            gz.write(json.dumps({"id": i, "text": f"document {i}"}).encode() + b"\n")


async def main():
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        corpus = tmp_path / "corpus.ndjson.gz"
        make_corpus(corpus, 50_000)
        logger.info(f"🚀 Splitting {corpus.name} into 8 shards")

        settings = SliceSettings(read_chunk_size=64 * 1024, show_progress=True)
        result = await split(corpus, 8, output_dir=tmp_path, settings=settings)
        result.raise_for_error()

        for name, lines in zip(result.filenames, result.lines_per_shard):
            logger.info(f"{Path(name).name}: {lines} lines")
        logger.info(
            f"✅ Split complete: {result.lines_written} lines, "
            f"{result.bytes_read} compressed bytes in {result.elapsed:.2f}s"
        )


if __name__ == "__main__":
    asyncio.run(main())
