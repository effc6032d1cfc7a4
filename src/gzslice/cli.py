import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from prometheus_client import start_http_server

from gzslice.config import get_settings
from gzslice.errors import SliceError
from gzslice.pipeline import split_file

app = typer.Typer(help="Split a gzip'd line-delimited file into round-robin gzip shards")


def configure_logging(level: str) -> None:
    """Send loguru output to stderr at `level`."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="{time:HH:mm:ss} | {level: <8} | {message}")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", envvar="GZSLICE_LOG_LEVEL", help="DEBUG, INFO, WARNING or ERROR"
    ),
):
    """gzslice command-line interface."""
    configure_logging(log_level or get_settings().log_level)


@app.command("split")
def split_cmd(
    input_file: Path = typer.Argument(..., help="gzip-compressed, newline-delimited input"),
    shards: int = typer.Argument(..., min=1, help="Number of output files"),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Directory for the shards (default: current directory)"
    ),
    compress_level: Optional[int] = typer.Option(
        None, "--compress-level", min=0, max=9, help="gzip level for the shards"
    ),
    chunk_size: Optional[int] = typer.Option(
        None, "--chunk-size", min=1, help="Decompressed bytes read per chunk"
    ),
    buffer_size: Optional[int] = typer.Option(
        None, "--buffer-size", min=1, help="Write buffer size per shard"
    ),
    progress: Optional[bool] = typer.Option(
        None, "--progress/--no-progress", help="Draw a progress bar on stderr"
    ),
    metrics_port: Optional[int] = typer.Option(
        None, "--metrics-port", envvar="GZSLICE_METRICS_PORT", help="Serve Prometheus metrics"
    ),
):
    """Split INPUT_FILE into SHARDS files named {index}_{basename}."""
    overrides = {
        "compress_level": compress_level,
        "read_chunk_size": chunk_size,
        "write_buffer_size": buffer_size,
        "show_progress": progress,
        "metrics_port": metrics_port,
    }
    settings = get_settings().model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )

    if settings.metrics_port:
        start_http_server(settings.metrics_port)
        logger.info(f"serving metrics on :{settings.metrics_port}")

    try:
        result = split_file(input_file, shards, output_dir=output_dir, settings=settings)
    except SliceError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)

    for name in result.filenames:
        typer.echo(name)

    if not result.ok:
        logger.error(f"split failed: {result.error}")
        raise typer.Exit(code=1)

    logger.success(
        f"wrote {result.lines_written} lines to {len(result.filenames)} files "
        f"in {result.elapsed:.2f}s"
    )


if __name__ == "__main__":
    app()
