"""CLI command for committing a local file to a destination.

Usage:
    stowage put data.json s3://bucket/2020/01/01/data.json.gz
    cat data.json | stowage put - gs://bucket/data.json --json
    stowage put big.csv azure://container/big.csv --file-buffer --keep-failed
"""

from __future__ import annotations

import asyncio
import sys
from contextlib import AbstractContextManager, nullcontext
from pathlib import Path
from typing import IO

import typer

from stowage.config import WriterOptions, settings
from stowage.core.writer import open_writer
from stowage.errors import (
    ConfigurationError,
    StagingError,
    StowageError,
    UnverifiedCommitError,
)
from stowage.observability.logging import configure_logging
from stowage.storage.factory import close_backends

CHUNK_SIZE = 64 * 1024


def put(
    source: str = typer.Argument(
        ...,
        help="Local file to upload, or - to read stdin",
    ),
    destination: str = typer.Argument(
        ...,
        help="Destination path, e.g. s3://bucket/key or /local/path",
    ),
    content_type: str | None = typer.Option(
        None,
        "--content-type",
        "-t",
        help="Content type (inferred from the destination extension by default)",
    ),
    compress: bool = typer.Option(
        False,
        "--compress",
        "-z",
        help="Gzip the payload (implied by a .gz destination)",
    ),
    keep_failed: bool = typer.Option(
        False,
        "--keep-failed",
        help="Keep the spool file when the transfer fails",
    ),
    file_buffer: bool = typer.Option(
        False,
        "--file-buffer",
        help="Spool to a temp file instead of memory",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print the committed object metadata as JSON",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
) -> None:
    """Stage SOURCE locally and commit it to DESTINATION."""
    configure_logging(
        json_format=settings.log_json,
        level="DEBUG" if verbose else settings.log_level,
    )

    try:
        options = WriterOptions.from_settings(
            compress=compress or settings.compress,
            keep_failed=keep_failed or settings.keep_failed,
            use_file_buffer=file_buffer or settings.use_file_buffer,
            content_type=content_type,
        )
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    asyncio.run(_put_and_close(source, destination, options, json_output))


async def _put_and_close(
    source: str,
    destination: str,
    options: WriterOptions,
    json_output: bool,
) -> None:
    try:
        await _put(source, destination, options, json_output)
    finally:
        await close_backends()


async def _put(
    source: str,
    destination: str,
    options: WriterOptions,
    json_output: bool,
) -> None:
    """Async implementation of put command."""
    from rich.console import Console
    from rich.table import Table

    console = Console(stderr=True)

    try:
        writer = open_writer(destination, options=options)
    except (ConfigurationError, StagingError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=2)

    try:
        with _open_source(source) as src:
            while True:
                chunk = src.read(CHUNK_SIZE)
                if not chunk:
                    break
                writer.write(chunk)
    except (OSError, StagingError) as e:
        await writer.abort()
        console.print(f"[red]Failed to read {source}:[/red] {e}")
        raise typer.Exit(code=1)

    try:
        await writer.close()
    except UnverifiedCommitError as e:
        console.print(f"[yellow]Written but unverified:[/yellow] {e}")
        raise typer.Exit(code=3)
    except StowageError as e:
        console.print(f"[red]Commit failed:[/red] {e}")
        if options.keep_failed and writer.buffer.path:
            console.print(f"  Buffer kept at {writer.buffer.path}")
        raise typer.Exit(code=1)

    stats = writer.stats()
    if json_output:
        typer.echo(stats.to_json().decode())
        return

    table = Table(title=stats.path, show_header=False)
    table.add_row("Size", str(stats.size))
    table.add_row("Checksum", stats.checksum)
    table.add_row("Created", stats.created.isoformat() if stats.created else "-")
    table.add_row("Content-Type", stats.content_type)
    Console().print(table)


def _open_source(source: str) -> AbstractContextManager[IO[bytes]]:
    if source == "-":
        return nullcontext(sys.stdin.buffer)
    return Path(source).open("rb")
