"""CLI command for printing backend metadata of a stored object.

Usage:
    stowage stat s3://bucket/2020/01/01/data.json.gz
    stowage stat /var/data/out.csv --json
"""

from __future__ import annotations

import asyncio

import orjson
import typer

from stowage.core.destination import parse_destination
from stowage.errors import ConfigurationError, ObjectNotFoundError, StowageError
from stowage.storage.factory import backend_for, close_backends


def stat(
    destination: str = typer.Argument(
        ...,
        help="Object path, e.g. s3://bucket/key or /local/path",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print metadata as JSON",
    ),
) -> None:
    """Print size, checksum and modification time of DESTINATION."""
    asyncio.run(_stat(destination, json_output))


async def _stat(destination: str, json_output: bool) -> None:
    """Async implementation of stat command."""
    from rich.console import Console

    console = Console()

    try:
        dest = parse_destination(destination)
        backend = backend_for(dest)
        info = await backend.stat_object(dest.container, dest.key)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=2)
    except ObjectNotFoundError:
        console.print(f"[red]Not found:[/red] {destination}")
        raise typer.Exit(code=1)
    except StowageError as e:
        console.print(f"[red]Stat failed:[/red] {e}")
        raise typer.Exit(code=1)
    finally:
        await close_backends()

    if json_output:
        typer.echo(
            orjson.dumps(
                {
                    "path": destination,
                    "size": info.size,
                    "checksum": info.checksum,
                    "modified": info.modified.isoformat(),
                }
            ).decode()
        )
        return

    console.print(f"[bold]{destination}[/bold]")
    console.print(f"  Size:     {info.size}")
    console.print(f"  Checksum: {info.checksum}")
    console.print(f"  Modified: {info.modified.isoformat()}")
