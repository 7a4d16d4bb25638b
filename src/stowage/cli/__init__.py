"""CLI commands for Stowage.

Provides command-line interface using Typer:
- stowage put: Commit a local file or stdin to a destination
- stowage stat: Show backend metadata for an object

Usage:
    stowage --help
    stowage put data.json s3://bucket/2020/01/01/data.json.gz
    stowage stat s3://bucket/2020/01/01/data.json.gz
"""

import typer

from stowage.cli.put_cmd import put
from stowage.cli.stat_cmd import stat

# Main CLI application
app = typer.Typer(
    name="stowage",
    help="Stowage: atomic buffered writers for object stores",
    no_args_is_help=True,
)

app.command("put", help="Commit a local file or stdin to an object store")(put)
app.command("stat", help="Show backend metadata for an object")(stat)


@app.callback()
def callback() -> None:
    """Stowage: atomic buffered writers for object stores."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
