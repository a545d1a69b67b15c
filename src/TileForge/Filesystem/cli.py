"""Command line front-end for the TileForge filesystem helpers.

Examples:
    $ tileforge-fs size data/tiles data/sources/planet.zip
    $ tileforge-fs unzip bundle.zip data/sources
    $ tileforge-fs --log-level DEBUG delete data/tmp
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .archives import unzip_file
from .errors import ArchiveExtractionError, FileStoreError
from .files import delete, format_bytes, get_file_store, size
from .logging_utils import setup_logging

_console = Console(highlight=False, soft_wrap=True)
_err_console = Console(stderr=True, highlight=False, soft_wrap=True)

app = typer.Typer(
    name="tileforge-fs",
    help="TileForge filesystem helpers - sizes, cleanup and safe zip extraction",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tileforge-fs {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        envvar="TILEFORGE_LOG_LEVEL",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """TileForge filesystem helpers."""

    setup_logging(level=log_level)


@app.command("size")
def size_command(
    paths: List[Path] = typer.Argument(..., help="Files or directories to measure"),
) -> None:
    """Print the size of each path (0 for missing paths)."""

    table = Table("path", "bytes", "size")
    for path in paths:
        total = size(path)
        table.add_row(str(path), str(total), format_bytes(total))
    _console.print(table)


@app.command("delete")
def delete_command(
    paths: List[Path] = typer.Argument(..., help="Files or directories to delete"),
) -> None:
    """Delete files and directories recursively; missing paths are ignored."""

    delete(*paths)
    for path in paths:
        _console.print(f"deleted {path}", markup=False)


@app.command("unzip")
def unzip_command(
    archive: Path = typer.Argument(..., help="Zip archive to extract"),
    destination: Path = typer.Argument(..., help="Destination directory"),
) -> None:
    """Safely extract ARCHIVE into DESTINATION."""

    try:
        summary = unzip_file(archive, destination)
    except ArchiveExtractionError as exc:
        _err_console.print(f"error [{exc.code.value}]: {exc}", markup=False)
        raise typer.Exit(1)
    _console.print(
        f"extracted {summary.entries} files ({format_bytes(summary.bytes_written)}) "
        f"to {summary.destination}",
        markup=False,
    )


@app.command("store")
def store_command(
    path: Path = typer.Argument(..., help="Path whose backing volume should be shown"),
) -> None:
    """Show the file store (volume) backing PATH or its nearest existing ancestor."""

    try:
        store = get_file_store(path)
    except FileStoreError as exc:
        _err_console.print(f"error: {exc}", markup=False)
        raise typer.Exit(1)
    table = Table("field", "value")
    table.add_row("mount point", str(store.mount_point))
    table.add_row("device", str(store.device))
    table.add_row("total", format_bytes(store.total))
    table.add_row("used", format_bytes(store.used))
    table.add_row("free", format_bytes(store.free))
    _console.print(table)


def run() -> None:
    """Console-script entry point."""

    app()
