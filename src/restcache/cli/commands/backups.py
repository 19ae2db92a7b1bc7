# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Backup inspection CLI commands.

These work on the backup directory directly and never contact a running
server.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer

from restcache.backup.manager import BackupManager
from restcache.cache.store import CacheStore
from restcache.core.exceptions import BackupIOError, BackupParseError

app = typer.Typer()

DirectoryOption = Annotated[
    Path | None,
    typer.Option("--dir", "-d", help="Backup directory (defaults to RESTCACHE_BACKUP_DIRECTORY)"),
]


def _manager(directory: Path | None) -> BackupManager:
    from restcache.core.config import get_settings

    settings = get_settings()
    return BackupManager(
        CacheStore(),
        directory or settings.backup_directory,
        retention=settings.backup_count,
    )


@app.command("list")
def list_backups(directory: DirectoryOption = None) -> None:
    """List backups, newest first."""
    from rich.console import Console
    from rich.table import Table

    mgr = _manager(directory)
    records = mgr.get_backups()
    if not records:
        typer.echo(f"No backups found in {mgr.directory}")
        return

    table = Table(title=f"Backups in {mgr.directory}")
    table.add_column("#", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Last Modified (UTC)")
    table.add_column("Size", justify="right")

    for i, record in enumerate(records, start=1):
        size = (mgr.directory / record.file_name).stat().st_size
        table.add_row(
            str(i),
            record.file_name,
            record.last_modified.strftime("%Y-%m-%d %H:%M:%S"),
            f"{size:,} B",
        )

    Console().print(table)


@app.command()
def show(
    name: Annotated[str, typer.Argument(help="Backup file name")],
    directory: DirectoryOption = None,
) -> None:
    """Print a backup's key/value content as JSON."""
    mgr = _manager(directory)
    try:
        contents = asyncio.run(mgr.load_backup(name))
    except (BackupIOError, BackupParseError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
    typer.echo(json.dumps(contents, indent=2, sort_keys=True))


@app.command()
def clean(directory: DirectoryOption = None) -> None:
    """Delete backups beyond the configured retention count."""
    mgr = _manager(directory)
    removed = mgr.clean_excess_backups()
    typer.echo(f"Removed {len(removed)} backup(s), keeping at most {mgr.retention}.")
