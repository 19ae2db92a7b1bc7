# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

from typing import Annotated

import typer

from restcache.cli.commands import backups

app = typer.Typer(
    name="restcache",
    help="In-memory key/value cache over HTTP with TTLs and disk backups",
    no_args_is_help=True,
)

app.add_typer(backups.app, name="backups", help="Inspect and prune backup files")


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Bind port")] = None,
) -> None:
    """Start the RESTCache HTTP server."""
    import uvicorn

    from restcache.core.config import get_settings
    from restcache.core.logging import setup_logging

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    # A single worker: the cache lives in this process.
    uvicorn.run(
        "restcache.api.app:create_app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        factory=True,
        log_config=None,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from restcache import __version__

    typer.echo(f"restcache v{__version__}")
