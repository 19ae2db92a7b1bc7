# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from restcache.api.middleware import RequestMiddleware
from restcache.api.routes import commands
from restcache.api.routes.extensions import build_router
from restcache.backup.manager import BackupManager
from restcache.cache.store import CacheStore
from restcache.core.config import Settings, get_settings
from restcache.extensions.base import Extension
from restcache.extensions.registry import ExtensionRegistry
from restcache.gateway.gateway import CommandGateway

logger = logging.getLogger("restcache.api.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    backups: BackupManager = app.state.backups
    # Restores the newest backup (if configured) before traffic is served.
    await backups.start()
    logger.info("RESTCache ready with %d keys", app.state.store.size())

    yield

    await backups.stop()
    app.state.store.flush()


def create_app(
    settings: Settings | None = None,
    *,
    extensions: Iterable[Extension] = (),
) -> FastAPI:
    """Build the app and its store, backup manager, gateway and extensions.

    Extensions passed here are registered after those listed in
    ``settings.extension_modules``, so they win on a path clash.  Extension
    routes are mounted before the built-in commands and can replace them.
    """
    from restcache import __version__

    settings = settings or get_settings()

    store = CacheStore(default_expiry_ms=settings.default_expiry_ms)
    backups = BackupManager(
        store,
        settings.backup_directory,
        retention=settings.backup_count,
        automatic=settings.backup_automatic,
        interval_ms=settings.backup_interval_ms,
        load_on_startup=settings.backup_load_on_startup,
    )
    gateway = CommandGateway(store, backups, enabled=settings.enabled_commands())

    registry = ExtensionRegistry()
    if settings.extensions_enabled:
        registry.load_from_module_paths(settings.extension_modules)
        for ext in extensions:
            registry.register(ext)

    app = FastAPI(
        title="restcache",
        description="In-memory key/value cache with TTLs and disk backups",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.backups = backups
    app.state.gateway = gateway
    app.state.extensions = registry

    app.include_router(build_router(registry), tags=["extensions"])
    app.include_router(commands.router, tags=["commands"])
    app.add_middleware(RequestMiddleware)

    return app
