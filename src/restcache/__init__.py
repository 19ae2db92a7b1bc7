# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""restcache - In-memory key/value cache over HTTP with TTLs and disk snapshots."""

__version__ = "0.1.0"

from restcache.backup.manager import BackupManager, BackupRecord
from restcache.cache.store import CacheStore
from restcache.client import RestCacheClient
from restcache.gateway.gateway import CommandGateway
from restcache.gateway.results import BatchResult

__all__ = [
    "BackupManager",
    "BackupRecord",
    "BatchResult",
    "CacheStore",
    "CommandGateway",
    "RestCacheClient",
    "__version__",
]
