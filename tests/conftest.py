# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from __future__ import annotations

import json
import os
from collections.abc import Callable
from pathlib import Path

import pytest

from restcache.backup.manager import BackupManager
from restcache.cache.store import CacheStore
from restcache.core.config import Settings
from restcache.gateway.gateway import CommandGateway


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Keep RESTCACHE_* variables and a stray .env file out of the tests."""
    for name in list(os.environ):
        if name.startswith("RESTCACHE_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "backups"
    directory.mkdir()
    return directory


@pytest.fixture
def store() -> CacheStore:
    return CacheStore()


@pytest.fixture
def backups(store: CacheStore, backup_dir: Path) -> BackupManager:
    return BackupManager(store, backup_dir, retention=3)


@pytest.fixture
def gateway(store: CacheStore, backups: BackupManager) -> CommandGateway:
    return CommandGateway(store, backups)


@pytest.fixture
def settings(backup_dir: Path) -> Settings:
    """Settings with every command enabled and no background backups."""
    return Settings(
        backup_directory=backup_dir,
        backup_automatic=False,
        backup_load_on_startup=False,
        disabled_commands=[],
    )


@pytest.fixture
def write_backup(backup_dir: Path) -> Callable[..., Path]:
    """Write a backup file with an explicit modification time."""

    def _write(name: str, contents: object, mtime: float | None = None) -> Path:
        path = backup_dir / name
        path.write_text(contents if isinstance(contents, str) else json.dumps(contents))
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _write
