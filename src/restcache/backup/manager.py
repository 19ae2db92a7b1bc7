# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""BackupManager: snapshot the store to disk, enforce retention, restore.

Backups are JSON files named ``<UTC timestamp>.rc.bak`` holding the value
map only.  Ordering is always by filesystem modification time, newest
first.  Serialisation is synchronous; the file write itself goes through
``aiofiles`` so it does not stall the event loop.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

import aiofiles

from restcache.core.constants import BACKUP_FILE_EXTENSION, BACKUP_NAME_FORMAT
from restcache.core.exceptions import BackupIOError, BackupNotFoundError, BackupParseError

logger = logging.getLogger("restcache.backup.manager")


class SnapshotTarget(Protocol):
    """What the backup manager needs from the store."""

    def snapshot(self) -> dict[str, Any]: ...

    def load(self, contents: Mapping[str, Any]) -> None: ...


@dataclass(frozen=True)
class BackupRecord:
    """A backup file and its last modification time."""

    file_name: str
    last_modified: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.file_name,
            "lastModified": int(self.last_modified.timestamp() * 1000),
        }


class BackupManager:
    """Creates, lists, prunes and restores backups of a :class:`SnapshotTarget`.

    Args:
        target: Source of snapshots and destination of restores.
        directory: Directory holding the backup files.
        retention: Number of backups kept after each backup run.
        automatic: Run :meth:`perform_backup` periodically after :meth:`start`.
        interval_ms: Period of automatic backups in milliseconds.
        load_on_startup: Restore the newest backup during :meth:`start`.
    """

    def __init__(
        self,
        target: SnapshotTarget,
        directory: str | Path,
        *,
        retention: int = 5,
        automatic: bool = False,
        interval_ms: int = 60_000,
        load_on_startup: bool = False,
    ) -> None:
        self._target = target
        self._directory = Path(directory)
        self._retention = retention
        self._automatic = automatic
        self._interval = interval_ms / 1000
        self._load_on_startup = load_on_startup
        # Serialises backup and restore, cleanup included.
        self._lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def retention(self) -> int:
        return self._retention

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Prepare the directory, optionally restore, optionally schedule backups."""
        self._directory.mkdir(parents=True, exist_ok=True)

        if self._load_on_startup:
            newest = self.newest_backup()
            if newest is not None:
                try:
                    await self.restore_backup(newest.file_name)
                except (BackupIOError, BackupParseError) as exc:
                    logger.error("Startup restore of %s failed: %s", newest.file_name, exc)

        if self._automatic and self._task is None:
            self._task = asyncio.create_task(self._loop())
            logger.info("Automatic backups started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        """Cancel the automatic backup task, if any."""
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
            logger.info("Automatic backups stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.perform_backup()
            except Exception:
                logger.exception("Automatic backup failed")

    # ------------------------------------------------------------------
    # Backup / restore
    # ------------------------------------------------------------------

    async def perform_backup(self) -> str:
        """Write a new backup and prune old ones.

        Returns:
            The new backup's file name.

        Raises:
            BackupIOError: The file could not be written.  Cleanup has
                still been run.
        """
        async with self._lock:
            name = self._new_backup_name()
            payload = json.dumps(self._target.snapshot())
            path = self._directory / name
            error: OSError | None = None
            try:
                async with aiofiles.open(path, "w", encoding="utf-8") as fh:
                    await fh.write(payload)
            except OSError as exc:
                logger.error("An error occurred during cache backup %s: %s", name, exc)
                error = exc
            else:
                logger.info("New backup created: %s", name)

            try:
                self.clean_excess_backups()
            except OSError:
                logger.exception("Backup cleanup failed")

            if error is not None:
                raise BackupIOError(f"Unable to write backup {name}: {error}") from error
            return name

    def clean_excess_backups(self) -> list[str]:
        """Delete backups beyond the retention count, oldest first.

        Returns:
            The names of the deleted files.
        """
        backups = self.get_backups()
        excess = backups[self._retention :]
        logger.debug("Found %d existing backups, removing %d", len(backups), len(excess))

        removed: list[str] = []
        for record in reversed(excess):
            try:
                (self._directory / record.file_name).unlink()
            except FileNotFoundError:
                logger.warning("Backup %s vanished before cleanup", record.file_name)
                continue
            except OSError as exc:
                logger.error("Unable to remove old backup %s: %s", record.file_name, exc)
                continue
            logger.info("Removed old backup: %s", record.file_name)
            removed.append(record.file_name)
        return removed

    def get_backups(self) -> list[BackupRecord]:
        """Return all recognised backups, newest first."""
        if not self._directory.is_dir():
            return []

        records: list[BackupRecord] = []
        for path in self._directory.iterdir():
            if not self._is_backup_name(path.name) or not path.is_file():
                continue
            try:
                mtime = path.stat().st_mtime
            except FileNotFoundError:
                continue
            records.append(
                BackupRecord(
                    file_name=path.name,
                    last_modified=datetime.fromtimestamp(mtime, tz=UTC),
                )
            )

        # Equal mtimes (coarse filesystem clocks) fall back to the name.
        records.sort(key=lambda r: (r.last_modified, r.file_name), reverse=True)
        return records

    def newest_backup(self) -> BackupRecord | None:
        backups = self.get_backups()
        return backups[0] if backups else None

    async def load_backup(self, name: str) -> dict[str, Any]:
        """Read and parse one backup without touching the store."""
        logger.debug("Loading backup: %s", name)
        path = self._resolve(name)
        try:
            async with aiofiles.open(path, encoding="utf-8") as fh:
                data = await fh.read()
        except FileNotFoundError:
            logger.error("Unable to load backup %s: file not found", name)
            raise BackupNotFoundError(f"Unable to load backup {name}") from None
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Unable to load backup %s: %s", name, exc)
            raise BackupIOError(f"Unable to load backup {name}") from exc

        try:
            contents = json.loads(data)
        except json.JSONDecodeError as exc:
            logger.error("Unable to parse backup %s: %s", name, exc)
            raise BackupParseError(f"Unable to parse backup {name}") from exc
        if not isinstance(contents, dict):
            logger.error("Backup %s does not contain a key/value object", name)
            raise BackupParseError(f"Unable to parse backup {name}")
        return contents

    async def restore_backup(self, name: str) -> bool:
        """Replace the store's content with backup *name*.

        TTLs are not restored.  On any failure the store is left untouched.
        """
        async with self._lock:
            logger.info("Cache being restored from backup: %s", name)
            contents = await self.load_backup(name)
            self._target.load(contents)
            logger.info("Cache restored from backup: %s", name)
            return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _is_backup_name(name: str) -> bool:
        return name.endswith(BACKUP_FILE_EXTENSION) and len(name) > len(BACKUP_FILE_EXTENSION)

    def _resolve(self, name: str) -> Path:
        """Map a backup name to a path inside the backup directory."""
        if not name or Path(name).name != name or name in (".", ".."):
            raise BackupNotFoundError(f"Unable to load backup {name}")
        return self._directory / name

    def _new_backup_name(self) -> str:
        stamp = datetime.now(UTC).strftime(BACKUP_NAME_FORMAT)
        name = f"{stamp}{BACKUP_FILE_EXTENSION}"
        suffix = 1
        while (self._directory / name).exists():
            name = f"{stamp}_{suffix}{BACKUP_FILE_EXTENSION}"
            suffix += 1
        return name
