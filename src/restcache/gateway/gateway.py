# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""CommandGateway: command gating and per-item batch execution.

A request is a command name plus an ordered list of ``(key, value)``
pairs.  Batch commands run once per pair, in order, and one item's failure
never affects its siblings.  Single-item commands run once and are wrapped
in the same envelope.
"""

from __future__ import annotations

import logging
import os
import platform
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from restcache.backup.manager import BackupManager
from restcache.cache.store import CacheStore
from restcache.core.constants import BATCH_COMMANDS, Command, ErrorKind
from restcache.core.exceptions import (
    BackupIOError,
    CommandArgumentError,
    DisabledCommandError,
    RestCacheError,
)
from restcache.gateway.results import BatchResult, ItemResult

logger = logging.getLogger("restcache.gateway")

Item = tuple[str, Any]
_ItemOp = Callable[[str, Any], Any]


class CommandStats:
    """Per-command call and error counters."""

    __slots__ = ("calls", "errors")

    def __init__(self) -> None:
        self.calls: dict[str, int] = {}
        self.errors: dict[str, int] = {}

    def record(self, command: Command, results: Sequence[ItemResult]) -> None:
        self.calls[command.value] = self.calls.get(command.value, 0) + 1
        failed = sum(1 for r in results if not r.is_ok)
        if failed:
            self.errors[command.value] = self.errors.get(command.value, 0) + failed

    @property
    def total(self) -> int:
        return sum(self.calls.values())

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "calls": dict(self.calls),
            "errors": dict(self.errors),
        }


class CommandGateway:
    """Routes commands to the store or the backup manager.

    Args:
        store: The live cache store.
        backups: Backup manager; BACKUP, RESTORE and named DUMP fail
            without one.
        enabled: Per-command enabled flags.  Commands missing from the
            mapping are enabled.
    """

    def __init__(
        self,
        store: CacheStore,
        backups: BackupManager | None = None,
        *,
        enabled: Mapping[Command, bool] | None = None,
    ) -> None:
        self._store = store
        self._backups = backups
        self._enabled = dict(enabled or {})
        self._stats = CommandStats()
        self._started = time.monotonic()
        self._item_ops: dict[Command, _ItemOp] = {
            Command.SET: store.set,
            Command.GET: lambda key, _value: store.get(key),
            Command.DEL: lambda key, _value: store.delete(key),
            Command.INCR: store.incr,
            Command.DECR: store.decr,
            Command.EXPIRE: store.expire,
            Command.UNEXPIRE: lambda key, _value: store.unexpire(key),
        }

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def backups(self) -> BackupManager | None:
        return self._backups

    @property
    def command_stats(self) -> CommandStats:
        return self._stats

    def is_enabled(self, command: Command | str) -> bool:
        return self._enabled.get(Command(command), True)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(self, command: Command | str, items: Iterable[Item] = ()) -> BatchResult:
        """Run *command* and return the ``{errors, response}`` envelope."""
        command = Command(command)
        results = await self.execute_tagged(command, items)
        return BatchResult.from_results(results, spread=command not in BATCH_COMMANDS)

    async def execute_tagged(
        self, command: Command | str, items: Iterable[Item] = ()
    ) -> list[ItemResult]:
        """Run *command* and return one tagged result per outcome, in order."""
        command = Command(command)
        items = list(items)

        if not self.is_enabled(command):
            error = DisabledCommandError(f"{command.name} is not enabled.")
            logger.info("Rejected disabled command %s", command.name)
            results = [ItemResult.err(error.kind, str(error), index=None)]
        elif command in BATCH_COMMANDS:
            op = self._item_ops[command]
            results = [self._run_item(command, i, op, key, value) for i, (key, value) in enumerate(items)]
        else:
            results = [await self._run_single(command, items)]

        self._stats.record(command, results)
        return results

    def _run_item(self, command: Command, index: int, op: _ItemOp, key: str, value: Any) -> ItemResult:
        try:
            return ItemResult.ok(op(key, value), index=index)
        except RestCacheError as exc:
            logger.debug("%s failed at index %d: %s", command.name, index, exc)
            return ItemResult.err(exc.kind, str(exc), index=index)
        except Exception as exc:
            logger.exception("%s raised unexpectedly at index %d", command.name, index)
            return ItemResult.err(ErrorKind.INTERNAL, f"Internal error: {exc}", index=index)

    async def _run_single(self, command: Command, items: list[Item]) -> ItemResult:
        try:
            value = await self._dispatch_single(command, [key for key, _ in items])
        except RestCacheError as exc:
            logger.debug("%s failed: %s", command.name, exc)
            return ItemResult.err(exc.kind, str(exc))
        except Exception as exc:
            logger.exception("%s raised unexpectedly", command.name)
            return ItemResult.err(ErrorKind.INTERNAL, f"Internal error: {exc}")
        return ItemResult.ok(value)

    async def _dispatch_single(self, command: Command, keys: list[str]) -> Any:
        if command == Command.PING:
            return self._store.ping()
        if command == Command.KEYS:
            return self._store.keys()
        if command == Command.RANDOM:
            return self._store.random()
        if command == Command.FLUSH:
            return self._store.flush()
        if command == Command.STATS:
            return self.stats()
        if command == Command.BACKUP:
            return await self._require_backups().perform_backup()
        if command == Command.RESTORE:
            if len(keys) != 1:
                raise CommandArgumentError(
                    f"Invalid number of keys for RESTORE [{len(keys)}]. RESTORE requires exactly 1 key."
                )
            return await self._require_backups().restore_backup(keys[0])
        if command == Command.DUMP:
            if len(keys) > 1:
                raise CommandArgumentError(
                    f"Invalid number of keys for DUMP [{len(keys)}]. DUMP requires 0 or 1 key."
                )
            if not keys:
                return self._store.snapshot()
            return await self._require_backups().load_backup(keys[0])
        raise CommandArgumentError(f"{command.name} is not a single-item command.")

    def _require_backups(self) -> BackupManager:
        if self._backups is None:
            raise BackupIOError("Backups are not configured.")
        return self._backups

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def stats(self) -> dict[str, object]:
        """Process and cache statistics, including current backup records."""
        from restcache import __version__

        backups = self._backups.get_backups() if self._backups is not None else []
        return {
            "cache": {
                "keyCount": self._store.size(),
                "expiringKeyCount": self._store.expiring_count(),
                "defaultExpiryMs": self._store.default_expiry_ms,
            },
            "commands": self._stats.to_dict(),
            "system": {
                "pid": os.getpid(),
                "platform": platform.system().lower(),
                "architecture": platform.machine(),
            },
            "versions": {
                "python": platform.python_version(),
                "restcache": __version__,
            },
            "misc": {
                "upTime": f"{time.monotonic() - self._started:.3f}s",
            },
            "backups": [b.to_dict() for b in backups],
        }
