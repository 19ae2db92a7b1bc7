# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Disk snapshots of the cache store."""

from restcache.backup.manager import BackupManager, BackupRecord, SnapshotTarget

__all__ = ["BackupManager", "BackupRecord", "SnapshotTarget"]
