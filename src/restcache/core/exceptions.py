# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for restcache."""

from restcache.core.constants import ErrorKind


class RestCacheError(Exception):
    """Base exception for all restcache errors."""

    kind: ErrorKind = ErrorKind.INTERNAL


class ConfigurationError(RestCacheError):
    """Invalid or missing configuration."""


class ValidationError(RestCacheError):
    """A command argument or stored value is not usable for the operation."""

    kind = ErrorKind.VALIDATION


class CommandArgumentError(ValidationError):
    """Wrong number of keys supplied to a single-item command."""


class DisabledCommandError(RestCacheError):
    """The command is administratively disabled."""

    kind = ErrorKind.DISABLED


class BackupIOError(RestCacheError):
    """Reading or writing a backup file failed."""

    kind = ErrorKind.IO


class BackupNotFoundError(BackupIOError):
    """The named backup does not exist in the backup directory."""

    kind = ErrorKind.NOT_FOUND


class BackupParseError(RestCacheError):
    """A backup file does not hold a valid serialized content map."""

    kind = ErrorKind.PARSE
