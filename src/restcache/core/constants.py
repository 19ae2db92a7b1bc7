# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Command names, error kinds, and fixed protocol constants."""

from enum import StrEnum


class Command(StrEnum):
    PING = "ping"
    SET = "set"
    GET = "get"
    DEL = "del"
    KEYS = "keys"
    INCR = "incr"
    DECR = "decr"
    EXPIRE = "expire"
    UNEXPIRE = "unexpire"
    RANDOM = "random"
    STATS = "stats"
    BACKUP = "backup"
    RESTORE = "restore"
    DUMP = "dump"
    FLUSH = "flush"


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    DISABLED = "disabled"
    NOT_FOUND = "not_found"
    IO = "io"
    PARSE = "parse"
    INTERNAL = "internal"


# Commands that fan out over every (key, value) pair in the request.
BATCH_COMMANDS: frozenset[Command] = frozenset(
    {
        Command.SET,
        Command.GET,
        Command.DEL,
        Command.INCR,
        Command.DECR,
        Command.EXPIRE,
        Command.UNEXPIRE,
    }
)

PONG = "PONG"

BACKUP_FILE_EXTENSION = ".rc.bak"
BACKUP_NAME_FORMAT = "%Y-%m-%d_%H-%M-%S-%fZ"

DEFAULT_PORT = 7654
DEFAULT_BACKUP_INTERVAL_MS = 60_000
DEFAULT_BACKUP_COUNT = 5

# Upper bound for an EXPIRE delay (about 100 years).
MAX_EXPIRY_MS = 100 * 365 * 24 * 60 * 60 * 1000
