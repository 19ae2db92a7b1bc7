# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from restcache.core.constants import (
    DEFAULT_BACKUP_COUNT,
    DEFAULT_BACKUP_INTERVAL_MS,
    DEFAULT_PORT,
    MAX_EXPIRY_MS,
    Command,
)


def _split_csv(v: object) -> list[str]:
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v if isinstance(v, list) else []


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RESTCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # HTTP interface
    api_host: str = "127.0.0.1"
    api_port: int = DEFAULT_PORT

    # Command gating; BACKUP and RESTORE are off unless explicitly enabled
    disabled_commands: Annotated[list[str], NoDecode] = [
        Command.BACKUP.value,
        Command.RESTORE.value,
    ]

    @field_validator("disabled_commands", mode="before")
    @classmethod
    def _parse_disabled_commands(cls, v: object) -> list[str]:
        return [c.lower() for c in _split_csv(v)]

    @field_validator("disabled_commands")
    @classmethod
    def _check_disabled_commands(cls, v: list[str]) -> list[str]:
        known = {c.value for c in Command}
        unknown = [c for c in v if c not in known]
        if unknown:
            raise ValueError(f"Unknown command(s): {', '.join(unknown)}")
        return v

    # Cache
    default_expiry_ms: int = 0  # 0 disables the default TTL

    @field_validator("default_expiry_ms")
    @classmethod
    def _check_default_expiry(cls, v: int) -> int:
        if v > MAX_EXPIRY_MS:
            raise ValueError(f"default_expiry_ms must be at most {MAX_EXPIRY_MS}")
        return v

    # Backups
    backup_automatic: bool = True
    backup_interval_ms: int = DEFAULT_BACKUP_INTERVAL_MS
    backup_count: int = DEFAULT_BACKUP_COUNT
    backup_directory: Path = Path("./out")
    backup_load_on_startup: bool = True

    @field_validator("backup_count")
    @classmethod
    def _check_backup_count(cls, v: int) -> int:
        if v < 1:
            raise ValueError("backup_count must be at least 1")
        return v

    @field_validator("backup_interval_ms")
    @classmethod
    def _check_backup_interval(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("backup_interval_ms must be positive")
        return v

    # Extensions
    extensions_enabled: bool = True
    extension_modules: Annotated[list[str], NoDecode] = []

    @field_validator("extension_modules", mode="before")
    @classmethod
    def _parse_extension_modules(cls, v: object) -> list[str]:
        return _split_csv(v)

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    def enabled_commands(self) -> dict[Command, bool]:
        """Return the enabled/disabled flag for every known command."""
        disabled = set(self.disabled_commands)
        return {cmd: cmd.value not in disabled for cmd in Command}


def get_settings() -> Settings:
    return Settings()
