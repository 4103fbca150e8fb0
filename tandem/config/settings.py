"""
Runtime settings for Tandem.

Settings are read from environment variables once and cached. Wizards and
stores take explicit constructor arguments and only fall back to these
values when none are given.

Environment:
    TANDEM_DEV_MODE               "1" enables console logging
    LOG_LEVEL                     stdlib level name (default INFO)
    REDIS_URL                     checkpoint backend (default redis://localhost:6379/0)
    TANDEM_DATABASE_URL           SQLAlchemy async URL for the SQL stores
    TANDEM_NOTE_DEBOUNCE_MS       quiet interval before a note is written (default 500)
    TANDEM_PROGRESS_TTL_SECONDS   checkpoint lifetime (default 14 days)
    TANDEM_LANGUAGE               language for transient messages (default en)
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass

from tandem.lib.exceptions import ConfigurationError

DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///tandem.db"
DEFAULT_NOTE_DEBOUNCE_MS = 500
DEFAULT_PROGRESS_TTL_SECONDS = 14 * 24 * 3600


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """Immutable snapshot of the process configuration."""

    dev_mode: bool = False
    log_level: str = "INFO"
    redis_url: str = DEFAULT_REDIS_URL
    database_url: str = DEFAULT_DATABASE_URL
    note_debounce_ms: int = DEFAULT_NOTE_DEBOUNCE_MS
    progress_ttl_seconds: int = DEFAULT_PROGRESS_TTL_SECONDS
    language: str = "en"

    @property
    def note_debounce_seconds(self) -> float:
        return self.note_debounce_ms / 1000

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the current environment."""
        return cls(
            dev_mode=os.environ.get("TANDEM_DEV_MODE") == "1",
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            redis_url=os.environ.get("REDIS_URL", DEFAULT_REDIS_URL),
            database_url=os.environ.get("TANDEM_DATABASE_URL", DEFAULT_DATABASE_URL),
            note_debounce_ms=_int_env("TANDEM_NOTE_DEBOUNCE_MS", DEFAULT_NOTE_DEBOUNCE_MS),
            progress_ttl_seconds=_int_env(
                "TANDEM_PROGRESS_TTL_SECONDS", DEFAULT_PROGRESS_TTL_SECONDS,
            ),
            language=os.environ.get("TANDEM_LANGUAGE", "en"),
        )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached process settings."""
    return Settings.from_env()


__all__ = ["Settings", "get_settings"]
