"""Environment-driven settings for sqlpersist.

``PersistSettings`` holds what is needed to build a pooled data source
and to configure logging. Values come from ``SQLPERSIST_*`` environment
variables or a ``.env`` file.

Examples:
    >>> from sqlpersist.core.settings import PersistSettings
    >>> settings = PersistSettings(database_url="sqlite:///data/app.db")
    >>> settings.pool_size
    5

Tags:
    settings, configuration, pydantic, environment, sqlpersist
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "sqlite:///sqlpersist.db"


class PersistSettings(BaseSettings):
    """sqlpersist configuration.

    Fields
    ──────
    database_url  : SQLAlchemy URL of the database to pool connections for
    pool_size     : Pool size (ignored by SQLite's single-connection pools)
    max_overflow  : Connections allowed above pool_size
    pool_timeout  : Seconds to wait for a free pooled connection
    echo          : Log every statement through SQLAlchemy
    log_level     : Default level for configure_logging()
    log_format    : Default renderer for configure_logging(), ``json`` or ``console``
    """

    model_config = SettingsConfigDict(
        env_prefix="SQLPERSIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default=DEFAULT_DATABASE_URL)
    pool_size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout: int = Field(default=30, ge=0)
    echo: bool = Field(default=False)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")

    @field_validator("database_url")
    @classmethod
    def _url_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("database_url must be non-empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value!r}")
        return level


_settings_cache: dict[str, PersistSettings] = {}


def get_settings(*, _force_reload: bool = False) -> PersistSettings:
    """Load, validate, and cache a :class:`PersistSettings` instance.

    Parameters
    ----------
    _force_reload:
        Bypass cache and reload from the environment.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = PersistSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "DEFAULT_DATABASE_URL",
    "PersistSettings",
    "get_settings",
    "clear_settings_cache",
]
