"""Settings for schemashift.

Manifesto:
    Configuration should be explicit, validated and environment-driven.
    The migration tool runs in CI jobs, containers and developer shells;
    all of them can set ``SCHEMASHIFT_*`` variables or drop a ``.env`` file
    next to the project instead of editing code.

Features:
    - **SchemashiftSettings:** database URL, migrations directory, logging
    - **env_prefix:** ``SCHEMASHIFT_`` namespacing
    - **.env file support:** Automatic loading via pydantic-settings
    - **Extra ignore:** Unknown env vars don't cause startup failures

Examples:
    >>> from schemashift.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.migrations_dir
    PosixPath('migrations')

Tags:
    settings, configuration, pydantic, environment, schemashift

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_FORMATS = ("auto", "console", "json")


class SchemashiftSettings(BaseSettings):
    """Process-wide configuration.

    Fields
    ──────
    database_url       : SQLAlchemy URL of the database being migrated
    database_echo      : Log every SQL statement SQLAlchemy emits
    database_pool_size : Connection pool size (ignored for SQLite)
    migrations_dir     : Directory holding ``YYYYMMDDHHMMSS_name.sql`` files
    log_level          : structlog level
    log_format         : ``auto`` (JSON unless a TTY), ``console`` or ``json``
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMASHIFT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default="sqlite:///schemashift.db")
    database_echo: bool = Field(default=False)
    database_pool_size: int | None = Field(default=None, ge=1)

    # ── Migrations ───────────────────────────────────────────────
    migrations_dir: Path = Field(default=Path("migrations"))

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="auto")

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("log_format")
    @classmethod
    def _check_format(cls, value: str) -> str:
        fmt = value.lower()
        if fmt not in _LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(_LOG_FORMATS)}")
        return fmt

    @property
    def json_logs(self) -> bool | None:
        """Translate ``log_format`` into ``configure_logging(json_format=...)``."""
        if self.log_format == "auto":
            return None
        return self.log_format == "json"


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, SchemashiftSettings] = {}


def get_settings(*, _force_reload: bool = False) -> SchemashiftSettings:
    """Load, validate, and cache a :class:`SchemashiftSettings` instance.

    Parameters
    ----------
    _force_reload:
        Bypass cache and re-read the environment.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = SchemashiftSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop cached settings (used by tests that patch the environment)."""
    _settings_cache.clear()


__all__ = ["SchemashiftSettings", "get_settings", "clear_settings_cache"]
