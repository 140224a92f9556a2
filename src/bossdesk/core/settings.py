"""Environment-driven settings for bossdesk.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    A bad schema name or a negative page size should fail at startup, not
    halfway through a dashboard refresh.

    - **Pydantic validation:** Type-checked at startup
    - **Environment-driven:** ``BOSSDESK_*`` variables and ``.env`` files
    - **Sensible defaults:** Local PostgreSQL, ``pgboss`` schema

Examples:
    >>> from bossdesk.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.schema_name
    'pgboss'

Tags:
    settings, configuration, pydantic, environment, bossdesk
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bossdesk.core.connection import (
    DEFAULT_SCHEMA,
    SCHEMA_NAME_REQUIREMENTS,
    AuthMethod,
    SSLMode,
    is_valid_schema_name,
)


class BossDeskSettings(BaseSettings):
    """bossdesk configuration.

    Fields
    ──────
    connection_id    : Cache key for the adapter registry
    host/port/...    : Target database (password never logged)
    schema_name      : pg-boss namespace, validated as a safe identifier
    log_level        : Structlog log level
    json_logs        : Force JSON (True) or console (False); None = auto
    page_size        : Jobs per page in list views
    refresh_interval : Seconds between auto-refresh cycles
    pool_min/max     : psycopg2 ThreadedConnectionPool bounds
    """

    model_config = SettingsConfigDict(
        env_prefix="BOSSDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Target ───────────────────────────────────────────────────
    connection_id: str = Field(default="default")
    database_url: str | None = Field(default=None, repr=False)
    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    database: str = Field(default="postgres")
    user: str = Field(default="postgres")
    password: str = Field(default="", repr=False)
    ssl_mode: SSLMode = Field(default=SSLMode.DISABLED)
    auth_method: AuthMethod = Field(default=AuthMethod.AUTO)
    ca_certificate_path: str = Field(default="")
    client_certificate_path: str = Field(default="")
    client_key_path: str = Field(default="")
    schema_name: str = Field(default=DEFAULT_SCHEMA)

    # ── Pool ─────────────────────────────────────────────────────
    pool_min: int = Field(default=1, ge=1)
    pool_max: int = Field(default=5, ge=1)
    connect_timeout_seconds: int = Field(default=30, ge=1)

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="WARNING")
    json_logs: bool | None = Field(default=None)

    # ── Browsing ─────────────────────────────────────────────────
    page_size: int = Field(default=50, ge=1, le=1000)
    refresh_interval_seconds: float = Field(default=30.0, gt=0)

    @field_validator("schema_name")
    @classmethod
    def _check_schema(cls, value: str) -> str:
        if not is_valid_schema_name(value):
            raise ValueError(SCHEMA_NAME_REQUIREMENTS)
        return value


_settings_cache: dict[str, BossDeskSettings] = {}


def get_settings(*, _force_reload: bool = False) -> BossDeskSettings:
    """Load, validate, and cache a :class:`BossDeskSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = BossDeskSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    _settings_cache.clear()


__all__ = ["BossDeskSettings", "get_settings", "clear_settings_cache"]
