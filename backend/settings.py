"""Centralized configuration management for the MMA data sync backend."""

from __future__ import annotations

import logging
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so scraper settings (read straight from ``os.environ``) see
# the same values.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/app.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SYNC_PROVIDER = "ufc"
DEFAULT_PAST_EVENTS_LIMIT = 5
DEFAULT_ERROR_PREVIEW_LIMIT = 20


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Besides the raw environment values the class exposes a couple of derived
    helpers (normalized database URL, numeric log level) so callers never
    repeat that parsing.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description=(
            "Full SQLAlchemy-compatible database URL. Postgres URLs supplied in"
            " sync format (postgres:// or postgresql://) are coerced into the"
            " async psycopg driver string at runtime."
        ),
    )
    use_sqlite: bool = Field(
        default=False,
        alias="USE_SQLITE",
        description=(
            "Force SQLite usage regardless of DATABASE_URL. Helpful for local"
            " development and test suites that do not require PostgreSQL."
        ),
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )
    sync_on_startup: bool = Field(
        default=True,
        alias="SYNC_ON_STARTUP",
        description="Launch a background sync_all run when the API starts.",
    )
    sync_provider: str = Field(
        default=DEFAULT_SYNC_PROVIDER,
        alias="SYNC_PROVIDER",
        description="Provider adapter used by the event sync (ufc, thesportsdb, sportsdataio).",
    )
    sync_past_events_limit: int = Field(
        default=DEFAULT_PAST_EVENTS_LIMIT,
        alias="SYNC_PAST_EVENTS_LIMIT",
        ge=0,
        description="Number of completed events reconciled by the past-events stage.",
    )
    sync_error_preview_limit: int = Field(
        default=DEFAULT_ERROR_PREVIEW_LIMIT,
        alias="SYNC_ERROR_PREVIEW_LIMIT",
        ge=0,
        description="Maximum number of error messages returned by the sync endpoints.",
    )
    mma_api_key: str | None = Field(
        default=None,
        alias="MMA_API_KEY",
        description="SportsData.io subscription key. Without it the adapter returns no data.",
    )
    mma_api_base_url: str | None = Field(
        default=None,
        alias="MMA_API_BASE_URL",
        description="Override for the SportsData.io MMA API root.",
    )

    @property
    def resolved_database_url(self) -> str:
        """Return the async-compatible database URL after applying fallbacks."""

        if self.use_sqlite or not self.database_url:
            return DEFAULT_SQLITE_DATABASE_URL

        url = self.database_url.strip()

        if url.startswith("sqlite"):
            return url

        for prefix in POSTGRES_SYNC_PREFIXES:
            if url.startswith(prefix):
                return url.replace(prefix, POSTGRES_ASYNC_PREFIX, 1)

        if url.startswith(POSTGRES_ASYNC_PREFIX):
            return url

        raise RuntimeError(
            f"Expected a PostgreSQL connection string or SQLite fallback, received: {url}"
        )

    @property
    def database_type(self) -> str:
        """Return ``sqlite`` when using SQLite otherwise ``postgresql``."""

        if self.resolved_database_url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self.database_url and not self.use_sqlite:
            warnings.append(
                "DATABASE_URL is not set - falling back to the local SQLite database"
            )

        if self.sync_provider.lower() == "sportsdataio" and not self.mma_api_key:
            warnings.append(
                "SYNC_PROVIDER is sportsdataio but MMA_API_KEY is not set - "
                "event syncs will return no data"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


# Module-level singleton; the getter remains available for tests that prefer
# dependency injection.
settings = get_settings()

__all__ = [
    "AppSettings",
    "DEFAULT_ERROR_PREVIEW_LIMIT",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PAST_EVENTS_LIMIT",
    "DEFAULT_SQLITE_DATABASE_URL",
    "DEFAULT_SYNC_PROVIDER",
    "POSTGRES_ASYNC_PREFIX",
    "POSTGRES_SYNC_PREFIXES",
    "get_settings",
    "settings",
]
