"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

Per-route cache TTLs are not configured here; they are supplied where each
route is registered.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field(
        "json",
        description="Log format: 'json' for machine-friendly output or 'plain'",
    )
    output: str = Field("stdout", description="Log destination: 'stdout' or 'file'")
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file' (default logs/app.log)",
    )
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    auth_required: bool = Field(
        True,
        description="Whether bearer token authentication is required on /api routes",
    )
    auth_tokens: str | None = Field(
        None,
        description="Comma-separated list of accepted bearer tokens",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable sliding-window rate limiting per client address",
    )
    rate_limit_requests: int = Field(
        100,
        description="Maximum number of requests allowed per window (per client)",
        ge=1,
    )
    rate_limit_window_seconds: float = Field(
        900,
        description="Sliding window size in seconds",
        gt=0,
    )
    rate_limit_retention_seconds: float | None = Field(
        None,
        description=(
            "How long the background sweep keeps timestamps of idle clients. "
            "Defaults to the window size; must not be smaller than it."
        ),
        gt=0,
    )
    rate_limit_sweep_interval_seconds: float = Field(
        60,
        description="Interval between sweeps of idle rate limit clients",
        gt=0,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _check_retention(self) -> "AppSettings":
        retention = self.rate_limit_retention_seconds
        if retention is not None and retention < self.rate_limit_window_seconds:
            raise ValueError(
                "rate_limit_retention_seconds must be >= rate_limit_window_seconds"
            )
        return self


class CacheSettings(BaseSettings):
    """In-process response cache configuration."""

    enabled: bool = Field(
        True,
        description="Enable the GET response cache",
    )
    sweep_interval_seconds: float = Field(
        60,
        description="Interval between sweeps of expired cache entries",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.
    """

    app_env: str = APP_ENV
    log: LogSettings = Field(default_factory=LogSettings)
    app: AppSettings = Field(default_factory=AppSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance used when the app factory is called without
# explicit settings. Nested settings are created via default_factory so env
# loading works.
settings = Settings()
