"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
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


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    Pydantic Settings (v2) populates values from environment variables, so
    the constructor is called without arguments.
    """

    return AppSettings()


def _build_database_settings() -> "DatabaseSettings":
    """Build database settings from environment."""

    return DatabaseSettings()


def _build_github_settings() -> "GitHubSettings":
    """Build GitHub credential verification settings from environment."""

    return GitHubSettings()


class LogSettings(BaseSettings):
    """Logging configuration (format, destination, correlation header)."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field(
        "json",
        description="Log format: 'json' for machine-friendly logs, 'plain' for humans",
    )
    output: str = Field("stdout", description="Log destination: 'stdout' or 'file'")
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file'",
    )
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    cors_origin: str = Field(
        "http://icelolly.ddns.net:466",
        description="The single origin allowed by the CORS policy",
    )
    max_body_bytes: int = Field(
        1_000_000,
        description="Hard cap on buffered request bodies; larger bodies abort the request",
        ge=1,
    )
    max_comment_chars: int = Field(
        1000,
        description="Maximum comment length, measured after sanitization",
        ge=1,
    )
    max_client_chars: int = Field(
        255,
        description="Maximum stored length of the client descriptor (User-Agent)",
        ge=1,
    )
    comment_cooldown_seconds: float = Field(
        20.0,
        description="Minimum interval between accepted comments from one GitHub account",
        gt=0,
    )
    password_attempt_threshold: int = Field(
        3,
        description="Failed password attempts from one address before it is blocked",
        ge=1,
    )
    password_block_seconds: float = Field(
        30.0,
        description="How long an address stays blocked after reaching the threshold",
        gt=0,
    )
    limiter_sweep_interval_seconds: float = Field(
        300.0,
        description="Minimum interval between sweeps of stale rate limiter entries",
        gt=0,
    )
    article_password: str | None = Field(
        None,
        description="Shared secret required to create articles",
        validation_alias=AliasChoices("APP_ARTICLE_PASSWORD", "PASSWORD"),
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class DatabaseSettings(BaseSettings):
    """Article/comment storage configuration.

    The ``sqlalchemy`` backend talks to PostgreSQL through asyncpg. The
    ``memory`` backend keeps everything in process and is meant for local
    development and tests.
    """

    backend: str = Field(
        "sqlalchemy",
        description="Storage backend name (sqlalchemy, memory)",
    )
    url: str | None = Field(
        None,
        description="Database connection URL",
        validation_alias=AliasChoices("DB_URL", "DATABASE_URL"),
    )
    echo: bool = Field(False, description="Echo SQL statements to the log")
    pool_pre_ping: bool = Field(True, description="Test pooled connections before use")
    create_schema: bool = Field(
        False,
        description="Create missing tables on startup (development only)",
    )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        case_sensitive=False,
    )

    @field_validator("url", mode="before")
    @classmethod
    def use_async_driver(cls, value: str | None) -> str | None:
        """Rewrite plain PostgreSQL URLs to the asyncpg dialect."""
        if not value:
            return None
        for prefix in ("postgres://", "postgresql://"):
            if value.startswith(prefix):
                return "postgresql+asyncpg://" + value[len(prefix):]
        return value


class GitHubSettings(BaseSettings):
    """GitHub token verification configuration."""

    api_url: str = Field(
        "https://api.github.com",
        description="Base URL of the GitHub REST API",
    )
    user_agent: str = Field(
        "Thunderstorm/1.0 (Linux)",
        description="User-Agent sent to GitHub (required by their API)",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Timeout for the token verification call in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="GITHUB_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app_env: str = APP_ENV
    log: LogSettings = Field(default_factory=_build_log_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    db: DatabaseSettings = Field(default_factory=_build_database_settings)
    github: GitHubSettings = Field(default_factory=_build_github_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
