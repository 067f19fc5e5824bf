"""Environment-based settings using pydantic-settings.

This module provides type-safe environment variable loading with validation.
Environment variables are loaded automatically and override config.yaml for
the paths they cover.

Usage:
    from rjsync.env_settings import get_env_settings

    env = get_env_settings()
    print(env.paths.root_dir)  # From RJSYNC_ROOT_DIR env var

Environment Variables:
    Paths:
        RJSYNC_ROOT_DIR - Content root scanned for work folders
        RJSYNC_DATABASE - Catalog SQLite database file

    Application:
        RJSYNC_ENV - Environment name (default: "production")
        LOG_LEVEL - Logging level (default: "INFO")

    Path Overrides (from platformdirs):
        RJSYNC_DATA_DIR - Override data directory
        RJSYNC_LOG_DIR - Override log directory
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class PathsEnvSettings(BaseSettings):
    """Path overrides from environment variables.

    Reads from RJSYNC_ROOT_DIR, RJSYNC_DATABASE env vars.
    """

    model_config = SettingsConfigDict(
        env_prefix="RJSYNC_",
        extra="ignore",
    )

    root_dir: str = Field(default="", description="Content root directory")
    database: str = Field(default="", description="Catalog database file")

    @field_validator("root_dir", "database")
    @classmethod
    def strip_value(cls, v: str) -> str:
        """Trim surrounding whitespace so blank values mean unset."""
        return v.strip()


class AppEnvSettings(BaseSettings):
    """Application-level settings from environment variables.

    Reads from RJSYNC_ENV, LOG_LEVEL env vars.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    env: str = Field(
        default="production",
        validation_alias="RJSYNC_ENV",
        description="Environment name (development/production)",
    )
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got: {v}")
        return upper


class EnvSettings(BaseSettings):
    """Combined environment settings.

    Use get_env_settings() to get a cached instance.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    paths: PathsEnvSettings = Field(default_factory=PathsEnvSettings)
    app: AppEnvSettings = Field(default_factory=AppEnvSettings)


@lru_cache(maxsize=1)
def get_env_settings() -> EnvSettings:
    """Get cached environment settings.

    The cache is populated on first call.
    """
    return EnvSettings()


def clear_env_settings_cache() -> None:
    """Clear the cached environment settings.

    Useful for testing to ensure fresh settings are loaded.
    """
    get_env_settings.cache_clear()
