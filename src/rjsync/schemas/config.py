"""
Pydantic schema for config.yaml validation.

This validates the YAML structure at load time before converting to dataclasses.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator


class EnvironmentSchema(BaseModel):
    """Environment settings (can override .env values)."""

    env: str = "production"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a recognized value."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return v.upper()


class PathsSchema(BaseModel):
    """Path configuration settings."""

    root_dir: str = ""
    database: str | None = None
    log_file: str | None = None


class ScannerSchema(BaseModel):
    """Folder scanning behaviour."""

    max_recursion_depth: int = Field(default=2, ge=1, le=10)
    strict_cleanup: bool = True
    cover_dir_name: str = "Images"

    @field_validator("cover_dir_name")
    @classmethod
    def validate_cover_dir_name(cls, v: str) -> str:
        """Cover directory must be a single path component."""
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"cover_dir_name must be a plain directory name, got: {v!r}")
        return v


class HvdbSchema(BaseModel):
    """Metadata/cover endpoint settings."""

    metadata_url_template: str = "https://hvdb.me/Dashboard/WorkDetails/{id}"
    cover_url_template: str = "https://hvdb.me/WorkImages/RJ{rjcode}.jpg"
    timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("metadata_url_template", "cover_url_template")
    @classmethod
    def validate_template(cls, v: str, info: ValidationInfo) -> str:
        """Templates must be http(s) URLs with their placeholder."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"{info.field_name} must start with http:// or https://, got: {v}")
        if "{id}" not in v and "{rjcode}" not in v:
            raise ValueError(f"{info.field_name} must contain {{id}} or {{rjcode}}")
        return v


class ConfigSchema(BaseModel):
    """Top-level config.yaml structure."""

    paths: PathsSchema = Field(default_factory=PathsSchema)
    scanner: ScannerSchema = Field(default_factory=ScannerSchema)
    hvdb: HvdbSchema = Field(default_factory=HvdbSchema)
    environment: EnvironmentSchema = Field(default_factory=EnvironmentSchema)

    model_config = {"extra": "ignore"}


def validate_config(data: dict[str, Any]) -> ConfigSchema:
    """
    Validate raw config.yaml data.

    Args:
        data: Parsed YAML mapping

    Returns:
        Validated ConfigSchema instance

    Raises:
        pydantic.ValidationError: If fields are missing or have the wrong type
    """
    return ConfigSchema.model_validate(data)
