"""
Configuration loading from .env and config.yaml.

Setting Sources and Precedence
==============================
1. **Environment / .env file** (highest priority for paths):
   - RJSYNC_ROOT_DIR, RJSYNC_DATABASE
   - RJSYNC_ENV, LOG_LEVEL

2. **config.yaml** (structured config):
   - paths: root_dir, database, log_file
   - scanner: max_recursion_depth, strict_cleanup, cover_dir_name
   - hvdb: metadata_url_template, cover_url_template, timeout_seconds
   - environment: env, log_level

3. **Defaults** (platformdirs locations for the database and log file).

Path Resolution
===============
- Absolute paths are used as-is
- Relative paths in config.yaml are resolved relative to the directory
  holding config.yaml
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from rjsync.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("config.yaml")


@dataclass(frozen=True)
class ScanConfig:
    """Everything one reconciliation run needs to know.

    Passed explicitly into the engine so separate runs (and tests) can use
    separate roots.
    """

    root_dir: Path
    cover_dir_name: str = "Images"
    metadata_url_template: str = "https://hvdb.me/Dashboard/WorkDetails/{id}"
    cover_url_template: str = "https://hvdb.me/WorkImages/RJ{rjcode}.jpg"
    timeout_seconds: float = 30.0
    max_recursion_depth: int = 2
    strict_cleanup: bool = True
    dry_run: bool = False

    @property
    def cover_dir(self) -> Path:
        """Directory holding cover images."""
        return self.root_dir / self.cover_dir_name


@dataclass
class PathsConfig:
    """Path configuration settings (from config.yaml paths section)."""

    root_dir: Path
    database: Path
    log_file: Path


@dataclass
class ScannerConfig:
    """Folder scanning settings (from config.yaml scanner section)."""

    max_recursion_depth: int = 2
    strict_cleanup: bool = True
    cover_dir_name: str = "Images"


@dataclass
class HvdbConfig:
    """Metadata source settings (from config.yaml hvdb section)."""

    metadata_url_template: str = "https://hvdb.me/Dashboard/WorkDetails/{id}"
    cover_url_template: str = "https://hvdb.me/WorkImages/RJ{rjcode}.jpg"
    timeout_seconds: float = 30.0


@dataclass
class Settings:
    """Main settings container."""

    paths: PathsConfig
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    hvdb: HvdbConfig = field(default_factory=HvdbConfig)
    env: str = "production"
    log_level: str = "INFO"
    config_file: Path | None = None

    def scan_config(self, *, dry_run: bool = False) -> ScanConfig:
        """Build the explicit per-run configuration for the engine."""
        return ScanConfig(
            root_dir=self.paths.root_dir,
            cover_dir_name=self.scanner.cover_dir_name,
            metadata_url_template=self.hvdb.metadata_url_template,
            cover_url_template=self.hvdb.cover_url_template,
            timeout_seconds=self.hvdb.timeout_seconds,
            max_recursion_depth=self.scanner.max_recursion_depth,
            strict_cleanup=self.scanner.strict_cleanup,
            dry_run=dry_run,
        )


def validate_settings(settings: Settings) -> list[str]:
    """
    Validate settings and return a list of problems.

    Args:
        settings: Loaded settings

    Returns:
        List of error messages (empty if valid)
    """
    errors: list[str] = []
    root = settings.paths.root_dir
    if not str(root) or str(root) == ".":
        errors.append("paths.root_dir is not set (config.yaml or RJSYNC_ROOT_DIR)")
    elif not root.exists():
        errors.append(f"paths.root_dir does not exist: {root}")
    elif not root.is_dir():
        errors.append(f"paths.root_dir is not a directory: {root}")
    return errors


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(
            "config.yaml must contain a mapping at the top level", config_file=config_path
        )
    return data


def load_settings(
    env_file: Path | None = None,
    config_file: Path | None = None,
    *,
    validate: bool = True,
) -> Settings:
    """
    Load settings from .env and config.yaml files.

    Args:
        env_file: Path to .env file (default: .env next to config.yaml, or in current dir)
        config_file: Path to config.yaml (default: ./config.yaml if it exists)
        validate: If True, raise ConfigurationError when required settings are invalid

    Returns:
        Populated Settings object

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        ConfigurationError: If config.yaml is malformed or validation fails
    """
    from rjsync.env_settings import clear_env_settings_cache, get_env_settings
    from rjsync.paths import default_database_path, default_log_file
    from rjsync.schemas.config import validate_config

    config_path = config_file or DEFAULT_CONFIG_FILE

    if env_file:
        env_path = env_file
    else:
        env_next_to_config = config_path.resolve().parent / ".env"
        env_path = env_next_to_config if env_next_to_config.exists() else Path(".env")

    if env_path.exists():
        load_dotenv(env_path)
    else:
        # Containerized usage: rely on the process environment
        load_dotenv()

    if config_file is not None or config_path.exists():
        yaml_config = load_yaml_config(config_path)
        resolved_config: Path | None = config_path.resolve()
    else:
        logger.debug("No config file at %s, using defaults", config_path)
        yaml_config = {}
        resolved_config = None

    try:
        schema = validate_config(yaml_config)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid config file: {e}", config_file=config_path
        ) from None

    base_dir = config_path.resolve().parent

    def resolve_path(path_str: str) -> Path:
        """Resolve a path, making relative paths relative to the config directory."""
        p = Path(path_str).expanduser()
        if p.is_absolute():
            return p
        return (base_dir / p).resolve()

    clear_env_settings_cache()
    env = get_env_settings()

    root_str = env.paths.root_dir or schema.paths.root_dir
    if env.paths.database:
        database = Path(env.paths.database).expanduser()
    elif schema.paths.database:
        database = resolve_path(schema.paths.database)
    else:
        database = default_database_path()

    paths = PathsConfig(
        root_dir=resolve_path(root_str) if root_str else Path(),
        database=database,
        log_file=resolve_path(schema.paths.log_file) if schema.paths.log_file else default_log_file(),
    )

    settings = Settings(
        paths=paths,
        scanner=ScannerConfig(
            max_recursion_depth=schema.scanner.max_recursion_depth,
            strict_cleanup=schema.scanner.strict_cleanup,
            cover_dir_name=schema.scanner.cover_dir_name,
        ),
        hvdb=HvdbConfig(
            metadata_url_template=schema.hvdb.metadata_url_template,
            cover_url_template=schema.hvdb.cover_url_template,
            timeout_seconds=schema.hvdb.timeout_seconds,
        ),
        env=env.app.env if env.app.env != "production" else schema.environment.env,
        log_level=env.app.log_level if env.app.log_level != "INFO" else schema.environment.log_level,
        config_file=resolved_config,
    )

    if validate:
        errors = validate_settings(settings)
        if errors:
            raise ConfigurationError(
                "Configuration validation failed: " + "; ".join(errors),
                config_file=resolved_config,
                details={"errors": errors},
            )

    return settings

