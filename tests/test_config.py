"""Tests for settings loading from config.yaml and the environment."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from rjsync.config import (
    PathsConfig,
    Settings,
    load_settings,
    load_yaml_config,
    validate_settings,
)
from rjsync.exceptions import ConfigurationError


def write_config(path: Path, data: dict) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestLoadYamlConfig:
    """Tests for load_yaml_config()."""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_yaml_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_yaml_config(path) == {}

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_yaml_config(path)


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_defaults_without_config(self, clean_env: Path) -> None:
        """No config.yaml and no env: defaults, root unset."""
        settings = load_settings(validate=False)
        assert settings.paths.root_dir == Path()
        assert settings.paths.database == clean_env / "data" / "catalog.sqlite3"
        assert settings.paths.log_file == clean_env / "logs" / "rjsync.log"
        assert settings.scanner.strict_cleanup is True
        assert settings.config_file is None

    def test_validation_requires_root(self, clean_env: Path) -> None:
        with pytest.raises(ConfigurationError, match="root_dir is not set"):
            load_settings()

    def test_env_root_dir(self, clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        root = clean_env / "library"
        root.mkdir()
        monkeypatch.setenv("RJSYNC_ROOT_DIR", str(root))
        settings = load_settings()
        assert settings.paths.root_dir == root

    def test_config_file_values(self, clean_env: Path) -> None:
        """Relative paths resolve against the config file's directory."""
        conf_dir = clean_env / "conf"
        (conf_dir / "library").mkdir(parents=True)
        config = write_config(
            conf_dir / "config.yaml",
            {
                "paths": {"root_dir": "library", "database": "db/catalog.db"},
                "scanner": {"max_recursion_depth": 3, "strict_cleanup": False},
                "hvdb": {"timeout_seconds": 5},
                "environment": {"log_level": "debug"},
            },
        )
        settings = load_settings(config_file=config)
        assert settings.paths.root_dir == (conf_dir / "library").resolve()
        assert settings.paths.database == (conf_dir / "db" / "catalog.db").resolve()
        assert settings.scanner.max_recursion_depth == 3
        assert settings.scanner.strict_cleanup is False
        assert settings.hvdb.timeout_seconds == 5
        assert settings.log_level == "DEBUG"
        assert settings.config_file == config.resolve()

    def test_env_overrides_config(self, clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (clean_env / "from_yaml").mkdir()
        (clean_env / "from_env").mkdir()
        config = write_config(clean_env / "config.yaml", {"paths": {"root_dir": "from_yaml"}})
        monkeypatch.setenv("RJSYNC_ROOT_DIR", str(clean_env / "from_env"))
        monkeypatch.setenv("RJSYNC_DATABASE", str(clean_env / "env.sqlite3"))
        settings = load_settings(config_file=config)
        assert settings.paths.root_dir == clean_env / "from_env"
        assert settings.paths.database == clean_env / "env.sqlite3"

    def test_default_config_picked_up_from_cwd(self, clean_env: Path) -> None:
        (clean_env / "library").mkdir()
        write_config(clean_env / "config.yaml", {"paths": {"root_dir": "library"}})
        settings = load_settings()
        assert settings.paths.root_dir == (clean_env / "library").resolve()

    def test_explicit_missing_config(self, clean_env: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(config_file=clean_env / "missing.yaml")

    def test_invalid_config_values(self, clean_env: Path) -> None:
        config = write_config(clean_env / "config.yaml", {"scanner": {"max_recursion_depth": 0}})
        with pytest.raises(ConfigurationError, match="Invalid config file"):
            load_settings(config_file=config, validate=False)

    def test_env_file_loaded(self, clean_env: Path) -> None:
        root = clean_env / "library"
        root.mkdir()
        env_file = clean_env / "custom.env"
        env_file.write_text(f"RJSYNC_ROOT_DIR={root}\n", encoding="utf-8")
        settings = load_settings(env_file=env_file)
        assert settings.paths.root_dir == root


class TestValidateSettings:
    """Tests for validate_settings()."""

    def test_root_missing(self, tmp_path: Path) -> None:
        settings = Settings(
            paths=PathsConfig(tmp_path / "gone", tmp_path / "db", tmp_path / "log")
        )
        assert validate_settings(settings) == [f"paths.root_dir does not exist: {tmp_path / 'gone'}"]

    def test_root_is_file(self, tmp_path: Path) -> None:
        file = tmp_path / "file"
        file.write_text("x")
        settings = Settings(paths=PathsConfig(file, tmp_path / "db", tmp_path / "log"))
        assert "not a directory" in validate_settings(settings)[0]

    def test_valid(self, tmp_path: Path) -> None:
        settings = Settings(paths=PathsConfig(tmp_path, tmp_path / "db", tmp_path / "log"))
        assert validate_settings(settings) == []


class TestScanConfig:
    """Tests for Settings.scan_config()."""

    def test_built_from_settings(self, tmp_path: Path) -> None:
        settings = Settings(paths=PathsConfig(tmp_path, tmp_path / "db", tmp_path / "log"))
        settings.scanner.cover_dir_name = "Covers"
        config = settings.scan_config(dry_run=True)
        assert config.root_dir == tmp_path
        assert config.cover_dir == tmp_path / "Covers"
        assert config.dry_run is True
        assert config.strict_cleanup is True
        assert config.max_recursion_depth == 2
