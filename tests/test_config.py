"""Tests for schemalens.config -- XDG paths, atomic writes, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from schemalens.config import (
    _atomic_write,
    get_cache_dir,
    get_config_dir,
    get_data_dir,
    load_global_config,
    load_project_config,
    resolve_config,
    save_global_config,
    set_config_value,
)
from schemalens.exceptions import ConfigError
from schemalens.models import GlobalConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPathsLinux:
    """XDG paths on Linux (the default XDG platform)."""

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("schemalens.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "schemalens"
        assert result.is_dir()

    def test_cache_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_cache"
        monkeypatch.setattr("schemalens.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CACHE_HOME", str(custom))

        result = get_cache_dir()
        assert result == custom / "schemalens"
        assert result.is_dir()

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("schemalens.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".local" / "share" / "schemalens"
        assert result.is_dir()


class TestXDGPathsFallback:
    """Fallback paths on non-XDG platforms (macOS, Windows)."""

    def test_config_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("schemalens.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".schemalens"

    def test_cache_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("schemalens.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_cache_dir() == tmp_path / ".schemalens" / "cache"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "file.json"
        _atomic_write(target, '{"a": 1}')
        assert target.read_text(encoding="utf-8") == '{"a": 1}'

    def test_failure_leaves_no_temp_file(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        target.write_text("original", encoding="utf-8")
        with patch("schemalens.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                _atomic_write(target, "new")
        assert target.read_text(encoding="utf-8") == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["file.json"]


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.pipeline.max_depth == 6
        assert config.output.payload == "yaml"

    def test_round_trip(self, isolated_config: Path) -> None:
        config = GlobalConfig()
        config.loader.default_source = "api.yaml"
        config.cache.ttl_seconds = 60
        save_global_config(config)
        assert load_global_config() == config

    def test_invalid_json_raises(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text("{nope", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_value_raises(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"pipeline": {"max_depth": -1}})
        with pytest.raises(ConfigError):
            load_global_config()


class TestSetConfigValue:
    def test_sets_nested_string(self) -> None:
        assert set_config_value(GlobalConfig(), "output.payload", "json").output.payload == "json"

    def test_coerces_int_and_bool(self) -> None:
        config = set_config_value(GlobalConfig(), "cache.ttl_seconds", "600")
        config = set_config_value(config, "cache.enabled", "false")
        assert config.cache.ttl_seconds == 600
        assert config.cache.enabled is False

    def test_coerces_float(self) -> None:
        assert set_config_value(GlobalConfig(), "loader.timeout", "2.5").loader.timeout == 2.5

    def test_optional_field_set_and_cleared(self) -> None:
        config = set_config_value(GlobalConfig(), "loader.data_root", "/srv/apis")
        assert config.loader.data_root == "/srv/apis"
        assert set_config_value(config, "loader.data_root", "none").loader.data_root is None

    @pytest.mark.parametrize("key", ["nope", "output.nope", "output", "nope.format"])
    def test_unknown_key(self, key: str) -> None:
        with pytest.raises(ConfigError):
            set_config_value(GlobalConfig(), key, "x")

    def test_bad_int(self) -> None:
        with pytest.raises(ConfigError, match="Expected integer"):
            set_config_value(GlobalConfig(), "pipeline.max_depth", "deep")

    def test_validation_failure(self) -> None:
        with pytest.raises(ConfigError, match="Invalid value"):
            set_config_value(GlobalConfig(), "pipeline.max_depth", "-3")


# ---------------------------------------------------------------------------
# Project config and precedence
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_missing_returns_none(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_invalid_raises(self, isolated_config: Path) -> None:
        (isolated_config / "schemalens.json").write_text("[1]", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_project_config()


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_config() == GlobalConfig()

    def test_project_overrides_global(self, isolated_config: Path) -> None:
        config = GlobalConfig()
        config.loader.default_source = "global.yaml"
        config.cache.ttl_seconds = 42
        save_global_config(config)
        _write_json(isolated_config / "schemalens.json", {"loader": {"default_source": "project.yaml"}})

        resolved = resolve_config()
        assert resolved.loader.default_source == "project.yaml"
        assert resolved.cache.ttl_seconds == 42

    def test_env_overrides_project(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_config / "schemalens.json", {"loader": {"default_source": "project.yaml"}})
        monkeypatch.setenv("SCHEMALENS_SOURCE", "env.yaml")
        monkeypatch.setenv("SCHEMALENS_FORMAT", "json")
        monkeypatch.setenv("SCHEMALENS_DATA_ROOT", "/data")

        resolved = resolve_config()
        assert resolved.loader.default_source == "env.yaml"
        assert resolved.output.format == "json"
        assert resolved.loader.data_root == "/data"

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCHEMALENS_SOURCE", "env.yaml")
        monkeypatch.setenv("SCHEMALENS_FORMAT", "json")

        resolved = resolve_config(cli_format="plain", cli_source="cli.yaml")
        assert resolved.loader.default_source == "cli.yaml"
        assert resolved.output.format == "plain"

    def test_invalid_project_value(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "schemalens.json", {"pipeline": {"max_depth": "deep"}})
        with pytest.raises(ConfigError, match="Invalid project config"):
            resolve_config()
