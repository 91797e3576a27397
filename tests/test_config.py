"""Tests for contractlens.config -- XDG paths, atomic writes, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from contractlens.config import (
    ENV_FAIL_ON,
    ENV_MAX_DOCUMENT_BYTES,
    _atomic_write,
    get_config_dir,
    get_data_dir,
    global_config_path,
    load_global_config,
    load_project_config,
    resolve_config,
    save_global_config,
)
from contractlens.exceptions import ConfigError
from contractlens.models import AnalysisConfig, FailOn, GlobalConfig, OutputConfig


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
        monkeypatch.setattr("contractlens.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        result = get_config_dir()
        assert result == tmp_path / ".config" / "contractlens"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("contractlens.config._is_xdg_platform", lambda: True)
        custom = tmp_path / "custom_config"
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        assert get_config_dir() == custom / "contractlens"

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("contractlens.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        result = get_data_dir()
        assert result == tmp_path / ".local" / "share" / "contractlens"
        assert result.is_dir()


class TestFallbackPaths:
    """Non-XDG platforms (macOS, Windows) keep everything under ~/.contractlens."""

    def test_config_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("contractlens.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        assert get_config_dir() == tmp_path / ".contractlens"

    def test_data_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("contractlens.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        assert get_data_dir() == tmp_path / ".contractlens" / "logs"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        _atomic_write(target, "hello world")
        assert target.read_text(encoding="utf-8") == "hello world"

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        target.write_text("old content", encoding="utf-8")
        _atomic_write(target, "new content")
        assert target.read_text(encoding="utf-8") == "new content"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "test.txt"
        _atomic_write(target, "deep write")
        assert target.read_text(encoding="utf-8") == "deep write"

    def test_no_temp_files_left_on_success(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        _atomic_write(target, "content")
        assert list(tmp_path.iterdir()) == [target]

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        target.write_text("original", encoding="utf-8")
        with patch("contractlens.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                _atomic_write(target, "will fail")
        assert list(tmp_path.iterdir()) == [target]
        assert target.read_text(encoding="utf-8") == "original"


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_load_returns_defaults_when_missing(self, isolated_config: Path) -> None:
        cfg = load_global_config()
        assert cfg == GlobalConfig()
        assert cfg.output.format == "auto"
        assert cfg.analysis.fail_on == FailOn.CRITICAL
        assert cfg.analysis.naming_checks is True
        assert cfg.analysis.quality_score is True
        assert cfg.analysis.max_document_bytes == 2 * 1024 * 1024

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        original = GlobalConfig(
            output=OutputConfig(format="json"),
            analysis=AnalysisConfig(fail_on=FailOn.WARNING, naming_checks=False),
        )
        save_global_config(original)
        assert load_global_config() == original

    def test_saved_config_is_valid_json(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig())
        data = json.loads(global_config_path().read_text(encoding="utf-8"))
        assert data["analysis"]["fail_on"] == "critical"

    def test_path_is_under_config_dir(self, isolated_config: Path) -> None:
        assert global_config_path() == isolated_config / "config" / "contractlens" / "config.json"

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        path = global_config_path()
        path.write_text("{invalid json!!!", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_load_invalid_schema_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(global_config_path(), {"analysis": {"fail_on": "sometimes"}})
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_load_returns_none_when_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_load_valid_project_config(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "contractlens.json", {"analysis": {"fail_on": "info"}})
        assert load_project_config() == {"analysis": {"fail_on": "info"}}

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        (isolated_config / "contractlens.json").write_text("not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_non_object_root_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "contractlens.json", ["analysis"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_config() == GlobalConfig()

    def test_global_value_used(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(analysis=AnalysisConfig(fail_on=FailOn.WARNING)))
        assert resolve_config().analysis.fail_on == FailOn.WARNING

    def test_project_overrides_global(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(analysis=AnalysisConfig(fail_on=FailOn.WARNING)))
        _write_json(isolated_config / "contractlens.json", {"analysis": {"fail_on": "never"}})

        cfg = resolve_config()
        assert cfg.analysis.fail_on == FailOn.NEVER
        # Keys the project does not set keep the global value
        assert cfg.analysis.naming_checks is True

    def test_project_analysis_must_be_object(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "contractlens.json", {"analysis": "strict"})
        with pytest.raises(ConfigError, match="'analysis' must be an object"):
            resolve_config()

    def test_env_overrides_project(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_config / "contractlens.json", {"analysis": {"fail_on": "never"}})
        monkeypatch.setenv(ENV_FAIL_ON, " WARNING ")
        assert resolve_config().analysis.fail_on == FailOn.WARNING

    def test_env_max_document_bytes(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_MAX_DOCUMENT_BYTES, "1024")
        assert resolve_config().analysis.max_document_bytes == 1024

    def test_invalid_env_raises_config_error(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(ENV_MAX_DOCUMENT_BYTES, "lots")
        with pytest.raises(ConfigError, match="environment"):
            resolve_config()

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_FAIL_ON, "warning")
        monkeypatch.setenv(ENV_MAX_DOCUMENT_BYTES, "1024")

        cfg = resolve_config(cli_fail_on=FailOn.INFO, cli_max_document_bytes=4096)
        assert cfg.analysis.fail_on == FailOn.INFO
        assert cfg.analysis.max_document_bytes == 4096

    def test_cli_format_overrides_global(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(output=OutputConfig(format="plain")))
        assert resolve_config(cli_format="json").output.format == "json"
        assert resolve_config().output.format == "plain"

    def test_resolution_does_not_write_global_config(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(ENV_FAIL_ON, "info")
        resolve_config()
        assert not global_config_path().exists()
