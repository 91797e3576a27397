"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for contractlens:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.contractlens/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_data_dir`.
* **Global config** -- A single :class:`~contractlens.models.GlobalConfig`
  JSON file storing defaults (output format, analysis switches, the diff
  gate threshold and the admission size limit).
* **Project config** -- An optional ``./contractlens.json`` whose
  ``analysis`` section overrides the global one for a repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) so that an interrupted ``config set`` never leaves a
truncated file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from contractlens.exceptions import ConfigError
from contractlens.models import AnalysisConfig, FailOn, GlobalConfig

_APP_NAME = "contractlens"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "contractlens.json"

ENV_FAIL_ON = "CONTRACTLENS_FAIL_ON"
ENV_MAX_DOCUMENT_BYTES = "CONTRACTLENS_MAX_DOCUMENT_BYTES"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/contractlens/`` (default
    ``~/.config/contractlens/``). On macOS/Windows: ``~/.contractlens/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/contractlens/`` (default
    ``~/.local/share/contractlens/``). On macOS/Windows:
    ``~/.contractlens/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the original file is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~contractlens.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./contractlens.json``.

    Only the ``analysis`` section is honoured, so a repository can pin its
    own gate threshold without touching the user's global settings.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    fail_on = os.environ.get(ENV_FAIL_ON)
    if fail_on:
        overrides["fail_on"] = fail_on.strip().lower()
    max_bytes = os.environ.get(ENV_MAX_DOCUMENT_BYTES)
    if max_bytes:
        overrides["max_document_bytes"] = max_bytes.strip()
    return overrides


def _apply_analysis_overrides(
    analysis: AnalysisConfig, overrides: dict[str, Any], origin: str
) -> AnalysisConfig:
    if not overrides:
        return analysis
    merged = {**analysis.model_dump(mode="json"), **overrides}
    try:
        return AnalysisConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid analysis settings from {origin}: {exc}") from exc


def resolve_config(
    cli_format: Optional[str] = None,
    cli_fail_on: Optional[FailOn] = None,
    cli_max_document_bytes: Optional[int] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_format``, ``cli_fail_on``, ``cli_max_document_bytes``)
        2. Environment variables (``CONTRACTLENS_FAIL_ON``,
           ``CONTRACTLENS_MAX_DOCUMENT_BYTES``)
        3. Project config (``./contractlens.json``, ``analysis`` section)
        4. User config (``~/.config/contractlens/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~contractlens.models.GlobalConfig`.

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    # 5 + 4. Defaults are filled in by the model
    global_cfg = load_global_config()
    analysis = global_cfg.analysis

    # 3. Project-local analysis section
    project = load_project_config()
    if project is not None:
        project_analysis = project.get("analysis") or {}
        if not isinstance(project_analysis, dict):
            raise ConfigError("Invalid project config: 'analysis' must be an object")
        analysis = _apply_analysis_overrides(analysis, project_analysis, "project config")

    # 2. Environment
    analysis = _apply_analysis_overrides(analysis, _env_overrides(), "environment")

    # 1. CLI flags
    cli: dict[str, Any] = {}
    if cli_fail_on is not None:
        cli["fail_on"] = cli_fail_on
    if cli_max_document_bytes is not None:
        cli["max_document_bytes"] = cli_max_document_bytes
    analysis = _apply_analysis_overrides(analysis, cli, "command line")

    output = global_cfg.output
    if cli_format is not None:
        output = output.model_copy(update={"format": cli_format})

    return GlobalConfig(output=output, analysis=analysis)
