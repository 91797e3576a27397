"""Shared test fixtures for contractlens.

Provides reusable fixtures for loading spec fixtures, building documents
from inline dicts, creating isolated config environments, managing output
state, and running CLI commands. These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from contractlens.models import Document
from contractlens.output import OutputFormat, OutputManager, reset_output, set_output
from contractlens.parser import parse


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def spec_dict(**sections: Any) -> dict[str, Any]:
    """Return a minimal valid OpenAPI 3.0 dict with *sections* merged in."""
    raw: dict[str, Any] = {
        "openapi": "3.0.3",
        "info": {"title": "Test API", "version": "1.0.0", "description": "Test."},
        "paths": {},
    }
    raw.update(sections)
    return raw


def build(raw: dict[str, Any]) -> Document:
    """Parse an inline spec dict through the public JSON entry point."""
    return parse(json.dumps(raw), "json")


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and logging handlers after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use. The same applies to the Rich logging handler
    that the root callback attaches to the ``contractlens`` logger.
    """
    yield
    reset_output()
    package_logger = logging.getLogger("contractlens")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_bytes() -> bytes:
    return (FIXTURES_DIR / "petstore.yaml").read_bytes()


@pytest.fixture
def petstore(petstore_bytes: bytes) -> Document:
    """Parsed petstore v1 (clean document, no validation issues)."""
    return parse(petstore_bytes, "yaml")


@pytest.fixture
def petstore_v2() -> Document:
    """Parsed petstore v2 (carries one of each common breaking change)."""
    return parse((FIXTURES_DIR / "petstore_v2.yaml").read_bytes(), "yaml")


@pytest.fixture
def swagger_petstore() -> Document:
    return parse((FIXTURES_DIR / "swagger_petstore.json").read_bytes(), "json")


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Factory building a document from :func:`spec_dict` keyword sections."""

    def _make(**sections: Any) -> Document:
        return build(spec_dict(**sections))

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config. Clears all CONTRACTLENS_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("contractlens.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["CONTRACTLENS_FAIL_ON", "CONTRACTLENS_MAX_DOCUMENT_BYTES"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner capturing stdout and stderr separately."""
    from typer.testing import CliRunner

    return CliRunner()
