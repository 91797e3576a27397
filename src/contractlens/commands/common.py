"""Helpers shared by the analysis commands.

Each command resolves the effective configuration, reads one or two
documents through :mod:`contractlens.sources` and hands them to the engine.
Library errors are reported on stderr and turned into a ``typer.Exit`` with
the error's exit code, so commands behave the same under ``main()`` and
under a test runner.
"""

from __future__ import annotations

from typing import Optional

import typer

from contractlens.config import resolve_config
from contractlens.exceptions import ContractLensError
from contractlens.exit_codes import EXIT_INVALID_USAGE
from contractlens.models import Document, FailOn, GlobalConfig
from contractlens.output import debug, error
from contractlens.parser import parse
from contractlens.sources import read_source


def effective_config(
    fail_on: Optional[FailOn] = None,
    max_document_bytes: Optional[int] = None,
) -> GlobalConfig:
    """Resolve the configuration, exiting with the error's code on failure."""
    try:
        return resolve_config(
            cli_fail_on=fail_on, cli_max_document_bytes=max_document_bytes
        )
    except ContractLensError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def read_bytes(
    source: str, config: GlobalConfig, format_hint: Optional[str] = None
) -> tuple[bytes, str]:
    """Read *source* within the configured size limit."""
    try:
        return read_source(source, config.analysis.max_document_bytes, format_hint)
    except ContractLensError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def load_document(
    source: str, config: GlobalConfig, format_hint: Optional[str] = None
) -> Document:
    """Read and parse *source*.

    Raises:
        typer.Exit: With the source (8) or parse (7) exit code on failure.
    """
    data, hint = read_bytes(source, config, format_hint)
    try:
        document = parse(data, hint)
    except ContractLensError as exc:
        error(f"{source}: {exc}")
        raise typer.Exit(code=exc.exit_code) from None
    debug(f"Parsed {source} ({document.spec_version}, {len(document.paths)} paths)")
    return document


def require_single_stdin(*sources: Optional[str]) -> None:
    """Exit with the usage code when more than one source is ``-``."""
    if sum(source == "-" for source in sources) > 1:
        error("Only one document can be read from stdin")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
