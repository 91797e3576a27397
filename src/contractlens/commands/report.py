"""Report command -- run the full analysis pipeline and print the report."""

from __future__ import annotations

from typing import Optional

import typer

from contractlens.commands.common import (
    effective_config,
    load_document,
    read_bytes,
    require_single_stdin,
)
from contractlens.exit_codes import EXIT_GATE_FAILED
from contractlens.models import ReportStatus
from contractlens.output import emit, error, info, success, warning
from contractlens.report import analyze_contract


def report_command(
    source: str = typer.Argument(help="Spec file path, URL, or '-' for stdin."),
    previous: Optional[str] = typer.Option(
        None, "--previous", "-P", help="Previous version to diff against."
    ),
    format_hint: Optional[str] = typer.Option(
        None, "--format-hint", help="Force the decoder for SOURCE: json or yaml."
    ),
) -> None:
    """Validate, diff and score a document, printing the full report.

    A document that cannot be parsed still produces a report with a single
    ``parse_error`` issue. The previous version, when given, must parse.

    Example::

        contractlens report openapi.yaml --previous main/openapi.yaml
    """
    require_single_stdin(source, previous)
    config = effective_config()
    previous_doc = load_document(previous, config) if previous else None
    data, hint = read_bytes(source, config, format_hint)

    report = analyze_contract(data, hint, previous=previous_doc, settings=config.analysis)
    emit(report.to_dict())

    if report.quality is not None:
        info(f"Quality score: {report.quality.score} ({report.quality.grade})")

    summary = (
        f"{report.status.value}: {report.error_count} errors, "
        f"{report.warning_count} warnings, "
        f"{len(report.breaking_changes)} breaking changes"
    )
    if report.status == ReportStatus.FAILED:
        error(summary)
        raise typer.Exit(code=EXIT_GATE_FAILED)
    if report.status == ReportStatus.WARNING:
        warning(summary)
    else:
        success(summary)
