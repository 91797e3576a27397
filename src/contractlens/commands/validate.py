"""Validate command -- check one document against the structural and best-practice rules.

Prints the issue list as a table (or JSON with ``--json``) on stdout and
the overall status on stderr. Exits with
:data:`~contractlens.exit_codes.EXIT_GATE_FAILED` when the status is
``failed`` so the command can guard a CI pipeline.
"""

from __future__ import annotations

from typing import Optional

import typer

from contractlens import validator
from contractlens.commands.common import effective_config, load_document
from contractlens.exit_codes import EXIT_GATE_FAILED
from contractlens.models import ReportStatus
from contractlens.output import OutputFormat, emit, error, get_output, success, warning


def validate_command(
    source: str = typer.Argument(help="Spec file path, URL, or '-' for stdin."),
    format_hint: Optional[str] = typer.Option(
        None, "--format-hint", help="Force the decoder: json or yaml."
    ),
) -> None:
    """Validate an OpenAPI or Swagger document.

    Example::

        contractlens validate openapi.yaml
        cat openapi.json | contractlens --json validate -
    """
    config = effective_config()
    document = load_document(source, config, format_hint)

    issues = validator.validate(document)
    counts = validator.count_by_severity(issues)
    status = validator.determine_status(issues)

    output = get_output()
    if output.format == OutputFormat.JSON:
        emit({
            "status": status.value,
            "counts": counts,
            "issues": [issue.to_dict() for issue in issues],
        })
    elif issues:
        output.print_table(
            ["Severity", "Type", "Path", "Message"],
            [
                [issue.severity.value, issue.type, issue.path, issue.message]
                for issue in issues
            ],
            title=f"Issues ({len(issues)})",
        )

    summary = (
        f"{status.value}: {counts['error']} errors, "
        f"{counts['warning']} warnings, {counts['info']} info"
    )
    if status == ReportStatus.FAILED:
        error(summary)
        raise typer.Exit(code=EXIT_GATE_FAILED)
    if status == ReportStatus.WARNING:
        warning(summary)
    else:
        success(summary)
