"""Diff and changelog commands -- compare two versions of a document.

``diff`` lists the breaking changes grouped by category with a merge-gate
recommendation, and fails with
:data:`~contractlens.exit_codes.EXIT_GATE_FAILED` when a change reaches the
``--fail-on`` threshold. ``changelog`` renders a short Markdown entry from
the endpoint counts of both versions.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

import typer

from contractlens.commands.common import (
    effective_config,
    load_document,
    require_single_stdin,
)
from contractlens.exit_codes import EXIT_GATE_FAILED
from contractlens.insights import generate_changelog
from contractlens.models import BreakingChange, ChangeSeverity, FailOn
from contractlens.output import (
    OutputFormat,
    emit,
    error,
    get_output,
    print_data,
    success,
    warning,
)
from contractlens.parser import extract_endpoints
from contractlens.report import RECOMMEND_BLOCK, RECOMMEND_PASS, compare_documents

_RANK = {
    ChangeSeverity.INFO: 1,
    ChangeSeverity.WARNING: 2,
    ChangeSeverity.CRITICAL: 3,
}


def gate_tripped(changes: Iterable[BreakingChange], fail_on: FailOn) -> bool:
    """Whether any change is at or above the *fail_on* severity."""
    if fail_on == FailOn.NEVER:
        return False
    threshold = _RANK[ChangeSeverity(fail_on.value)]
    return any(_RANK[change.severity] >= threshold for change in changes)


def diff_command(
    old: str = typer.Argument(help="Previous version: file path, URL, or '-'."),
    new: str = typer.Argument(help="New version: file path, URL, or '-'."),
    fail_on: Optional[FailOn] = typer.Option(
        None,
        "--fail-on",
        case_sensitive=False,
        help="Lowest severity that fails the command (default from config).",
    ),
) -> None:
    """Detect breaking changes between two versions.

    Example::

        contractlens diff v1/openapi.yaml v2/openapi.yaml
        contractlens diff --fail-on warning old.json new.json
    """
    require_single_stdin(old, new)
    config = effective_config(fail_on=fail_on)
    old_doc = load_document(old, config)
    new_doc = load_document(new, config)

    result = compare_documents(old_doc, new_doc)

    output = get_output()
    if output.format == OutputFormat.JSON:
        emit(result.to_dict())
    else:
        for category, changes in result.by_category.items():
            output.print_table(
                ["Severity", "Type", "Message"],
                [[c.severity.value, c.type, c.message] for c in changes],
                title=f"{category} ({len(changes)})",
            )

    counts = f"{result.critical} critical, {result.warning} warning, {result.info} info"
    if result.recommendation == RECOMMEND_BLOCK:
        error(f"{result.recommendation} ({counts})")
    elif result.recommendation == RECOMMEND_PASS:
        success(result.recommendation)
    else:
        warning(f"{result.recommendation} ({counts})")

    if gate_tripped(result.changes, config.analysis.fail_on):
        raise typer.Exit(code=EXIT_GATE_FAILED)


def changelog_command(
    old: str = typer.Argument(help="Previous version: file path or URL."),
    new: str = typer.Argument(help="New version: file path or URL."),
) -> None:
    """Print a Markdown changelog entry for the new version.

    Example::

        contractlens changelog v1/openapi.yaml v2/openapi.yaml >> CHANGELOG.md
    """
    require_single_stdin(old, new)
    config = effective_config()
    old_doc = load_document(old, config)
    new_doc = load_document(new, config)

    version = new_doc.info.version if new_doc.info else None
    print_data(
        generate_changelog(extract_endpoints(old_doc), extract_endpoints(new_doc), version)
    )
