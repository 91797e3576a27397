"""Report assembly on top of the parser, validator, diff and insights.

This is the layer storage and notification code calls: it runs the whole
analysis pipeline for one document version and hands back a serialisable
:class:`~contractlens.models.ValidationReport`, or compares two parsed
versions into a :class:`~contractlens.models.ComparisonResult` with a gate
recommendation.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional

from contractlens import diff, insights, validator
from contractlens.exceptions import ParseError
from contractlens.models import (
    AnalysisConfig,
    BreakingChange,
    ChangeSeverity,
    ComparisonResult,
    Document,
    Endpoint,
    Issue,
    IssueSeverity,
    Metadata,
    QualityScore,
    ReportStatus,
    ValidationReport,
)
from contractlens.parser import extract_endpoints, extract_metadata, parse
from contractlens.tally import severity_of

logger = logging.getLogger(__name__)

RECOMMEND_BLOCK = "BLOCK: Critical breaking changes detected"
RECOMMEND_WARN = "WARN: Non-critical changes detected, review recommended"
RECOMMEND_PASS = "PASS: No breaking changes detected"


def _has_critical(changes: Sequence[BreakingChange]) -> bool:
    return any(severity_of(c) == ChangeSeverity.CRITICAL.value for c in changes)


def build_report(
    issues: Sequence[Issue],
    breaking_changes: Sequence[BreakingChange] = (),
    metadata: Optional[Metadata] = None,
    endpoints: Optional[Sequence[Endpoint]] = None,
    quality: Optional[QualityScore] = None,
) -> ValidationReport:
    """Combine validator and diff output into one report.

    The validator's verdict is overridden to ``failed`` when any breaking
    change is critical.
    """
    status = validator.determine_status(issues)
    if _has_critical(breaking_changes):
        status = ReportStatus.FAILED

    counts = validator.count_by_severity(issues)
    return ValidationReport(
        status=status,
        error_count=counts[IssueSeverity.ERROR.value],
        warning_count=counts[IssueSeverity.WARNING.value],
        info_count=counts[IssueSeverity.INFO.value],
        issues=list(issues),
        breaking_changes=list(breaking_changes),
        metadata=metadata,
        endpoint_count=len(endpoints) if endpoints is not None else None,
        quality=quality,
    )


def parse_error_report(exc: Exception) -> ValidationReport:
    """Build the failed report recorded when a document cannot be parsed."""
    issue = Issue(
        severity=IssueSeverity.ERROR,
        type="parse_error",
        message=f"Failed to parse OpenAPI contract: {exc}",
        path="root",
    )
    return ValidationReport(status=ReportStatus.FAILED, error_count=1, issues=[issue])


def analyze_contract(
    data: bytes | str,
    format_hint: Optional[str],
    previous: Optional[Document] = None,
    settings: Optional[AnalysisConfig] = None,
) -> ValidationReport:
    """Run the full analysis pipeline for one document version.

    Args:
        data: Raw document content.
        format_hint: File extension or format name, as for
            :func:`~contractlens.parser.parse`.
        previous: The already-parsed prior version, when one exists.
        settings: Analysis switches; defaults to :class:`AnalysisConfig`.

    Returns:
        The assembled report. A document that fails to parse produces
        :func:`parse_error_report` instead of raising.

    Example::

        report = analyze_contract(path.read_bytes(), path.suffix, previous=old_doc)
        for event in report.notification_events():
            notify(event, report.to_dict())
    """
    settings = settings or AnalysisConfig()

    try:
        document = parse(data, format_hint)
    except ParseError as exc:
        logger.debug("Parse failed, recording parse_error report: %s", exc)
        return parse_error_report(exc)

    metadata = extract_metadata(document)
    endpoints = extract_endpoints(document)

    issues = validator.validate(document)
    if settings.naming_checks:
        issues.extend(insights.analyze_naming(endpoints))

    changes = diff.detect(previous, document) if previous is not None else []

    quality = None
    if settings.quality_score:
        quality = insights.calculate_quality_score(metadata, endpoints)

    report = build_report(issues, changes, metadata, endpoints, quality)
    logger.debug(
        "Report %s: %d issues, %d breaking changes",
        report.status.value, len(report.issues), len(report.breaking_changes),
    )
    return report


def recommendation_for(changes: Sequence[BreakingChange]) -> str:
    """Return the merge-gate recommendation for a set of changes."""
    if _has_critical(changes):
        return RECOMMEND_BLOCK
    if changes:
        return RECOMMEND_WARN
    return RECOMMEND_PASS


def compare_documents(old: Document, new: Document) -> ComparisonResult:
    """Diff two parsed versions and summarise the result for a merge gate."""
    changes = diff.detect(old, new)
    counts = diff.count_by_severity(changes)
    return ComparisonResult(
        has_breaking_changes=bool(changes),
        has_blocking_changes=_has_critical(changes),
        total=len(changes),
        critical=counts[ChangeSeverity.CRITICAL.value],
        warning=counts[ChangeSeverity.WARNING.value],
        info=counts[ChangeSeverity.INFO.value],
        by_category=diff.group_by_category(changes),
        changes=changes,
        recommendation=recommendation_for(changes),
    )
