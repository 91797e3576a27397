"""Rule-based design insights over the flat endpoint projection.

These heuristics work on :class:`~contractlens.models.Endpoint` rows and
:class:`~contractlens.models.Metadata` rather than on the full document, so
they can run against stored contract versions without re-parsing.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Optional

from contractlens.models import (
    DesignPattern,
    Endpoint,
    Issue,
    IssueSeverity,
    Metadata,
    QualityScore,
)

_SINGULAR_ITEM_PATH = re.compile(r"/[a-z]+/\{[a-z]+Id\}")
_PLURAL_ITEM_PATH = re.compile(r"/[a-z]+s/\{[a-z]+Id\}")
_URI_VERSION = re.compile(r"/v\d+/")

PAGINATION_PARAMETERS = frozenset({"page", "limit", "offset", "per_page"})
CRUD_METHODS = frozenset({"GET", "POST", "PUT", "DELETE"})

_GRADES = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))


def analyze_naming(endpoints: Sequence[Endpoint]) -> list[Issue]:
    """Flag collection paths that are not plural and paths using snake_case.

    Both findings are ``info``; they never affect the report status.
    """
    issues: list[Issue] = []
    for endpoint in endpoints:
        path = endpoint.path
        location = f"paths.{path}.{endpoint.method.lower()}"

        if _SINGULAR_ITEM_PATH.search(path) and not _PLURAL_ITEM_PATH.search(path):
            issues.append(Issue(
                severity=IssueSeverity.INFO,
                type="naming_inconsistency",
                message=f"Consider using plural form for collection: {path}",
                path=location,
            ))

        if "_" in path:
            issues.append(Issue(
                severity=IssueSeverity.INFO,
                type="naming_style",
                message=f"Consider using kebab-case instead of snake_case: {path}",
                path=location,
            ))
    return issues


def detect_design_patterns(endpoints: Sequence[Endpoint]) -> list[DesignPattern]:
    """Return the recognised good design patterns, in a fixed order."""
    patterns: list[DesignPattern] = []

    methods = {endpoint.method.upper() for endpoint in endpoints}
    if CRUD_METHODS <= methods:
        patterns.append(DesignPattern(
            pattern="RESTful CRUD",
            description="API implements complete CRUD operations",
        ))

    if any(_URI_VERSION.search(endpoint.path) for endpoint in endpoints):
        patterns.append(DesignPattern(
            pattern="URI Versioning",
            description="API uses version numbers in URIs",
        ))

    if any(
        param.name in PAGINATION_PARAMETERS
        for endpoint in endpoints
        for param in endpoint.parameters or ()
    ):
        patterns.append(DesignPattern(
            pattern="Pagination Support",
            description="API implements pagination for collection endpoints",
        ))

    return patterns


def grade_for(score: int) -> str:
    """Map a score to a letter grade (A >= 90 ... F < 60)."""
    for threshold, grade in _GRADES:
        if score >= threshold:
            return grade
    return "F"


def calculate_quality_score(
    metadata: Optional[Metadata], endpoints: Sequence[Endpoint]
) -> QualityScore:
    """Score documentation completeness and design on a 0-100 scale.

    Starts at 100, loses 10 without an API description and 2 per endpoint
    without a summary (at most 20), and gains 5 per detected design
    pattern, then clamps to 0..100.

    Example::

        quality = calculate_quality_score(extract_metadata(doc), extract_endpoints(doc))
        print(quality.score, quality.grade)
    """
    score = 100
    deductions: list[str] = []

    if metadata is None or not metadata.description:
        score -= 10
        deductions.append("Missing API description (-10)")

    missing_summary = sum(1 for endpoint in endpoints if not endpoint.summary)
    if missing_summary:
        penalty = min(20, missing_summary * 2)
        score -= penalty
        deductions.append(f"{missing_summary} endpoints without summary (-{penalty})")

    bonus = len(detect_design_patterns(endpoints)) * 5
    if bonus:
        score += bonus
        deductions.append(f"Good design patterns detected (+{bonus})")

    return QualityScore(
        score=max(0, min(100, score)),
        grade=grade_for(score),
        deductions=deductions,
    )


def generate_changelog(
    old_endpoints: Sequence[Endpoint],
    new_endpoints: Sequence[Endpoint],
    new_version: Optional[str],
) -> str:
    """Render a short Markdown changelog entry from endpoint counts."""
    old_count = len(old_endpoints)
    new_count = len(new_endpoints)
    changes: list[str] = []

    if new_count > old_count:
        added = new_count - old_count
        changes.append(f"Added {added} new endpoint{'s' if added > 1 else ''}")
    elif new_count < old_count:
        removed = old_count - new_count
        changes.append(f"Removed {removed} endpoint{'s' if removed > 1 else ''}")

    if not changes:
        changes.append("No significant changes detected")

    return f"## Version {new_version or 'unknown'}\n\n" + "\n".join(changes)
