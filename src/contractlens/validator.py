"""Structural and best-practice validation of a parsed document.

:func:`validate` runs five independent rule groups over a
:class:`~contractlens.models.Document` and concatenates their findings in a
fixed order:

1. basic structure (version marker),
2. the ``info`` section,
3. paths and operations,
4. named component schemas,
5. best practices (servers, tags, semantic versioning).

The order only matters for stable report output; severity never depends on
it. Findings are returned as :class:`~contractlens.models.Issue` values,
never raised.

:func:`count_by_severity` and :func:`determine_status` turn an issue list
into counts and an overall ``passed`` / ``warning`` / ``failed`` verdict.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

from contractlens.models import (
    Document,
    HTTPMethod,
    Issue,
    IssueSeverity,
    ReportStatus,
)
from contractlens.tally import tally

logger = logging.getLogger(__name__)

_SEMVER_PREFIX = re.compile(r"^\d+\.\d+\.\d+")


def validate(document: Document) -> list[Issue]:
    """Validate *document* and return every issue found.

    Example::

        issues = validate(parse(data, "yaml"))
        status = determine_status(issues)
    """
    issues: list[Issue] = []
    issues.extend(_validate_basic_structure(document))
    issues.extend(_validate_info(document))
    issues.extend(_validate_paths(document))
    issues.extend(_validate_components(document))
    issues.extend(_validate_best_practices(document))
    logger.debug("Validation produced %d issues", len(issues))
    return issues


def count_by_severity(issues: Iterable[Any]) -> dict[str, int]:
    """Tally *issues* into ``error`` / ``warning`` / ``info`` counts.

    Accepts :class:`~contractlens.models.Issue` models or mappings. Unknown
    severities are ignored.
    """
    return tally(issues, (s.value for s in IssueSeverity))


def determine_status(issues: Iterable[Any]) -> ReportStatus:
    """Return the overall verdict for *issues*.

    Any error fails the contract regardless of how many lesser issues
    exist; otherwise any warning yields ``warning``; otherwise ``passed``.
    """
    counts = count_by_severity(issues)
    if counts[IssueSeverity.ERROR.value] > 0:
        return ReportStatus.FAILED
    if counts[IssueSeverity.WARNING.value] > 0:
        return ReportStatus.WARNING
    return ReportStatus.PASSED


def _issue(severity: IssueSeverity, type_: str, message: str, path: str) -> Issue:
    return Issue(severity=severity, type=type_, message=message, path=path)


def _validate_basic_structure(document: Document) -> list[Issue]:
    if document.spec_version:
        return []
    return [
        _issue(
            IssueSeverity.ERROR,
            "missing_version",
            "OpenAPI/Swagger version is missing",
            "root",
        )
    ]


def _validate_info(document: Document) -> list[Issue]:
    info = document.info
    if info is None:
        return [
            _issue(IssueSeverity.ERROR, "missing_info", "Info section is required", "info")
        ]

    issues: list[Issue] = []
    if not info.title:
        issues.append(_issue(
            IssueSeverity.ERROR,
            "missing_title",
            "API title is required in info section",
            "info.title",
        ))
    if not info.version:
        issues.append(_issue(
            IssueSeverity.ERROR,
            "missing_version",
            "API version is required in info section",
            "info.version",
        ))
    if not info.description:
        issues.append(_issue(
            IssueSeverity.WARNING,
            "missing_description",
            "API description is recommended",
            "info.description",
        ))
    return issues


def _is_success_code(status_code: str) -> bool:
    try:
        return 200 <= int(status_code) < 300
    except ValueError:
        return False


def _validate_paths(document: Document) -> list[Issue]:
    if not document.paths:
        return [
            _issue(
                IssueSeverity.WARNING,
                "no_paths",
                "No paths/endpoints defined in the API",
                "paths",
            )
        ]

    issues: list[Issue] = []
    for path, path_item in document.paths.items():
        for method in HTTPMethod:
            operation = path_item.get(method)
            if operation is None:
                continue
            location = f"paths.{path}.{method.value}"

            if operation.operation_id is None:
                issues.append(_issue(
                    IssueSeverity.WARNING,
                    "missing_operation_id",
                    "operationId is recommended for each operation",
                    location,
                ))

            if not operation.summary:
                issues.append(_issue(
                    IssueSeverity.WARNING,
                    "missing_summary",
                    "Summary is recommended for better documentation",
                    location,
                ))

            if not operation.responses:
                issues.append(_issue(
                    IssueSeverity.ERROR,
                    "missing_responses",
                    "At least one response must be defined",
                    f"{location}.responses",
                ))

            # An absent responses section is already reported above.
            if operation.responses is not None and not any(
                _is_success_code(code) for code in operation.responses
            ):
                issues.append(_issue(
                    IssueSeverity.WARNING,
                    "no_success_response",
                    "No 2xx success response defined",
                    f"{location}.responses",
                ))

            for param in operation.parameters:
                if param.required and param.schema_ is None:
                    issues.append(_issue(
                        IssueSeverity.ERROR,
                        "parameter_missing_schema",
                        f"Required parameter '{param.name}' is missing schema definition",
                        f"{location}.parameters",
                    ))

    return issues


def _validate_components(document: Document) -> list[Issue]:
    issues: list[Issue] = []
    for name, schema in document.components.schemas.items():
        if schema.type is None and not schema.has_composition:
            issues.append(_issue(
                IssueSeverity.WARNING,
                "schema_missing_type",
                f"Schema '{name}' should have a type or composition keyword",
                f"components.schemas.{name}",
            ))
    return issues


def _validate_best_practices(document: Document) -> list[Issue]:
    issues: list[Issue] = []

    if not document.servers:
        issues.append(_issue(
            IssueSeverity.INFO,
            "no_servers",
            "Servers section is recommended to specify API base URLs",
            "servers",
        ))

    if not document.tags:
        issues.append(_issue(
            IssueSeverity.INFO,
            "no_tags",
            "Tags are recommended for better API organization",
            "tags",
        ))

    version = document.info.version if document.info else None
    if version and not _SEMVER_PREFIX.match(version):
        issues.append(_issue(
            IssueSeverity.INFO,
            "non_semver_version",
            "Consider using semantic versioning (e.g., 1.0.0)",
            "info.version",
        ))

    return issues
