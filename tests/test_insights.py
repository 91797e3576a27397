"""Tests for contractlens.insights -- naming, patterns, quality score, changelog."""

from __future__ import annotations

from typing import Any

import pytest

from contractlens.insights import (
    analyze_naming,
    calculate_quality_score,
    detect_design_patterns,
    generate_changelog,
    grade_for,
)
from contractlens.models import Document, Endpoint, IssueSeverity, Metadata
from contractlens.parser import extract_endpoints, extract_metadata


def _endpoint(path: str, method: str = "GET", **fields: Any) -> Endpoint:
    return Endpoint(path=path, method=method, **fields)


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------


class TestAnalyzeNaming:
    def test_plural_collection_is_fine(self) -> None:
        assert analyze_naming([_endpoint("/users/{userId}")]) == []

    def test_singular_collection_flagged(self) -> None:
        issues = analyze_naming([_endpoint("/user/{userId}", "DELETE")])
        assert len(issues) == 1
        issue = issues[0]
        assert issue.type == "naming_inconsistency"
        assert issue.severity == IssueSeverity.INFO
        assert issue.path == "paths./user/{userId}.delete"
        assert "/user/{userId}" in issue.message

    def test_snake_case_flagged(self) -> None:
        issues = analyze_naming([_endpoint("/order_items")])
        assert [i.type for i in issues] == ["naming_style"]

    def test_both_rules_on_one_path(self) -> None:
        issues = analyze_naming([_endpoint("/order_items/item/{itemId}")])
        assert [i.type for i in issues] == ["naming_inconsistency", "naming_style"]

    def test_petstore_is_clean(self, petstore: Document) -> None:
        assert analyze_naming(extract_endpoints(petstore)) == []


# ---------------------------------------------------------------------------
# Design patterns
# ---------------------------------------------------------------------------


class TestDetectDesignPatterns:
    def test_petstore_patterns(self, petstore: Document) -> None:
        patterns = detect_design_patterns(extract_endpoints(petstore))
        assert [p.pattern for p in patterns] == ["RESTful CRUD", "Pagination Support"]
        assert all(p.quality == "good" for p in patterns)

    def test_crud_needs_all_four_methods(self) -> None:
        endpoints = [_endpoint("/a", m) for m in ("GET", "POST", "PUT")]
        assert detect_design_patterns(endpoints) == []

    def test_uri_versioning(self) -> None:
        patterns = detect_design_patterns([_endpoint("/api/v2/users")])
        assert [p.pattern for p in patterns] == ["URI Versioning"]

    @pytest.mark.parametrize("name", ["page", "limit", "offset", "per_page"])
    def test_pagination_parameter_names(self, name: str) -> None:
        endpoint = _endpoint("/items", parameters=[{"name": name, "in": "query"}])
        assert [p.pattern for p in detect_design_patterns([endpoint])] == ["Pagination Support"]

    def test_no_endpoints(self) -> None:
        assert detect_design_patterns([]) == []


# ---------------------------------------------------------------------------
# Quality score
# ---------------------------------------------------------------------------


class TestQualityScore:
    @pytest.mark.parametrize(
        ("score", "grade"),
        [(100, "A"), (90, "A"), (89, "B"), (80, "B"), (70, "C"), (60, "D"), (59, "F"), (0, "F")],
    )
    def test_grade_boundaries(self, score: int, grade: str) -> None:
        assert grade_for(score) == grade

    def test_petstore_scores_full_marks(self, petstore: Document) -> None:
        quality = calculate_quality_score(extract_metadata(petstore), extract_endpoints(petstore))
        assert quality.score == 100
        assert quality.grade == "A"
        assert quality.deductions == ["Good design patterns detected (+10)"]

    def test_missing_description(self) -> None:
        quality = calculate_quality_score(Metadata(title="T"), [])
        assert quality.score == 90
        assert quality.deductions == ["Missing API description (-10)"]

    def test_no_metadata_counts_as_missing_description(self) -> None:
        assert calculate_quality_score(None, []).score == 90

    def test_summary_penalty_is_capped(self) -> None:
        endpoints = [_endpoint(f"/r{i}") for i in range(15)]
        quality = calculate_quality_score(Metadata(description="d"), endpoints)
        assert quality.score == 80
        assert quality.deductions == ["15 endpoints without summary (-20)"]

    def test_summary_penalty_per_endpoint(self) -> None:
        endpoints = [_endpoint("/a"), _endpoint("/b", summary="B")]
        quality = calculate_quality_score(Metadata(description="d"), endpoints)
        assert quality.score == 98
        assert quality.deductions == ["1 endpoints without summary (-2)"]

    def test_score_clamped_to_100(self) -> None:
        endpoints = [
            _endpoint("/v1/items", m, summary="s", parameters=[{"name": "page", "in": "query"}])
            for m in ("GET", "POST", "PUT", "DELETE")
        ]
        quality = calculate_quality_score(Metadata(description="d"), endpoints)
        assert quality.score == 100
        assert quality.deductions == ["Good design patterns detected (+15)"]


# ---------------------------------------------------------------------------
# Changelog
# ---------------------------------------------------------------------------


class TestGenerateChangelog:
    def test_added_endpoints(self) -> None:
        old = [_endpoint("/a")]
        new = [_endpoint("/a"), _endpoint("/b"), _endpoint("/c")]
        assert generate_changelog(old, new, "2.0.0") == "## Version 2.0.0\n\nAdded 2 new endpoints"

    def test_single_endpoint_removed(self) -> None:
        old = [_endpoint("/a"), _endpoint("/b")]
        assert generate_changelog(old, [_endpoint("/a")], "1.1.0") == (
            "## Version 1.1.0\n\nRemoved 1 endpoint"
        )

    def test_same_count(self) -> None:
        assert generate_changelog([_endpoint("/a")], [_endpoint("/b")], None) == (
            "## Version unknown\n\nNo significant changes detected"
        )

    def test_petstore_versions(self, petstore: Document, petstore_v2: Document) -> None:
        entry = generate_changelog(
            extract_endpoints(petstore), extract_endpoints(petstore_v2), "2.0.0"
        )
        assert entry.endswith("Removed 1 endpoint")
