"""Fail-open severity tallying shared by the validator and the diff engine.

Findings reach the counting helpers either as models
(:class:`~contractlens.models.Issue`, :class:`~contractlens.models.BreakingChange`)
or as plain mappings read back from a stored report. A mapping without a
``severity`` counts in the most permissive bucket (``info``); a severity
string outside the known buckets is dropped from the tally rather than
treated as blocking.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_SEVERITY = "info"


def _value(raw: Any) -> Any:
    return raw.value if isinstance(raw, enum.Enum) else raw


def severity_of(item: Any) -> Optional[str]:
    """Return the severity string of a finding model or mapping."""
    if isinstance(item, Mapping):
        raw = item.get("severity")
        return DEFAULT_SEVERITY if raw is None else str(_value(raw))
    raw = getattr(item, "severity", None)
    return DEFAULT_SEVERITY if raw is None else str(_value(raw))


def category_of(item: Any, default: str = "other") -> str:
    """Return the category string of a finding model or mapping."""
    if isinstance(item, Mapping):
        raw = item.get("category")
    else:
        raw = getattr(item, "category", None)
    return default if raw is None else str(_value(raw))


def tally(items: Iterable[Any], buckets: Iterable[str]) -> dict[str, int]:
    """Count *items* per severity bucket, ignoring unknown severities."""
    counts = {bucket: 0 for bucket in buckets}
    for item in items:
        severity = severity_of(item)
        if severity in counts:
            counts[severity] += 1
        else:
            logger.debug("Ignoring finding with unknown severity %r", severity)
    return counts
