"""Decode raw API specification bytes into Python dictionaries.

This module turns a byte stream handed in by the caller into a plain
``dict`` and checks that it declares itself as an API specification. It
performs no I/O of its own: reading files, stdin or URLs is the job of
:mod:`contractlens.sources`.

The decoder is selected from the caller's format hint only (``yaml`` /
``yml`` select YAML, everything else selects JSON); the content is never
sniffed.

The two public functions are:

* :func:`decode_document` -- Decode bytes into a mapping.
* :func:`detect_spec_version` -- Return the ``openapi`` or ``swagger``
  version marker, rejecting documents that carry neither.

After decoding, the raw dict is handed to
:func:`~contractlens.parser.extractor.build_document`.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import yaml

from contractlens.exceptions import ParseError

logger = logging.getLogger(__name__)

_YAML_HINTS = frozenset({"yaml", "yml"})


def normalize_format_hint(format_hint: str | None) -> str:
    """Return ``"yaml"`` or ``"json"`` for a file extension or format name.

    Case is ignored and a leading dot is stripped, so ``".YML"`` and
    ``"yaml"`` both select YAML. Anything that is not a YAML extension
    (including an empty hint) selects JSON.
    """
    hint = (format_hint or "").strip().lower().lstrip(".")
    return "yaml" if hint in _YAML_HINTS else "json"


def decode_document(data: bytes | str, format_hint: str | None) -> dict[str, Any]:
    """Decode *data* with the decoder chosen by *format_hint*.

    Args:
        data: The raw document. Bytes are decoded as UTF-8 (JSON also
            accepts UTF-16/32 with a BOM).
        format_hint: File extension or format name (``yaml``, ``yml``,
            ``json``, ...).

    Returns:
        The decoded top-level mapping.

    Raises:
        ParseError: If the content is empty, is not well-formed for the
            selected format, or its root is not a mapping.
    """
    fmt = normalize_format_hint(format_hint)

    if not data.strip():
        raise ParseError("Document is empty")

    if fmt == "yaml":
        try:
            result = yaml.safe_load(data)
        except yaml.YAMLError as exc:
            raise ParseError(f"Invalid YAML: {exc}") from exc
    else:
        try:
            result = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"Invalid JSON: {exc}") from exc

    if not isinstance(result, dict):
        raise ParseError(
            "Spec must be a JSON/YAML object (got "
            f"{type(result).__name__ if result is not None else 'empty document'})"
        )

    logger.debug("Decoded %s document with %d top-level keys", fmt, len(result))
    return result


def detect_spec_version(raw: dict[str, Any]) -> str:
    """Return the specification version marker of a decoded document.

    OpenAPI 3.x documents declare ``openapi``; Swagger 2.0 documents declare
    ``swagger``. When both are present ``openapi`` wins.

    Args:
        raw: The decoded document.

    Returns:
        The version string (e.g. ``"3.0.3"``, ``"3.1.0"``, ``"2.0"``).

    Raises:
        ParseError: If neither marker is present at the document root.
    """
    for marker in ("openapi", "swagger"):
        value = raw.get(marker)
        if value is not None and str(value).strip():
            return str(value)

    raise ParseError(
        "Missing 'openapi' or 'swagger' field. Is this an OpenAPI/Swagger document?"
    )
