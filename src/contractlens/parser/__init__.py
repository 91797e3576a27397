"""API spec parser -- decode, resolve ``$ref`` pointers, and build the document model.

This sub-package is the bottom half of the contractlens engine: it turns a
raw OpenAPI 3.x or Swagger 2.0 byte stream into an immutable
:class:`~contractlens.models.Document` that the validator and the diff
engine consume, plus the flat projections that storage layers persist.

Typical usage::

    from contractlens.parser import parse, extract_endpoints, extract_metadata

    document = parse(path.read_bytes(), path.suffix)
    endpoints = extract_endpoints(document)
    metadata = extract_metadata(document)

Sub-modules:

* :mod:`~contractlens.parser.loader` -- YAML/JSON decoding selected by a
  format hint, plus version-marker detection.
* :mod:`~contractlens.parser.resolver` -- Internal ``$ref`` resolution with
  circular-reference detection.
* :mod:`~contractlens.parser.swagger` -- Swagger 2.0 to OpenAPI 3.x layout
  rewrite.
* :mod:`~contractlens.parser.extractor` -- Builds the
  :class:`~contractlens.models.Document`.
* :mod:`~contractlens.parser.projection` -- Endpoint and metadata
  projections.
"""

from __future__ import annotations

from contractlens.exceptions import ParseError
from contractlens.models import Document
from contractlens.parser.extractor import build_document
from contractlens.parser.loader import decode_document, detect_spec_version
from contractlens.parser.projection import extract_endpoints, extract_metadata


def parse(data: bytes | str, format_hint: str | None) -> Document:
    """Parse a specification byte stream into a fresh :class:`~contractlens.models.Document`.

    Args:
        data: The raw document content.
        format_hint: File extension or format name; ``yaml``/``yml``
            select the YAML decoder, anything else the JSON decoder.

    Raises:
        ParseError: If the content is malformed, is not a mapping, lacks
            an ``openapi``/``swagger`` marker, has a dangling internal
            ``$ref``, or nests too deeply. A YAML alias that contains
            itself counts as too deep.
    """
    try:
        raw = decode_document(data, format_hint)
        return build_document(raw, detect_spec_version(raw))
    except RecursionError:
        raise ParseError("Document nesting too deep or self-referential") from None


__all__ = [
    "parse",
    "decode_document",
    "detect_spec_version",
    "build_document",
    "extract_endpoints",
    "extract_metadata",
]
