"""Read raw specification bytes from a URL, local file, or stdin.

The parser never touches the filesystem or the network; this module is the
caller-side collaborator that obtains ``(bytes, format_hint)`` for it and
enforces the admission size limit (``analysis.max_document_bytes``).

Supported sources:

* ``-`` -- standard input; the hint defaults to ``json``.
* ``http://`` / ``https://`` URLs -- fetched with :mod:`httpx`; the hint
  comes from the URL path extension, then the ``Content-Type`` header.
* Anything else -- a local file path; the hint is the file extension.

An explicit ``format_hint`` always wins over the derived one.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional
from urllib.parse import urlparse

import httpx

from contractlens.exceptions import SourceError

logger = logging.getLogger(__name__)

DEFAULT_HINT = "json"
FETCH_TIMEOUT = 30.0

_KNOWN_HINTS = ("json", "yaml", "yml")


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def read_source(
    source: str,
    max_bytes: int,
    format_hint: Optional[str] = None,
) -> tuple[bytes, str]:
    """Load a document from *source* and pick its format hint.

    Args:
        source: A URL (http/https), file path, or ``-`` for stdin.
        max_bytes: Largest accepted document size in bytes.
        format_hint: Explicit hint overriding the derived one.

    Returns:
        A ``(content, hint)`` tuple ready for :func:`~contractlens.parser.parse`.

    Raises:
        SourceError: If the source cannot be read or exceeds *max_bytes*.

    Example::

        data, hint = read_source("api/openapi.yaml", max_bytes=2 * 1024 * 1024)
        document = parse(data, hint)
    """
    if source == "-":
        content, derived = _read_stdin(max_bytes), DEFAULT_HINT
    elif is_url(source):
        content, derived = _read_url(source, max_bytes)
    else:
        content, derived = _read_file(source, max_bytes)

    hint = format_hint or derived
    logger.debug("Read %d bytes from %s (hint: %s)", len(content), source, hint)
    return content, hint


def _check_size(size: int, max_bytes: int, source: str) -> None:
    if size > max_bytes:
        raise SourceError(
            f"Document {source} is {size} bytes, larger than the {max_bytes} byte limit"
        )


def _read_limited(stream: BinaryIO, max_bytes: int, source: str) -> bytes:
    content = stream.read(max_bytes + 1)
    _check_size(len(content), max_bytes, source)
    return content


def _read_stdin(max_bytes: int) -> bytes:
    try:
        return _read_limited(sys.stdin.buffer, max_bytes, "<stdin>")
    except OSError as exc:
        raise SourceError(f"Failed to read from stdin: {exc}") from exc


def _hint_from_suffix(path: str) -> Optional[str]:
    suffix = PurePosixPath(path).suffix.lower().lstrip(".")
    return suffix or None


def _read_file(path: str, max_bytes: int) -> tuple[bytes, str]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SourceError(f"Spec file not found: {path}")

    try:
        _check_size(file_path.stat().st_size, max_bytes, path)
        with file_path.open("rb") as stream:
            content = _read_limited(stream, max_bytes, path)
    except OSError as exc:
        raise SourceError(f"Failed to read spec file {path}: {exc}") from exc

    return content, _hint_from_suffix(path) or DEFAULT_HINT


def _read_url(url: str, max_bytes: int) -> tuple[bytes, str]:
    try:
        with httpx.stream(
            "GET", url, timeout=FETCH_TIMEOUT, follow_redirects=True
        ) as response:
            response.raise_for_status()
            content = _read_body(response, max_bytes)
            headers = response.headers
    except httpx.HTTPStatusError as exc:
        raise SourceError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SourceError(f"Failed to fetch spec from {url}: {exc}") from exc

    _check_size(len(content), max_bytes, url)

    hint = _hint_from_suffix(urlparse(url).path)
    if hint not in _KNOWN_HINTS:
        hint = None
        content_type = headers.get("content-type", "")
        if "yaml" in content_type or "yml" in content_type:
            hint = "yaml"
    return content, hint or DEFAULT_HINT


def _read_body(response: httpx.Response, max_bytes: int) -> bytes:
    """Collect the body, stopping once it is known to exceed *max_bytes*."""
    body = bytearray()
    for chunk in response.iter_bytes():
        body.extend(chunk)
        if len(body) > max_bytes:
            break
    return bytes(body[: max_bytes + 1])
