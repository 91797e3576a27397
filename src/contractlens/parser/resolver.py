"""Inline internal ``$ref`` pointers before the document model is built.

Both OpenAPI 3.x (``#/components/...``) and Swagger 2.0 (``#/definitions/...``,
``#/parameters/...``) documents are handled the same way: every mapping whose
``$ref`` is an RFC 6901 pointer into the same document is replaced by a copy
of its target, recursively.

* External references (``common.yaml#/Pet``, ``https://...``) are never
  fetched. The ``$ref`` mapping is kept and later surfaces as
  :attr:`~contractlens.models.Schema.ref`.
* A pointer that is already being expanded higher up the same branch is a
  cycle; it is kept as a ``$ref`` mapping at that point.
* A pointer whose target does not exist is a :class:`ParseError`.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from contractlens.exceptions import ParseError

logger = logging.getLogger(__name__)

_LOCAL_PREFIX = "#/"


def resolve_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *spec* with every internal ``$ref`` inlined.

    The input mapping is left untouched.

    Raises:
        ParseError: If an internal ``$ref`` points nowhere.
    """
    root = copy.deepcopy(spec)
    return _RefWalker(root).walk(root, frozenset())


def lookup_pointer(root: dict[str, Any], ref: str) -> Any:
    """Follow a ``#/a/b/0`` pointer through *root*, honouring ``~0``/``~1`` escapes."""
    target: Any = root
    for token in ref[len(_LOCAL_PREFIX):].split("/"):
        key = token.replace("~1", "/").replace("~0", "~")
        if isinstance(target, dict):
            if key not in target:
                raise ParseError(f"Cannot resolve $ref '{ref}': no '{key}' in document")
            target = target[key]
        elif isinstance(target, list):
            if not key.isdigit() or int(key) >= len(target):
                raise ParseError(f"Cannot resolve $ref '{ref}': bad array index '{key}'")
            target = target[int(key)]
        else:
            raise ParseError(
                f"Cannot resolve $ref '{ref}': '{key}' is inside a {type(target).__name__}"
            )
    return target


class _RefWalker:
    """Recursive expansion over one decoded document.

    A ref whose expansion never reached a cycle point expands the same way
    wherever it appears, so its result is kept in ``resolved`` and the same
    object is returned for every later occurrence. Shared sub-trees must
    therefore not be mutated by callers.
    """

    def __init__(self, root: dict[str, Any]) -> None:
        self.root = root
        self.external: set[str] = set()
        self.resolved: dict[str, Any] = {}
        self.cycle_cuts = 0

    def walk(self, node: Any, expanding: frozenset[str]) -> Any:
        if isinstance(node, list):
            return [self.walk(item, expanding) for item in node]
        if not isinstance(node, dict):
            return node

        ref = node.get("$ref")
        if isinstance(ref, str):
            if not ref.startswith(_LOCAL_PREFIX):
                if ref not in self.external:
                    self.external.add(ref)
                    logger.debug("External $ref kept as-is: %s", ref)
                return dict(node)
            if ref in expanding:
                self.cycle_cuts += 1
                return dict(node)
            return self._expand(ref, expanding)

        return {key: self.walk(value, expanding) for key, value in node.items()}

    def _expand(self, ref: str, expanding: frozenset[str]) -> Any:
        if ref in self.resolved:
            return self.resolved[ref]
        cuts_before = self.cycle_cuts
        value = self.walk(lookup_pointer(self.root, ref), expanding | {ref})
        if self.cycle_cuts == cuts_before:
            self.resolved[ref] = value
        return value
