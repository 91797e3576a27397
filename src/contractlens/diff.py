"""Breaking-change detection between two versions of a document.

:func:`detect` compares an old and a new :class:`~contractlens.models.Document`
and reports every change that could break an existing API consumer, in
three passes whose output is concatenated:

* **endpoints** -- removed paths and methods, then per shared operation:
  parameters (keyed by ``(location, name)``), 2xx responses and the
  request body;
* **schemas** -- removed named schemas, required-field changes and
  property type changes;
* **authentication** -- a global requirement added to a previously open
  API and removed security schemes.

Every severity is assigned from the API caller's point of view: anything a
client built against the old version can no longer do (send the old
request, read the old response, call without credentials) is ``critical``;
constraints that were relaxed are ``info``.

Sections missing on either side are treated as empty. Results are ordered
by the old document's path order, the canonical method order and the old
schema order, so repeated runs produce identical output.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Optional

from contractlens.models import (
    BreakingChange,
    ChangeCategory,
    ChangeSeverity,
    Document,
    HTTPMethod,
    Operation,
    Parameter,
    Schema,
)
from contractlens.tally import category_of, tally

logger = logging.getLogger(__name__)


def detect(old: Document, new: Document) -> list[BreakingChange]:
    """Return the breaking changes from *old* to *new*.

    ``detect(d, d)`` is always empty.

    Example::

        changes = detect(parse(v1, "yaml"), parse(v2, "yaml"))
        blocking = [c for c in changes if c.severity == ChangeSeverity.CRITICAL]
    """
    changes: list[BreakingChange] = []
    changes.extend(_compare_endpoints(old, new))
    changes.extend(_compare_schemas(old, new))
    changes.extend(_compare_authentication(old, new))
    logger.debug("Detected %d breaking changes", len(changes))
    return changes


def group_by_category(changes: Iterable[Any]) -> dict[str, list[Any]]:
    """Group *changes* by category, keeping input order within each group.

    Groups appear in order of first occurrence. Items without a category
    land in ``"other"``.
    """
    grouped: dict[str, list[Any]] = {}
    for change in changes:
        grouped.setdefault(category_of(change), []).append(change)
    return grouped


def count_by_severity(changes: Iterable[Any]) -> dict[str, int]:
    """Tally *changes* into ``critical`` / ``warning`` / ``info`` counts.

    Unknown severities are ignored, mirroring the validator's tallying.
    """
    return tally(changes, (s.value for s in ChangeSeverity))


# --- Endpoints ---


def _compare_endpoints(old: Document, new: Document) -> list[BreakingChange]:
    changes: list[BreakingChange] = []

    for path, old_item in old.paths.items():
        new_item = new.paths.get(path)
        if new_item is None:
            changes.append(BreakingChange(
                type="endpoint_removed",
                severity=ChangeSeverity.CRITICAL,
                message=f"Endpoint removed: {path}",
                category=ChangeCategory.ENDPOINTS,
                path=path,
            ))
            continue

        for method in HTTPMethod:
            old_op = old_item.get(method)
            if old_op is None:
                continue
            new_op = new_item.get(method)
            if new_op is None:
                changes.append(BreakingChange(
                    type="method_removed",
                    severity=ChangeSeverity.CRITICAL,
                    message=f"HTTP method removed: {method.value} {path}",
                    category=ChangeCategory.ENDPOINTS,
                    path=path,
                    method=method.value.upper(),
                ))
                continue
            changes.extend(_compare_operation(path, method, old_op, new_op))

    return changes


def _compare_operation(
    path: str, method: HTTPMethod, old_op: Operation, new_op: Operation
) -> list[BreakingChange]:
    changes: list[BreakingChange] = []
    changes.extend(_compare_parameters(path, method, old_op, new_op))
    changes.extend(_compare_responses(path, method, old_op, new_op))
    changes.extend(_compare_request_body(path, method, old_op, new_op))
    return changes


def _keyed_parameters(operation: Operation) -> dict[tuple[str, str], Parameter]:
    return {param.key: param for param in operation.parameters}


def _schema_type(schema: Optional[Schema]) -> Optional[str]:
    return schema.type if schema is not None else None


def _compare_parameters(
    path: str, method: HTTPMethod, old_op: Operation, new_op: Operation
) -> list[BreakingChange]:
    changes: list[BreakingChange] = []
    old_params = _keyed_parameters(old_op)
    new_params = _keyed_parameters(new_op)
    verb = method.value
    method_name = verb.upper()

    for key, old_param in old_params.items():
        if key not in new_params:
            changes.append(BreakingChange(
                type="parameter_removed",
                severity=(
                    ChangeSeverity.CRITICAL if old_param.required else ChangeSeverity.WARNING
                ),
                message=f"Parameter removed: {old_param.name} from {verb} {path}",
                category=ChangeCategory.PARAMETERS,
                path=path,
                method=method_name,
                parameter=old_param.name,
            ))

    for key, new_param in new_params.items():
        if key not in old_params and new_param.required:
            changes.append(BreakingChange(
                type="required_parameter_added",
                severity=ChangeSeverity.CRITICAL,
                message=f"New required parameter added: {new_param.name} to {verb} {path}",
                category=ChangeCategory.PARAMETERS,
                path=path,
                method=method_name,
                parameter=new_param.name,
            ))

    for key, old_param in old_params.items():
        new_param = new_params.get(key)
        if new_param is None:
            continue
        old_type = _schema_type(old_param.schema_)
        new_type = _schema_type(new_param.schema_)
        if old_type and new_type and old_type != new_type:
            changes.append(BreakingChange(
                type="parameter_type_changed",
                severity=ChangeSeverity.CRITICAL,
                message=(
                    f"Parameter type changed: {old_param.name} from {old_type} "
                    f"to {new_type} in {verb} {path}"
                ),
                category=ChangeCategory.PARAMETERS,
                path=path,
                method=method_name,
                parameter=old_param.name,
                old_type=old_type,
                new_type=new_type,
            ))

    return changes


def _compare_responses(
    path: str, method: HTTPMethod, old_op: Operation, new_op: Operation
) -> list[BreakingChange]:
    # Removing a 4xx/5xx response is not breaking for callers.
    new_responses = new_op.responses or {}
    return [
        BreakingChange(
            type="success_response_removed",
            severity=ChangeSeverity.CRITICAL,
            message=f"Success response {status_code} removed from {method.value} {path}",
            category=ChangeCategory.RESPONSES,
            path=path,
            method=method.value.upper(),
            status_code=status_code,
        )
        for status_code in (old_op.responses or {})
        if status_code.startswith("2") and status_code not in new_responses
    ]


def _compare_request_body(
    path: str, method: HTTPMethod, old_op: Operation, new_op: Operation
) -> list[BreakingChange]:
    old_body = old_op.request_body
    if old_body is None:
        return []

    new_body = new_op.request_body
    if new_body is None:
        return [BreakingChange(
            type="request_body_removed",
            severity=ChangeSeverity.CRITICAL,
            message=f"Request body removed from {method.value} {path}",
            category=ChangeCategory.REQUEST_BODY,
            path=path,
            method=method.value.upper(),
        )]

    if old_body.required and not new_body.required:
        return [BreakingChange(
            type="request_body_optional",
            severity=ChangeSeverity.INFO,
            message=f"Request body made optional in {method.value} {path}",
            category=ChangeCategory.REQUEST_BODY,
            path=path,
            method=method.value.upper(),
        )]

    return []


# --- Schemas ---


def _compare_schemas(old: Document, new: Document) -> list[BreakingChange]:
    changes: list[BreakingChange] = []
    new_schemas = new.components.schemas

    for name, old_schema in old.components.schemas.items():
        new_schema = new_schemas.get(name)
        if new_schema is None:
            # Whether anything still references the schema is not traced.
            changes.append(BreakingChange(
                type="schema_removed",
                severity=ChangeSeverity.WARNING,
                message=f"Schema removed: {name}",
                category=ChangeCategory.SCHEMAS,
                schema=name,
            ))
            continue

        changes.extend(_compare_required_fields(name, old_schema, new_schema))
        changes.extend(_compare_property_types(name, old_schema, new_schema))

    return changes


def _compare_required_fields(
    name: str, old_schema: Schema, new_schema: Schema
) -> list[BreakingChange]:
    # Only schemas that declared a required array (even an empty one) are compared.
    if old_schema.required is None:
        return []

    old_required = old_schema.required
    new_required = new_schema.required or []
    changes: list[BreakingChange] = []

    for field in old_required:
        if field not in new_required:
            changes.append(BreakingChange(
                type="required_field_removed",
                severity=ChangeSeverity.WARNING,
                message=f"Required field '{field}' removed from schema {name}",
                category=ChangeCategory.SCHEMAS,
                schema=name,
                field=field,
            ))

    for field in new_required:
        if field not in old_required:
            changes.append(BreakingChange(
                type="required_field_added",
                severity=ChangeSeverity.CRITICAL,
                message=f"New required field '{field}' added to schema {name}",
                category=ChangeCategory.SCHEMAS,
                schema=name,
                field=field,
            ))

    return changes


def _compare_property_types(
    name: str, old_schema: Schema, new_schema: Schema
) -> list[BreakingChange]:
    changes: list[BreakingChange] = []
    for prop_name, old_prop in old_schema.properties.items():
        new_prop = new_schema.properties.get(prop_name)
        if new_prop is None:
            continue
        if old_prop.type and new_prop.type and old_prop.type != new_prop.type:
            changes.append(BreakingChange(
                type="property_type_changed",
                severity=ChangeSeverity.CRITICAL,
                message=(
                    f"Property '{prop_name}' type changed from {old_prop.type} "
                    f"to {new_prop.type} in schema {name}"
                ),
                category=ChangeCategory.SCHEMAS,
                schema=name,
                field=prop_name,
                old_type=old_prop.type,
                new_type=new_prop.type,
            ))
    return changes


# --- Authentication ---


def _compare_authentication(old: Document, new: Document) -> list[BreakingChange]:
    changes: list[BreakingChange] = []

    if not old.security and new.security:
        changes.append(BreakingChange(
            type="authentication_added",
            severity=ChangeSeverity.CRITICAL,
            message="Authentication requirement added to previously open API",
            category=ChangeCategory.SECURITY,
        ))

    new_schemes = new.components.security_schemes
    for scheme_name in old.components.security_schemes:
        if scheme_name not in new_schemes:
            changes.append(BreakingChange(
                type="security_scheme_removed",
                severity=ChangeSeverity.CRITICAL,
                message=f"Security scheme removed: {scheme_name}",
                category=ChangeCategory.SECURITY,
                scheme=scheme_name,
            ))

    return changes
