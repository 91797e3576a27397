"""Rewrite a Swagger 2.0 document into the OpenAPI 3.x layout.

The extractor only understands the OpenAPI 3.x shape. Swagger 2.0 keeps the
same information in different places, so :func:`convert_swagger2` moves it
before extraction:

* ``definitions`` and ``securityDefinitions`` move under ``components``.
* ``host`` / ``basePath`` / ``schemes`` become ``servers`` entries.
* Non-body parameters carry ``type``/``format``/``enum`` directly; those
  keys are wrapped into an inline ``schema``.
* An ``in: body`` parameter becomes the ``requestBody``; ``in: formData``
  parameters are folded into an object schema request body.
* A response ``schema`` moves under ``content`` for each ``produces`` type.

``$ref`` pointers must already be resolved (see
:func:`~contractlens.parser.resolver.resolve_refs`) because the
``#/definitions/...`` targets disappear in the rewritten document.
"""

from __future__ import annotations

from typing import Any

from contractlens.models import HTTPMethod

_SCHEMA_KEYS = (
    "type", "format", "enum", "default", "items", "minimum", "maximum",
    "minLength", "maxLength", "pattern",
)
_DEFAULT_MEDIA_TYPES = ["application/json"]


def convert_swagger2(spec: dict[str, Any]) -> dict[str, Any]:
    """Return an OpenAPI 3.x shaped copy of a resolved Swagger 2.0 document."""
    converted: dict[str, Any] = {
        key: spec[key]
        for key in ("swagger", "info", "tags", "security")
        if key in spec
    }

    servers = _servers(spec)
    if servers:
        converted["servers"] = servers

    components: dict[str, Any] = {}
    if isinstance(spec.get("definitions"), dict):
        components["schemas"] = spec["definitions"]
    if isinstance(spec.get("securityDefinitions"), dict):
        components["securitySchemes"] = {
            name: _security_scheme(scheme)
            for name, scheme in spec["securityDefinitions"].items()
        }
    if components:
        converted["components"] = components

    doc_consumes = _media_types(spec.get("consumes"))
    doc_produces = _media_types(spec.get("produces"))

    paths = spec.get("paths")
    if isinstance(paths, dict):
        converted["paths"] = {
            path: _path_item(item, doc_consumes, doc_produces)
            if isinstance(item, dict) else item
            for path, item in paths.items()
        }

    return converted


def _servers(spec: dict[str, Any]) -> list[dict[str, Any]]:
    host = spec.get("host")
    base_path = spec.get("basePath") or ""
    if not host:
        return [{"url": base_path}] if base_path else []
    schemes = spec.get("schemes") or ["https"]
    return [{"url": f"{scheme}://{host}{base_path}"} for scheme in schemes]


def _security_scheme(scheme: Any) -> Any:
    # Swagger 2 "basic" is OpenAPI 3 "http" + "basic"
    if isinstance(scheme, dict) and scheme.get("type") == "basic":
        return {**scheme, "type": "http", "scheme": "basic"}
    return scheme


def _media_types(value: Any) -> list[str] | None:
    if isinstance(value, list) and value:
        return [str(v) for v in value]
    return None


def _path_item(
    item: dict[str, Any],
    doc_consumes: list[str] | None,
    doc_produces: list[str] | None,
) -> dict[str, Any]:
    path_params = item.get("parameters") or []
    converted: dict[str, Any] = {}

    for method in HTTPMethod:
        operation = item.get(method.value)
        if not isinstance(operation, dict):
            continue
        consumes = _media_types(operation.get("consumes")) or doc_consumes or _DEFAULT_MEDIA_TYPES
        produces = _media_types(operation.get("produces")) or doc_produces or _DEFAULT_MEDIA_TYPES
        params = _merge_raw_parameters(path_params, operation.get("parameters") or [])
        converted[method.value] = _operation(operation, params, consumes, produces)

    return converted


def _merge_raw_parameters(
    path_params: list[Any], op_params: list[Any]
) -> list[dict[str, Any]]:
    op_keys = {
        (p.get("in"), p.get("name")) for p in op_params if isinstance(p, dict)
    }
    merged = [
        p for p in path_params
        if isinstance(p, dict) and (p.get("in"), p.get("name")) not in op_keys
    ]
    merged.extend(p for p in op_params if isinstance(p, dict))
    return merged


def _operation(
    operation: dict[str, Any],
    params: list[dict[str, Any]],
    consumes: list[str],
    produces: list[str],
) -> dict[str, Any]:
    converted = {
        key: value
        for key, value in operation.items()
        if key not in ("parameters", "responses", "consumes", "produces")
    }

    parameters: list[dict[str, Any]] = []
    form_fields: list[dict[str, Any]] = []
    body: dict[str, Any] | None = None

    for param in params:
        location = param.get("in")
        if location == "body":
            body = param
        elif location == "formData":
            form_fields.append(param)
        else:
            parameters.append(_parameter(param))

    if parameters:
        converted["parameters"] = parameters

    if body is not None:
        converted["requestBody"] = {
            "description": body.get("description"),
            "required": bool(body.get("required", False)),
            "content": {mt: {"schema": body.get("schema")} for mt in consumes},
        }
    elif form_fields:
        converted["requestBody"] = _form_body(form_fields)

    if "responses" in operation:
        responses = operation["responses"]
        if isinstance(responses, dict):
            converted["responses"] = {
                code: _response(response, produces)
                for code, response in responses.items()
            }
        else:
            converted["responses"] = responses

    return converted


def _parameter(param: dict[str, Any]) -> dict[str, Any]:
    if "schema" in param:
        return param
    converted = {k: v for k, v in param.items() if k not in _SCHEMA_KEYS}
    schema = {k: param[k] for k in _SCHEMA_KEYS if k in param}
    if schema:
        converted["schema"] = schema
    return converted


def _form_body(fields: list[dict[str, Any]]) -> dict[str, Any]:
    properties = {
        str(f.get("name", "")): {k: f[k] for k in _SCHEMA_KEYS if k in f}
        for f in fields
    }
    required = [str(f.get("name", "")) for f in fields if f.get("required")]
    has_file = any(f.get("type") == "file" for f in fields)
    media_type = "multipart/form-data" if has_file else "application/x-www-form-urlencoded"

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return {
        "required": bool(required),
        "content": {media_type: {"schema": schema}},
    }


def _response(response: Any, produces: list[str]) -> Any:
    if not isinstance(response, dict) or "schema" not in response:
        return response
    converted = {k: v for k, v in response.items() if k != "schema"}
    converted["content"] = {mt: {"schema": response["schema"]} for mt in produces}
    return converted
