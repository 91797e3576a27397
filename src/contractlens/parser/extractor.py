"""Build the immutable document model from a decoded specification.

This module walks a decoded OpenAPI 3.x (or Swagger 2.0) dictionary and
builds a :class:`~contractlens.models.Document`: info, servers, tags, every
path and operation, and the ``components`` section.

The single public entry point is :func:`build_document`.  Internally it
delegates to private helpers that each handle one section of the OpenAPI
structure:

* ``_build_info`` -- the ``info`` object (title, version, description).
* ``_build_servers`` / ``_build_tags`` -- the ``servers`` and ``tags`` arrays.
* ``_build_paths`` -- the ``paths`` object, iterating over every path and
  HTTP method combination in canonical method order.
* ``_build_components`` -- named schemas and security schemes.

Decoded YAML is loosely typed (status codes arrive as ``int``, versions such
as ``1.0`` as ``float``), so scalar fields are normalised to strings here.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from contractlens.models import (
    Components,
    Document,
    HTTPMethod,
    Info,
    MediaType,
    Operation,
    Parameter,
    ParameterLocation,
    PathItem,
    RequestBody,
    Response,
    Schema,
    SecurityRequirement,
    SecurityScheme,
    Server,
    Tag,
)
from contractlens.parser.resolver import resolve_refs
from contractlens.parser.swagger import convert_swagger2

logger = logging.getLogger(__name__)

_COMPOSITION_KEYWORDS = ("allOf", "oneOf", "anyOf")


def build_document(raw_spec: dict[str, Any], spec_version: str) -> Document:
    """Build a :class:`~contractlens.models.Document` from a decoded spec.

    Resolves internal ``$ref`` pointers first, rewrites Swagger 2.0 layouts
    into the OpenAPI 3.x shape, then extracts every section.

    Args:
        raw_spec: The decoded spec dictionary as returned by
            :func:`~contractlens.parser.loader.decode_document`.
        spec_version: The version marker returned by
            :func:`~contractlens.parser.loader.detect_spec_version`.

    Returns:
        A fully populated, frozen :class:`~contractlens.models.Document`.

    Raises:
        ParseError: If an internal ``$ref`` cannot be resolved.

    Example::

        raw = decode_document(data, "yaml")
        document = build_document(raw, detect_spec_version(raw))
        for path, item in document.paths.items():
            print(path, [m.value for m in item.operations])
    """
    spec = resolve_refs(raw_spec)
    if spec_version.startswith("2"):
        spec = convert_swagger2(spec)

    build_schema = _SchemaBuilder()
    document = Document(
        spec_version=spec_version,
        info=_build_info(spec),
        servers=_build_servers(spec),
        tags=_build_tags(spec),
        paths=_build_paths(spec, build_schema),
        components=_build_components(spec, build_schema),
        security=_build_global_security(spec),
    )
    logger.debug(
        "Built document %s with %d paths and %d schemas",
        spec_version,
        len(document.paths),
        len(document.components.schemas),
    )
    return document


def _text(value: Any) -> Optional[str]:
    """Normalise a scalar to ``str``; ``None`` stays ``None``."""
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _build_info(spec: dict[str, Any]) -> Optional[Info]:
    info = spec.get("info")
    if not isinstance(info, dict):
        return None
    return Info(
        title=_text(info.get("title")),
        version=_text(info.get("version")),
        description=_text(info.get("description")),
    )


def _build_servers(spec: dict[str, Any]) -> list[Server]:
    servers = spec.get("servers")
    if not isinstance(servers, list):
        return []
    return [
        Server(url=_text(server["url"]) or "", description=_text(server.get("description")))
        for server in servers
        if isinstance(server, dict) and server.get("url") is not None
    ]


def _build_tags(spec: dict[str, Any]) -> list[Tag]:
    tags = spec.get("tags")
    if not isinstance(tags, list):
        return []
    return [
        Tag(name=_text(tag["name"]) or "", description=_text(tag.get("description")))
        for tag in tags
        if isinstance(tag, dict) and tag.get("name") is not None
    ]


def _build_paths(spec: dict[str, Any], build_schema: _SchemaBuilder) -> dict[str, PathItem]:
    """Extract every path item, keeping the document's path order.

    Path items that are not mappings are kept as empty
    :class:`~contractlens.models.PathItem` instances: a path with no
    operations is meaningless but not invalid.
    """
    paths = spec.get("paths")
    if not isinstance(paths, dict):
        return {}

    result: dict[str, PathItem] = {}
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            result[str(path)] = PathItem()
            continue

        path_params = path_item.get("parameters")
        if not isinstance(path_params, list):
            path_params = []

        operations: dict[HTTPMethod, Operation] = {}
        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue
            operations[method] = _build_operation(operation, path_params, build_schema)

        result[str(path)] = PathItem(operations=operations)

    return result


def _build_operation(
    operation: dict[str, Any], path_params: list[Any], build_schema: _SchemaBuilder
) -> Operation:
    op_params = operation.get("parameters")
    if not isinstance(op_params, list):
        op_params = []
    merged = _merge_parameters(path_params, op_params)

    responses: Optional[dict[str, Response]] = None
    raw_responses = operation.get("responses")
    if isinstance(raw_responses, dict):
        responses = {
            str(code): _build_response(response, build_schema)
            for code, response in raw_responses.items()
        }

    request_body: Optional[RequestBody] = None
    raw_body = operation.get("requestBody")
    if isinstance(raw_body, dict):
        request_body = RequestBody(
            description=_text(raw_body.get("description")),
            required=bool(raw_body.get("required", False)),
            content=_build_content(raw_body.get("content"), build_schema),
        )

    tags = operation.get("tags")

    return Operation(
        operation_id=_text(operation.get("operationId")),
        summary=_text(operation.get("summary")),
        description=_text(operation.get("description")),
        tags=[str(t) for t in tags] if isinstance(tags, list) else [],
        deprecated=bool(operation.get("deprecated", False)),
        parameters=_build_parameters(merged, build_schema),
        responses=responses,
        request_body=request_body,
        security=_build_operation_security(operation.get("security")),
    )


def _merge_parameters(
    path_params: list[Any],
    op_params: list[Any],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.
    """
    op_lookup: set[tuple[str, str]] = set()
    for param in op_params:
        if isinstance(param, dict):
            op_lookup.add((str(param.get("name", "")), str(param.get("in", ""))))

    merged: list[dict[str, Any]] = []
    for param in path_params:
        if not isinstance(param, dict):
            continue
        key = (str(param.get("name", "")), str(param.get("in", "")))
        if key not in op_lookup:
            merged.append(param)

    merged.extend(p for p in op_params if isinstance(p, dict))
    return merged


def _build_parameters(
    params_list: list[dict[str, Any]], build_schema: _SchemaBuilder
) -> list[Parameter]:
    """Convert raw parameter dicts into :class:`~contractlens.models.Parameter` models.

    Parameters with unrecognised ``in`` locations are skipped, and path
    parameters are always required regardless of the source's ``required``.
    """
    parameters: list[Parameter] = []

    for param in params_list:
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            logger.debug("Skipping parameter with location %r", param.get("in"))
            continue

        required = bool(param.get("required", False))
        if location == ParameterLocation.PATH:
            required = True

        parameters.append(
            Parameter(
                name=_text(param.get("name")) or "",
                location=location,
                description=_text(param.get("description")),
                required=required,
                schema=build_schema(param.get("schema")),
            )
        )

    return parameters


def _build_response(response: Any, build_schema: _SchemaBuilder) -> Response:
    if not isinstance(response, dict):
        return Response()
    return Response(
        description=_text(response.get("description")),
        content=_build_content(response.get("content"), build_schema),
    )


def _build_content(content: Any, build_schema: _SchemaBuilder) -> dict[str, MediaType]:
    if not isinstance(content, dict):
        return {}
    return {
        str(media_type): MediaType(
            schema=build_schema(entry.get("schema")) if isinstance(entry, dict) else None
        )
        for media_type, entry in content.items()
    }


def _schema_type(schema: dict[str, Any]) -> Optional[str]:
    """Extract the declared type of a schema object.

    Handles OpenAPI 3.1 type arrays (e.g., ``["string", "null"]``) by
    returning the first non-null type. Returns ``None`` when no type is
    declared.
    """
    type_value = schema.get("type")
    if isinstance(type_value, list):
        if not type_value:
            return None
        non_null = [t for t in type_value if t != "null"]
        return str(non_null[0]) if non_null else "null"
    return _text(type_value)


class _SchemaBuilder:
    """Convert resolved schema dicts into :class:`~contractlens.models.Schema` models.

    The resolver hands back the same dict object for every occurrence of a
    ref, so models are cached by identity and shared. ``Schema`` is frozen,
    which makes the sharing invisible to callers. The cache is only valid
    while the resolved spec it was built from is alive.
    """

    def __init__(self) -> None:
        self._built: dict[int, Schema] = {}

    def __call__(self, schema: Any) -> Optional[Schema]:
        """Return the model for *schema*, or ``None`` when it is not a mapping."""
        if not isinstance(schema, dict):
            return None
        built = self._built.get(id(schema))
        if built is None:
            built = self._build(schema)
            self._built[id(schema)] = built
        return built

    def _build(self, schema: dict[str, Any]) -> Schema:
        required = schema.get("required")
        properties = schema.get("properties")
        enum_values = schema.get("enum")
        ref = schema.get("$ref")

        fields: dict[str, Any] = {
            "type": _schema_type(schema),
            "format": _text(schema.get("format")),
            "description": _text(schema.get("description")),
            "enum": list(enum_values) if isinstance(enum_values, list) else None,
            "default": schema.get("default"),
            "example": schema.get("example"),
            "required": [str(r) for r in required] if isinstance(required, list) else None,
            "properties": {
                str(name): self(prop) or Schema()
                for name, prop in properties.items()
            } if isinstance(properties, dict) else {},
            "items": self(schema.get("items")),
            "$ref": ref if isinstance(ref, str) else None,
        }
        for keyword in _COMPOSITION_KEYWORDS:
            members = schema.get(keyword)
            if isinstance(members, list):
                fields[keyword] = [self(m) or Schema() for m in members]

        return Schema.model_validate(fields)


def _build_components(spec: dict[str, Any], build_schema: _SchemaBuilder) -> Components:
    components = spec.get("components")
    if not isinstance(components, dict):
        return Components()

    schemas_raw = components.get("schemas")
    schemas: dict[str, Schema] = {}
    if isinstance(schemas_raw, dict):
        for name, schema in schemas_raw.items():
            schemas[str(name)] = build_schema(schema) or Schema()

    schemes_raw = components.get("securitySchemes")
    schemes: dict[str, SecurityScheme] = {}
    if isinstance(schemes_raw, dict):
        for name, scheme in schemes_raw.items():
            scheme = scheme if isinstance(scheme, dict) else {}
            schemes[str(name)] = SecurityScheme(
                name=str(name),
                type=_text(scheme.get("type")),
                scheme=_text(scheme.get("scheme")),
                description=_text(scheme.get("description")),
            )

    return Components(schemas=schemas, security_schemes=schemes)


def _normalise_requirements(requirements: list[Any]) -> list[dict[str, list[str]]]:
    normalised: list[dict[str, list[str]]] = []
    for requirement in requirements:
        if not isinstance(requirement, dict):
            continue
        normalised.append({
            str(name): [str(s) for s in scopes] if isinstance(scopes, list) else []
            for name, scopes in requirement.items()
        })
    return normalised


def _build_global_security(spec: dict[str, Any]) -> list[dict[str, list[str]]]:
    security = spec.get("security")
    if not isinstance(security, list):
        return []
    return _normalise_requirements(security)


def _build_operation_security(security: Any) -> Optional[list[SecurityRequirement]]:
    """Flatten an operation's security requirements into name/scopes pairs.

    ``None`` means the operation declares nothing and inherits the global
    requirement; ``[]`` means it explicitly opts out.
    """
    if not isinstance(security, list):
        return None
    return [
        SecurityRequirement(name=name, scopes=scopes)
        for requirement in _normalise_requirements(security)
        for name, scopes in requirement.items()
    ]
