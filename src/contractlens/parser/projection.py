"""Flat projections of a :class:`~contractlens.models.Document`.

Storage layers do not keep the whole document model; they persist one
:class:`~contractlens.models.Endpoint` row per (path, method) pair and a
:class:`~contractlens.models.Metadata` summary per contract version. Both
projections are pure functions of the document and never fail.
"""

from __future__ import annotations

from typing import Optional

from contractlens.models import (
    Document,
    Endpoint,
    EndpointParameter,
    EndpointRequestBody,
    EndpointResponse,
    HTTPMethod,
    MediaType,
    MediaTypeSummary,
    Metadata,
    Operation,
    Schema,
    SchemaSummary,
)


def extract_metadata(document: Document) -> Metadata:
    """Summarise *document* for storage next to a contract version.

    Absent sections produce ``None`` / empty defaults.
    """
    info = document.info
    return Metadata(
        spec_version=document.spec_version,
        title=info.title if info else None,
        version=info.version if info else None,
        description=info.description if info else None,
        servers=list(document.servers),
        paths_count=len(document.paths),
        schemas_count=len(document.components.schemas),
    )


def extract_endpoints(document: Document) -> list[Endpoint]:
    """Flatten every (path, method) pair of *document* into an endpoint row.

    Rows follow the document's path order, then the canonical method order
    (get, post, put, delete, patch, head, options, trace). Methods absent
    from a path produce no row.
    """
    endpoints: list[Endpoint] = []
    for path, path_item in document.paths.items():
        for method in HTTPMethod:
            operation = path_item.get(method)
            if operation is None:
                continue
            endpoints.append(_endpoint(path, method, operation))
    return endpoints


def _endpoint(path: str, method: HTTPMethod, operation: Operation) -> Endpoint:
    parameters = [
        EndpointParameter(
            name=param.name,
            location=param.location.value,
            description=param.description,
            required=param.required,
            schema=_summarise(param.schema_),
        )
        for param in operation.parameters
    ]

    responses = {
        code: EndpointResponse(
            description=response.description,
            content=_summarise_content(response.content),
        )
        for code, response in (operation.responses or {}).items()
    }

    request_body = None
    if operation.request_body is not None:
        request_body = EndpointRequestBody(
            description=operation.request_body.description,
            required=operation.request_body.required,
            content=_summarise_content(operation.request_body.content),
        )

    return Endpoint(
        path=path,
        method=method.value.upper(),
        summary=operation.summary,
        description=operation.description,
        parameters=parameters or None,
        responses=responses or None,
        request_body=request_body,
        security=list(operation.security) if operation.security else None,
    )


def _summarise(schema: Optional[Schema]) -> Optional[SchemaSummary]:
    if schema is None:
        return None
    return SchemaSummary(
        type=schema.type,
        format=schema.format,
        enum=schema.enum,
        default=schema.default,
        example=schema.example,
    )


def _summarise_content(
    content: dict[str, MediaType],
) -> Optional[dict[str, MediaTypeSummary]]:
    if not content:
        return None
    return {
        media_type: MediaTypeSummary(schema=_summarise(entry.schema_))
        for media_type, entry in content.items()
    }
