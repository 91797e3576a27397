"""Canonical Pydantic models shared across all contractlens modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into four groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig`, :class:`AnalysisConfig` and :class:`GlobalConfig`.

**Document model** -- the normalised, immutable representation of a parsed
OpenAPI 3.x / Swagger 2.0 document produced by :mod:`contractlens.parser`:
    :class:`Document`, :class:`Info`, :class:`Server`, :class:`Tag`,
    :class:`PathItem`, :class:`Operation`, :class:`Parameter`,
    :class:`RequestBody`, :class:`Response`, :class:`MediaType`,
    :class:`Schema`, :class:`SecurityScheme`, :class:`SecurityRequirement`
    and :class:`Components`.

**Projections** -- flat, storage-friendly views of a document:
    :class:`Endpoint` (one per path + method) and :class:`Metadata`.

**Findings and reports** -- what the validator, the diff engine and the
report layer hand back to callers:
    :class:`Issue`, :class:`BreakingChange`, :class:`DesignPattern`,
    :class:`QualityScore`, :class:`ValidationReport` and
    :class:`ComparisonResult`.

Document-model and finding models are frozen: once parsed or computed they
are never mutated. Optional sections keep the difference between *absent*
(``None``) and *present but empty* (``[]`` / ``{}``) because several rules
depend on it (for example required-field diffing).
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Config ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class FailOn(str, enum.Enum):
    """Lowest breaking-change severity that makes ``contractlens diff`` fail."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    NEVER = "never"


class AnalysisConfig(BaseModel):
    """Settings that shape a contract analysis run.

    Stored under the ``analysis`` key of :class:`GlobalConfig` and
    overridable from the project config, environment variables and CLI
    flags (see :func:`~contractlens.config.resolve_config`).
    """

    naming_checks: bool = Field(
        default=True, description="Append rule-based naming issues to the report"
    )
    quality_score: bool = Field(
        default=True, description="Compute the quality score for reports"
    )
    fail_on: FailOn = Field(
        default=FailOn.CRITICAL,
        description="Lowest breaking-change severity that fails the diff gate",
    )
    max_document_bytes: int = Field(
        default=2 * 1024 * 1024,
        description="Largest document accepted from a file, stdin or URL",
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/contractlens/config.json``.

    Loaded and saved by :func:`~contractlens.config.load_global_config` and
    :func:`~contractlens.config.save_global_config`.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)


# --- Document model ---


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised on an OpenAPI *Path Item Object*.

    Declaration order is the canonical method order used for endpoint
    extraction, validation and diffing.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    PATH = "path"
    HEADER = "header"
    COOKIE = "cookie"


class Schema(_Frozen):
    """A JSON Schema fragment, either named under ``components`` or inline.

    ``required`` is ``None`` when the schema declares no ``required`` array
    and ``[]`` when it declares an empty one. ``ref`` is set only when a
    ``$ref`` was left unresolved (external or circular reference).
    """

    type: Optional[str] = None
    format: Optional[str] = None
    description: Optional[str] = None
    enum: Optional[list[Any]] = None
    default: Any = None
    example: Any = None
    required: Optional[list[str]] = None
    properties: dict[str, Schema] = Field(default_factory=dict)
    items: Optional[Schema] = None
    all_of: Optional[list[Schema]] = Field(default=None, alias="allOf")
    one_of: Optional[list[Schema]] = Field(default=None, alias="oneOf")
    any_of: Optional[list[Schema]] = Field(default=None, alias="anyOf")
    ref: Optional[str] = Field(default=None, alias="$ref")

    @property
    def has_composition(self) -> bool:
        """Whether the schema uses ``allOf``, ``oneOf`` or ``anyOf``."""
        return any(
            keyword is not None
            for keyword in (self.all_of, self.one_of, self.any_of)
        )


class Parameter(_Frozen):
    """An OpenAPI *Parameter Object*.

    Identity for comparison is ``(location, name)``; see :attr:`key`.
    """

    name: str
    location: ParameterLocation = Field(alias="in")
    description: Optional[str] = None
    required: bool = False
    schema_: Optional[Schema] = Field(default=None, alias="schema")

    @property
    def key(self) -> tuple[str, str]:
        return (self.location.value, self.name)


class MediaType(_Frozen):
    """One entry of a ``content`` map."""

    schema_: Optional[Schema] = Field(default=None, alias="schema")


class Response(_Frozen):
    description: Optional[str] = None
    content: dict[str, MediaType] = Field(default_factory=dict)


class RequestBody(_Frozen):
    description: Optional[str] = None
    required: bool = False
    content: dict[str, MediaType] = Field(default_factory=dict)


class SecurityRequirement(_Frozen):
    """A single ``{scheme: [scopes]}`` entry of a security requirement."""

    scheme_name: str = Field(alias="name")
    scopes: list[str] = Field(default_factory=list)


class Operation(_Frozen):
    """An OpenAPI *Operation Object* (one HTTP method on one path).

    ``responses`` is ``None`` when the operation has no ``responses``
    section. ``security`` is ``None`` when the operation inherits the
    document-level requirement and ``[]`` when it explicitly opts out.
    """

    operation_id: Optional[str] = Field(default=None, alias="operationId")
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    deprecated: bool = False
    parameters: list[Parameter] = Field(default_factory=list)
    responses: Optional[dict[str, Response]] = None
    request_body: Optional[RequestBody] = Field(default=None, alias="requestBody")
    security: Optional[list[SecurityRequirement]] = None


class PathItem(_Frozen):
    """Operations declared on one path, keyed by method in canonical order."""

    operations: dict[HTTPMethod, Operation] = Field(default_factory=dict)

    def get(self, method: HTTPMethod) -> Optional[Operation]:
        return self.operations.get(method)


class SecurityScheme(_Frozen):
    """A named security scheme. Only its presence is compared across versions."""

    name: str
    type: Optional[str] = None
    scheme: Optional[str] = None
    description: Optional[str] = None


class Components(_Frozen):
    schemas: dict[str, Schema] = Field(default_factory=dict)
    security_schemes: dict[str, SecurityScheme] = Field(
        default_factory=dict, alias="securitySchemes"
    )


class Info(_Frozen):
    title: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None


class Server(_Frozen):
    url: str
    description: Optional[str] = None


class Tag(_Frozen):
    name: str
    description: Optional[str] = None


class Document(_Frozen):
    """Complete normalised representation of an API specification document.

    Produced by :func:`contractlens.parser.parse` and consumed by the
    validator, the diff engine and the projections. ``spec_version`` holds
    the ``openapi`` value (or the ``swagger`` value for 2.0 documents) and
    is only ``None`` for documents built by hand.

    See Also:
        :class:`PathItem`: Operations of one path.
        :class:`Components`: Named schemas and security schemes.
    """

    spec_version: Optional[str] = None
    info: Optional[Info] = None
    servers: list[Server] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    paths: dict[str, PathItem] = Field(default_factory=dict)
    components: Components = Field(default_factory=Components)
    security: list[dict[str, list[str]]] = Field(default_factory=list)

    @property
    def is_swagger(self) -> bool:
        """Whether the document was declared as Swagger 2.x."""
        return self.spec_version is not None and self.spec_version.startswith("2")


# --- Projections ---


class SchemaSummary(_Frozen):
    """The part of a schema kept in the flat endpoint projection."""

    type: Optional[str] = None
    format: Optional[str] = None
    enum: Optional[list[Any]] = None
    default: Any = None
    example: Any = None


class MediaTypeSummary(_Frozen):
    schema_: Optional[SchemaSummary] = Field(default=None, alias="schema")


class EndpointParameter(_Frozen):
    name: str
    location: str = Field(alias="in")
    description: Optional[str] = None
    required: bool = False
    schema_: Optional[SchemaSummary] = Field(default=None, alias="schema")


class EndpointResponse(_Frozen):
    description: Optional[str] = None
    content: Optional[dict[str, MediaTypeSummary]] = None


class EndpointRequestBody(_Frozen):
    description: Optional[str] = None
    required: bool = False
    content: Optional[dict[str, MediaTypeSummary]] = None


class Endpoint(_Frozen):
    """Denormalised view of one (path, method) pair, for external persistence.

    Collections are ``None`` rather than empty when the operation declares
    nothing, so that stored rows stay compact.
    """

    path: str
    method: str
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: Optional[list[EndpointParameter]] = None
    responses: Optional[dict[str, EndpointResponse]] = None
    request_body: Optional[EndpointRequestBody] = None
    security: Optional[list[SecurityRequirement]] = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Metadata(_Frozen):
    """Summary of a document stored alongside a contract version."""

    spec_version: Optional[str] = None
    title: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    servers: list[Server] = Field(default_factory=list)
    paths_count: int = 0
    schemas_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


# --- Findings ---


class IssueSeverity(str, enum.Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ChangeSeverity(str, enum.Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class ChangeCategory(str, enum.Enum):
    ENDPOINTS = "endpoints"
    PARAMETERS = "parameters"
    RESPONSES = "responses"
    REQUEST_BODY = "request_body"
    SCHEMAS = "schemas"
    SECURITY = "security"
    OTHER = "other"


class ReportStatus(str, enum.Enum):
    PASSED = "passed"
    WARNING = "warning"
    FAILED = "failed"


class Issue(_Frozen):
    """A validator finding.

    ``type`` is a stable machine-readable code (``missing_title``,
    ``no_paths``, ...) and ``path`` a dotted location such as
    ``paths./users.get``.
    """

    severity: IssueSeverity
    type: str
    message: str
    path: str

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class BreakingChange(_Frozen):
    """A difference between two document versions, classified for consumers.

    Only the change-specific fields relevant to ``type`` are populated; the
    rest stay ``None`` and are omitted from :meth:`to_dict`.
    """

    type: str
    severity: ChangeSeverity
    message: str
    category: ChangeCategory = ChangeCategory.OTHER
    path: Optional[str] = None
    method: Optional[str] = None
    parameter: Optional[str] = None
    status_code: Optional[str] = None
    schema_name: Optional[str] = Field(default=None, alias="schema")
    field: Optional[str] = None
    old_type: Optional[str] = None
    new_type: Optional[str] = None
    scheme: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Insights and reports ---


class DesignPattern(_Frozen):
    pattern: str
    description: str
    quality: str = "good"


class QualityScore(_Frozen):
    score: int
    grade: str
    deductions: list[str] = Field(default_factory=list)


class ValidationReport(_Frozen):
    """The assembled outcome of one contract analysis.

    ``status`` combines the validator's verdict with the diff result: any
    ``critical`` breaking change forces ``failed``.
    """

    status: ReportStatus
    error_count: int = 0
    warning_count: int = 0
    info_count: int = 0
    issues: list[Issue] = Field(default_factory=list)
    breaking_changes: list[BreakingChange] = Field(default_factory=list)
    metadata: Optional[Metadata] = None
    endpoint_count: Optional[int] = None
    quality: Optional[QualityScore] = None

    def notification_events(self) -> list[str]:
        """Names of the notifications a webhook layer should fire for this report."""
        events = [
            "contract.failed"
            if self.status == ReportStatus.FAILED
            else "contract.validated"
        ]
        if self.breaking_changes:
            events.append("breaking_changes.detected")
        return events

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ComparisonResult(_Frozen):
    """Breaking-change comparison of two versions with a gate recommendation."""

    has_breaking_changes: bool
    has_blocking_changes: bool
    total: int = 0
    critical: int = 0
    warning: int = 0
    info: int = 0
    by_category: dict[str, list[BreakingChange]] = Field(default_factory=dict)
    changes: list[BreakingChange] = Field(default_factory=list)
    recommendation: str

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
