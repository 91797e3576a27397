"""contractlens -- Validate OpenAPI/Swagger contracts and detect breaking changes.

This package parses an OpenAPI 3.x or Swagger 2.0 document into an
immutable document model, validates it against structural and
best-practice rules, and diffs two versions to find changes that would
break existing API consumers.

Typical workflow::

    contractlens validate openapi.yaml
    contractlens diff main/openapi.yaml openapi.yaml --fail-on warning
    contractlens report openapi.yaml --previous main/openapi.yaml

Modules:
    parser: Decoding, ``$ref`` resolution and the document model builder.
    validator: Rule checks producing issues and an overall status.
    diff: Breaking-change detection between two versions.
    insights: Naming checks, design patterns and the quality score.
    report: Report assembly for storage and notification layers.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration with precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
