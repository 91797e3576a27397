"""Inspect commands -- examine a document without validating it.

Provides the ``contractlens inspect`` sub-command group with read-only
views of a document: its metadata summary, the flat endpoint projection,
and the named component schemas. Every sub-command takes a SOURCE (file
path, URL, or ``-`` for stdin).
"""

from __future__ import annotations

from typing import Optional

import typer

from contractlens.commands.common import effective_config, load_document
from contractlens.output import OutputFormat, emit, get_output, info
from contractlens.parser import extract_endpoints, extract_metadata


inspect_app = typer.Typer(no_args_is_help=True)

_SOURCE_HELP = "Spec file path, URL, or '-' for stdin."


@inspect_app.command("info")
def inspect_info(
    source: str = typer.Argument(help=_SOURCE_HELP),
    format_hint: Optional[str] = typer.Option(None, "--format-hint", help="json or yaml."),
) -> None:
    """Show document metadata (version marker, title, servers, counts).

    Example::

        contractlens inspect info openapi.yaml
    """
    document = load_document(source, effective_config(), format_hint)
    emit(extract_metadata(document).to_dict())


@inspect_app.command("endpoints")
def inspect_endpoints(
    source: str = typer.Argument(help=_SOURCE_HELP),
    format_hint: Optional[str] = typer.Option(None, "--format-hint", help="json or yaml."),
) -> None:
    """List every (path, method) pair in canonical order.

    With ``--json`` the full endpoint projection is printed, as it would be
    stored next to a contract version.

    Example::

        contractlens inspect endpoints openapi.yaml
        contractlens --json inspect endpoints openapi.yaml
    """
    document = load_document(source, effective_config(), format_hint)
    endpoints = extract_endpoints(document)

    output = get_output()
    if output.format == OutputFormat.JSON:
        emit([endpoint.to_dict() for endpoint in endpoints])
        return

    if not endpoints:
        info("No endpoints defined in this document.")
        return

    rows = [
        [
            endpoint.method,
            endpoint.path,
            endpoint.summary or "-",
            str(len(endpoint.parameters or [])),
            ", ".join(endpoint.responses or {}) or "-",
        ]
        for endpoint in endpoints
    ]
    output.print_table(
        ["Method", "Path", "Summary", "Params", "Responses"],
        rows,
        title=f"Endpoints ({len(rows)})",
    )


@inspect_app.command("schemas")
def inspect_schemas(
    source: str = typer.Argument(help=_SOURCE_HELP),
    format_hint: Optional[str] = typer.Option(None, "--format-hint", help="json or yaml."),
) -> None:
    """List the named component schemas with their type and required fields.

    Example::

        contractlens inspect schemas openapi.yaml
    """
    document = load_document(source, effective_config(), format_hint)
    schemas = document.components.schemas

    if not schemas:
        info("No schemas defined in this document.")
        return

    rows: list[list[str]] = []
    for name, schema in schemas.items():
        prop_names = list(schema.properties)
        props = ", ".join(prop_names[:5])
        if len(prop_names) > 5:
            props += "..."
        rows.append([
            name,
            schema.type or ("composed" if schema.has_composition else "-"),
            ", ".join(schema.required or []) or "-",
            props or "-",
        ])

    get_output().print_table(
        ["Schema", "Type", "Required", "Properties"], rows, title=f"Schemas ({len(rows)})"
    )
