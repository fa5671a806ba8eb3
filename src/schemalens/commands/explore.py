"""Explore commands -- list services and render operation and component schemas.

Provides the read-only commands registered directly on the root app:

* ``services`` -- every operation grouped by service, endpoint, and method.
* ``operation`` -- the request or response schema of one operation.
* ``schema`` -- one component schema, by name or alias.
* ``schemas`` -- the component schema names and their aliases.

Each command loads the document (``SOURCE`` argument, else the configured
default source), and renders through the global
:class:`~schemalens.output.OutputManager`.  Schemas can be shown in four
views: a materialized ``example`` (YAML or JSON), flattened ``rows``, a
``tree``, or the normalized ``schema`` itself.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Optional

import typer

from schemalens.exceptions import InvalidUsageError, NotFoundError, SchemalensError
from schemalens.models import GlobalConfig, SchemaRow
from schemalens.output import (
    OutputFormat,
    error,
    format_response,
    get_output,
    info,
    print_table,
    print_tree,
    suggest,
)

logger = logging.getLogger(__name__)


class View(str, enum.Enum):
    """Projection used to render a schema."""

    EXAMPLE = "example"
    ROWS = "rows"
    TREE = "tree"
    SCHEMA = "schema"


class Part(str, enum.Enum):
    """Which side of an operation to render."""

    REQUEST = "request"
    RESPONSE = "response"


class Payload(str, enum.Enum):
    """Text format of a materialized example."""

    YAML = "yaml"
    JSON = "json"


ROW_HEADERS = ["Name", "Type", "Required", "In", "Format", "Enum", "Example", "Description"]

_SOURCE_HELP = "OpenAPI document: URL, file path, or '-' for stdin. Defaults to the configured source."


def _load(source: Optional[str]) -> tuple[dict[str, Any], GlobalConfig]:
    """Resolve config, then load and version-check the document.

    Raises:
        InvalidUsageError: If no source was given or configured.
        SpecParseError: If the document cannot be loaded or is not OpenAPI 3.x.
    """
    from schemalens.cache import DocumentCache
    from schemalens.config import get_cache_dir, resolve_config
    from schemalens.parser import load_document, validate_openapi_version

    config = resolve_config(cli_source=source)
    resolved = config.loader.default_source
    if not resolved:
        raise InvalidUsageError(
            "No document given. Pass SOURCE or set SCHEMALENS_SOURCE / loader.default_source."
        )

    cache = DocumentCache(get_cache_dir(), config.cache)
    try:
        document = load_document(resolved, config.loader, cache)
    finally:
        cache.close()

    version = validate_openapi_version(document)
    logger.debug("Loaded %s (OpenAPI %s)", resolved, version)
    return document, config


def _fail(exc: SchemalensError) -> typer.Exit:
    error(str(exc))
    if isinstance(exc, NotFoundError):
        suggest("Run 'schemalens services' or 'schemalens schemas' to list valid names.")
    return typer.Exit(code=exc.exit_code)


def services_command(
    source: Optional[str] = typer.Argument(None, help=_SOURCE_HELP),
) -> None:
    """List services, endpoints, and operations.

    One row per operation: service (tag), HTTP method, path, and
    operation id.  Services follow the document's tag order; untagged
    operations appear under ``default``.

    Example::

        schemalens services petstore.yaml
        schemalens --json services https://example.com/openapi.json
    """
    from schemalens.parser import aggregate, document_title

    try:
        document, _ = _load(source)
        services = aggregate(document)
    except SchemalensError as exc:
        raise _fail(exc) from None

    rows = [
        [service.name, operation.method.value, endpoint.path, operation.operation_id]
        for service in services
        for endpoint in service.endpoints
        for operation in endpoint.operations
    ]
    print_table(
        ["Service", "Method", "Path", "Operation"],
        rows,
        title=f"{document_title(document)} -- Operations ({len(rows)})",
    )


def operation_command(
    operation_id: str = typer.Argument(help="operationId, or 'METHOD /path' when none is declared."),
    source: Optional[str] = typer.Argument(None, help=_SOURCE_HELP),
    part: Part = typer.Option(Part.RESPONSE, "--part", help="Request or response schema."),
    view: View = typer.Option(View.EXAMPLE, "--view", help="How to render the schema."),
    payload: Optional[Payload] = typer.Option(
        None, "--payload", help="Example text format (default: output.payload)."
    ),
) -> None:
    """Render the request or response schema of one operation.

    The request schema combines parameters (grouped by location) and the
    JSON request body; the response schema is the body of the preferred
    success response.

    Example::

        schemalens operation listPets petstore.yaml
        schemalens operation createPet petstore.yaml --part request --view rows
        schemalens operation "GET /health" petstore.yaml --view tree
    """
    from schemalens.parser import SchemaResolver, aggregate

    try:
        document, config = _load(source)
        services = aggregate(document)
        operation = None
        for service in services:
            operation = service.find_operation(operation_id)
            if operation is not None:
                break
        if operation is None:
            raise NotFoundError(f"Operation '{operation_id}' not found")
    except SchemalensError as exc:
        raise _fail(exc) from None

    schema = operation.request if part is Part.REQUEST else operation.response
    if schema is None:
        info(f"Operation '{operation_id}' declares no {part.value} schema.")
        return

    resolver = SchemaResolver.from_document(document)
    _render(schema, operation_id, resolver, config, view, payload)


def schema_command(
    name: str = typer.Argument(help="Component schema name or alias."),
    source: Optional[str] = typer.Argument(None, help=_SOURCE_HELP),
    view: View = typer.Option(View.EXAMPLE, "--view", help="How to render the schema."),
    payload: Optional[Payload] = typer.Option(
        None, "--payload", help="Example text format (default: output.payload)."
    ),
) -> None:
    """Render one component schema.

    *NAME* may be the component key, its ``xml.name``, or the prefix
    before a hyphen (``Pet`` for ``Pet-v2``).

    Example::

        schemalens schema Pet petstore.yaml
        schemalens schema Pet petstore.yaml --view tree
    """
    from schemalens.parser import SchemaResolver

    try:
        document, config = _load(source)
        resolver = SchemaResolver.from_document(document)
        if name not in resolver:
            raise NotFoundError(f"Schema '{name}' not found")
    except SchemalensError as exc:
        raise _fail(exc) from None

    # Entering through the pointer puts the component on every cycle guard.
    root = {"$ref": resolver.pointer_for(name)}
    _render(root, name, resolver, config, view, payload)


def schemas_command(
    source: Optional[str] = typer.Argument(None, help=_SOURCE_HELP),
) -> None:
    """List component schemas with their type and aliases.

    Example::

        schemalens schemas petstore.yaml
    """
    from schemalens.parser import SchemaResolver
    from schemalens.schema.kinds import classify, schema_type

    try:
        document, _ = _load(source)
    except SchemalensError as exc:
        raise _fail(exc) from None

    resolver = SchemaResolver.from_document(document)
    if not len(resolver):
        info("No schemas defined in this document.")
        return

    rows: list[list[str]] = []
    for name in resolver:
        schema = resolver.get(name)
        kind = schema_type(schema) or classify(schema).value
        rows.append([name, kind, ", ".join(resolver.aliases(name))])
    print_table(["Schema", "Type", "Aliases"], rows, title=f"Schemas ({len(rows)})")


def _render(
    schema: Any,
    root_name: str,
    resolver: Any,
    config: GlobalConfig,
    view: View,
    payload: Optional[Payload],
) -> None:
    from schemalens.schema import flatten, materialize, normalize, to_json, to_tree, to_yaml

    output = get_output()

    if view is View.EXAMPLE:
        value = materialize(schema, resolver, max_depth=config.pipeline.max_depth)
        fmt = payload.value if payload is not None else config.output.payload
        if output.format == OutputFormat.JSON or fmt == Payload.JSON.value:
            output.print_payload(to_json(value), "json")
        else:
            output.print_payload(to_yaml(value), "yaml")

    elif view is View.ROWS:
        rows = flatten(schema, resolver)
        if output.format == OutputFormat.JSON:
            format_response([row.model_dump(mode="json") for row in rows])
        else:
            print_table(ROW_HEADERS, [_row_cells(row) for row in rows], title=root_name)

    elif view is View.TREE:
        print_tree(to_tree(schema, root_name, resolver))

    else:
        format_response(normalize(schema, resolver))


def _row_cells(row: SchemaRow) -> list[str]:
    return [
        "  " * row.depth + row.name,
        row.type,
        "yes" if row.required else "",
        row.param_location.value if row.param_location else "",
        row.format or "",
        row.enum,
        row.example,
        row.description,
    ]
