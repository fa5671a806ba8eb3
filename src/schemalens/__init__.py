"""schemalens -- Inspect OpenAPI 3.x documents and JSON-Schema fragments.

This package turns raw OpenAPI documents into concrete, inspectable
artifacts: a canonical (ref-resolved, ``allOf``-merged) schema, a
materialized example value, a YAML/JSON rendering of that value, a flat
row projection for tables, and a tree projection for hierarchical display.
Operations are grouped into services (by tag), endpoints (by path), and
methods.

Typical workflow::

    schemalens services petstore.json
    schemalens operation addPet petstore.json --view example
    schemalens schema Pet petstore.json --view tree

Modules:
    app: Typer application and CLI entry point.
    cache: Disk cache for remote documents.
    commands: Built-in CLI commands.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration with precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    parser: Document loading, ``$ref`` resolution, operation aggregation.
    schema: Normalization, materialization, emission, flattening, trees.
"""

__version__ = "0.3.0"
