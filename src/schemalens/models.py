"""Canonical Pydantic models shared across all schemalens modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig`, :class:`CacheConfig`, :class:`LoaderConfig`,
    :class:`PipelineConfig`, and :class:`GlobalConfig`.

**Pipeline output models** -- produced by the aggregator, flattener, and tree
builder, and consumed by the CLI renderers:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`Operation`,
    :class:`Endpoint`, :class:`Service`, :class:`SchemaRow`, and
    :class:`TreeNode`.

Schema nodes themselves are *not* modelled: they stay plain JSON values
(``dict`` or ``bool``) exactly as they were loaded, and every pipeline stage
returns new values instead of mutating its input.  Pipeline output models are
frozen for the same reason.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class OutputConfig(BaseModel):
    """Default output preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )
    payload: str = Field(
        default="yaml", description="Example payload format: yaml or json"
    )


class CacheConfig(BaseModel):
    """Remote document cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=True, description="Cache fetched remote documents")
    ttl_seconds: int = Field(default=300, description="Cache TTL in seconds")


class LoaderConfig(BaseModel):
    """Settings for fetching and reading raw documents."""

    timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    data_root: Optional[str] = Field(
        default=None,
        description="When set, local documents must live inside this directory",
    )
    default_source: Optional[str] = Field(
        default=None, description="Document used when a command omits SOURCE"
    )


class PipelineConfig(BaseModel):
    """Tuning knobs for the schema pipeline."""

    max_depth: int = Field(
        default=6, ge=0, description="Materialization depth before the cut-off sentinel"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/schemalens/config.json``.

    Loaded and saved by :func:`~schemalens.config.load_global_config` and
    :func:`~schemalens.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~schemalens.config.resolve_config`.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)


# --- Pipeline Output Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods grouped by the aggregator.

    Declaration order is the display precedence of methods within an
    endpoint.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    PATH = "path"
    HEADER = "header"
    COOKIE = "cookie"


class Operation(BaseModel):
    """A single HTTP method on an endpoint with its selected schemas.

    ``request`` merges the parameter schema and the request body schema;
    ``response`` is the schema of the preferred success response.  Either
    may be ``None`` when the document declares nothing for it.
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    operation_id: str
    request: Any = None
    response: Any = None


class Endpoint(BaseModel):
    """A URL path and its operations, sorted by :class:`HTTPMethod` order."""

    model_config = ConfigDict(frozen=True)

    path: str
    operations: list[Operation] = Field(default_factory=list)


class Service(BaseModel):
    """A named group of endpoints (one per OpenAPI tag)."""

    model_config = ConfigDict(frozen=True)

    name: str
    endpoints: list[Endpoint] = Field(default_factory=list)

    def find_operation(self, operation_id: str) -> Optional[Operation]:
        """Return the first operation with *operation_id*, or ``None``."""
        for endpoint in self.endpoints:
            for operation in endpoint.operations:
                if operation.operation_id == operation_id:
                    return operation
        return None


class SchemaRow(BaseModel):
    """One line of the flattened, tabular projection of a schema.

    ``structural`` marks rows that carry no leaf value: array bracket rows
    and the heading row of a named array property, whose item rows follow.
    Text fields hold display-ready strings.
    """

    model_config = ConfigDict(frozen=True)

    depth: int
    name: str
    type: str = ""
    required: bool = False
    format: Optional[str] = None
    nullable: bool = False
    enum: str = ""
    example: str = ""
    minimum: Optional[int | float] = None
    maximum: Optional[int | float] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    pattern: Optional[str] = None
    description: str = ""
    param_location: Optional[ParameterLocation] = None
    structural: bool = False


class TreeNode(BaseModel):
    """A labelled node of the hierarchical projection of a schema.

    ``key`` is a stable path (``Schema.pet.tags[]``) usable as an identifier
    by renderers.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    key: str
    children: list[TreeNode] = Field(default_factory=list)
