"""Classify schema nodes once so downstream walkers can switch on a tag.

JSON Schema leaves ``type`` optional, so "is this an object or an array"
has to be inferred from which keywords are present.  :func:`classify`
performs that inference in one place and returns a :class:`SchemaKind`;
the normalizer, materializer, flattener, and tree builder all dispatch on
the result instead of re-deriving it.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

PARAM_LOCATION_KEY = "x-param-location"
"""Vendor-extension key carrying the parameter location tag on a schema."""

COMPOSITION_KEYWORDS = ("oneOf", "anyOf", "allOf")


class SchemaKind(str, enum.Enum):
    """Structural category of a schema node."""

    ANY = "any"
    NEVER = "never"
    REF = "ref"
    OBJECT = "object"
    ARRAY = "array"
    COMPOSITION = "composition"
    LEAF = "leaf"


def as_schema(node: Any) -> dict[str, Any]:
    """Return *node* if it is a schema object, else an empty dict.

    Booleans are handled by callers before this is reached; anything else
    that is not a mapping is malformed and treated as an empty schema.
    """
    return node if isinstance(node, dict) else {}


def classify(node: Any) -> SchemaKind:
    """Return the :class:`SchemaKind` of *node*.

    Checks run in a fixed order: boolean shorthand, ``$ref``, object,
    array, composition, leaf.  A node that is neither a dict nor a bool is
    classified as :attr:`SchemaKind.LEAF` with no usable information.
    """
    if node is True:
        return SchemaKind.ANY
    if node is False:
        return SchemaKind.NEVER
    if not isinstance(node, dict):
        return SchemaKind.LEAF
    if isinstance(node.get("$ref"), str):
        return SchemaKind.REF

    declared = schema_type(node)
    if declared == "object" or "properties" in node or "additionalProperties" in node:
        return SchemaKind.OBJECT
    if declared == "array" or "items" in node:
        return SchemaKind.ARRAY
    if any(_non_empty_list(node.get(key)) for key in COMPOSITION_KEYWORDS):
        return SchemaKind.COMPOSITION
    return SchemaKind.LEAF


def schema_type(node: Any) -> Optional[str]:
    """Return the declared ``type`` of *node* as a single string.

    OpenAPI 3.1 allows ``type`` to be a list (``["string", "null"]``); the
    first non-null member is returned.  ``None`` when nothing is declared.
    """
    if not isinstance(node, dict):
        return None
    value = node.get("type")
    if isinstance(value, list):
        non_null = [t for t in value if isinstance(t, str) and t != "null"]
        if non_null:
            return non_null[0]
        return "null" if "null" in value else None
    return value if isinstance(value, str) and value else None


def is_nullable(node: Any) -> bool:
    """Return ``True`` for ``nullable: true`` or a 3.1 type list containing ``null``."""
    if not isinstance(node, dict):
        return False
    if node.get("nullable") is True:
        return True
    value = node.get("type")
    return isinstance(value, list) and "null" in value


def composition_members(node: dict[str, Any], keyword: str) -> list[Any]:
    """Return the members listed under *keyword*, or an empty list."""
    members = node.get(keyword)
    return members if isinstance(members, list) else []


def param_location(node: Any) -> Optional[str]:
    """Return the parameter location tag carried by *node*, if any."""
    if not isinstance(node, dict):
        return None
    value = node.get(PARAM_LOCATION_KEY)
    return value if isinstance(value, str) else None


def _non_empty_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0
