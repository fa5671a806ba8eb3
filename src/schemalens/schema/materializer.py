"""Synthesize one concrete example value from a schema.

:func:`materialize` walks a (possibly un-normalized) schema and returns a
JSON-compatible value.  The walk is deterministic: explicit examples win,
objects get every declared property, arrays get exactly one element, and
``oneOf`` / ``anyOf`` contribute only their first branch.

Two guards keep the walk finite:

* a stack of in-flight ``$ref`` pointers -- a pointer met again on the same
  path yields :data:`CIRCULAR_SENTINEL`;
* a depth cap (:data:`MAX_DEPTH`) -- deeper nodes yield
  :data:`DEPTH_SENTINEL`, which catches long acyclic chains.

Neither guard raises; the result always contains *some* value.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from schemalens.parser.resolver import SchemaResolver
from schemalens.schema.kinds import (
    SchemaKind,
    as_schema,
    classify,
    composition_members,
    schema_type,
)
from schemalens.schema.normalizer import normalize

logger = logging.getLogger(__name__)

MAX_DEPTH = 6

ANY_SENTINEL = "<any>"
NEVER_SENTINEL = "<never>"
CIRCULAR_SENTINEL = "<circular>"
DEPTH_SENTINEL = "<max-depth>"
FALLBACK_VALUE = "value"

FORMAT_EXAMPLES: dict[str, str] = {
    "date": "2024-01-01",
    "date-time": "2024-01-01T00:00:00Z",
    "uuid": "3fa85f64-5717-4562-b3fc-2c963f66afa6",
    "email": "user@example.com",
    "uri": "https://example.com",
    "url": "https://example.com",
    "hostname": "example.com",
    "ipv4": "192.168.0.1",
    "ipv6": "2001:db8::1",
}

_DEFAULT_ITEMS = {"type": "string"}


def materialize(
    node: Any,
    resolver: Optional[SchemaResolver] = None,
    ref_stack: Optional[list[str]] = None,
    depth: int = 0,
    max_depth: int = MAX_DEPTH,
) -> Any:
    """Return one example value for *node*.

    Args:
        node: A schema node (dict or boolean).  Malformed values are
            treated as an empty schema.
        resolver: Pointer lookup for ``$ref``; ``None`` leaves refs as their
            raw pointer strings.
        ref_stack: Pointers being expanded on the current path.  Created on
            the initial call.
        depth: Current nesting depth.  Callers normally leave the default.
        max_depth: Depth beyond which :data:`DEPTH_SENTINEL` is returned.

    Returns:
        A JSON-compatible value (dict, list, str, int, bool, or ``None``).

    Example::

        >>> materialize({"type": "array", "items": {"type": "integer"}})
        [0]
    """
    if ref_stack is None:
        ref_stack = []

    if depth > max_depth:
        return DEPTH_SENTINEL

    kind = classify(node)
    if kind is SchemaKind.ANY:
        return ANY_SENTINEL
    if kind is SchemaKind.NEVER:
        return NEVER_SENTINEL

    schema = as_schema(node)
    if kind is SchemaKind.REF:
        return _materialize_ref(schema["$ref"], resolver, ref_stack, depth, max_depth)

    found, value = _direct_example(schema)
    if found:
        return value

    all_of = composition_members(schema, "allOf")
    if all_of:
        without_unions = {k: v for k, v in schema.items() if k not in ("oneOf", "anyOf")}
        merged = normalize(without_unions, resolver, ref_stack)
        if classify(merged) is SchemaKind.OBJECT:
            return _materialize_object(merged, resolver, ref_stack, depth, max_depth)

    if kind is SchemaKind.OBJECT:
        return _materialize_object(schema, resolver, ref_stack, depth, max_depth)
    if kind is SchemaKind.ARRAY:
        return _materialize_array(schema, resolver, ref_stack, depth, max_depth)

    if all_of:
        return materialize(all_of[0], resolver, ref_stack, depth, max_depth)

    for keyword in ("oneOf", "anyOf"):
        branches = composition_members(schema, keyword)
        if branches:
            return materialize(branches[0], resolver, ref_stack, depth, max_depth)

    return _materialize_leaf(schema)


def _materialize_ref(
    pointer: str,
    resolver: Optional[SchemaResolver],
    ref_stack: list[str],
    depth: int,
    max_depth: int,
) -> Any:
    key = resolver.canonical(pointer) if resolver is not None else pointer
    if key in ref_stack:
        logger.debug("Circular $ref %s; emitting sentinel", pointer)
        return CIRCULAR_SENTINEL
    target = resolver.resolve(pointer) if resolver is not None else None
    if target is None:
        return pointer

    ref_stack.append(key)
    try:
        return materialize(target, resolver, ref_stack, depth, max_depth)
    finally:
        ref_stack.pop()


def _direct_example(schema: dict[str, Any]) -> tuple[bool, Any]:
    """Return ``(True, value)`` for the first explicit example source present."""
    if "example" in schema:
        return True, schema["example"]
    examples = schema.get("examples")
    if isinstance(examples, list) and examples:
        return True, examples[0]
    if "default" in schema:
        return True, schema["default"]
    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        return True, enum[0]
    return False, None


def _materialize_object(
    schema: dict[str, Any],
    resolver: Optional[SchemaResolver],
    ref_stack: list[str],
    depth: int,
    max_depth: int,
) -> dict[str, Any]:
    properties = schema.get("properties")
    properties = properties if isinstance(properties, dict) else {}
    required = schema.get("required")
    required_names = {n for n in required if isinstance(n, str)} if isinstance(required, list) else set()

    # Required properties first, then the rest; both alphabetical.
    ordered = sorted(properties, key=lambda name: (name not in required_names, name))
    result = {
        name: materialize(properties[name], resolver, ref_stack, depth + 1, max_depth)
        for name in ordered
    }

    additional = schema.get("additionalProperties")
    if not properties and additional is not None and additional is not False:
        if additional is True:
            result["additionalProp1"] = ANY_SENTINEL
        else:
            result["additionalProp1"] = materialize(
                additional, resolver, ref_stack, depth + 1, max_depth
            )
    return result


def _materialize_array(
    schema: dict[str, Any],
    resolver: Optional[SchemaResolver],
    ref_stack: list[str],
    depth: int,
    max_depth: int,
) -> list[Any]:
    items = schema.get("items", _DEFAULT_ITEMS)
    if items is False:
        return []
    return [materialize(items, resolver, ref_stack, depth + 1, max_depth)]


def _materialize_leaf(schema: dict[str, Any]) -> Any:
    declared = schema_type(schema)
    if declared == "string":
        fmt = schema.get("format")
        return FORMAT_EXAMPLES.get(fmt, "string") if isinstance(fmt, str) else "string"
    if declared in ("integer", "number"):
        return 0
    if declared == "boolean":
        return False
    if declared == "null":
        return None
    return FALLBACK_VALUE
