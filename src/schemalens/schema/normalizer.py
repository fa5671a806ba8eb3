"""Canonicalize schema nodes: follow refs, merge ``allOf``, collapse unions.

:func:`normalize` produces a new schema node in which

* ``$ref`` pointers are replaced by their (normalized) targets, with a
  call-local stack of in-flight pointers acting as the cycle guard;
* ``allOf`` members are merged into a single object-like node;
* ``oneOf`` / ``anyOf`` are collapsed to their **first** branch;
* a parameter location tag inherited from an unwrapped ``$ref`` or
  composition is attached without overwriting an existing one.

Collapsing to the first branch is deterministic and deliberately not
data-driven: there is no instance to match branches against, and the
OpenAPI ``discriminator`` keyword is not consulted.

The input is never mutated.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from schemalens.parser.resolver import SchemaResolver
from schemalens.schema.kinds import (
    PARAM_LOCATION_KEY,
    composition_members,
    param_location,
)

logger = logging.getLogger(__name__)


def normalize(
    node: Any,
    resolver: Optional[SchemaResolver] = None,
    ref_stack: Optional[list[str]] = None,
    location: Optional[str] = None,
) -> Any:
    """Return the canonical form of *node*.

    Args:
        node: A schema node (dict or boolean).  Other values are returned
            unchanged.
        resolver: Pointer lookup for ``$ref``.  ``None`` means no document
            context: refs are left unresolved.
        ref_stack: Pointers currently being expanded on this call path.
            Created on the initial call.
        location: Parameter location tag inherited from the caller.

    Returns:
        A new schema node.  A ``$ref`` node that forms a cycle or cannot be
        resolved is returned as-is so consumers can render the pointer.
    """
    if ref_stack is None:
        ref_stack = []

    if isinstance(node, bool) or not isinstance(node, dict):
        return node

    inherited = param_location(node) or location

    pointer = node.get("$ref")
    if isinstance(pointer, str):
        return _normalize_ref(node, pointer, resolver, ref_stack, inherited)

    result = dict(node)

    all_of = composition_members(node, "allOf")
    if all_of:
        result = _merge_all_of(result, all_of, resolver, ref_stack, inherited)

    for keyword in ("oneOf", "anyOf"):
        branches = composition_members(result, keyword)
        if branches:
            chosen = normalize(branches[0], resolver, ref_stack, inherited)
            return _with_location(chosen, inherited)

    return _with_location(result, inherited)


def _normalize_ref(
    node: dict[str, Any],
    pointer: str,
    resolver: Optional[SchemaResolver],
    ref_stack: list[str],
    location: Optional[str],
) -> Any:
    key = resolver.canonical(pointer) if resolver is not None else pointer
    if key in ref_stack:
        logger.debug("Cycle detected at %s; leaving ref unresolved", pointer)
        return node
    if resolver is None:
        return node

    target = resolver.resolve(pointer)
    if target is None:
        return node

    ref_stack.append(key)
    try:
        resolved = normalize(target, resolver, ref_stack, location)
    finally:
        ref_stack.pop()
    return _with_location(resolved, location)


def _merge_all_of(
    base: dict[str, Any],
    members: list[Any],
    resolver: Optional[SchemaResolver],
    ref_stack: list[str],
    location: Optional[str],
) -> dict[str, Any]:
    """Fold normalized ``allOf`` members into a copy of *base*.

    Scalar fields (``type``, ``description``) are first-wins, properties are
    unioned with the first registration winning, ``required`` names are
    unioned, and ``additionalProperties`` is adopted only when absent.
    """
    merged = {key: value for key, value in base.items() if key != "allOf"}
    properties: dict[str, Any] = dict(_properties(merged))
    required: list[str] = list(_required(merged))

    for member in members:
        part = normalize(member, resolver, ref_stack, location)
        if not isinstance(part, dict):
            continue

        for field in ("type", "description"):
            if not merged.get(field) and part.get(field):
                merged[field] = part[field]

        for name, schema in _properties(part).items():
            properties.setdefault(name, schema)

        for name in _required(part):
            if name not in required:
                required.append(name)

        if "additionalProperties" not in merged and "additionalProperties" in part:
            merged["additionalProperties"] = part["additionalProperties"]

    if properties:
        merged["properties"] = properties
    if required:
        merged["required"] = required
    return merged


def _with_location(node: Any, location: Optional[str]) -> Any:
    if location is None or not isinstance(node, dict) or PARAM_LOCATION_KEY in node:
        return node
    return {**node, PARAM_LOCATION_KEY: location}


def _properties(node: dict[str, Any]) -> dict[str, Any]:
    value = node.get("properties")
    return value if isinstance(value, dict) else {}


def _required(node: dict[str, Any]) -> list[str]:
    value = node.get("required")
    if not isinstance(value, list):
        return []
    return [name for name in value if isinstance(name, str)]
