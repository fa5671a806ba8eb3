"""Build a labelled hierarchy of :class:`~schemalens.models.TreeNode` from a schema.

The walk mirrors the row flattener but keeps the nesting:

* objects get one child per property (required ones marked ``*``) plus an
  ``additionalProperties`` child when present;
* arrays get a single ``items`` child;
* each non-empty ``oneOf`` / ``anyOf`` / ``allOf`` becomes a wrapper child
  holding one child per branch, numbered ``#1``, ``#2``, ...

Every label summarizes the node: ref target, declared type, format,
nullability, description, enum cardinality, and example.  Keys are stable
dotted paths (``Schema.owner.tags[]``) suitable as renderer identifiers.

Without a resolver, ``$ref`` nodes are shown as leaves naming their target.
With one, each ref is expanded in place, guarded by the same in-flight
pointer stack the normalizer uses.
"""

from __future__ import annotations

from typing import Any, Optional

from schemalens.models import TreeNode
from schemalens.parser.resolver import SchemaResolver
from schemalens.schema.flattener import format_example
from schemalens.schema.kinds import (
    COMPOSITION_KEYWORDS,
    SchemaKind,
    classify,
    composition_members,
    is_nullable,
    schema_type,
)

ADDITIONAL_KEY = "$additional"


def to_tree(
    node: Any,
    root_name: str = "Schema",
    resolver: Optional[SchemaResolver] = None,
) -> list[TreeNode]:
    """Return the tree projection of *node* as a single-root list.

    Args:
        node: A schema node (dict or boolean).
        root_name: Label and key of the root node.
        resolver: Optional pointer lookup used to expand ``$ref`` nodes.

    Returns:
        A one-element list holding the root :class:`TreeNode`.  A boolean
        root yields a single childless node labelled ``any`` or ``never``.
    """
    if isinstance(node, bool):
        return [TreeNode(label=f"{root_name}: {_boolean_text(node)}", key=root_name)]

    schema = node if isinstance(node, dict) else {}
    builder = _TreeBuilder(resolver)
    return [builder.build(schema, root_name, f"{root_name}: {summarize(schema) or 'object'}")]


def summarize(schema: Any) -> str:
    """Return the short type summary used in labels (``$ref``, type, format, nullable)."""
    if not isinstance(schema, dict):
        return ""
    parts: list[str] = []
    if isinstance(schema.get("$ref"), str):
        parts.append(f"$ref: {schema['$ref']}")
    declared = schema_type(schema)
    if declared:
        parts.append(declared)
    fmt = schema.get("format")
    if isinstance(fmt, str) and fmt:
        parts.append(f"({fmt})")
    if is_nullable(schema):
        parts.append("nullable")
    if not parts and isinstance(schema.get("enum"), list) and schema["enum"]:
        parts.append("enum")
    return " ".join(parts)


def decorate(label: str, schema: Any) -> str:
    """Append description, enum cardinality, and example text to *label*."""
    if not isinstance(schema, dict):
        return label
    text = label
    description = schema.get("description")
    if isinstance(description, str) and description.strip():
        text = f"{text} - {description.strip()}"
    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        text = f"{text} [enum:{len(enum)}]"
    if "example" in schema:
        text = f"{text} ex: {format_example(schema['example'])}"
    elif isinstance(schema.get("examples"), list) and schema["examples"]:
        text = f"{text} ex: {format_example(schema['examples'][0])}"
    return text


class _TreeBuilder:
    def __init__(self, resolver: Optional[SchemaResolver]) -> None:
        self._resolver = resolver
        self._ref_stack: list[str] = []

    def build(self, schema: dict[str, Any], key: str, label: str) -> TreeNode:
        if classify(schema) is SchemaKind.REF and self._resolver is not None:
            pointer = schema["$ref"]
            guard = self._resolver.canonical(pointer)
            target = None if guard in self._ref_stack else self._resolver.resolve(pointer)
            if isinstance(target, bool):
                return TreeNode(label=f"{label} -> {_boolean_text(target)}", key=key)
            if isinstance(target, dict):
                self._ref_stack.append(guard)
                try:
                    return self.build(target, key, label)
                finally:
                    self._ref_stack.pop()

        children = self._composition_children(schema, key)
        kind = classify(schema)
        if kind is SchemaKind.ARRAY:
            children.append(self._items_child(schema, key))
        elif kind is SchemaKind.OBJECT:
            children.extend(self._property_children(schema, key))
        return TreeNode(label=decorate(label, schema), key=key, children=children)

    def _child(self, node: Any, key: str, name: str) -> TreeNode:
        if isinstance(node, bool):
            return TreeNode(label=f"{name}: {_boolean_text(node)}", key=key)
        schema = node if isinstance(node, dict) else {}
        return self.build(schema, key, f"{name}: {summarize(schema) or 'object'}")

    def _composition_children(self, schema: dict[str, Any], key: str) -> list[TreeNode]:
        wrappers: list[TreeNode] = []
        for keyword in COMPOSITION_KEYWORDS:
            members = composition_members(schema, keyword)
            if not members:
                continue
            branches = [
                self._child(member, f"{key}.{keyword}[{index}]", f"#{index + 1}")
                for index, member in enumerate(members)
            ]
            wrappers.append(TreeNode(label=keyword, key=f"{key}:{keyword}", children=branches))
        return wrappers

    def _items_child(self, schema: dict[str, Any], key: str) -> TreeNode:
        return self._child(schema.get("items", True), f"{key}[]", "items")

    def _property_children(self, schema: dict[str, Any], key: str) -> list[TreeNode]:
        properties = schema.get("properties")
        properties = properties if isinstance(properties, dict) else {}
        required = schema.get("required")
        required_names = (
            {n for n in required if isinstance(n, str)} if isinstance(required, list) else set()
        )

        nodes = []
        for name, prop in properties.items():
            marker = " *" if name in required_names else ""
            nodes.append(self._child(prop, f"{key}.{name}", f"{name}{marker}"))

        additional = schema.get("additionalProperties")
        additional_key = f"{key}.{ADDITIONAL_KEY}"
        if additional is True:
            nodes.append(TreeNode(label="additionalProperties: any", key=additional_key))
        elif isinstance(additional, dict):
            value = self._child(additional, f"{additional_key}.value", "value")
            nodes.append(
                TreeNode(label="additionalProperties", key=additional_key, children=[value])
            )
        return nodes


def _boolean_text(value: bool) -> str:
    return "any" if value else "never"
