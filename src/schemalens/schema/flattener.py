"""Project a schema into an ordered, depth-annotated list of rows.

:func:`flatten` produces one :class:`~schemalens.models.SchemaRow` per
property or leaf, in declaration order, with ``depth`` giving the
indentation level for tabular display:

* object properties are emitted at the current depth; the children of a
  structural property (object or array) follow it at ``depth + 1``;
* arrays are bracketed by structural ``[`` / ``]`` rows, with the item
  schema flattened one level deeper;
* ``additionalProperties`` appears as a synthetic property of that name;
* a parameter location tag is inherited by descendants unless overridden.

A single set of expanded ``$ref`` pointers is shared by the whole call, so a
component is expanded at most once per table no matter how many places (or
cycles) reference it.  Later occurrences render as a ``$ref: <pointer>``
leaf.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from schemalens.models import ParameterLocation, SchemaRow
from schemalens.parser.resolver import SchemaResolver
from schemalens.schema.kinds import (
    SchemaKind,
    classify,
    is_nullable,
    param_location,
    schema_type,
)
from schemalens.schema.normalizer import normalize

ROOT_NAME = "value"
OPEN_BRACKET = "["
CLOSE_BRACKET = "]"
EXAMPLE_TEXT_LIMIT = 80

_LOCATIONS = {loc.value: loc for loc in ParameterLocation}


def flatten(node: Any, resolver: Optional[SchemaResolver] = None) -> list[SchemaRow]:
    """Return the flattened rows of *node*.

    Args:
        node: A schema node (dict or boolean).
        resolver: Pointer lookup for ``$ref``; ``None`` leaves refs
            unexpanded.

    Returns:
        A new list of rows.  An object root contributes its properties at
        depth 0; an array root contributes its brackets at depth 0; any
        other root becomes a single row named ``value``.

    Example::

        >>> [r.name for r in flatten({"type": "array", "items": {"type": "integer"}})]
        ['[', 'items', ']']
    """
    return _Flattener(resolver).run(node)


def format_example(value: Any) -> str:
    """Render an example value as compact JSON, truncated for table cells."""
    try:
        text = json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        text = str(value)
    if len(text) > EXAMPLE_TEXT_LIMIT:
        return text[: EXAMPLE_TEXT_LIMIT - 3] + "..."
    return text


def format_enum(values: Any) -> str:
    """Render ``enum`` values as a comma-separated list of JSON literals."""
    if not isinstance(values, list):
        return ""
    return ", ".join(format_example(v) for v in values)


class _Flattener:
    """Stateful walker for one top-level :func:`flatten` call."""

    def __init__(self, resolver: Optional[SchemaResolver]) -> None:
        self._resolver = resolver
        self._seen: set[str] = set()
        self._path: list[str] = []
        self._rows: list[SchemaRow] = []

    def run(self, node: Any) -> list[SchemaRow]:
        if isinstance(node, bool):
            self._rows.append(_boolean_row(ROOT_NAME, node, 0, False, None))
            return self._rows

        mark = len(self._path)
        schema = self._canonical(node, None)
        location = param_location(schema)
        kind = classify(schema)
        if kind is SchemaKind.OBJECT:
            self._walk_object(schema, 0, location)
        elif kind is SchemaKind.ARRAY:
            self._walk_array(schema, 0, location)
        else:
            self._rows.append(_leaf_row(ROOT_NAME, schema, 0, False, location))
        del self._path[mark:]
        return self._rows

    def _canonical(self, node: Any, location: Optional[str]) -> Any:
        """Follow top-level refs through the shared guard, then normalize.

        Followed pointers are pushed onto the ancestor path, which callers
        truncate once the node's rows are emitted.  :func:`normalize` only
        sees that path as its cycle guard.
        """
        location = param_location(node) or location
        while isinstance(node, dict) and isinstance(node.get("$ref"), str):
            if self._resolver is None:
                return node
            pointer = self._resolver.canonical(node["$ref"])
            if pointer in self._seen:
                return node
            target = self._resolver.resolve(node["$ref"])
            if target is None:
                return node
            self._seen.add(pointer)
            self._path.append(pointer)
            location = param_location(node) or location
            node = target
        return normalize(node, self._resolver, list(self._path), location)

    def _walk_object(self, schema: dict[str, Any], depth: int, location: Optional[str]) -> None:
        properties = schema.get("properties")
        properties = properties if isinstance(properties, dict) else {}
        required = schema.get("required")
        required_names = (
            {n for n in required if isinstance(n, str)} if isinstance(required, list) else set()
        )

        for name, prop in properties.items():
            self._emit_property(str(name), prop, name in required_names, depth, location)

        additional = schema.get("additionalProperties")
        if additional is not None and additional is not False:
            self._emit_property("additionalProperties", additional, False, depth, location)

    def _emit_property(
        self,
        name: str,
        prop: Any,
        required: bool,
        depth: int,
        location: Optional[str],
    ) -> None:
        if isinstance(prop, bool):
            self._rows.append(_boolean_row(name, prop, depth, required, location))
            return

        mark = len(self._path)
        schema = self._canonical(prop, location)
        location = param_location(schema) or location
        kind = classify(schema)
        heading = kind is SchemaKind.ARRAY
        self._rows.append(_leaf_row(name, schema, depth, required, location, structural=heading))
        if kind is SchemaKind.OBJECT:
            self._walk_object(schema, depth + 1, location)
        elif kind is SchemaKind.ARRAY:
            self._walk_array(schema, depth + 1, location)
        del self._path[mark:]

    def _walk_array(self, schema: dict[str, Any], depth: int, location: Optional[str]) -> None:
        self._rows.append(_bracket_row(OPEN_BRACKET, depth, location))

        items = schema.get("items", True)
        if isinstance(items, bool):
            self._rows.append(_boolean_row("items", items, depth + 1, False, location))
        else:
            mark = len(self._path)
            item = self._canonical(items, location)
            item_location = param_location(item) or location
            kind = classify(item)
            if kind is SchemaKind.OBJECT:
                self._walk_object(item, depth + 1, item_location)
            elif kind is SchemaKind.ARRAY:
                self._walk_array(item, depth + 1, item_location)
            else:
                self._rows.append(_leaf_row("items", item, depth + 1, False, item_location))
            del self._path[mark:]

        self._rows.append(_bracket_row(CLOSE_BRACKET, depth, location))


def _type_text(schema: Any) -> str:
    kind = classify(schema)
    if kind is SchemaKind.REF:
        return f"$ref: {schema['$ref']}"
    declared = schema_type(schema)
    if declared:
        return declared
    if kind is SchemaKind.OBJECT:
        return "object"
    if kind is SchemaKind.ARRAY:
        return "array"
    return ""


def _location(location: Optional[str]) -> Optional[ParameterLocation]:
    return _LOCATIONS.get(location) if location else None


def _boolean_row(
    name: str, value: bool, depth: int, required: bool, location: Optional[str]
) -> SchemaRow:
    return SchemaRow(
        depth=depth,
        name=name,
        type="any" if value else "never",
        required=required,
        param_location=_location(location),
    )


def _bracket_row(name: str, depth: int, location: Optional[str]) -> SchemaRow:
    return SchemaRow(
        depth=depth,
        name=name,
        type="array",
        param_location=_location(location),
        structural=True,
    )


def _leaf_row(
    name: str,
    schema: Any,
    depth: int,
    required: bool,
    location: Optional[str],
    structural: bool = False,
) -> SchemaRow:
    data = schema if isinstance(schema, dict) else {}

    example = ""
    if "example" in data:
        example = format_example(data["example"])
    elif isinstance(data.get("examples"), list) and data["examples"]:
        example = format_example(data["examples"][0])

    description = data.get("description")
    fmt = data.get("format")
    pattern = data.get("pattern")
    return SchemaRow(
        depth=depth,
        name=name,
        type=_type_text(data),
        required=required,
        format=fmt if isinstance(fmt, str) else None,
        nullable=is_nullable(data),
        enum=format_enum(data.get("enum")),
        example=example,
        minimum=_number(data.get("minimum")),
        maximum=_number(data.get("maximum")),
        min_length=_integer(data.get("minLength")),
        max_length=_integer(data.get("maxLength")),
        min_items=_integer(data.get("minItems")),
        max_items=_integer(data.get("maxItems")),
        pattern=pattern if isinstance(pattern, str) else None,
        description=description if isinstance(description, str) else "",
        param_location=_location(location),
        structural=structural,
    )


def _number(value: Any) -> Optional[int | float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _integer(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value
