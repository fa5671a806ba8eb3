"""Resolve ``$ref`` pointers against a document's component schema table.

OpenAPI documents use ``$ref`` pointers (e.g.
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition.  Unlike a
deep-copy inliner, this module does **not** rewrite the document: it builds a
lookup table once per document and answers single-pointer queries.  The
normalizer, materializer, and flattener call :meth:`SchemaResolver.resolve`
lazily and keep their own cycle guards, so self-referential schemas never
cause unbounded recursion here.

Only pointers of the shape ``#/components/schemas/<name>`` are answered;
every other shape (external files, URLs, deep pointers) resolves to
``None``.  That is a structural absence, not an error -- callers fall back to
rendering the raw pointer string.

Because naming conventions vary between generators, the table is
supplemented with two alias classes (see :func:`build_schema_table`).
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional
from urllib.parse import quote, unquote

logger = logging.getLogger(__name__)

SCHEMA_POINTER_PREFIX = "#/components/schemas/"


def build_schema_table(document: Any) -> dict[str, Any]:
    """Build the name -> schema lookup table for *document*.

    Every entry of ``components.schemas`` is registered under its own name
    first.  Two alias classes are then added, in document order:

    1. the schema's ``xml.name``, if present and not already claimed;
    2. the part of the name before the first hyphen (``Pet-v2`` -> ``Pet``),
       if not already claimed.

    The first registration of any key wins; later duplicates are dropped
    silently.

    Args:
        document: The raw OpenAPI document.  Anything without a
            ``components.schemas`` mapping yields an empty table.

    Returns:
        A new dict mapping names and aliases to schema nodes.
    """
    schemas = _component_schemas(document)
    table: dict[str, Any] = dict(schemas)

    for name, schema in schemas.items():
        xml_name = _xml_name(schema)
        if xml_name and xml_name not in table:
            table[xml_name] = schema

        prefix = name.split("-", 1)[0]
        if prefix and prefix != name and prefix not in table:
            table[prefix] = schema

    return table


def decode_pointer_name(pointer: str) -> Optional[str]:
    """Extract the component name from a ``#/components/schemas/<name>`` pointer.

    The name segment is percent-decoded, then JSON-Pointer unescaped
    (RFC 6901: ``~1`` for ``/``, ``~0`` for ``~``).

    Returns:
        The decoded name, or ``None`` when *pointer* has any other shape.
    """
    if not isinstance(pointer, str) or not pointer.startswith(SCHEMA_POINTER_PREFIX):
        return None
    raw = pointer[len(SCHEMA_POINTER_PREFIX):]
    if not raw or "/" in raw:
        return None
    return unquote(raw).replace("~1", "/").replace("~0", "~")


class SchemaResolver:
    """Pure pointer lookup over a table built once per document.

    Instances are immutable after construction and safe to share across
    threads.  A resolver built from an empty table represents "no document
    context": it resolves nothing.

    Args:
        table: Name/alias -> schema mapping, normally produced by
            :func:`build_schema_table`.
        names: Primary component names in document order (aliases
            excluded).  Defaults to the table's keys.

    Example::

        resolver = SchemaResolver.from_document(raw)
        pet = resolver.resolve("#/components/schemas/Pet")
    """

    def __init__(
        self,
        table: Optional[dict[str, Any]] = None,
        names: Optional[list[str]] = None,
    ) -> None:
        self._table: dict[str, Any] = dict(table or {})
        self._names: tuple[str, ...] = tuple(names if names is not None else self._table)

    @classmethod
    def from_document(cls, document: Any) -> SchemaResolver:
        """Build a resolver for *document* (see :func:`build_schema_table`)."""
        return cls(build_schema_table(document), list(_component_schemas(document)))

    @property
    def names(self) -> tuple[str, ...]:
        """Primary component schema names, in document order."""
        return self._names

    def aliases(self, name: str) -> list[str]:
        """Return every alias key that resolves to the schema registered as *name*."""
        target = self._table.get(name)
        if target is None:
            return []
        return [
            key for key, value in self._table.items()
            if value is target and key != name and key not in self._names
        ]

    def resolve(self, pointer: str) -> Optional[Any]:
        """Return the schema addressed by *pointer*, or ``None``.

        Args:
            pointer: A ``$ref`` string such as
                ``"#/components/schemas/Pet%20Owner"``.

        Returns:
            The referenced schema node, or ``None`` if the pointer has an
            unsupported shape or names nothing in the table.
        """
        name = decode_pointer_name(pointer)
        if name is None:
            logger.debug("Unsupported $ref shape: %s", pointer)
            return None
        schema = self._table.get(name)
        if schema is None:
            logger.debug("Unresolved $ref: %s", pointer)
        return schema

    def primary_name(self, name: str) -> Optional[str]:
        """Return the component name *name* (a name or alias) was registered from.

        Example::

            >>> resolver.primary_name("Pet")
            'Pet-v2'
        """
        target = self._table.get(name)
        if target is None:
            return None
        if name in self._names:
            return name
        for primary in self._names:
            if self._table.get(primary) is target:
                return primary
        return name

    def pointer_for(self, name: str) -> Optional[str]:
        """Return the ``$ref`` pointer of the component behind *name*, or ``None``."""
        primary = self.primary_name(name)
        if primary is None:
            return None
        escaped = primary.replace("~", "~0").replace("/", "~1")
        return SCHEMA_POINTER_PREFIX + quote(escaped, safe="~")

    def canonical(self, pointer: str) -> str:
        """Map *pointer* to the pointer of its primary component.

        Aliases share one cycle-guard key with the component they name;
        pointers that resolve to nothing are returned unchanged.
        """
        name = decode_pointer_name(pointer)
        if name is None:
            return pointer
        return self.pointer_for(name) or pointer

    def get(self, name: str) -> Optional[Any]:
        """Look up a schema by (already decoded) name or alias."""
        return self._table.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)


def _component_schemas(document: Any) -> dict[str, Any]:
    if not isinstance(document, dict):
        return {}
    components = document.get("components")
    if not isinstance(components, dict):
        return {}
    schemas = components.get("schemas")
    if not isinstance(schemas, dict):
        return {}
    return {str(name): schema for name, schema in schemas.items()}


def _xml_name(schema: Any) -> Optional[str]:
    if not isinstance(schema, dict):
        return None
    xml = schema.get("xml")
    if not isinstance(xml, dict):
        return None
    name = xml.get("name")
    return name if isinstance(name, str) and name else None
