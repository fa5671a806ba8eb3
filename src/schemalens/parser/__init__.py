"""Document loading, operation aggregation, and component lookup.

* :func:`load_document` -- read a raw document from URL, file, or stdin.
* :func:`validate_openapi_version` -- reject Swagger 2.x and non-3.x documents.
* :func:`aggregate` -- group operations into :class:`~schemalens.models.Service` objects.
* :class:`SchemaResolver` -- resolve ``#/components/schemas`` pointers and aliases.
"""

from schemalens.parser.aggregator import aggregate, document_title
from schemalens.parser.loader import load_document, validate_openapi_version
from schemalens.parser.resolver import SchemaResolver, build_schema_table

__all__ = [
    "SchemaResolver",
    "aggregate",
    "build_schema_table",
    "document_title",
    "load_document",
    "validate_openapi_version",
]
