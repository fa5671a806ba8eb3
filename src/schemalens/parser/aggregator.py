"""Group a document's operations into services, endpoints, and methods.

This module walks the raw ``paths`` object of an OpenAPI 3.x document and
builds an ordered list of :class:`~schemalens.models.Service` objects.  For
every operation it also selects the two schemas the explorer displays:

* the **request** schema -- the parameter schema and the request body
  schema, combined under ``params`` / ``body`` when both exist;
* the **response** schema -- the content schema of the preferred success
  response.

Schemas are taken from the raw document (``$ref`` pointers intact); the
schema pipeline resolves them lazily.  Only ``#/components/parameters``,
``#/components/requestBodies``, and ``#/components/responses`` references on
the operation objects themselves are followed here, one level deep.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they
share the same ``in`` and ``name`` values.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Optional

from schemalens.exceptions import EmptyDocumentError
from schemalens.models import Endpoint, HTTPMethod, Operation, Service
from schemalens.schema.kinds import PARAM_LOCATION_KEY

logger = logging.getLogger(__name__)

DEFAULT_TAG = "default"
"""Service name for operations that declare no tags."""

PREFERRED_STATUSES = ("200", "201", "202", "204")

JSON_MEDIA_TYPE = "application/json"

_METHOD_ORDER = {method: index for index, method in enumerate(HTTPMethod)}
_SUCCESS_STATUS_RE = re.compile(r"^2(\d\d|xx)$", re.IGNORECASE)


def aggregate(document: dict[str, Any]) -> list[Service]:
    """Build the ordered service list for *document*.

    Operations without tags are filed under :data:`DEFAULT_TAG`; operations
    with several tags appear under each of them.  Endpoints are sorted by
    path, methods by :class:`~schemalens.models.HTTPMethod` order, and
    services by the document's ``tags`` order (undeclared tags last, by
    name).

    Args:
        document: The raw OpenAPI document.

    Returns:
        A new list of :class:`~schemalens.models.Service` objects.

    Raises:
        EmptyDocumentError: If ``paths`` is missing or empty, or no
            GET/POST/PUT/PATCH/DELETE operation is found.

    Example::

        services = aggregate(load_document("petstore.json"))
        for service in services:
            for endpoint in service.endpoints:
                print(service.name, endpoint.path,
                      [op.method.value for op in endpoint.operations])
    """
    paths = document.get("paths") if isinstance(document, dict) else None
    if not isinstance(paths, dict) or not paths:
        raise EmptyDocumentError("Document declares no paths.")

    grouped: dict[str, dict[str, list[Operation]]] = {}

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            logger.debug("Skipping non-object path item at %s", path)
            continue
        shared_params = _as_list(path_item.get("parameters"))

        for method_key, operation in path_item.items():
            method = _http_method(method_key)
            if method is None or not isinstance(operation, dict):
                continue

            built = _build_operation(document, str(path), method, operation, shared_params)
            for tag in _operation_tags(operation):
                grouped.setdefault(tag, {}).setdefault(str(path), []).append(built)

    if not grouped:
        raise EmptyDocumentError("Document declares no operations.")

    tag_order = _declared_tag_order(document)
    services = [
        Service(name=name, endpoints=_sorted_endpoints(endpoints))
        for name, endpoints in grouped.items()
    ]
    services.sort(key=lambda s: (tag_order.get(s.name, math.inf), s.name))
    return services


def document_title(document: Any) -> str:
    """Return ``info.title`` of *document*, or ``"Untitled API"``."""
    info = document.get("info") if isinstance(document, dict) else None
    title = info.get("title") if isinstance(info, dict) else None
    return title if isinstance(title, str) and title.strip() else "Untitled API"


def merge_parameters(
    document: dict[str, Any],
    path_params: list[Any],
    op_params: list[Any],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Parameters are keyed by ``(in, name)``; an operation-level parameter
    replaces the path-level one with the same key while keeping its
    position.  Entries without a string ``name`` and ``in`` are skipped.

    Args:
        document: The raw document, used to follow
            ``#/components/parameters`` references.
        path_params: Parameters declared on the path item.
        op_params: Parameters declared on the operation.

    Returns:
        A merged list of parameter dicts.
    """
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for raw in [*path_params, *op_params]:
        param = _follow_component(document, raw, "parameters")
        if not isinstance(param, dict):
            continue
        name, location = param.get("name"), param.get("in")
        if not isinstance(name, str) or not name or not isinstance(location, str) or not location:
            logger.debug("Skipping parameter without name/in: %r", raw)
            continue
        merged[(location, name)] = param
    return list(merged.values())


def build_params_schema(document: dict[str, Any], params: list[dict[str, Any]]) -> Optional[Any]:
    """Turn merged parameters into one object schema.

    Parameters are grouped by location.  Each group becomes an object
    schema whose properties are the parameter schemas (tagged with their
    location, with the parameter's ``description``/``example`` copied in
    when the schema lacks one) and whose ``required`` lists the required
    parameters.  A single group is returned as-is; several groups are
    nested under their location names.

    Returns:
        The params schema, or ``None`` when there are no parameters.
    """
    groups: dict[str, dict[str, Any]] = {}

    for param in params:
        location = param["in"]
        group = groups.setdefault(location, {"properties": {}, "required": []})
        group["properties"][param["name"]] = _parameter_schema(document, param, location)
        if param.get("required") is True:
            group["required"].append(param["name"])

    schemas = {
        location: _group_schema(location, group)
        for location, group in groups.items()
        if group["properties"]
    }
    if not schemas:
        return None
    if len(schemas) == 1:
        return next(iter(schemas.values()))
    return {"type": "object", "properties": schemas}


def merge_request_schema(body: Optional[Any], params: Optional[Any]) -> Optional[Any]:
    """Combine body and params schemas (``params``/``body`` wrapper when both exist)."""
    if body is not None and params is not None:
        return {"type": "object", "properties": {"params": params, "body": body}}
    return body if body is not None else params


def pick_content_schema(content: Any) -> Optional[Any]:
    """Pick the ``application/json`` schema, else the first content schema."""
    if not isinstance(content, dict):
        return None
    preferred = content.get(JSON_MEDIA_TYPE)
    if isinstance(preferred, dict) and preferred.get("schema") is not None:
        return preferred["schema"]
    for entry in content.values():
        if isinstance(entry, dict) and entry.get("schema") is not None:
            return entry["schema"]
    return None


def pick_request_schema(document: dict[str, Any], request_body: Any) -> Optional[Any]:
    """Return the body schema of an operation's ``requestBody``."""
    body = _follow_component(document, request_body, "requestBodies")
    if not isinstance(body, dict):
        return None
    return pick_content_schema(body.get("content"))


def pick_response_schema(document: dict[str, Any], responses: Any) -> Optional[Any]:
    """Return the content schema of the preferred response.

    Preference: the first of ``200``/``201``/``202``/``204`` declared, then
    the first ``2xx`` status, then ``default``, then the first declared
    status.
    """
    if not isinstance(responses, dict) or not responses:
        return None
    by_status = {str(status): response for status, response in responses.items()}

    status = next((s for s in PREFERRED_STATUSES if s in by_status), None)
    if status is None:
        status = next((s for s in by_status if _SUCCESS_STATUS_RE.match(s)), None)
    if status is None:
        status = "default" if "default" in by_status else next(iter(by_status))

    response = _follow_component(document, by_status[status], "responses")
    if not isinstance(response, dict):
        return None
    return pick_content_schema(response.get("content"))


def _build_operation(
    document: dict[str, Any],
    path: str,
    method: HTTPMethod,
    operation: dict[str, Any],
    shared_params: list[Any],
) -> Operation:
    params = merge_parameters(document, shared_params, _as_list(operation.get("parameters")))
    request = merge_request_schema(
        pick_request_schema(document, operation.get("requestBody")),
        build_params_schema(document, params),
    )
    operation_id = operation.get("operationId")
    if not isinstance(operation_id, str) or not operation_id.strip():
        operation_id = f"{method.value} {path}"

    return Operation(
        method=method,
        operation_id=operation_id,
        request=request,
        response=pick_response_schema(document, operation.get("responses")),
    )


def _parameter_schema(document: dict[str, Any], param: dict[str, Any], location: str) -> Any:
    schema = param.get("schema")
    if schema is None:
        schema = pick_content_schema(param.get("content"))
    if isinstance(schema, bool):
        return schema
    if not isinstance(schema, dict):
        schema = {"type": "string"}

    result = dict(schema)
    description = param.get("description")
    if description and not result.get("description"):
        result["description"] = description
    if "example" in param and "example" not in result:
        result["example"] = param["example"]
    result.setdefault(PARAM_LOCATION_KEY, location)
    return result


def _group_schema(location: str, group: dict[str, Any]) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "object",
        "properties": group["properties"],
        PARAM_LOCATION_KEY: location,
    }
    if group["required"]:
        schema["required"] = group["required"]
    return schema


def _sorted_endpoints(endpoints: dict[str, list[Operation]]) -> list[Endpoint]:
    return [
        Endpoint(
            path=path,
            operations=sorted(operations, key=lambda op: _METHOD_ORDER[op.method]),
        )
        for path, operations in sorted(endpoints.items())
    ]


def _operation_tags(operation: dict[str, Any]) -> list[str]:
    tags = [str(tag) for tag in _as_list(operation.get("tags")) if tag is not None]
    return list(dict.fromkeys(tags)) or [DEFAULT_TAG]


def _declared_tag_order(document: dict[str, Any]) -> dict[str, int]:
    order: dict[str, int] = {}
    for index, tag in enumerate(_as_list(document.get("tags"))):
        name = tag.get("name") if isinstance(tag, dict) else None
        if isinstance(name, str) and name not in order:
            order[name] = index
    return order


def _http_method(value: Any) -> Optional[HTTPMethod]:
    if not isinstance(value, str):
        return None
    try:
        return HTTPMethod(value.upper())
    except ValueError:
        return None


def _follow_component(document: dict[str, Any], node: Any, section: str) -> Any:
    """Follow one ``#/components/<section>/<name>`` reference, if *node* is one."""
    if not isinstance(node, dict) or not isinstance(node.get("$ref"), str):
        return node
    prefix = f"#/components/{section}/"
    pointer = node["$ref"]
    if not pointer.startswith(prefix):
        return node
    name = pointer[len(prefix):].replace("~1", "/").replace("~0", "~")
    components = document.get("components")
    table = components.get(section) if isinstance(components, dict) else None
    if not isinstance(table, dict) or name not in table:
        logger.debug("Unresolved %s reference: %s", section, pointer)
        return node
    return table[name]


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []
