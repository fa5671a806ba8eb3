"""Load OpenAPI documents from a URL, local file, or stdin.

This module handles all I/O for fetching raw OpenAPI documents and converting
them into Python dictionaries.  It supports both JSON and YAML formats with
automatic format detection, and validates that the document declares a
supported OpenAPI version (3.0.x or 3.1.x).

The two public functions are:

* :func:`load_document` -- Load and parse a document from any supported source.
* :func:`validate_openapi_version` -- Check and return the ``openapi`` version
  string, rejecting Swagger 2.x and unsupported versions.

After loading, the raw dict is handed unchanged to
:func:`~schemalens.parser.aggregator.aggregate` and
:meth:`~schemalens.parser.resolver.SchemaResolver.from_document`; ``$ref``
pointers are resolved lazily by the schema pipeline.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote, urlparse

import httpx
import yaml

from schemalens.cache import DocumentCache
from schemalens.exceptions import SpecParseError
from schemalens.models import LoaderConfig

logger = logging.getLogger(__name__)


def load_document(
    source: str,
    config: Optional[LoaderConfig] = None,
    cache: Optional[DocumentCache] = None,
) -> dict[str, Any]:
    """Load an OpenAPI document from URL, file path, or stdin ('-').

    Supports JSON and YAML formats.
    Auto-detects format from content/extension.

    Args:
        source: An ``http(s)://`` or ``file://`` URL, a file path, or '-'
            for stdin.
        config: Loader settings (HTTP timeout, ``data_root`` sandbox).
            Defaults to :class:`~schemalens.models.LoaderConfig`.
        cache: Optional cache consulted for remote documents.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be loaded or parsed, or a local
            path falls outside the configured data root.
    """
    config = config or LoaderConfig()
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source, config, cache)
    elif source.startswith("file://"):
        return _load_from_file(unquote(urlparse(source).path), config)
    else:
        return _load_from_file(source, config)


def _load_from_stdin() -> dict[str, Any]:
    """Read a document from stdin, trying JSON then YAML.

    Raises:
        SpecParseError: If stdin is empty or content cannot be parsed.
    """
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(
    url: str, config: LoaderConfig, cache: Optional[DocumentCache]
) -> dict[str, Any]:
    """Fetch a document from *url*, consulting *cache* first.

    Raises:
        SpecParseError: If the URL cannot be fetched or content cannot be parsed.
    """
    if cache is not None:
        cached = cache.get(url)
        if cached is not None:
            logger.debug("Cache hit for %s", url)
            return cached

    logger.debug("Fetching %s", url)
    try:
        response = httpx.get(url, timeout=config.timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    # Use content-type as a hint for parsing
    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    document = _parse_content(response.text, hint=hint)
    if cache is not None:
        cache.set(url, document)
    return document


def _load_from_file(path: str, config: LoaderConfig) -> dict[str, Any]:
    """Load a document from a local file.

    Supports .json, .yaml, and .yml extensions. Falls back to content-based
    detection if the extension is not recognized.

    Raises:
        SpecParseError: If the file is outside the data root, cannot be
            read, or its content cannot be parsed.
    """
    file_path = _sandboxed_path(path, config.data_root)
    if not file_path.is_file():
        raise SpecParseError(f"Document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read document {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Document is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _sandboxed_path(path: str, data_root: Optional[str]) -> Path:
    """Resolve *path*, confining it to *data_root* when one is configured.

    Relative paths are taken relative to the data root.
    """
    if not data_root:
        return Path(path).expanduser()

    root = Path(data_root).expanduser().resolve()
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = root / candidate
    candidate = candidate.resolve()
    if not candidate.is_relative_to(root):
        raise SpecParseError(f"Path {path} is outside the data root {root}")
    return candidate


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.

    Raises:
        SpecParseError: If the content cannot be parsed as either format,
            or the top level is not a mapping.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
        else:
            if not isinstance(result, dict):
                raise SpecParseError(
                    "Document must be a JSON/YAML object (got "
                    f"{type(result).__name__})"
                )
            return result

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        if not isinstance(result, dict):
            raise SpecParseError(
                "Document must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result

    msg = "Failed to parse document as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)


def validate_openapi_version(document: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Supports OpenAPI 3.x. Raises SpecParseError for Swagger 2.x,
    missing version fields, or unsupported versions.

    Returns:
        The OpenAPI version string (e.g., '3.0.3', '3.1.0').

    Raises:
        SpecParseError: If the version is missing, unsupported, or indicates Swagger 2.x.
    """
    if "swagger" in document:
        raise SpecParseError(
            f"Swagger {document['swagger']} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x are supported. "
            "Consider converting with https://converter.swagger.io"
        )

    openapi_version = document.get("openapi")
    if openapi_version is None:
        raise SpecParseError(
            "Missing 'openapi' field. Is this an OpenAPI 3.x document?"
        )

    version_str = str(openapi_version)
    if version_str.startswith("3."):
        return version_str

    raise SpecParseError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only OpenAPI 3.0.x and 3.1.x are supported."
    )
