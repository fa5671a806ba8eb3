"""Tests for schemalens.parser.loader."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from schemalens.cache import DocumentCache
from schemalens.exceptions import SpecParseError
from schemalens.models import CacheConfig, LoaderConfig
from schemalens.parser.loader import (
    _load_from_stdin,
    _parse_content,
    load_document,
    validate_openapi_version,
)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


def _response(url: str, **kwargs) -> httpx.Response:
    return httpx.Response(request=httpx.Request("GET", url), **kwargs)


# ---------------------------------------------------------------------------
# load_document dispatch
# ---------------------------------------------------------------------------


class TestLoadDocument:
    """Test load_document routes to the correct loader."""

    def test_loads_from_file_json(self) -> None:
        result = load_document(str(FIXTURES_DIR / "petstore.json"))
        assert result["openapi"] == "3.0.3"
        assert result["info"]["title"] == "Petstore API"

    def test_loads_from_file_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "openapi.yaml"
        yaml_file.write_text(textwrap.dedent("""\
            openapi: "3.1.0"
            info:
              title: YAML Test
              version: "1.0.0"
            paths:
              /hello:
                get:
                  responses:
                    200:
                      description: OK
        """), encoding="utf-8")
        result = load_document(str(yaml_file))
        assert result["info"]["title"] == "YAML Test"
        assert 200 in result["paths"]["/hello"]["get"]["responses"]

    def test_loads_from_file_url(self, tmp_path: Path) -> None:
        target = tmp_path / "my api.json"
        target.write_text(json.dumps({"openapi": "3.0.0"}), encoding="utf-8")
        result = load_document(target.as_uri())
        assert result == {"openapi": "3.0.0"}

    def test_loads_from_stdin(self) -> None:
        doc = json.dumps({"openapi": "3.0.3", "info": {"title": "stdin test", "version": "1.0"}})
        with patch("schemalens.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO(doc)
            result = load_document("-")
        assert result["info"]["title"] == "stdin test"

    def test_loads_from_url(self) -> None:
        url = "https://example.com/openapi.json"
        doc = {"openapi": "3.0.3", "info": {"title": "URL test", "version": "1.0"}}
        with patch("schemalens.parser.loader.httpx.get", return_value=_response(url, status_code=200, json=doc)) as get:
            result = load_document(url, LoaderConfig(timeout=5.0))
        assert result["info"]["title"] == "URL test"
        assert get.call_args.kwargs["timeout"] == 5.0


# ---------------------------------------------------------------------------
# Local files and the data root
# ---------------------------------------------------------------------------


class TestLoadFromFile:
    def test_file_not_found_raises(self) -> None:
        with pytest.raises(SpecParseError, match="not found"):
            load_document("/nonexistent/path/to/openapi.json")

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty.json"
        empty.write_text("", encoding="utf-8")
        with pytest.raises(SpecParseError, match="empty"):
            load_document(str(empty))

    def test_invalid_json_file_raises(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("{invalid json", encoding="utf-8")
        with pytest.raises(SpecParseError, match="Invalid JSON"):
            load_document(str(bad))

    def test_non_object_raises(self, tmp_path: Path) -> None:
        array_file = tmp_path / "array.json"
        array_file.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(SpecParseError, match="must be a JSON/YAML object"):
            load_document(str(array_file))


class TestDataRoot:
    def test_relative_path_inside_root(self, tmp_path: Path) -> None:
        (tmp_path / "apis").mkdir()
        (tmp_path / "apis" / "a.json").write_text('{"openapi": "3.0.0"}', encoding="utf-8")
        result = load_document("apis/a.json", LoaderConfig(data_root=str(tmp_path)))
        assert result["openapi"] == "3.0.0"

    def test_traversal_rejected(self, tmp_path: Path) -> None:
        root = tmp_path / "root"
        root.mkdir()
        (tmp_path / "secret.json").write_text("{}", encoding="utf-8")
        with pytest.raises(SpecParseError, match="outside the data root"):
            load_document("../secret.json", LoaderConfig(data_root=str(root)))

    def test_absolute_path_outside_rejected(self, tmp_path: Path) -> None:
        root = tmp_path / "root"
        root.mkdir()
        with pytest.raises(SpecParseError, match="outside the data root"):
            load_document(str(FIXTURES_DIR / "petstore.json"), LoaderConfig(data_root=str(root)))


# ---------------------------------------------------------------------------
# stdin
# ---------------------------------------------------------------------------


class TestLoadFromStdin:
    def test_reads_yaml_from_stdin(self) -> None:
        with patch("schemalens.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("openapi: '3.0.0'\ninfo:\n  title: YAML stdin\n")
            result = _load_from_stdin()
        assert result["info"]["title"] == "YAML stdin"

    def test_empty_stdin_raises(self) -> None:
        with patch("schemalens.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("   \n\t\n  ")
            with pytest.raises(SpecParseError, match="No input"):
                _load_from_stdin()


# ---------------------------------------------------------------------------
# URLs and caching
# ---------------------------------------------------------------------------


class TestLoadFromUrl:
    def test_yaml_content_type(self) -> None:
        url = "https://example.com/openapi"
        response = _response(
            url, status_code=200, text="openapi: '3.1.0'\n", headers={"content-type": "application/yaml"}
        )
        with patch("schemalens.parser.loader.httpx.get", return_value=response):
            assert load_document(url) == {"openapi": "3.1.0"}

    def test_http_error(self) -> None:
        url = "https://example.com/missing.json"
        with patch("schemalens.parser.loader.httpx.get", return_value=_response(url, status_code=404)):
            with pytest.raises(SpecParseError, match="HTTP 404"):
                load_document(url)

    def test_connection_error(self) -> None:
        url = "https://unreachable.example.com/openapi.json"
        error = httpx.ConnectError("refused", request=httpx.Request("GET", url))
        with patch("schemalens.parser.loader.httpx.get", side_effect=error):
            with pytest.raises(SpecParseError, match="Failed to fetch"):
                load_document(url)

    def test_cache_hit_skips_fetch(self, tmp_path: Path) -> None:
        url = "https://example.com/openapi.json"
        cache = DocumentCache(tmp_path, CacheConfig())
        cache.set(url, {"openapi": "3.0.0", "cached": True})
        try:
            with patch("schemalens.parser.loader.httpx.get") as get:
                result = load_document(url, cache=cache)
            get.assert_not_called()
            assert result["cached"] is True
        finally:
            cache.close()

    def test_fetched_document_is_cached(self, tmp_path: Path) -> None:
        url = "https://example.com/openapi.json"
        cache = DocumentCache(tmp_path, CacheConfig())
        try:
            with patch(
                "schemalens.parser.loader.httpx.get",
                return_value=_response(url, status_code=200, json={"openapi": "3.0.1"}),
            ):
                load_document(url, cache=cache)
            assert cache.get(url) == {"openapi": "3.0.1"}
        finally:
            cache.close()


# ---------------------------------------------------------------------------
# Parsing and version validation
# ---------------------------------------------------------------------------


class TestParseContent:
    def test_yaml_fallback(self) -> None:
        assert _parse_content("a: 1") == {"a": 1}

    def test_unparseable(self) -> None:
        with pytest.raises(SpecParseError, match="Failed to parse"):
            _parse_content("{[: not : valid")

    def test_empty_yaml_document(self) -> None:
        with pytest.raises(SpecParseError, match="empty document"):
            _parse_content("---\n", hint="yaml")


class TestValidateOpenapiVersion:
    @pytest.mark.parametrize("version", ["3.0.0", "3.0.3", "3.1.0", "3.2.0"])
    def test_supported(self, version: str) -> None:
        assert validate_openapi_version({"openapi": version}) == version

    def test_swagger_rejected(self) -> None:
        with pytest.raises(SpecParseError, match="Swagger 2.0 is not supported"):
            validate_openapi_version({"swagger": "2.0"})

    def test_missing_rejected(self) -> None:
        with pytest.raises(SpecParseError, match="Missing 'openapi'"):
            validate_openapi_version({"info": {}})

    def test_unsupported_rejected(self) -> None:
        with pytest.raises(SpecParseError, match="Unsupported"):
            validate_openapi_version({"openapi": "4.0.0"})
