"""Tests for n8n_cli.parser.loader."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from n8n_cli.exceptions import SpecParseError
from n8n_cli.parser.loader import _load_from_url, _parse_content, load_spec


# ---------------------------------------------------------------------------
# load_spec dispatch
# ---------------------------------------------------------------------------


class TestLoadSpec:
    """Test load_spec dispatcher routes to the correct loader."""

    def test_loads_yaml_fixture(self, sample_doc_path: Path) -> None:
        result = load_spec(str(sample_doc_path))
        assert result["info"]["version"] == "1.1.1"
        assert "/workflows/{id}" in result["paths"]

    def test_loads_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "api.json"
        path.write_text(json.dumps({"openapi": "3.0.0", "paths": {}}), encoding="utf-8")
        assert load_spec(str(path)) == {"openapi": "3.0.0", "paths": {}}

    def test_json_content_in_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "api.yaml"
        path.write_text('{"paths": {}}', encoding="utf-8")
        assert load_spec(str(path)) == {"paths": {}}

    def test_loads_from_stdin(self) -> None:
        with patch("n8n_cli.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("paths: {}\n")
            result = load_spec("-")
        assert result == {"paths": {}}

    def test_empty_stdin_raises(self) -> None:
        with patch("n8n_cli.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("  \n")
            with pytest.raises(SpecParseError, match="stdin"):
                load_spec("-")

    def test_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(SpecParseError, match="not found"):
            load_spec(str(tmp_path / "missing.yaml"))

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(SpecParseError, match="empty"):
            load_spec(str(path))

    def test_invalid_json_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SpecParseError, match="Invalid JSON"):
            load_spec(str(path))


# ---------------------------------------------------------------------------
# _load_from_url
# ---------------------------------------------------------------------------


class TestLoadFromUrl:
    def test_loads_yaml_from_url(self) -> None:
        body = textwrap.dedent("""\
            openapi: "3.0.0"
            info:
              title: Remote
              version: "1.0"
        """)
        response = httpx.Response(
            status_code=200,
            text=body,
            headers={"content-type": "application/x-yaml"},
            request=httpx.Request("GET", "https://example.com/api.yaml"),
        )
        with patch("n8n_cli.parser.loader.httpx.get", return_value=response):
            result = load_spec("https://example.com/api.yaml")
        assert result["info"]["title"] == "Remote"

    def test_http_error_raises(self) -> None:
        response = httpx.Response(
            status_code=404,
            request=httpx.Request("GET", "https://example.com/missing.json"),
        )
        with patch("n8n_cli.parser.loader.httpx.get", return_value=response):
            with pytest.raises(SpecParseError, match="HTTP 404"):
                _load_from_url("https://example.com/missing.json")

    def test_connection_error_raises(self) -> None:
        with patch(
            "n8n_cli.parser.loader.httpx.get",
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            with pytest.raises(SpecParseError, match="Failed to fetch"):
                _load_from_url("https://unreachable.example.com/api.json")


# ---------------------------------------------------------------------------
# _parse_content
# ---------------------------------------------------------------------------


class TestParseContent:
    def test_parses_json(self) -> None:
        assert _parse_content('{"a": 1}') == {"a": 1}

    def test_parses_yaml(self) -> None:
        assert _parse_content("a: 1\n") == {"a": 1}

    def test_json_hint_disables_yaml_fallback(self) -> None:
        with pytest.raises(SpecParseError, match="Invalid JSON"):
            _parse_content("a: 1\n", hint="json")

    def test_unparseable_content_reports_both_errors(self) -> None:
        with pytest.raises(SpecParseError) as exc_info:
            _parse_content("a: [unclosed\n")
        assert "JSON error" in str(exc_info.value)
        assert "YAML error" in str(exc_info.value)

    def test_non_mapping_raises(self) -> None:
        with pytest.raises(SpecParseError, match="list"):
            _parse_content("[1, 2]")

    def test_null_document_raises(self) -> None:
        with pytest.raises(SpecParseError, match="empty document"):
            _parse_content("~\n", hint="yaml")
