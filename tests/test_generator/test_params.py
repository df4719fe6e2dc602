"""Tests for n8n_cli.generator.params."""

from __future__ import annotations

from n8n_cli.generator.params import merge_params, parse_param
from n8n_cli.models import ParameterLocation, SchemaKind


class TestParseParam:
    def test_compiles_query_param(self) -> None:
        result = parse_param({}, {"name": "includeData", "in": "query", "schema": {"type": "boolean"}})
        assert result is not None
        assert result.name == "includeData"
        assert result.flag == "include-data"
        assert result.location == ParameterLocation.QUERY
        assert result.required is False
        assert result.schema_.kind == SchemaKind.BOOLEAN

    def test_location_defaults_to_query(self) -> None:
        result = parse_param({}, {"name": "limit"})
        assert result is not None
        assert result.location == ParameterLocation.QUERY
        assert result.schema_.kind == SchemaKind.UNKNOWN

    def test_resolves_parameter_refs(self) -> None:
        doc = {
            "components": {
                "parameters": {
                    "Id": {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}
                }
            }
        }
        result = parse_param(doc, {"$ref": "#/components/parameters/Id"})
        assert result is not None
        assert result.key == ("path", "id")
        assert result.required is True

    def test_header_and_cookie_params_are_dropped(self) -> None:
        assert parse_param({}, {"name": "X-Trace", "in": "header"}) is None
        assert parse_param({}, {"name": "session", "in": "cookie"}) is None

    def test_nameless_params_are_dropped(self) -> None:
        assert parse_param({}, {"in": "query"}) is None
        assert parse_param({}, {"name": "", "in": "query"}) is None
        assert parse_param({}, "not a mapping") is None

    def test_required_must_be_literal_true(self) -> None:
        result = parse_param({}, {"name": "q", "required": "yes"})
        assert result is not None
        assert result.required is False

    def test_separator_only_name_gets_placeholder_flag(self) -> None:
        result = parse_param({}, {"name": "_", "in": "query"})
        assert result is not None
        assert result.flag == "param"


class TestMergeParams:
    def test_operation_param_overrides_shared(self) -> None:
        shared = [{"name": "id", "in": "path", "required": True}]
        override = [{"name": "id", "in": "path", "required": False}]
        merged = merge_params({}, shared, override)
        assert len(merged) == 1
        assert merged[0].required is False

    def test_override_replaces_the_whole_entry(self) -> None:
        shared = [{"name": "id", "in": "path", "schema": {"type": "integer"}}]
        override = [{"name": "id", "in": "path"}]
        merged = merge_params({}, shared, override)
        assert merged[0].schema_.kind == SchemaKind.UNKNOWN

    def test_same_name_in_different_locations_is_kept(self) -> None:
        merged = merge_params(
            {},
            [{"name": "id", "in": "path", "required": True}],
            [{"name": "id", "in": "query"}],
        )
        assert [p.key for p in merged] == [("path", "id"), ("query", "id")]

    def test_sorted_by_location_then_name(self) -> None:
        merged = merge_params(
            {},
            [{"name": "zeta", "in": "query"}, {"name": "id", "in": "path"}],
            [{"name": "alpha", "in": "query"}],
        )
        assert [p.key for p in merged] == [("path", "id"), ("query", "alpha"), ("query", "zeta")]

    def test_empty_inputs(self) -> None:
        assert merge_params({}, [], []) == []
