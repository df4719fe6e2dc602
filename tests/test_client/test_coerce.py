"""Tests for n8n_cli.client.coerce -- token to JSON value coercion."""

from __future__ import annotations

import pytest

from n8n_cli.client.coerce import (
    ListInput,
    coerce_list,
    coerce_scalar,
    loads_strict,
    to_query_string,
)
from n8n_cli.exceptions import InvalidUsageError
from n8n_cli.models import SchemaDef, SchemaKind


def _kind(kind: SchemaKind, item: SchemaKind | None = None) -> SchemaDef:
    return SchemaDef(kind=kind, item=SchemaDef(kind=item) if item is not None else None)


INTEGER = _kind(SchemaKind.INTEGER)
NUMBER = _kind(SchemaKind.NUMBER)
BOOLEAN = _kind(SchemaKind.BOOLEAN)
STRING = _kind(SchemaKind.STRING)


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


class TestInteger:
    @pytest.mark.parametrize(
        "token, expected",
        [("42", 42), ("-7", -7), ("+3", 3), ("007", 7), ("9223372036854775807", 2**63 - 1)],
    )
    def test_valid(self, token: str, expected: int) -> None:
        assert coerce_scalar(INTEGER, token) == expected

    @pytest.mark.parametrize("token", ["", "1.0", "1e3", " 1", "abc", "0x10", "1_000"])
    def test_invalid(self, token: str) -> None:
        with pytest.raises(InvalidUsageError, match="invalid integer"):
            coerce_scalar(INTEGER, token)

    def test_out_of_range(self) -> None:
        with pytest.raises(InvalidUsageError, match="integer out of range"):
            coerce_scalar(INTEGER, "9223372036854775808")


class TestNumber:
    @pytest.mark.parametrize("token, expected", [("1.5", 1.5), ("-2", -2.0), ("1e3", 1000.0)])
    def test_valid(self, token: str, expected: float) -> None:
        assert coerce_scalar(NUMBER, token) == expected

    @pytest.mark.parametrize("token", ["abc", "nan", "inf", "-Infinity", " 1.5", "1_0", ""])
    def test_invalid(self, token: str) -> None:
        with pytest.raises(InvalidUsageError, match="invalid number"):
            coerce_scalar(NUMBER, token)


class TestBoolean:
    @pytest.mark.parametrize("token", ["true", "TRUE", "1", "yes", "Yes"])
    def test_truthy(self, token: str) -> None:
        assert coerce_scalar(BOOLEAN, token) is True

    @pytest.mark.parametrize("token", ["false", "False", "0", "no", "NO"])
    def test_falsy(self, token: str) -> None:
        assert coerce_scalar(BOOLEAN, token) is False

    @pytest.mark.parametrize("token", ["maybe", "", "2", "on"])
    def test_invalid(self, token: str) -> None:
        with pytest.raises(InvalidUsageError, match="invalid boolean"):
            coerce_scalar(BOOLEAN, token)


class TestStringAndJson:
    def test_string_is_verbatim(self) -> None:
        assert coerce_scalar(STRING, " 42 ") == " 42 "

    def test_object_parses_json(self) -> None:
        assert coerce_scalar(_kind(SchemaKind.OBJECT), '{"a": [1]}') == {"a": [1]}

    def test_unknown_parses_json(self) -> None:
        assert coerce_scalar(_kind(SchemaKind.UNKNOWN), "null") is None

    def test_malformed_json(self) -> None:
        with pytest.raises(InvalidUsageError, match="invalid JSON value"):
            coerce_scalar(_kind(SchemaKind.OBJECT), "{nope")

    @pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity", '{"a": NaN}'])
    def test_non_standard_constants_rejected(self, token: str) -> None:
        with pytest.raises(InvalidUsageError, match="invalid JSON value: non-standard JSON constant"):
            coerce_scalar(_kind(SchemaKind.OBJECT), token)


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


class TestListInput:
    def test_single_bracket_token_is_literal(self) -> None:
        assert ListInput.detect(["[1,2]"]) is ListInput.LITERAL
        assert ListInput.detect(["  [1]"]) is ListInput.LITERAL

    def test_other_shapes_are_repeated(self) -> None:
        assert ListInput.detect(["1"]) is ListInput.REPEATED
        assert ListInput.detect(["[1]", "[2]"]) is ListInput.REPEATED
        assert ListInput.detect([]) is ListInput.REPEATED


class TestCoerceList:
    def test_repeated_and_literal_agree(self) -> None:
        ints = _kind(SchemaKind.ARRAY, SchemaKind.INTEGER)
        assert coerce_list(ints, ["1", "2"]) == coerce_list(ints, ["[1,2]"]) == [1, 2]

    def test_repeated_preserves_order(self) -> None:
        strings = _kind(SchemaKind.ARRAY, SchemaKind.STRING)
        assert coerce_list(strings, ["b", "a", "b"]) == ["b", "a", "b"]

    def test_literal_is_not_item_coerced(self) -> None:
        ints = _kind(SchemaKind.ARRAY, SchemaKind.INTEGER)
        assert coerce_list(ints, ['["x", 1]']) == ["x", 1]

    def test_item_error_propagates(self) -> None:
        ints = _kind(SchemaKind.ARRAY, SchemaKind.INTEGER)
        with pytest.raises(InvalidUsageError, match="invalid integer: x"):
            coerce_list(ints, ["1", "x"])

    def test_missing_item_schema_uses_outer(self) -> None:
        untyped = _kind(SchemaKind.ARRAY)
        assert coerce_list(untyped, ['{"a":1}', "2"]) == [{"a": 1}, 2]

    def test_malformed_literal(self) -> None:
        with pytest.raises(InvalidUsageError, match="invalid JSON list"):
            coerce_list(_kind(SchemaKind.ARRAY, SchemaKind.STRING), ["[1,"])

    def test_literal_with_non_standard_constant(self) -> None:
        with pytest.raises(InvalidUsageError, match="invalid JSON list"):
            coerce_list(_kind(SchemaKind.ARRAY, SchemaKind.NUMBER), ["[1, Infinity]"])


class TestToQueryString:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("abc", "abc"),
            (3, "3"),
            (1.5, "1.5"),
            (True, "true"),
            (None, "null"),
            ({"a": 1}, '{"a":1}'),
            ([1, 2], "[1,2]"),
        ],
    )
    def test_rendering(self, value: object, expected: str) -> None:
        assert to_query_string(value) == expected


class TestLoadsStrict:
    def test_standard_json(self) -> None:
        assert loads_strict('{"a": [1, 2.5, null]}') == {"a": [1, 2.5, None]}

    @pytest.mark.parametrize("text", ["NaN", "[Infinity]", '{"x": -Infinity}'])
    def test_rejects_non_standard_constants(self, text: str) -> None:
        with pytest.raises(ValueError, match="non-standard JSON constant"):
            loads_strict(text)
