"""Convert command-line string tokens into typed JSON values.

Every flag value reaches the runtime as a string.  :func:`coerce_scalar`
turns one token into the JSON value its :class:`~n8n_cli.models.SchemaDef`
asks for; :func:`coerce_list` handles array-kind flags, which accept either
repeated occurrences (``--ids 1 --ids 2``) or a single JSON array literal
(``--ids '[1, 2]'``).  Both inputs yield the same typed value.

All failures raise :class:`~n8n_cli.exceptions.InvalidUsageError` before any
network activity.
"""

from __future__ import annotations

import enum
import json
import math
import re
from typing import Any, Sequence

from n8n_cli.exceptions import InvalidUsageError
from n8n_cli.models import SchemaDef, SchemaKind

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1

_TRUE_TOKENS = frozenset({"true", "1", "yes"})
_FALSE_TOKENS = frozenset({"false", "0", "no"})


class ListInput(str, enum.Enum):
    """How the tokens of an array-kind flag were supplied."""

    LITERAL = "literal"
    REPEATED = "repeated"

    @classmethod
    def detect(cls, tokens: Sequence[str]) -> ListInput:
        """A single token whose text starts with ``[`` is a JSON literal."""
        if len(tokens) == 1 and tokens[0].lstrip().startswith("["):
            return cls.LITERAL
        return cls.REPEATED


def coerce_scalar(schema: SchemaDef, token: str) -> Any:
    """Coerce one *token* according to ``schema.kind``.

    * ``integer`` -- base-10 signed 64-bit integer.
    * ``number`` -- finite floating point.
    * ``boolean`` -- ``true``/``1``/``yes`` or ``false``/``0``/``no``,
      case-insensitively.
    * ``string`` -- passed through unchanged.
    * ``object``, ``array``, ``unknown`` -- parsed as JSON text.

    Raises:
        InvalidUsageError: If the token does not match the kind.

    Example::

        >>> coerce_scalar(SchemaDef(kind=SchemaKind.INTEGER), "42")
        42
        >>> coerce_scalar(SchemaDef(kind=SchemaKind.BOOLEAN), "Yes")
        True
    """
    kind = schema.kind
    if kind == SchemaKind.INTEGER:
        return _parse_integer(token)
    if kind == SchemaKind.NUMBER:
        return _parse_number(token)
    if kind == SchemaKind.BOOLEAN:
        return _parse_boolean(token)
    if kind == SchemaKind.STRING:
        return token
    return _parse_json(token, "invalid JSON value")


def coerce_list(schema: SchemaDef, tokens: Sequence[str]) -> list[Any]:
    """Coerce the tokens of an array-kind flag into a list.

    A single token starting with ``[`` is parsed as a JSON array and used
    as-is.  Otherwise each token is coerced with :func:`coerce_scalar`
    against ``schema.item`` (or *schema* itself when no item descriptor
    exists), preserving order.

    Raises:
        InvalidUsageError: On malformed JSON, a literal that is not an
            array, or an item that fails scalar coercion.

    Example::

        >>> ints = SchemaDef(kind=SchemaKind.ARRAY, item=SchemaDef(kind=SchemaKind.INTEGER))
        >>> coerce_list(ints, ["1", "2"]) == coerce_list(ints, ["[1,2]"])
        True
    """
    if ListInput.detect(tokens) is ListInput.LITERAL:
        value = _parse_json(tokens[0], "invalid JSON list")
        if not isinstance(value, list):
            raise InvalidUsageError("expected JSON array")
        return value

    item_schema = schema.item if schema.item is not None else schema
    return [coerce_scalar(item_schema, token) for token in tokens]


def to_query_string(value: Any) -> str:
    """Render a JSON value as query-string text.

    Strings are used verbatim; numbers and booleans use their JSON literal
    (``true``, ``1.5``); ``None`` becomes ``"null"``; objects and arrays are
    JSON-encoded.
    """
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def loads_strict(text: str) -> Any:
    """Parse JSON *text*, rejecting the ``NaN`` and ``Infinity`` extensions.

    Raises:
        ValueError: On malformed JSON, including those constants.
    """
    return json.loads(text, parse_constant=_reject_constant)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


# --- Scalar parsers ---


def _parse_integer(token: str) -> int:
    if not _INT_RE.fullmatch(token):
        raise InvalidUsageError(f"invalid integer: {token}")
    value = int(token)
    if not _INT_MIN <= value <= _INT_MAX:
        raise InvalidUsageError(f"integer out of range: {token}")
    return value


def _parse_number(token: str) -> float:
    if token != token.strip() or "_" in token:
        raise InvalidUsageError(f"invalid number: {token}")
    try:
        value = float(token)
    except ValueError:
        raise InvalidUsageError(f"invalid number: {token}") from None
    if not math.isfinite(value):
        raise InvalidUsageError(f"invalid number: {token}")
    return value


def _parse_boolean(token: str) -> bool:
    lowered = token.lower()
    if lowered in _TRUE_TOKENS:
        return True
    if lowered in _FALSE_TOKENS:
        return False
    raise InvalidUsageError(f"invalid boolean: {token}")


def _parse_json(token: str, message: str) -> Any:
    try:
        return loads_strict(token)
    except ValueError as exc:
        raise InvalidUsageError(f"{message}: {exc}") from exc
