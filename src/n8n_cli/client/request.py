"""Assemble a concrete HTTP request from an operation and bound arguments.

The runtime binds the user's flags into a :class:`BoundArguments` value;
:func:`build_request` combines it with the :class:`~n8n_cli.models.Operation`
and the :class:`~n8n_cli.models.RuntimeConfig` into a
:class:`PreparedRequest` ready for the executor.  Nothing here reads the
environment or touches the network.

URL assembly (:func:`build_url`):

1. Strip the trailing ``/`` from the base URL and give the base path a
   leading ``/``.  A base URL that already ends with the base path is not
   extended again.
2. Replace every ``{name}`` token of the operation path with the
   percent-encoded value of the matching path parameter.
3. Append one query pair per bound query value; array parameters append one
   pair per element.

Body selection (:func:`build_body`) is a priority choice over
:class:`BodySource`: raw ``--body`` text, then ``--body-file``, then the
``--input-*`` field flags, then nothing.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

import httpx

from n8n_cli.client.coerce import coerce_list, coerce_scalar, loads_strict, to_query_string
from n8n_cli.exceptions import ConnectionError_, InvalidUsageError
from n8n_cli.models import (
    BodyDef,
    InputField,
    Operation,
    ParamDef,
    ParameterLocation,
    RuntimeConfig,
    SchemaKind,
)


class BodySource(str, enum.Enum):
    """Where the request payload comes from, in priority order."""

    RAW = "raw"
    FILE = "file"
    FIELDS = "fields"
    NONE = "none"


@dataclass
class BoundArguments:
    """The string tokens bound to one operation's flags.

    Every value is the list of tokens given for a flag, in command-line
    order; scalar flags carry a single token.  Unbound flags are absent.

    Attributes:
        params: Parameter tokens keyed by ``(location, name)``.
        fields: Body input-field tokens keyed by property name.
        raw_body: The ``--body`` text, if given.
        body_file: The ``--body-file`` path, if given.
    """

    params: dict[tuple[str, str], list[str]] = field(default_factory=dict)
    fields: dict[str, list[str]] = field(default_factory=dict)
    raw_body: Optional[str] = None
    body_file: Optional[str] = None

    def for_param(self, param: ParamDef) -> list[str]:
        return self.params.get(param.key, [])

    def for_field(self, input_field: InputField) -> list[str]:
        return self.fields.get(input_field.name, [])

    def body_source(self) -> BodySource:
        """Select the body source.  ``--body`` and ``--body-file`` are exclusive.

        Raises:
            InvalidUsageError: If both ``--body`` and ``--body-file`` are set.
        """
        if self.raw_body is not None and self.body_file is not None:
            raise InvalidUsageError("use only one of --body or --body-file")
        if self.raw_body is not None:
            return BodySource.RAW
        if self.body_file is not None:
            return BodySource.FILE
        if any(self.fields.values()):
            return BodySource.FIELDS
        return BodySource.NONE


@dataclass
class PreparedRequest:
    """A fully assembled request.  ``body`` is only sent when ``source`` is not NONE."""

    method: str
    url: str
    source: BodySource = BodySource.NONE
    body: Any = None

    @property
    def has_body(self) -> bool:
        return self.source is not BodySource.NONE


# ---------------------------------------------------------------------------
# URL
# ---------------------------------------------------------------------------


def join_base(base_url: str, base_path: str) -> str:
    """Join the service URL and the API base path without duplicating it.

    Example::

        >>> join_base("https://h/api/v1/", "/api/v1")
        'https://h/api/v1'
        >>> join_base("https://h", "api/v1")
        'https://h/api/v1'
    """
    base = base_url.rstrip("/")
    path = base_path.strip()
    if not path.startswith("/"):
        path = "/" + path
    if base.endswith(path):
        return base
    return base + path


def build_url(
    config: RuntimeConfig,
    base_path: str,
    operation: Operation,
    bound: BoundArguments,
) -> str:
    """Build the absolute request URL, including the query string.

    Raises:
        InvalidUsageError: If a path parameter is unbound or a query value
            fails coercion.
        ConnectionError_: If the result is not an absolute http(s) URL.
    """
    path = operation.path
    query: list[tuple[str, str]] = []

    for param in operation.params:
        tokens = bound.for_param(param)
        if param.location == ParameterLocation.PATH:
            if not tokens:
                raise InvalidUsageError(f"missing required param --{param.flag}")
            path = path.replace("{" + param.name + "}", quote(",".join(tokens), safe=""))
        elif tokens:
            query.extend((param.name, value) for value in _query_values(param, tokens))

    url_text = join_base(config.base_url, base_path) + path
    try:
        url = httpx.URL(url_text)
    except httpx.InvalidURL as exc:
        raise ConnectionError_(f"invalid URL {url_text}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConnectionError_(f"invalid N8N_BASE_URL: {config.base_url}")

    if query:
        url = url.copy_merge_params(query)
    return str(url)


def _query_values(param: ParamDef, tokens: list[str]) -> list[str]:
    if param.schema_.kind != SchemaKind.ARRAY:
        return [tokens[-1]]
    values = _with_flag(param.flag, coerce_list, param.schema_, tokens)
    return [to_query_string(value) for value in values]


# ---------------------------------------------------------------------------
# Body
# ---------------------------------------------------------------------------


def build_body(operation: Operation, bound: BoundArguments) -> tuple[BodySource, Any]:
    """Resolve the request payload.

    Returns:
        A ``(source, body)`` pair.  ``source`` is :attr:`BodySource.NONE`
        when no body should be sent; ``body`` is then ``None``.

    Raises:
        InvalidUsageError: For a body on an operation without one, both
            ``--body`` and ``--body-file``, unreadable or malformed JSON, a
            field that fails coercion, or a missing required body.
    """
    body = operation.body
    if body is None:
        if bound.raw_body is not None or bound.body_file is not None:
            raise InvalidUsageError("request does not accept a body")
        return BodySource.NONE, None

    source = bound.body_source()
    if source is BodySource.RAW:
        return source, _load_json(bound.raw_body, "invalid JSON body")
    if source is BodySource.FILE:
        return source, _load_json(_read_body_file(bound.body_file), "invalid JSON body file")
    if source is BodySource.FIELDS and body.schema_.kind == SchemaKind.OBJECT:
        payload = _body_from_fields(body, bound)
        if payload:
            return source, payload

    if body.required:
        raise InvalidUsageError("request body required")
    return BodySource.NONE, None


def _body_from_fields(body: BodyDef, bound: BoundArguments) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for input_field in body.input_fields:
        tokens = bound.for_field(input_field)
        if not tokens:
            continue
        schema = input_field.schema_
        if schema.kind == SchemaKind.ARRAY:
            payload[input_field.name] = _with_flag(input_field.flag, coerce_list, schema, tokens)
        else:
            payload[input_field.name] = _with_flag(
                input_field.flag, coerce_scalar, schema, tokens[-1]
            )
    return payload


def _read_body_file(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidUsageError(f"failed to read body file {path}: {exc}") from exc


def _load_json(text: str, message: str) -> Any:
    try:
        return loads_strict(text)
    except ValueError as exc:
        raise InvalidUsageError(f"{message}: {exc}") from exc


def _with_flag(flag: str, coercer: Any, *args: Any) -> Any:
    """Run *coercer*, prefixing any usage error with the offending flag."""
    try:
        return coercer(*args)
    except InvalidUsageError as exc:
        raise InvalidUsageError(f"--{flag}: {exc}") from exc


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


def build_request(
    config: RuntimeConfig,
    base_path: str,
    operation: Operation,
    bound: BoundArguments,
) -> PreparedRequest:
    """Assemble the :class:`PreparedRequest` for one invocation.

    Args:
        config: Service URL, credential, and timeout.
        base_path: The command tree's ``base_path``.
        operation: The selected operation.
        bound: The flag tokens given on the command line.

    Returns:
        The method, absolute URL, and resolved body.

    Raises:
        InvalidUsageError: On any argument-binding failure.
        ConnectionError_: If the URL is not a valid absolute http(s) URL.
    """
    url = build_url(config, base_path, operation, bound)
    source, body = build_body(operation, bound)
    return PreparedRequest(method=operation.method, url=url, source=source, body=body)
