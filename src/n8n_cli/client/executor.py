"""Send one prepared request and triage the response.

:class:`Executor` wraps :class:`httpx.Client` with the n8n credential header
and the fixed request timeout.  It must be used as a context manager so the
underlying transport is opened and closed around the single call.  There is
no retry: a transport failure is surfaced as
:class:`~n8n_cli.exceptions.ConnectionError_`.

A non-2xx status is *not* an error at this layer.  :func:`triage_response`
always returns an :class:`~n8n_cli.models.ApiResponse`; the command layer
renders it first and only then reports the failure.
"""

from __future__ import annotations

import json
import re
from time import monotonic
from typing import Any, Optional

import httpx

from n8n_cli.client.coerce import loads_strict
from n8n_cli.client.request import PreparedRequest
from n8n_cli.exceptions import ConnectionError_
from n8n_cli.models import ApiResponse, RuntimeConfig
from n8n_cli.output import get_output

API_KEY_HEADER = "X-N8N-API-KEY"

# RFC 7230 token characters.
_METHOD_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


class Executor:
    """Synchronous executor for a single API call.

    Args:
        config: Credential, service URL, and timeout.
        transport: Optional transport handed to :class:`httpx.Client`;
            tests pass an :class:`httpx.MockTransport`.

    Example::

        with Executor(config) as executor:
            response = executor.send(prepared)
    """

    def __init__(
        self,
        config: RuntimeConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> Executor:
        self._client = httpx.Client(
            timeout=self._config.timeout,
            headers={API_KEY_HEADER: self._config.api_key},
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def send(self, request: PreparedRequest) -> ApiResponse:
        """Send *request* and triage the response.

        Redirects are followed.  The configured timeout bounds each network
        phase and also the whole exchange, including redirects and reading
        the body.

        Raises:
            ConnectionError_: On an invalid method token, an invalid URL, a
                timeout, or any other transport failure.
        """
        assert self._client is not None, "Executor not initialised -- use as context manager"

        if not _METHOD_RE.fullmatch(request.method):
            raise ConnectionError_(f"invalid method: {request.method!r}")

        kwargs: dict[str, Any] = {"method": request.method, "url": request.url}
        if request.has_body:
            # Encoded here so that a JSON ``null`` body is still sent.
            payload = json.dumps(request.body, ensure_ascii=False, allow_nan=False)
            kwargs["content"] = payload.encode("utf-8")
            kwargs["headers"] = {"Content-Type": "application/json"}

        output = get_output()
        output.debug(f"{request.method} {request.url}")
        deadline = monotonic() + self._config.timeout
        try:
            with self._client.stream(**kwargs) as response:
                _check_deadline(deadline, response.request)
                chunks = []
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    _check_deadline(deadline, response.request)
        except httpx.TimeoutException as exc:
            raise ConnectionError_(
                f"request timed out after {self._config.timeout:g}s: {exc}"
            ) from exc
        except httpx.InvalidURL as exc:
            raise ConnectionError_(f"invalid URL {request.url}: {exc}") from exc
        except httpx.RequestError as exc:
            raise ConnectionError_(f"request failed: {exc}") from exc

        output.debug(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())
        text = b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")
        return triage_response(response, text)


def _check_deadline(deadline: float, request: httpx.Request) -> None:
    if monotonic() > deadline:
        raise httpx.ReadTimeout("total time limit exceeded", request=request)


def decode_body(text: str) -> Any:
    """Decode a response body: blank is ``None``, JSON is decoded, anything else stays text."""
    if not text.strip():
        return None
    try:
        return loads_strict(text)
    except ValueError:
        return text


def triage_response(response: httpx.Response, text: Optional[str] = None) -> ApiResponse:
    """Split an :class:`httpx.Response` into the body view and the raw envelope.

    The raw envelope is ``{"status", "headers", "body"}``.  Header names are
    lower-cased and repeated headers are comma-joined.

    Args:
        response: The response, with or without its body read.
        text: The decoded body of a streamed response; ``response.text``
            is used when omitted.
    """
    body = decode_body(response.text if text is None else text)
    return ApiResponse(
        status_code=response.status_code,
        ok=response.is_success,
        body=body,
        raw={
            "status": response.status_code,
            "headers": dict(response.headers.items()),
            "body": body,
        },
    )
