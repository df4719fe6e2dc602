"""Runtime request pipeline for n8n-cli.

Turns bound command-line tokens into one HTTP call:

* :mod:`~n8n_cli.client.coerce` -- string tokens to typed JSON values.
* :mod:`~n8n_cli.client.request` -- URL, query string, and body assembly.
* :mod:`~n8n_cli.client.executor` -- the HTTP call and response triage.

Example::

    from n8n_cli.client import BoundArguments, Executor, build_request

    prepared = build_request(config, tree.base_path, op, BoundArguments(...))
    with Executor(config) as executor:
        response = executor.send(prepared)
"""

from n8n_cli.client.coerce import ListInput, coerce_list, coerce_scalar
from n8n_cli.client.executor import Executor, triage_response
from n8n_cli.client.request import (
    BodySource,
    BoundArguments,
    PreparedRequest,
    build_body,
    build_request,
    build_url,
)

__all__ = [
    "BodySource",
    "BoundArguments",
    "Executor",
    "ListInput",
    "PreparedRequest",
    "build_body",
    "build_request",
    "build_url",
    "coerce_list",
    "coerce_scalar",
    "triage_response",
]
