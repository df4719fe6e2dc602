"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~n8n_cli.exceptions.N8nCliError` subclass.
Shell wrappers can inspect the exit code to tell a rejected credential from
a missing workflow without parsing stderr.

Example::

    $ n8n workflow get-workflow --id 42
    $ echo $?
    4   # EXIT_NOT_FOUND -- the server answered 404
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (also: missing configuration, other non-2xx statuses)."""

EXIT_INVALID_USAGE = 2
"""Unknown command, missing parameter, or an argument that could not be bound."""

EXIT_AUTH_FAILURE = 3
"""The server rejected the credential (HTTP 401 or 403)."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A transport-level error occurred (invalid URL or method, timeout, connection refused)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document or the compiled command tree could not be parsed."""

EXIT_INTERRUPTED = 130
"""The user pressed Ctrl-C."""
