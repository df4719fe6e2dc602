"""Exception hierarchy for n8n-cli.

All exceptions inherit from :class:`N8nCliError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`n8n_cli.exit_codes`.
The top-level handler in :func:`n8n_cli.app.run` catches ``N8nCliError``,
prints ``error: <message>`` and exits with the matching code, while
unexpected exceptions produce a crash log and exit with
:data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    N8nCliError (exit 1)
    +-- ConfigError         (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- HttpStatusError     (exit 1)
    |   +-- AuthError       (exit 3)
    |   +-- NotFoundError   (exit 4)
    |   +-- ServerError     (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- SpecParseError      (exit 7)
"""

from n8n_cli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class N8nCliError(Exception):
    """Base exception for all n8n-cli errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`n8n_cli.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(N8nCliError):
    """Raised when required environment configuration is missing or invalid."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidUsageError(N8nCliError):
    """Raised for unknown commands and arguments that cannot be bound to a request."""

    exit_code = EXIT_INVALID_USAGE


class HttpStatusError(N8nCliError):
    """Raised after rendering a response whose status is outside the 2xx range.

    Args:
        status: The HTTP status code returned by the server.
    """

    exit_code = EXIT_GENERIC_FAILURE

    def __init__(self, status: int, exit_code: int | None = None):
        super().__init__(f"http error: {status}", exit_code)
        self.status = status


class AuthError(HttpStatusError):
    """Raised when the API answers 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(HttpStatusError):
    """Raised when the API answers 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(HttpStatusError):
    """Raised when the API answers with a 5xx status."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(N8nCliError):
    """Raised on transport failures (invalid URL or method, timeout, refused connection).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(N8nCliError):
    """Raised when an OpenAPI document or a compiled command tree cannot be parsed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


def error_for_status(status: int) -> HttpStatusError:
    """Return the typed :class:`HttpStatusError` matching *status*."""
    if status in (401, 403):
        return AuthError(status)
    if status == 404:
        return NotFoundError(status)
    if status >= 500:
        return ServerError(status)
    return HttpStatusError(status)
