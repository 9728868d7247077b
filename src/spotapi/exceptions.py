"""Exception hierarchy for spotapi.

All exceptions inherit from :class:`SpotApiError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`spotapi.exit_codes`.
Library callers catch the specific subclasses to decide on a retry policy;
the CLI entry point in :func:`spotapi.app.main` catches ``SpotApiError``
and exits with the matching code.

Subclass hierarchy::

    SpotApiError (exit 1)
    +-- NoTokenError        (exit 3)
    +-- InvalidTokenError   (exit 4)
    +-- BadStatusError      (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- ContentDecodeError  (exit 7)
    +-- CacheError          (exit 8)
    +-- ConfigError         (exit 1)
        +-- CredentialNotFoundError

Malformed JSON is deliberately absent from this list:
:meth:`~spotapi.client.response.SpotifyResponse.deserialize` reports it
as ``None``.
"""

from spotapi.exit_codes import (
    EXIT_BAD_STATUS,
    EXIT_CACHE_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_TOKEN,
    EXIT_NO_TOKEN,
)


class SpotApiError(Exception):
    """Base exception for all spotapi errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class NoTokenError(SpotApiError):
    """Raised before any network I/O when no bearer token is stored.

    The caller must run its authentication flow and call
    :meth:`~spotapi.client.async_client.SpotifyClient.update_token`.
    """

    exit_code = EXIT_NO_TOKEN

    def __init__(self, message: str = "No token") -> None:
        super().__init__(message)


class InvalidTokenError(SpotApiError):
    """Raised when the API answers 401.

    The stored token has already been cleared when this is raised, so
    re-authenticating and resending once is likely to succeed.
    """

    exit_code = EXIT_INVALID_TOKEN

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class BadStatusError(SpotApiError):
    """Raised for any status other than 2xx, 304 or 401.

    Attributes:
        status_code: The numeric HTTP status returned by the server.
    """

    exit_code = EXIT_BAD_STATUS

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"Request failed with status {status_code}")


class ConnectionError_(SpotApiError):
    """Raised on network-level failures (timeout, DNS resolution, TLS, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``. The original :mod:`httpx` exception is chained
    as ``__cause__``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ContentDecodeError(SpotApiError):
    """Raised when a 2xx body is not valid UTF-8 text."""

    exit_code = EXIT_DECODE_ERROR


class CacheError(SpotApiError):
    """Raised when the response cache cannot be read or written."""

    exit_code = EXIT_CACHE_ERROR


class ConfigError(SpotApiError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class CredentialNotFoundError(ConfigError):
    """Raised when a well-formed credential source holds no value (unset env var, missing file)."""
