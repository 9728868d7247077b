"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~spotapi.exceptions.SpotApiError` subclass.
Shell wrappers can inspect the exit code to tell a missing token from a
rejected one without parsing stderr.

Example::

    $ spotapi artist 0OdUWJ0sBjDrqHygGUXeCF
    $ echo $?
    4   # EXIT_INVALID_TOKEN -- the server rejected the bearer token
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_NO_TOKEN = 3
"""No bearer token is available; the request was never sent."""

EXIT_INVALID_TOKEN = 4
"""The API answered 401 and the stored token was discarded."""

EXIT_BAD_STATUS = 5
"""The API answered with a status other than 2xx, 304 or 401."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, TLS, connection refused)."""

EXIT_DECODE_ERROR = 7
"""The response body could not be decoded as UTF-8 text."""

EXIT_CACHE_ERROR = 8
"""The response cache could not be read or written."""
