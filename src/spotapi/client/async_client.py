"""Asynchronous transport for the Spotify Web API.

This module provides :class:`SpotifyClient`, which owns one long-lived
:class:`httpx.AsyncClient` (connection pooling is left to :mod:`httpx`)
and the :class:`~spotapi.auth.token_store.TokenStore` shared by every
request built from it. Requests are created with :meth:`SpotifyClient.request`
or the endpoint helpers inherited from
:class:`~spotapi.client.endpoints.EndpointCatalog`, and come back here
through two send paths:

- :meth:`SpotifyClient.send_req` -- reads headers, classifies the status,
  reads the body only for 2xx, returns a
  :class:`~spotapi.client.response.SpotifyResponse`.
- :meth:`SpotifyClient.send_req_no_response` -- classifies the status and
  never reads the body.

Nothing here retries. A 401 clears the stored token so that later
requests fail fast with :class:`~spotapi.exceptions.NoTokenError`;
requests already past their authentication step are not cancelled.

.. warning::
   ``request.allow_insecure_tls`` disables certificate verification so
   that a local intercepting proxy can be used during development. It is
   off by default and ignored entirely when Python runs with ``-O``.
"""

from __future__ import annotations

import logging
from typing import Any, NoReturn, Optional

import httpx

from spotapi.auth.token_store import TokenStore
from spotapi.client.endpoints import EndpointCatalog
from spotapi.client.request import SpotifyRequest
from spotapi.client.response import (
    SpotifyResponse,
    StatusClass,
    classify_status,
    decode_body,
    extract_cache_metadata,
)
from spotapi.exceptions import (
    BadStatusError,
    ConnectionError_,
    ContentDecodeError,
    InvalidTokenError,
)
from spotapi.models import ClientConfig, RequestConfig

logger = logging.getLogger(__name__)


def tls_verify_enabled(config: RequestConfig) -> bool:
    """Return whether certificate verification stays on for *config*.

    Verification is only turned off when ``allow_insecure_tls`` is set and
    the interpreter runs with assertions enabled (``__debug__``).
    """
    if not config.allow_insecure_tls:
        return True
    if __debug__:
        logger.warning(
            "TLS certificate verification is DISABLED (allow_insecure_tls); "
            "use this only against a local test proxy"
        )
        return False
    logger.warning("allow_insecure_tls ignored: Python is running with -O")
    return True


class SpotifyClient(EndpointCatalog):
    """Authenticated, cache-aware client for the Spotify Web API.

    Use it as an async context manager, or call :meth:`aclose` when done.
    The underlying :class:`httpx.AsyncClient` is created on first use.

    Args:
        config: Client configuration; defaults to :class:`ClientConfig()`.
        token_store: Token store to share with an external auth flow. A
            fresh empty store is created when omitted.
        transport: Optional :mod:`httpx` transport, e.g.
            :class:`httpx.MockTransport` in tests.

    Example::

        async with SpotifyClient() as client:
            client.update_token(token)
            response = await client.get_album(album_id).send()
            album = response.deserialize()
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        token_store: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self.token_store = token_store if token_store is not None else TokenStore()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> SpotifyClient:
        self._http()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            request_config = self._config.request
            self._client = httpx.AsyncClient(
                timeout=request_config.timeout,
                verify=tls_verify_enabled(request_config),
                transport=self._transport,
            )
        return self._client

    # ------------------------------------------------------------------ #
    # Token lifecycle
    # ------------------------------------------------------------------ #

    def has_token(self) -> bool:
        return self.token_store.has_token()

    def update_token(self, new_token: str) -> None:
        """Replace the stored token with *new_token*.

        Any non-empty token replaces the current one unconditionally. An
        empty string raises :class:`ValueError` and leaves the stored token
        unchanged; use :meth:`clear_token` to log out.
        """
        self.token_store.update_token(new_token)

    def clear_token(self) -> None:
        self.token_store.clear_token()

    # ------------------------------------------------------------------ #
    # Request construction
    # ------------------------------------------------------------------ #

    def request(self, response_type: Any = None) -> SpotifyRequest[Any]:
        """Start building a request whose payload parses into *response_type*."""
        return SpotifyRequest(self, response_type)

    # ------------------------------------------------------------------ #
    # Send paths
    # ------------------------------------------------------------------ #

    async def send_req(
        self,
        request: httpx.Request,
        response_type: Any = None,
    ) -> SpotifyResponse[Any]:
        """Send *request* and classify the response into an envelope.

        Headers are inspected before the body; the body is read only for
        2xx responses.

        Raises:
            InvalidTokenError: On 401 (the token store is cleared first).
            BadStatusError: On any status other than 2xx, 304 or 401.
            ConnectionError_: On transport failures, including while
                reading the body.
            ContentDecodeError: If the body cannot be decoded.
        """
        response = await self._send(request)
        try:
            max_age, etag = extract_cache_metadata(response.headers)
            outcome = classify_status(response.status_code)

            if outcome is StatusClass.SUCCESS:
                raw = await self._read_body(request, response)
                return SpotifyResponse.ok(decode_body(raw), max_age, etag, response_type)

            if outcome is StatusClass.NOT_MODIFIED:
                logger.debug("%s %s not modified (etag=%s)", request.method, request.url, etag)
                return SpotifyResponse.not_modified(max_age, etag, response_type)

            self._raise_for_status(request, outcome, response.status_code)
        finally:
            await response.aclose()

    async def send_req_no_response(self, request: httpx.Request) -> None:
        """Send *request* and reduce the outcome to success or an exception.

        2xx and 304 count as success. The body is never read.

        Raises:
            InvalidTokenError: On 401 (the token store is cleared first).
            BadStatusError: On any other non-success status.
            ConnectionError_: On transport failures.
        """
        response = await self._send(request)
        try:
            outcome = classify_status(response.status_code)
            if outcome in (StatusClass.SUCCESS, StatusClass.NOT_MODIFIED):
                return
            self._raise_for_status(request, outcome, response.status_code)
        finally:
            await response.aclose()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Send with a streamed body so that headers can be inspected first."""
        try:
            response = await self._http().send(request, stream=True)
        except httpx.TransportError as exc:
            logger.debug("%s %s failed: %s", request.method, request.url, exc)
            raise ConnectionError_(f"Request to {request.url} failed: {exc}") from exc
        logger.debug("%s %s -> %s", request.method, request.url, response.status_code)
        return response

    async def _read_body(self, request: httpx.Request, response: httpx.Response) -> bytes:
        try:
            return await response.aread()
        except httpx.DecodingError as exc:
            raise ContentDecodeError(f"Cannot decode response body from {request.url}: {exc}") from exc
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Reading response from {request.url} failed: {exc}") from exc

    def _raise_for_status(
        self,
        request: httpx.Request,
        outcome: StatusClass,
        status_code: int,
    ) -> NoReturn:
        if outcome is StatusClass.UNAUTHORIZED:
            logger.warning("API rejected the bearer token; clearing it")
            self.clear_token()
            raise InvalidTokenError()
        logger.debug("%s %s failed with status %s", request.method, request.url, status_code)
        raise BadStatusError(status_code)
