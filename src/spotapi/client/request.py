"""Fluent builder for a single API request.

A :class:`SpotifyRequest` is obtained from
:meth:`~spotapi.client.async_client.SpotifyClient.request` (usually via
one of the endpoint helpers), configured with chainable calls, and then
consumed exactly once by :meth:`~SpotifyRequest.send` or
:meth:`~SpotifyRequest.send_no_response`::

    response = await (
        client.request(Artist)
        .method(HTTPMethod.GET)
        .uri("/v1/artists/0OdUWJ0sBjDrqHygGUXeCF")
        .etag(previous_etag)
        .send()
    )

Both send methods run :meth:`~SpotifyRequest.authenticated` first, so a
request without a stored token fails with
:class:`~spotapi.exceptions.NoTokenError` before any network I/O.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, Optional, TypeVar, Union

import httpx

from spotapi.exceptions import NoTokenError
from spotapi.models import HTTPMethod

if TYPE_CHECKING:
    from spotapi.client.async_client import SpotifyClient
    from spotapi.client.response import SpotifyResponse

R = TypeVar("R")

API_HOST = "api.spotify.com"

_NO_BODY = object()


class SpotifyRequest(Generic[R]):
    """Builder for one outbound request whose payload parses into ``R``.

    Args:
        client: The client whose token store and transport are used.
        response_type: Type handed to
            :meth:`~spotapi.client.response.SpotifyResponse.deserialize`;
            ``None`` for requests that expect no body.
    """

    def __init__(self, client: SpotifyClient, response_type: Any = None) -> None:
        self._client = client
        self.response_type = response_type
        self._method = HTTPMethod.GET
        self._url: Optional[str] = None
        self._headers: dict[str, str] = {}
        self._body: Any = _NO_BODY
        self._token: Optional[str] = None
        self._consumed = False

    # ------------------------------------------------------------------ #
    # Chainable configuration
    # ------------------------------------------------------------------ #

    def method(self, method: Union[HTTPMethod, str]) -> SpotifyRequest[R]:
        if not isinstance(method, HTTPMethod):
            method = HTTPMethod(method.upper())
        self._method = method
        return self

    def uri(self, path: str, query: Optional[str] = None) -> SpotifyRequest[R]:
        """Target ``https://api.spotify.com{path}``.

        Args:
            path: Absolute path, e.g. ``/v1/albums/123``.
            query: Already-encoded query string appended verbatim after
                ``?``; see :mod:`spotapi.client.query`.

        Raises:
            ValueError: If *path* is not absolute.
        """
        if not path.startswith("/"):
            raise ValueError(f"Request path must start with '/': {path!r}")
        url = f"https://{API_HOST}{path}"
        if query is not None:
            url = f"{url}?{query}"
        self._url = url
        return self

    def authenticated(self) -> SpotifyRequest[R]:
        """Attach ``Authorization: Bearer <token>`` from the client's token store.

        Raises:
            NoTokenError: If no token is stored.
        """
        token = self._client.token_store.get_token()
        if token is None:
            raise NoTokenError()
        self._token = token
        self._headers["Authorization"] = f"Bearer {token}"
        return self

    def etag(self, previous: Optional[str] = None) -> SpotifyRequest[R]:
        """Make the request conditional on *previous* via ``If-None-Match``."""
        if previous is not None:
            self._headers["If-None-Match"] = previous
        return self

    def json(self, payload: Any) -> SpotifyRequest[R]:
        """Send *payload* as a JSON request body."""
        self._body = payload
        return self

    # ------------------------------------------------------------------ #
    # Inspection
    # ------------------------------------------------------------------ #

    @property
    def http_method(self) -> HTTPMethod:
        return self._method

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    @property
    def token(self) -> Optional[str]:
        """Bearer token attached by the last :meth:`authenticated` call."""
        return self._token

    def build(self) -> httpx.Request:
        """Assemble the :class:`httpx.Request` without authenticating or sending it.

        Raises:
            RuntimeError: If :meth:`uri` was never called.
        """
        if self._url is None:
            raise RuntimeError("Request has no URI; call uri() before sending")
        kwargs: dict[str, Any] = {"headers": self._headers}
        if self._body is not _NO_BODY:
            kwargs["json"] = self._body
        return httpx.Request(self._method.value, self._url, **kwargs)

    # ------------------------------------------------------------------ #
    # Sending
    # ------------------------------------------------------------------ #

    async def send(self) -> SpotifyResponse[R]:
        """Authenticate, send, and return the classified response envelope.

        Raises:
            NoTokenError: If no token is stored (nothing is sent).
            InvalidTokenError: On 401; the stored token has been cleared.
            BadStatusError: On any status other than 2xx, 304 or 401.
            ConnectionError_: On transport failures.
            ContentDecodeError: If the body is not valid UTF-8.
        """
        request = self._finalize()
        return await self._client.send_req(request, self.response_type)

    async def send_no_response(self) -> None:
        """Authenticate and send, reducing the outcome to success or an exception.

        The response body is never read. Raises the same errors as
        :meth:`send` except :class:`~spotapi.exceptions.ContentDecodeError`.
        """
        request = self._finalize()
        await self._client.send_req_no_response(request)

    def _finalize(self) -> httpx.Request:
        if self._consumed:
            raise RuntimeError("Request has already been sent")
        self._consumed = True
        self.authenticated()
        return self.build()

    def __repr__(self) -> str:
        return f"SpotifyRequest({self._method.value} {self._url})"
