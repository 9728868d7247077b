"""HTTP client package for spotapi.

Request flow::

    client.get_artist(id)          # EndpointCatalog -> SpotifyRequest
        .etag(previous)            # optional conditional request
        .send()                    # authenticate -> SpotifyClient.send_req
    -> SpotifyResponse             # OK(content) or NOT_MODIFIED + max_age/etag
        .deserialize()             # typed value or None

Classes:
    :class:`SpotifyClient` -- transport and token owner.
    :class:`SpotifyRequest` -- fluent request builder.
    :class:`SpotifyResponse` -- response envelope with deferred parsing.
    :class:`SearchQuery` -- search query serialiser.
"""

from spotapi.client.async_client import SpotifyClient
from spotapi.client.query import SearchQuery, make_query
from spotapi.client.request import API_HOST, SpotifyRequest
from spotapi.client.response import ResponseKind, SpotifyResponse

__all__ = [
    "API_HOST",
    "ResponseKind",
    "SearchQuery",
    "SpotifyClient",
    "SpotifyRequest",
    "SpotifyResponse",
    "make_query",
]
