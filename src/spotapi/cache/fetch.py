"""Conditional-request flow on top of :class:`~spotapi.cache.cache.ResponseCache`.

:func:`fetch_cached` sends a GET request only when needed:

1. A fresh entry (younger than its ``max_age``) is served without any
   network I/O.
2. A stale entry with an ETag turns the request into a conditional one
   (``If-None-Match``). On 304 the stored body is reused and its
   freshness window restarts with the new ``max_age``.
3. On 2xx the new body and metadata replace the entry.

The request is authenticated before the cache is consulted, so a missing
token fails with :class:`~spotapi.exceptions.NoTokenError` even when a
fresh entry exists, and entries are keyed per token. Non-GET requests
bypass the cache. Errors from the client propagate unchanged; the cache
is never updated on failure.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from spotapi.cache.cache import CacheEntry, ResponseCache
from spotapi.client.request import SpotifyRequest
from spotapi.client.response import SpotifyResponse
from spotapi.models import HTTPMethod

logger = logging.getLogger(__name__)

R = TypeVar("R")


async def fetch_cached(
    request: SpotifyRequest[R],
    cache: ResponseCache,
    clock: Callable[[], float] = time.time,
) -> SpotifyResponse[R]:
    """Send *request* through *cache* and return an ``OK`` envelope when possible.

    The returned envelope is ``NOT_MODIFIED`` only if the server answers
    304 and nothing is cached to reuse.

    Raises:
        NoTokenError: If no token is stored, before any cache lookup.
        Any other error raised by :meth:`SpotifyRequest.send`, and
        :class:`~spotapi.exceptions.CacheError` on storage failures.
    """
    request.authenticated()
    if request.http_method is not HTTPMethod.GET or not cache.enabled or request.url is None:
        return await request.send()

    assert request.token is not None
    key = cache.make_key(request.http_method.value, request.url, request.token)
    now = clock()
    entry = cache.get(key)

    if entry is not None and entry.is_fresh(now):
        logger.debug("Cache hit for %s (%ss left)", request.url, entry.remaining(now))
        return SpotifyResponse.ok(
            entry.body,
            entry.remaining(now),
            entry.etag,
            request.response_type,
            from_cache=True,
        )

    if entry is not None:
        request.etag(entry.etag)

    response = await request.send()
    # send() re-reads the token store; key the result by the token actually used.
    key = cache.make_key(request.http_method.value, request.url, request.token)

    if response.is_not_modified:
        if entry is None:
            return response
        logger.debug("Revalidated %s with etag %s", request.url, entry.etag)
        etag = response.etag or entry.etag
        cache.set(
            key,
            CacheEntry(body=entry.body, etag=etag, max_age=response.max_age, stored_at=now),
        )
        return SpotifyResponse.ok(
            entry.body,
            response.max_age,
            etag,
            request.response_type,
            from_cache=True,
        )

    assert response.content is not None
    cache.set(
        key,
        CacheEntry(body=response.content, etag=response.etag, max_age=response.max_age, stored_at=now),
    )
    return response
