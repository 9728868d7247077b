"""Response envelope and status classification.

Everything in this module is pure: no I/O, no shared state. The transport
(:class:`~spotapi.client.async_client.SpotifyClient`) reads the status
line and headers, asks :func:`classify_status` what to do, reads the body
only when told to, and wraps the outcome in a :class:`SpotifyResponse`.

Status mapping:

===========  =====================================================
2xx          :attr:`StatusClass.SUCCESS` -- body read, ``OK`` envelope
304          :attr:`StatusClass.NOT_MODIFIED` -- no body, reuse the cache
401          :attr:`StatusClass.UNAUTHORIZED` -- token cleared, error
anything     :attr:`StatusClass.FAILURE` -- ``BadStatusError(code)``
===========  =====================================================

Cache metadata (``max_age`` and ``etag``) is extracted from the headers
for both envelope kinds.
"""

from __future__ import annotations

import enum
import json as json_mod
from functools import lru_cache
from typing import Any, Generic, Mapping, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from spotapi.exceptions import ContentDecodeError

T = TypeVar("T")

DEFAULT_MAX_AGE = 10
"""Freshness lifetime in seconds when ``Cache-Control`` carries no usable ``max-age``."""


class StatusClass(enum.Enum):
    SUCCESS = "success"
    NOT_MODIFIED = "not_modified"
    UNAUTHORIZED = "unauthorized"
    FAILURE = "failure"


def classify_status(status_code: int) -> StatusClass:
    """Map an HTTP status code onto the four outcomes the client distinguishes."""
    if 200 <= status_code < 300:
        return StatusClass.SUCCESS
    if status_code == 304:
        return StatusClass.NOT_MODIFIED
    if status_code == 401:
        return StatusClass.UNAUTHORIZED
    return StatusClass.FAILURE


def parse_cache_control(value: Optional[str]) -> Optional[int]:
    """Return the ``max-age`` of a ``Cache-Control`` header value.

    Only the first ``max-age=`` directive is considered; if its value is
    not a non-negative integer the result is ``None``.

    Example::

        >>> parse_cache_control("public, max-age=3600")
        3600
        >>> parse_cache_control("no-cache") is None
        True
    """
    if not value:
        return None
    for directive in value.split(","):
        directive = directive.strip()
        if directive.startswith("max-age="):
            seconds = directive[len("max-age="):].strip()
            if seconds.isascii() and seconds.isdigit():
                return int(seconds)
            return None
    return None


def extract_cache_metadata(headers: Mapping[str, str]) -> tuple[int, Optional[str]]:
    """Return ``(max_age, etag)`` from response headers.

    Header lookup is case-insensitive when *headers* is an
    :class:`httpx.Headers`.
    """
    max_age = parse_cache_control(headers.get("cache-control"))
    etag = headers.get("etag")
    return (DEFAULT_MAX_AGE if max_age is None else max_age), etag


def decode_body(raw: bytes) -> str:
    """Decode a response body as strict UTF-8.

    Raises:
        ContentDecodeError: If *raw* is not valid UTF-8.
    """
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ContentDecodeError(f"Response body is not valid UTF-8: {exc}") from exc


@lru_cache(maxsize=None)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


class ResponseKind(str, enum.Enum):
    OK = "ok"
    NOT_MODIFIED = "not_modified"


class SpotifyResponse(Generic[T]):
    """The raw outcome of one successful API call.

    An ``OK`` envelope always holds the body text (possibly empty); a
    ``NOT_MODIFIED`` envelope never does. Both carry the cache metadata
    sent by the server. Parsing is deferred to :meth:`deserialize`.

    Attributes:
        kind: :class:`ResponseKind` of the envelope.
        content: Raw body text for ``OK``, ``None`` for ``NOT_MODIFIED``.
        max_age: Freshness lifetime in seconds.
        etag: Entity tag for conditional re-fetching, if the server sent one.
        response_type: Type that :meth:`deserialize` parses into.
        from_cache: ``True`` when the body was served from the local cache
            rather than the network.
    """

    def __init__(
        self,
        kind: ResponseKind,
        content: Optional[str],
        max_age: int = DEFAULT_MAX_AGE,
        etag: Optional[str] = None,
        response_type: Any = None,
        from_cache: bool = False,
    ) -> None:
        if kind is ResponseKind.OK and content is None:
            raise ValueError("OK response requires body content")
        if kind is ResponseKind.NOT_MODIFIED and content is not None:
            raise ValueError("Not-modified response cannot carry body content")
        self.kind = kind
        self.content = content
        self.max_age = max_age
        self.etag = etag
        self.response_type = response_type
        self.from_cache = from_cache

    @classmethod
    def ok(
        cls,
        content: str,
        max_age: int = DEFAULT_MAX_AGE,
        etag: Optional[str] = None,
        response_type: Any = None,
        from_cache: bool = False,
    ) -> SpotifyResponse[T]:
        return cls(ResponseKind.OK, content, max_age, etag, response_type, from_cache)

    @classmethod
    def not_modified(
        cls,
        max_age: int = DEFAULT_MAX_AGE,
        etag: Optional[str] = None,
        response_type: Any = None,
    ) -> SpotifyResponse[T]:
        return cls(ResponseKind.NOT_MODIFIED, None, max_age, etag, response_type)

    @property
    def is_not_modified(self) -> bool:
        return self.kind is ResponseKind.NOT_MODIFIED

    def deserialize(self) -> Optional[T]:
        """Parse the body into :attr:`response_type`.

        Returns ``None`` instead of raising when the envelope is
        ``NOT_MODIFIED``, when no response type was declared, or when the
        body is not valid JSON of the expected shape.
        """
        if self.content is None or self.response_type is None:
            return None
        try:
            return _adapter(self.response_type).validate_json(self.content)
        except ValidationError:
            return None

    def json(self) -> Any:
        """Return the body as untyped JSON, or ``None`` if absent or malformed."""
        if self.content is None:
            return None
        try:
            return json_mod.loads(self.content)
        except ValueError:
            return None

    def __repr__(self) -> str:
        size = 0 if self.content is None else len(self.content)
        return (
            f"SpotifyResponse(kind={self.kind.value}, max_age={self.max_age}, "
            f"etag={self.etag!r}, content_length={size})"
        )
