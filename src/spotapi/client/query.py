"""Query-string construction for the endpoint catalog.

Two encoders live here:

- :func:`make_query` -- standard ``application/x-www-form-urlencoded``
  serialisation (space becomes ``+``, every non-unreserved UTF-8 byte is
  percent-encoded) with pairs emitted in the order given.
- :class:`SearchQuery` -- the fixed-order query of ``/v1/search``, whose
  ``type`` list keeps its comma separators literal.

The resulting strings are passed verbatim to
:meth:`~spotapi.client.request.SpotifyRequest.uri`.
"""

from __future__ import annotations

from typing import Optional, Union
from urllib.parse import quote_plus, urlencode

from pydantic import BaseModel, Field

from spotapi.models import SearchType

QueryValue = Union[str, int]


def _form_quote(value: str, safe: str = "", encoding: Optional[str] = None, errors: Optional[str] = None) -> str:
    """``application/x-www-form-urlencoded`` escaping of one key or value.

    Unlike :func:`urllib.parse.quote_plus`, ``*`` stays literal and ``~`` is
    percent-encoded, matching the WHATWG form serializer.
    """
    return quote_plus(value, safe="*", encoding=encoding, errors=errors).replace("~", "%7E")


def make_query(*pairs: tuple[str, QueryValue]) -> str:
    """Form-encode *pairs* in insertion order.

    Example::

        >>> make_query(("offset", 0), ("limit", 20))
        'offset=0&limit=20'
        >>> make_query(("q", "a b"))
        'q=a+b'
    """
    return urlencode([(key, str(value)) for key, value in pairs], quote_via=_form_quote)


class SearchQuery(BaseModel):
    """Parameters of a catalog search.

    Serialises as
    ``type=<types>&q=<query>&offset=<n>&limit=<n>&market=from_token``.
    Question marks are removed from the query text before encoding.
    """

    query: str
    types: list[SearchType] = Field(min_length=1)
    limit: int = Field(default=20, ge=0)
    offset: int = Field(default=0, ge=0)

    def to_query_string(self) -> str:
        types = ",".join(t.value for t in self.types)
        text = _form_quote(self.query.replace("?", ""))
        return (
            f"type={types}&q={text}&offset={self.offset}"
            f"&limit={self.limit}&market=from_token"
        )
