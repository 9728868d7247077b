"""Canonical Pydantic models shared across all spotapi modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`CacheConfig`, :class:`OutputConfig`
    and :class:`ClientConfig`.

**API resource models** -- the payload shapes returned by the endpoint
catalog and produced by
:meth:`~spotapi.client.response.SpotifyResponse.deserialize`:
    :class:`Image`, :class:`ArtistRef`, :class:`Artist`, :class:`AlbumRef`,
    :class:`Album`, :class:`Track`, :class:`TopTracks`, :class:`User`,
    :class:`PlaylistTrack`, :class:`PlaylistTracks`, :class:`Playlist`,
    :class:`SavedAlbum`, :class:`Page` and :class:`RawSearchResults`.

Resource models ignore unknown keys so that new fields on the upstream
API never break parsing; missing required keys make parsing fail, which
``deserialize`` reports as ``None``.
"""

from __future__ import annotations

import enum
from typing import Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, Field


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP transport settings applied to every API call."""

    timeout: float = Field(default=30, description="Request timeout in seconds")
    allow_insecure_tls: bool = Field(
        default=False,
        description="Accept invalid certificates (local proxy testing only; "
        "ignored when Python runs with -O)",
    )


class CacheConfig(BaseModel):
    """Response cache settings."""

    enabled: bool = Field(default=True, description="Enable the response cache")
    directory: Optional[str] = Field(
        default=None, description="Cache directory (defaults to the XDG cache dir)"
    )
    retention_seconds: int = Field(
        default=7 * 24 * 3600,
        description="How long entries are kept for ETag revalidation after going stale",
    )


class OutputConfig(BaseModel):
    """Default output format preferences for the CLI."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto",
        description="Format used when neither --json nor --plain is given",
    )


class ClientConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/spotapi/config.json``.

    Loaded and saved by :func:`~spotapi.config.load_config` and
    :func:`~spotapi.config.save_config`. Environment variables override
    the values read from disk; see :func:`~spotapi.config.resolve_config`.
    """

    token_source: str = Field(
        default="env:SPOTAPI_TOKEN",
        description="Credential source for the bearer token: env:VAR, file:/path, prompt",
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Request vocabulary ---


class HTTPMethod(str, enum.Enum):
    """HTTP verbs used against the API."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class SearchType(str, enum.Enum):
    """Resource kinds accepted by the ``type`` parameter of ``/v1/search``."""

    ALBUM = "album"
    ARTIST = "artist"
    PLAYLIST = "playlist"
    TRACK = "track"


# --- API resources ---


T = TypeVar("T")


class Image(BaseModel):
    url: str
    height: Optional[int] = None
    width: Optional[int] = None


class ArtistRef(BaseModel):
    """Simplified artist object embedded in albums and tracks."""

    id: Optional[str] = None
    name: str


class Artist(BaseModel):
    id: str
    name: str
    images: list[Image] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)


class AlbumRef(BaseModel):
    """Simplified album object embedded in tracks."""

    id: Optional[str] = None
    name: str
    images: list[Image] = Field(default_factory=list)
    artists: list[ArtistRef] = Field(default_factory=list)


class Track(BaseModel):
    id: Optional[str] = None
    name: str
    duration_ms: int
    artists: list[ArtistRef] = Field(default_factory=list)
    album: Optional[AlbumRef] = None
    track_number: Optional[int] = None


class Page(BaseModel, Generic[T]):
    """One page of a paginated collection.

    ``next`` is the absolute URL of the following page, or ``None`` on
    the last page.
    """

    items: list[T] = Field(default_factory=list)
    offset: int = 0
    limit: int = 0
    total: int = 0
    next: Optional[str] = None


class Album(BaseModel):
    id: str
    name: str
    album_type: Optional[str] = None
    release_date: Optional[str] = None
    images: list[Image] = Field(default_factory=list)
    artists: list[ArtistRef] = Field(default_factory=list)
    tracks: Optional[Page[Track]] = None


class TopTracks(BaseModel):
    tracks: list[Track]


class User(BaseModel):
    id: str
    display_name: Optional[str] = None
    images: list[Image] = Field(default_factory=list)


class PlaylistTrack(BaseModel):
    """A playlist entry; ``track`` is ``None`` for removed or unavailable items."""

    is_local: bool = False
    track: Optional[Track] = None


class PlaylistTracks(BaseModel):
    """The ``tracks`` member of a playlist.

    Full playlist responses inline the first ``items``; playlist listings
    only report ``total``.
    """

    total: int = 0
    items: list[PlaylistTrack] = Field(default_factory=list)


class Playlist(BaseModel):
    id: str
    name: str
    images: list[Image] = Field(default_factory=list)
    owner: User
    tracks: PlaylistTracks = Field(default_factory=PlaylistTracks)


class SavedAlbum(BaseModel):
    added_at: Optional[str] = None
    album: Album


class RawSearchResults(BaseModel):
    """Search response; a section is ``None`` when its type was not requested."""

    albums: Optional[Page[Album]] = None
    artists: Optional[Page[Artist]] = None
