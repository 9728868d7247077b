"""Endpoint catalog: one request builder per remote resource.

Every helper returns an unsent
:class:`~spotapi.client.request.SpotifyRequest` typed with the model its
payload parses into, so callers can still attach an ETag before sending::

    request = client.get_playlist(playlist_id).etag(cached_etag)
    response = await request.send()

Mutating helpers (:meth:`EndpointCatalog.save_album`,
:meth:`EndpointCatalog.remove_saved_album`) expect no body and are meant
to be sent with :meth:`~spotapi.client.request.SpotifyRequest.send_no_response`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from spotapi.client.query import SearchQuery, make_query
from spotapi.client.request import SpotifyRequest
from spotapi.models import (
    Album,
    Artist,
    HTTPMethod,
    Page,
    Playlist,
    PlaylistTrack,
    RawSearchResults,
    SavedAlbum,
    SearchType,
    TopTracks,
    User,
)

PLAYLIST_FIELDS = (
    "id,name,images,owner,"
    "tracks(total,items(is_local,track(name,id,duration_ms,"
    "artists(name,id),album(name,id,images,artists))))"
)
"""Field filter sent with :meth:`EndpointCatalog.get_playlist`."""

SEARCH_TYPES = (SearchType.ALBUM, SearchType.ARTIST)


class EndpointCatalog(ABC):
    """Mixin providing path and query builders for the catalog endpoints.

    The concrete client supplies :meth:`request`.
    """

    @abstractmethod
    def request(self, response_type: Any = None) -> SpotifyRequest[Any]:
        """Start a request whose payload parses into *response_type*."""
        ...

    def _get(self, response_type: Any, path: str, query: str | None = None) -> SpotifyRequest[Any]:
        return self.request(response_type).method(HTTPMethod.GET).uri(path, query)

    # --- Artists ---

    def get_artist(self, id: str) -> SpotifyRequest[Artist]:
        return self._get(Artist, f"/v1/artists/{id}")

    def get_artist_albums(self, id: str, offset: int, limit: int) -> SpotifyRequest[Page[Album]]:
        query = make_query(
            ("include_groups", "album,single"),
            ("country", "from_token"),
            ("offset", offset),
            ("limit", limit),
        )
        return self._get(Page[Album], f"/v1/artists/{id}/albums", query)

    def get_artist_top_tracks(self, id: str) -> SpotifyRequest[TopTracks]:
        query = make_query(("market", "from_token"))
        return self._get(TopTracks, f"/v1/artists/{id}/top-tracks", query)

    # --- Albums ---

    def get_album(self, id: str) -> SpotifyRequest[Album]:
        return self._get(Album, f"/v1/albums/{id}")

    def is_album_saved(self, id: str) -> SpotifyRequest[list[bool]]:
        return self._get(list[bool], "/v1/me/albums/contains", make_query(("ids", id)))

    def save_album(self, id: str) -> SpotifyRequest[None]:
        query = make_query(("ids", id))
        return self.request().method(HTTPMethod.PUT).uri("/v1/me/albums", query)

    def remove_saved_album(self, id: str) -> SpotifyRequest[None]:
        query = make_query(("ids", id))
        return self.request().method(HTTPMethod.DELETE).uri("/v1/me/albums", query)

    def get_saved_albums(self, offset: int, limit: int) -> SpotifyRequest[Page[SavedAlbum]]:
        query = make_query(("offset", offset), ("limit", limit))
        return self._get(Page[SavedAlbum], "/v1/me/albums", query)

    # --- Playlists ---

    def get_playlist(self, id: str) -> SpotifyRequest[Playlist]:
        return self._get(Playlist, f"/v1/playlists/{id}", make_query(("fields", PLAYLIST_FIELDS)))

    def get_playlist_tracks(
        self, id: str, offset: int, limit: int
    ) -> SpotifyRequest[Page[PlaylistTrack]]:
        query = make_query(("offset", offset), ("limit", limit))
        return self._get(Page[PlaylistTrack], f"/v1/playlists/{id}/tracks", query)

    def get_saved_playlists(self, offset: int, limit: int) -> SpotifyRequest[Page[Playlist]]:
        query = make_query(("offset", offset), ("limit", limit))
        return self._get(Page[Playlist], "/v1/me/playlists", query)

    # --- Search ---

    def search(self, query: str, offset: int, limit: int) -> SpotifyRequest[RawSearchResults]:
        search_query = SearchQuery(
            query=query,
            types=list(SEARCH_TYPES),
            limit=limit,
            offset=offset,
        )
        return self._get(RawSearchResults, "/v1/search", search_query.to_query_string())

    # --- Users ---

    def get_user(self, id: str) -> SpotifyRequest[User]:
        return self._get(User, f"/v1/users/{id}")

    def get_user_playlists(self, id: str, offset: int, limit: int) -> SpotifyRequest[Page[Playlist]]:
        query = make_query(("offset", offset), ("limit", limit))
        return self._get(Page[Playlist], f"/v1/users/{id}/playlists", query)
