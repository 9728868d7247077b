"""Tests for the fluent request builder."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from spotapi.client import SpotifyClient
from spotapi.client.request import API_HOST, SpotifyRequest
from spotapi.exceptions import NoTokenError
from spotapi.models import Artist, HTTPMethod


def _client(handler=None, token: str | None = "test-token") -> SpotifyClient:
    def default(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="{}")

    client = SpotifyClient(transport=httpx.MockTransport(handler or default))
    if token is not None:
        client.update_token(token)
    return client


class TestChaining:
    def test_each_step_returns_builder(self) -> None:
        request = _client().request(Artist)
        assert request.method(HTTPMethod.GET) is request
        assert request.uri("/v1/artists/1") is request
        assert request.etag('"e"') is request
        assert request.authenticated() is request
        assert request.json({"a": 1}) is request

    def test_defaults_to_get(self) -> None:
        request = _client().request().uri("/v1/me")
        assert request.build().method == "GET"

    def test_method_from_string(self) -> None:
        request = _client().request().method("delete").uri("/v1/me/albums")
        assert request.http_method is HTTPMethod.DELETE
        assert request.build().method == "DELETE"

    def test_unknown_method_rejected(self) -> None:
        with pytest.raises(ValueError):
            _client().request().method("BREW")


class TestUri:
    def test_fixed_host_over_https(self) -> None:
        request = _client().request().uri("/v1/albums/xyz")
        assert request.url == f"https://{API_HOST}/v1/albums/xyz"
        built = request.build()
        assert built.url.scheme == "https"
        assert built.url.host == "api.spotify.com"
        assert built.url.path == "/v1/albums/xyz"

    def test_query_appended_verbatim(self) -> None:
        query = "type=album,artist&q=test+wow&offset=0&limit=5&market=from_token"
        request = _client().request().uri("/v1/search", query)
        assert request.url == f"https://api.spotify.com/v1/search?{query}"
        assert request.build().url.query == query.encode()

    def test_no_query(self) -> None:
        request = _client().request().uri("/v1/me")
        assert "?" not in request.url

    def test_relative_path_rejected(self) -> None:
        with pytest.raises(ValueError):
            _client().request().uri("v1/me")

    def test_build_without_uri(self) -> None:
        with pytest.raises(RuntimeError):
            _client().request().build()


class TestAuthenticated:
    def test_injects_bearer_header(self) -> None:
        request = _client(token="abc123").request().uri("/v1/me").authenticated()
        assert request.build().headers["authorization"] == "Bearer abc123"

    def test_no_token_fails_fast(self) -> None:
        with pytest.raises(NoTokenError):
            _client(token=None).request().uri("/v1/me").authenticated()

    def test_reads_current_token(self) -> None:
        client = _client(token="old")
        client.update_token("new")
        request = client.request().uri("/v1/me").authenticated()
        assert request.headers["Authorization"] == "Bearer new"


class TestEtag:
    def test_adds_if_none_match(self) -> None:
        request = _client().request().uri("/v1/me").etag('"v1"')
        assert request.build().headers["if-none-match"] == '"v1"'

    def test_none_adds_nothing(self) -> None:
        request = _client().request().uri("/v1/me").etag(None)
        assert "if-none-match" not in request.build().headers


class TestBody:
    def test_json_payload(self) -> None:
        request = _client().request().method("PUT").uri("/v1/me/albums").json({"ids": ["a"]})
        built = request.build()
        assert json.loads(built.content) == {"ids": ["a"]}
        assert built.headers["content-type"] == "application/json"

    def test_no_payload_means_empty_body(self) -> None:
        built = _client().request().method("PUT").uri("/v1/me/albums").build()
        assert built.content == b""


class TestSend:
    def test_send_authenticates_implicitly(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text='{"id": "1", "name": "A"}')

        client = _client(handler, token="tok")
        response = asyncio.run(client.request(Artist).uri("/v1/artists/1").send())

        assert seen[0].headers["authorization"] == "Bearer tok"
        assert response.deserialize() == Artist(id="1", name="A")

    def test_send_without_token_makes_no_network_call(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, text="{}")

        client = _client(handler, token=None)
        with pytest.raises(NoTokenError):
            asyncio.run(client.request().uri("/v1/me").send())
        with pytest.raises(NoTokenError):
            asyncio.run(client.request().uri("/v1/me").send_no_response())
        assert calls == 0

    def test_request_is_consumed_once(self) -> None:
        client = _client()
        request = client.request().uri("/v1/me")

        async def scenario() -> None:
            await request.send()
            await request.send()

        with pytest.raises(RuntimeError):
            asyncio.run(scenario())

    def test_send_no_response_returns_none(self) -> None:
        client = _client(lambda request: httpx.Response(200))
        request: SpotifyRequest = client.request().method("PUT").uri("/v1/me/albums", "ids=a")
        assert asyncio.run(request.send_no_response()) is None
