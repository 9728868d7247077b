"""Tests for the disk-backed response cache."""

from __future__ import annotations

from pathlib import Path

import diskcache
import pytest

from spotapi.cache import CacheEntry, ResponseCache
from spotapi.exceptions import CacheError
from spotapi.models import CacheConfig

URL = "https://api.spotify.com/v1/albums/1"


@pytest.fixture
def cache(tmp_path: Path) -> ResponseCache:
    response_cache = ResponseCache(tmp_path, CacheConfig())
    yield response_cache
    response_cache.close()


def _entry(**overrides) -> CacheEntry:
    values = {"body": '{"id": "1"}', "etag": '"v1"', "max_age": 60, "stored_at": 1000.0}
    values.update(overrides)
    return CacheEntry(**values)


class TestCacheEntry:
    def test_fresh_within_max_age(self) -> None:
        entry = _entry()
        assert entry.is_fresh(1000.0)
        assert entry.is_fresh(1059.9)

    def test_stale_at_expiry(self) -> None:
        entry = _entry()
        assert not entry.is_fresh(1060.0)
        assert not entry.is_fresh(5000.0)

    def test_zero_max_age_is_never_fresh(self) -> None:
        assert not _entry(max_age=0).is_fresh(1000.0)

    def test_remaining(self) -> None:
        entry = _entry()
        assert entry.remaining(1000.0) == 60
        assert entry.remaining(1045.0) == 15
        assert entry.remaining(2000.0) == 0


class TestKeys:
    def test_stable_and_hex(self) -> None:
        key = ResponseCache.make_key("GET", URL, "tok")
        assert key == ResponseCache.make_key("get", URL, "tok")
        assert len(key) == 64
        int(key, 16)

    def test_method_and_url_distinguish(self) -> None:
        assert ResponseCache.make_key("GET", URL, "tok") != ResponseCache.make_key("PUT", URL, "tok")
        assert ResponseCache.make_key("GET", URL, "tok") != ResponseCache.make_key("GET", URL + "?x=1", "tok")

    def test_token_distinguishes(self) -> None:
        assert ResponseCache.make_key("GET", URL, "alice") != ResponseCache.make_key("GET", URL, "bob")


class TestResponseCache:
    def test_miss(self, cache: ResponseCache) -> None:
        assert cache.get("absent") is None

    def test_set_get(self, cache: ResponseCache) -> None:
        key = cache.make_key("GET", URL, "tok")
        cache.set(key, _entry())
        assert cache.get(key) == _entry()

    def test_persists_across_instances(self, tmp_path: Path) -> None:
        key = ResponseCache.make_key("GET", URL, "tok")
        first = ResponseCache(tmp_path, CacheConfig())
        first.set(key, _entry())
        first.close()

        second = ResponseCache(tmp_path, CacheConfig())
        assert second.get(key) == _entry()
        second.close()

    def test_invalidate(self, cache: ResponseCache) -> None:
        cache.set("k", _entry())
        cache.invalidate("k")
        assert cache.get("k") is None

    def test_clear_returns_count(self, cache: ResponseCache) -> None:
        cache.set("a", _entry())
        cache.set("b", _entry())
        assert cache.clear() == 2
        assert cache.get("a") is None

    def test_malformed_record_is_dropped(self, tmp_path: Path) -> None:
        response_cache = ResponseCache(tmp_path, CacheConfig())
        raw = diskcache.Cache(str(tmp_path / "responses"))
        raw.set("k", {"unexpected": True})
        raw.close()

        assert response_cache.get("k") is None
        assert response_cache.stats()["size"] == 0
        response_cache.close()

    def test_stats(self, cache: ResponseCache, tmp_path: Path) -> None:
        cache.set("a", _entry())
        stats = cache.stats()
        assert stats["enabled"] is True
        assert stats["size"] == 1
        assert stats["directory"] == str(tmp_path / "responses")
        assert stats["retention_seconds"] == CacheConfig().retention_seconds


class TestDisabledCache:
    def test_everything_is_a_noop(self, tmp_path: Path) -> None:
        cache = ResponseCache(tmp_path, CacheConfig(enabled=False))
        assert cache.enabled is False
        cache.set("k", _entry())
        assert cache.get("k") is None
        assert cache.clear() == 0
        assert cache.stats() == {"enabled": False}
        assert not (tmp_path / "responses").exists()
        cache.close()


class TestStorageErrors:
    def test_read_failure_wrapped(self, cache: ResponseCache, monkeypatch: pytest.MonkeyPatch) -> None:
        def broken(*args, **kwargs):
            raise OSError("disk gone")

        monkeypatch.setattr(cache._cache, "get", broken)
        with pytest.raises(CacheError, match="disk gone"):
            cache.get("k")

    def test_write_failure_wrapped(self, cache: ResponseCache, monkeypatch: pytest.MonkeyPatch) -> None:
        def broken(*args, **kwargs):
            raise diskcache.Timeout("locked")

        monkeypatch.setattr(cache._cache, "set", broken)
        with pytest.raises(CacheError):
            cache.set("k", _entry())

    def test_unopenable_directory(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(CacheError):
            ResponseCache(blocker, CacheConfig())
