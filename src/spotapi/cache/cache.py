"""Disk-backed store of API responses with their HTTP cache metadata.

Uses :mod:`diskcache` to persist :class:`CacheEntry` records -- the raw
body text plus the ``etag`` and ``max_age`` reported by the server.
Entries stay on disk for ``retention_seconds`` after being stored so that
a stale entry can still be revalidated with ``If-None-Match``; freshness
itself is decided by :meth:`CacheEntry.is_fresh`.

Cache keys are SHA-256 hashes of ``METHOD|URL|token-digest``, so a
response stored for one bearer token is never served under another.

See Also:
    :func:`spotapi.cache.fetch.fetch_cached` -- the conditional-request
    flow that reads and writes this store.
"""

from __future__ import annotations

import hashlib
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any, Optional

import diskcache
from pydantic import BaseModel, ValidationError

from spotapi.exceptions import CacheError
from spotapi.models import CacheConfig

logger = logging.getLogger(__name__)

_STORAGE_ERRORS = (OSError, sqlite3.Error, diskcache.Timeout)


class CacheEntry(BaseModel):
    """One cached response body with its cache metadata."""

    body: str
    etag: Optional[str] = None
    max_age: int
    stored_at: float

    def is_fresh(self, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        return now < self.stored_at + self.max_age

    def remaining(self, now: Optional[float] = None) -> int:
        """Seconds of freshness left, never negative."""
        now = time.time() if now is None else now
        return max(0, int(self.stored_at + self.max_age - now))


class ResponseCache:
    """Disk-backed cache for API response bodies.

    Args:
        cache_dir: Root directory for the cache. A ``responses/``
            subdirectory is created inside it.
        config: Cache configuration (``enabled`` flag and retention).

    Example::

        cache = ResponseCache("/tmp/spotapi-cache", CacheConfig())
        key = cache.make_key("GET", "https://api.spotify.com/v1/albums/1", "tok")
        cache.set(key, CacheEntry(body="{}", etag='"v1"', max_age=60, stored_at=time.time()))
        entry = cache.get(key)
    """

    def __init__(self, cache_dir: str | Path, config: CacheConfig) -> None:
        self._config = config
        self._cache: Optional[diskcache.Cache] = None
        self._cache_dir = Path(cache_dir)
        if config.enabled:
            try:
                self._cache = diskcache.Cache(str(self._cache_dir / "responses"))
            except _STORAGE_ERRORS as exc:
                raise CacheError(f"Cannot open response cache at {self._cache_dir}: {exc}") from exc

    @property
    def enabled(self) -> bool:
        return self._cache is not None

    @staticmethod
    def make_key(method: str, url: str, token: str) -> str:
        """Key for *url* as seen by the holder of *token*.

        Only a digest of the token enters the key; the token itself is
        never written to disk.
        """
        token_digest = hashlib.sha256(token.encode()).hexdigest()
        raw = f"{method.upper()}|{url}|{token_digest}"
        return hashlib.sha256(raw.encode()).hexdigest()

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry stored under *key*, or ``None``.

        An unreadable record is dropped and reported as a miss.

        Raises:
            CacheError: If the underlying store cannot be read.
        """
        if self._cache is None:
            return None
        try:
            data = self._cache.get(key)
        except _STORAGE_ERRORS as exc:
            raise CacheError(f"Cannot read cache entry: {exc}") from exc
        if data is None:
            return None
        try:
            return CacheEntry.model_validate(data)
        except ValidationError:
            logger.debug("Discarding malformed cache entry %s", key)
            self.invalidate(key)
            return None

    def set(self, key: str, entry: CacheEntry) -> None:
        """Store *entry* under *key*.

        Raises:
            CacheError: If the underlying store cannot be written.
        """
        if self._cache is None:
            return
        try:
            self._cache.set(
                key,
                entry.model_dump(mode="json"),
                expire=entry.max_age + self._config.retention_seconds,
            )
        except _STORAGE_ERRORS as exc:
            raise CacheError(f"Cannot write cache entry: {exc}") from exc

    def invalidate(self, key: str) -> None:
        if self._cache is None:
            return
        try:
            self._cache.delete(key)
        except _STORAGE_ERRORS as exc:
            raise CacheError(f"Cannot delete cache entry: {exc}") from exc

    def clear(self) -> int:
        """Remove all entries and return how many were removed."""
        if self._cache is None:
            return 0
        try:
            return self._cache.clear()
        except _STORAGE_ERRORS as exc:
            raise CacheError(f"Cannot clear cache: {exc}") from exc

    def stats(self) -> dict[str, Any]:
        """Return ``enabled`` and, when enabled, ``size``, ``directory`` and ``retention_seconds``."""
        if self._cache is None:
            return {"enabled": False}
        return {
            "enabled": True,
            "size": len(self._cache),
            "directory": str(self._cache_dir / "responses"),
            "retention_seconds": self._config.retention_seconds,
        }

    def close(self) -> None:
        if self._cache is not None:
            self._cache.close()
