"""Response caching for spotapi.

- :class:`ResponseCache` -- disk store of :class:`CacheEntry` records
  (body, ``etag``, ``max_age``) built on :mod:`diskcache`.
- :func:`fetch_cached` -- serve fresh entries locally and revalidate stale
  ones with ``If-None-Match``.
"""

from spotapi.cache.cache import CacheEntry, ResponseCache
from spotapi.cache.fetch import fetch_cached

__all__ = ["CacheEntry", "ResponseCache", "fetch_cached"]
