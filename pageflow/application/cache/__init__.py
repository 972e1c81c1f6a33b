"""Cache addressing and page storage."""

from .keys import derive_cache_key
from .store import CacheEntry, CacheStore, InMemoryCacheStore, utc_now

__all__ = [
    "CacheEntry",
    "CacheStore",
    "InMemoryCacheStore",
    "derive_cache_key",
    "utc_now",
]
