"""Cache store interface and the default bounded in-memory implementation.

This module provides:
- CacheStore: Abstract, query-aware page store with optional per-entry TTL
- CacheEntry: A stored page with its expiry
- InMemoryCacheStore: Bounded LRU store kept in process memory
"""

import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Generic, TypeVar

from ...domain import FetchQuery, Page

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")

Clock = Callable[[], datetime]

DEFAULT_MAX_ENTRIES = 256


def utc_now() -> datetime:
    """Get the current UTC timestamp."""
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class CacheEntry(Generic[T, K]):
    """A cached page and the moment it stops being valid.

    Attributes:
        page: The stored page.
        expires_at: Expiry time. None means the entry never expires.
    """

    page: Page[T, K]
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class CacheStore(ABC, Generic[T, K]):
    """Query-aware store of fetched pages.

    Keys are always derived and supplied by the paginator; a store never
    builds keys itself. The query is passed along for stores that need
    backend context (for example a store that re-validates against a
    remote cache). Simple stores ignore it.

    All operations are async to support I/O-bound stores like Redis or a
    local database.
    """

    @staticmethod
    def in_memory(
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Clock = utc_now,
    ) -> "InMemoryCacheStore[Any, Any]":
        return InMemoryCacheStore(max_entries=max_entries, clock=clock)

    @abstractmethod
    async def get(self, key: str, query: FetchQuery[K]) -> Page[T, K] | None:
        """Return the page stored under key.

        Returns:
            The page, or None when nothing was stored or the entry expired.
        """
        ...

    @abstractmethod
    async def put(
        self,
        key: str,
        query: FetchQuery[K],
        page: Page[T, K],
        ttl: timedelta | None = None,
    ) -> None:
        """Store page under key, replacing any previous entry.

        Args:
            key: Cache key derived from the query.
            query: The query the page answers.
            page: The page to store.
            ttl: How long the entry stays valid. None means forever.
        """
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Remove the entry stored under key, if any."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""
        ...

    @abstractmethod
    async def has(self, key: str) -> bool:
        """Check whether key holds an entry that has not expired."""
        ...


class InMemoryCacheStore(CacheStore[T, K]):
    """Bounded least-recently-used page store.

    Reads and writes both count as use. When a write would exceed
    max_entries, the least recently used entry is evicted. Expired entries
    are dropped lazily when they are looked up.

    Note:
        Entries are lost on restart and are not shared between processes.
    """

    __slots__ = ("max_entries", "clock", "entries")

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES, clock: Clock = utc_now):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self.clock = clock
        self.entries: OrderedDict[str, CacheEntry[T, K]] = OrderedDict()

    def __len__(self) -> int:
        return len(self.entries)

    def _lookup(self, key: str) -> CacheEntry[T, K] | None:
        entry = self.entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            del self.entries[key]
            return None
        return entry

    async def get(self, key: str, query: FetchQuery[K]) -> Page[T, K] | None:
        entry = self._lookup(key)
        if entry is None:
            return None
        self.entries.move_to_end(key)
        return entry.page

    async def put(
        self,
        key: str,
        query: FetchQuery[K],
        page: Page[T, K],
        ttl: timedelta | None = None,
    ) -> None:
        expires_at = self.clock() + ttl if ttl is not None else None
        self.entries[key] = CacheEntry(page=page, expires_at=expires_at)
        self.entries.move_to_end(key)
        while len(self.entries) > self.max_entries:
            evicted, _ = self.entries.popitem(last=False)
            LOGGER.debug("Evicted cached page", extra={"cache_key": evicted})

    async def remove(self, key: str) -> None:
        self.entries.pop(key, None)

    async def clear(self) -> None:
        self.entries.clear()

    async def has(self, key: str) -> bool:
        return self._lookup(key) is not None
