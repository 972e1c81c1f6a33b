"""Cache policies and the load strategies that implement them.

Each strategy decides how cache lookups and live fetches combine for a
single load. Strategies never touch paginator state directly; they report
through the PageLoad they are given, which knows whether the load is still
current and how to fold a page into the accumulated items.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

from ...domain import CacheNotConfiguredError, NoCachedDataError

if TYPE_CHECKING:
    from .paginator import PageLoad

LOGGER = logging.getLogger(__name__)


class CachePolicy(str, Enum):
    """Relationship between the cache and the page source for a load.

    - cache_first: show cached data at once, refresh it in the background
    - network_first: fetch, fall back to the cache when the fetch fails
    - cache_only: only read the cache (offline mode)
    - network_only: always fetch, never read or write the cache
    """

    CACHE_FIRST = "cache_first"
    NETWORK_FIRST = "network_first"
    CACHE_ONLY = "cache_only"
    NETWORK_ONLY = "network_only"

    @property
    def uses_cache(self) -> bool:
        return self is not CachePolicy.NETWORK_ONLY

    def strategy(self) -> "LoadStrategy":
        return _STRATEGIES[self]()


class LoadStrategy(ABC):
    """Executes one load under a cache policy."""

    @abstractmethod
    async def execute(self, load: "PageLoad") -> None:
        """Resolve the load, publishing pages or an error through it.

        Implementations must not raise for fetch failures; those end up in
        the published state.
        """
        ...


class CacheFirst(LoadStrategy):
    """Serve the cached page immediately, then replace it with fresh data.

    A failed background refresh is never surfaced: the cached page already
    satisfied the caller, so only the refreshing flag is cleared.
    """

    async def execute(self, load: "PageLoad") -> None:
        try:
            cached = await load.read_cache()
        except Exception as e:
            load.apply_error(e)
            return
        if cached is None:
            try:
                page = await load.fetch()
                await load.write_cache(page)
            except Exception as e:
                load.apply_error(e)
                return
            load.apply_page(page, from_cache=False)
            return

        load.apply_page(cached, from_cache=True)
        load.mark_refreshing()
        try:
            fresh = await load.fetch()
            await load.write_cache(fresh)
        except Exception as e:
            LOGGER.warning(
                f"Background refresh failed, keeping cached page: {e}",
                extra={"cache_key": load.cache_key},
            )
            load.clear_refreshing()
            return
        load.apply_page(fresh, from_cache=False, clear_refreshing=True)


class NetworkFirst(LoadStrategy):
    """Fetch first; on failure fall back to whatever the cache holds."""

    async def execute(self, load: "PageLoad") -> None:
        try:
            page = await load.fetch()
            await load.write_cache(page)
        except Exception as e:
            try:
                cached = await load.read_cache()
            except Exception as cache_error:
                LOGGER.warning(
                    f"Cache fallback failed: {cache_error}",
                    extra={"cache_key": load.cache_key},
                )
                cached = None
            if cached is None:
                load.apply_error(e)
                return
            LOGGER.info(
                "Fetch failed, serving cached page",
                extra={"cache_key": load.cache_key},
            )
            load.apply_page(cached, from_cache=True)
            return
        load.apply_page(page, from_cache=False)


class CacheOnly(LoadStrategy):
    """Read the cache and nothing else. The page source is never called."""

    async def execute(self, load: "PageLoad") -> None:
        if load.cache is None:
            load.apply_error(CacheNotConfiguredError())
            return
        try:
            cached = await load.read_cache()
        except Exception as e:
            load.apply_error(e)
            return
        if cached is None:
            load.apply_error(NoCachedDataError(load.cache_key))
            return
        load.apply_page(cached, from_cache=True)


class NetworkOnly(LoadStrategy):
    """Always fetch; the cache is neither read nor written."""

    async def execute(self, load: "PageLoad") -> None:
        try:
            page = await load.fetch()
        except Exception as e:
            load.apply_error(e)
            return
        load.apply_page(page, from_cache=False)


_STRATEGIES: dict[CachePolicy, type[LoadStrategy]] = {
    CachePolicy.CACHE_FIRST: CacheFirst,
    CachePolicy.NETWORK_FIRST: NetworkFirst,
    CachePolicy.CACHE_ONLY: CacheOnly,
    CachePolicy.NETWORK_ONLY: NetworkOnly,
}
