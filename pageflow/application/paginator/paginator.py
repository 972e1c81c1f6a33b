import asyncio
import logging
from collections import Counter
from collections.abc import AsyncIterator, Callable
from datetime import timedelta
from typing import TYPE_CHECKING, Generic, TypeVar

from ulid import ULID

from ...domain import FetchQuery, FilterSpec, Page, PageState, PageStatus
from ..cache import CacheStore, derive_cache_key
from ..fetching import PageSource, RetryPolicy, fetch_with_retry
from ..fetching.retry import Sleep
from .observers import ListenerRegistry, StateListener, Subscription
from .policies import CachePolicy

if TYPE_CHECKING:
    from ..config import PaginatorSettings

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")

DEFAULT_PAGE_SIZE = 20


class PageLoad(Generic[T, K]):
    """One load request, as seen by a LoadStrategy.

    A load belongs to the generation that was current when it started.
    Once the paginator is reset (refresh, filter update) the load becomes
    stale and everything it reports is ignored, so a superseded fetch that
    resolves late can never touch the new run's items.
    """

    __slots__ = ("paginator", "query", "cache_key", "generation", "is_initial", "served_from_cache")

    def __init__(
        self,
        paginator: "Paginator[T, K]",
        query: FetchQuery[K],
        cache_key: str,
        generation: ULID,
        is_initial: bool,
    ):
        self.paginator = paginator
        self.query = query
        self.cache_key = cache_key
        self.generation = generation
        self.is_initial = is_initial
        # Items of the cached page this load published, replaced when the
        # fresh page arrives
        self.served_from_cache: tuple[T, ...] | None = None

    @property
    def cache(self) -> CacheStore[T, K] | None:
        return self.paginator.cache

    @property
    def is_current(self) -> bool:
        return self.paginator._generation == self.generation

    async def read_cache(self) -> Page[T, K] | None:
        if self.cache is None:
            return None
        return await self.cache.get(self.cache_key, self.query)

    async def write_cache(self, page: Page[T, K]) -> None:
        if self.cache is not None:
            await self.cache.put(self.cache_key, self.query, page, ttl=self.paginator.cache_ttl)

    async def fetch(self) -> Page[T, K]:
        return await fetch_with_retry(
            lambda: self.paginator.source.fetch(self.query),
            self.paginator.retry_policy,
            on_attempt=self.report_retry,
            sleep=self.paginator._sleep,
        )

    def report_retry(self, attempt: int) -> None:
        if self._still_current():
            self.paginator._publish(self.paginator.state.replace(retry_attempt=attempt))

    def apply_page(self, page: Page[T, K], *, from_cache: bool, clear_refreshing: bool = False) -> None:
        if self._still_current():
            self.paginator._fold_page(self, page, from_cache=from_cache, clear_refreshing=clear_refreshing)

    def apply_error(self, error: Exception) -> None:
        if self._still_current():
            self.paginator._fail(error)

    def mark_refreshing(self) -> None:
        if self._still_current():
            self.paginator._publish(self.paginator.state.replace(is_refreshing=True))

    def clear_refreshing(self) -> None:
        if self._still_current():
            self.paginator._publish(self.paginator.state.replace(is_refreshing=False))

    def _still_current(self) -> bool:
        if self.is_current:
            return True
        LOGGER.debug(
            "Discarding result of superseded load",
            extra={"cache_key": self.cache_key, "generation": str(self.generation)},
        )
        return False


class Paginator(Generic[T, K]):
    """Pagination engine: accumulates pages from a PageSource into one state.

    The paginator owns the item list, the cursor to the next page and the
    status, and publishes an immutable PageState on every transition. How
    the cache and the source are combined is decided by the cache policy.

    Exactly one load runs at a time. load_initial and load_next are no-ops
    while a load is in flight; refresh and update_filter deliberately clear
    the in-flight guard so they can pre-empt a stuck load. Outstanding
    fetches are never cancelled, only superseded.

    Type Parameters:
        T: Item type.
        K: Page key type.

    Attributes:
        source: Where pages come from.
        cache: Optional page store. Required by the cache_only policy.
        page_size: Items requested per page.
        cache_policy: Cache/network strategy used by every load.
        retry_policy: Retry configuration for fetches. None means a single
            attempt.
        cache_ttl: Lifetime of pages written to the cache. None means the
            store keeps them until evicted or cleared.

    Examples:
        >>> paginator = Paginator(
        ...     source=ProductSource(client),
        ...     cache=CacheStore.in_memory(),
        ...     page_size=20,
        ...     cache_policy=CachePolicy.CACHE_FIRST,
        ...     retry_policy=RetryPolicy(max_attempts=3),
        ... )
        >>> subscription = paginator.subscribe(render)
        >>> await paginator.load_initial()
        >>> await paginator.load_next()
        >>> await paginator.update_filter(FilterSpec(filters=[FilterField.equals("status", "active")]))
    """

    def __init__(
        self,
        source: PageSource[T, K],
        cache: CacheStore[T, K] | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        cache_policy: CachePolicy = CachePolicy.CACHE_FIRST,
        retry_policy: RetryPolicy | None = None,
        initial_filter: FilterSpec | None = None,
        cache_ttl: timedelta | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.source = source
        self.cache = cache
        self.page_size = page_size
        self.cache_policy = CachePolicy(cache_policy)
        self.retry_policy = retry_policy or RetryPolicy.none()
        self.cache_ttl = cache_ttl
        self.initial_filter = initial_filter

        self._strategy = self.cache_policy.strategy()
        self._sleep = sleep
        self._listeners: ListenerRegistry[T] = ListenerRegistry()
        self._state: PageState[T] = PageState.initial()
        self._filter = initial_filter
        self._next_key: K | None = None
        self._generation = ULID()
        self._active_load: ULID | None = None

    @classmethod
    def from_settings(
        cls,
        source: PageSource[T, K],
        settings: "PaginatorSettings | None" = None,
        cache: CacheStore[T, K] | None = None,
        initial_filter: FilterSpec | None = None,
    ) -> "Paginator[T, K]":
        """Build a paginator from PaginatorSettings.

        When the configured policy uses a cache and none is given, an
        in-memory store sized by the settings is created.

        Args:
            source: Where pages come from.
            settings: Settings to use. Read from the environment when None.
            cache: Cache store overriding the one built from settings.
            initial_filter: Filter applied to the first load.
        """
        if settings is None:
            from ..config import PaginatorSettings

            settings = PaginatorSettings()
        if cache is None and settings.cache_policy.uses_cache:
            cache = settings.create_cache_store()
        return cls(
            source=source,
            cache=cache,
            page_size=settings.page_size,
            cache_policy=settings.cache_policy,
            retry_policy=settings.retry_policy,
            initial_filter=initial_filter,
            cache_ttl=settings.cache_ttl,
        )

    @property
    def state(self) -> PageState[T]:
        return self._state

    @property
    def filter(self) -> FilterSpec | None:
        return self._filter

    @property
    def is_loading(self) -> bool:
        return self._active_load is not None

    # Loading

    async def load_initial(self) -> None:
        """Reset and load the first page.

        Items are cleared and an idle snapshot is published before the fetch
        starts, so stale data never shows while the first page loads.
        """
        if self.is_loading:
            return
        token = self._begin_load()
        self._generation = ULID()
        self._next_key = None
        self._publish(PageState.initial())
        try:
            await self._load_page(is_initial=True)
        finally:
            self._end_load(token)

    async def load_next(self) -> None:
        """Load the following page and append its items.

        Does nothing while a load is in flight, when no more pages exist, or
        when the status is already loading.
        """
        if self.is_loading or not self._state.has_more or self._state.status is PageStatus.LOADING:
            return
        token = self._begin_load()
        self._publish(self._state.replace(status=PageStatus.LOADING))
        try:
            await self._load_page(is_initial=False)
        finally:
            self._end_load(token)

    async def refresh(self, clear_cache: bool = True) -> None:
        """Reload from the first page, pre-empting any load in flight.

        Args:
            clear_cache: Clear the whole cache store first.
        """
        if clear_cache and self.cache is not None:
            await self.cache.clear()
        self._active_load = None
        await self.load_initial()

    async def update_filter(self, filter: FilterSpec | None) -> None:
        """Replace the active filter and reload from the first page.

        Any load in flight is pre-empted; its result is discarded.
        """
        self._filter = filter
        self._active_load = None
        await self.load_initial()

    # Local mutations. These never fetch, never write the cache and only
    # change items.

    def update_item(self, item: T, predicate: Callable[[T], bool]) -> None:
        """Replace every item matching predicate with item."""
        items = tuple(item if predicate(existing) else existing for existing in self._state.items)
        self._publish(self._state.replace(items=items))

    def remove_item(self, predicate: Callable[[T], bool]) -> None:
        """Remove every item matching predicate."""
        items = tuple(existing for existing in self._state.items if not predicate(existing))
        self._publish(self._state.replace(items=items))

    def insert_item(self, item: T, position: int = 0) -> None:
        """Insert item at position, clamped to the bounds of the list."""
        items = self._state.items
        position = max(0, min(position, len(items)))
        self._publish(self._state.replace(items=items[:position] + (item,) + items[position:]))

    # Observation

    def subscribe(self, listener: StateListener[T]) -> Subscription:
        """Call listener with every snapshot published from now on."""
        return self._listeners.subscribe(listener)

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.unsubscribe()

    async def watch(self) -> AsyncIterator[PageState[T]]:
        """Yield the current snapshot, then every published snapshot.

        Examples:
            >>> async for state in paginator.watch():
            ...     if state.status is PageStatus.READY:
            ...         break
        """
        queue: asyncio.Queue[PageState[T]] = asyncio.Queue()
        subscription = self.subscribe(queue.put_nowait)
        try:
            yield self._state
            while True:
                yield await queue.get()
        finally:
            subscription.unsubscribe()

    def close(self) -> None:
        """Drop every subscriber."""
        self._listeners.clear()

    # Internals

    def _begin_load(self) -> ULID:
        token = ULID()
        self._active_load = token
        return token

    def _end_load(self, token: ULID) -> None:
        # A pre-empted load must not release the guard held by its successor
        if self._active_load == token:
            self._active_load = None

    async def _load_page(self, is_initial: bool) -> None:
        query: FetchQuery[K] = FetchQuery(
            page_size=self.page_size,
            page_key=None if is_initial else self._next_key,
            filter=self._filter,
        )
        cache_key = derive_cache_key(query)
        LOGGER.debug(
            "Loading page",
            extra={
                "cache_policy": self.cache_policy.value,
                "cache_key": cache_key,
                "generation": str(self._generation),
                "is_initial": is_initial,
            },
        )
        load = PageLoad(self, query, cache_key, self._generation, is_initial)
        await self._strategy.execute(load)

    def _fold_page(
        self,
        load: PageLoad[T, K],
        page: Page[T, K],
        *,
        from_cache: bool,
        clear_refreshing: bool,
    ) -> None:
        if load.served_from_cache is not None:
            items = self._replace_served(load.served_from_cache, tuple(page.items))
        elif load.is_initial:
            items = tuple(page.items)
        else:
            items = self._state.items + tuple(page.items)
        load.served_from_cache = tuple(page.items) if from_cache else None
        self._next_key = page.next_key
        self._publish(
            PageState(
                items=items,
                status=PageStatus.READY,
                error=None,
                has_more=not page.is_last,
                is_from_cache=from_cache,
                is_refreshing=False if clear_refreshing else self._state.is_refreshing,
                retry_attempt=None,
            )
        )

    def _replace_served(self, served: tuple[T, ...], fresh: tuple[T, ...]) -> tuple[T, ...]:
        """Swap the items a cached page contributed for the fresh page's items.

        Cached items are matched by identity, so items inserted, replaced or
        removed by local mutations while the fresh page was loading are left
        as the caller made them. The fresh items go where the first surviving
        cached item was. When every cached item was removed, nothing is
        inserted.
        """
        items = self._state.items
        pending = Counter(id(item) for item in served)
        matched: set[int] = set()
        # The cached page was appended last, so match from the end
        for index in range(len(items) - 1, -1, -1):
            if pending[id(items[index])] > 0:
                pending[id(items[index])] -= 1
                matched.add(index)
        if not matched:
            LOGGER.debug("Cached page was removed locally, dropping its fresh copy")
            return items
        anchor = min(matched)
        rest = tuple(item for index, item in enumerate(items) if index > anchor and index not in matched)
        return items[:anchor] + fresh + rest

    def _fail(self, error: Exception) -> None:
        LOGGER.info(
            f"Page load failed: {error}",
            extra={"cache_policy": self.cache_policy.value, "error_type": type(error).__name__},
        )
        self._publish(
            self._state.replace(
                status=PageStatus.ERROR,
                error=error,
                is_refreshing=False,
                retry_attempt=None,
            )
        )

    def _publish(self, state: PageState[T]) -> None:
        self._state = state
        self._listeners.notify(state)
