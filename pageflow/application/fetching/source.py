from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from ...domain import FetchQuery, Page

T = TypeVar("T")
K = TypeVar("K")

FetchFunction = Callable[[FetchQuery[K]], Awaitable[Page[T, K]]]


class PageSource(ABC, Generic[T, K]):
    """Backend integration contract: fetch one page for a query.

    Implementations translate the query's page key, page size and filter
    into whatever their backend understands (REST parameters, SQL, a
    document-store query) and return the resulting Page.

    Implementations must let errors propagate. The paginator relies on
    seeing them to retry, fall back to the cache or report the failure.

    Examples:
        >>> class ProductSource(PageSource[Product, int]):
        ...     async def fetch(self, query: FetchQuery[int]) -> Page[Product, int]:
        ...         offset = query.page_key or 0
        ...         rows = await self.client.list_products(offset, query.page_size)
        ...         is_last = len(rows) < query.page_size
        ...         return Page(
        ...             items=rows,
        ...             next_key=None if is_last else offset + len(rows),
        ...             is_last=is_last,
        ...         )
    """

    @staticmethod
    def from_callable(fetch: "FetchFunction[Any, Any]") -> "CallablePageSource[Any, Any]":
        return CallablePageSource(fetch)

    @abstractmethod
    async def fetch(self, query: FetchQuery[K]) -> Page[T, K]:
        """Fetch the page described by query.

        Args:
            query: Page size, page key (None for the first page) and filter.

        Returns:
            The page, including the key of the following page.

        Raises:
            Any transport or backend error, unchanged.
        """
        ...


class CallablePageSource(PageSource[T, K]):
    """Adapts a plain coroutine function to the PageSource contract."""

    __slots__ = ("_fetch",)

    def __init__(self, fetch: "FetchFunction[T, K]"):
        self._fetch = fetch

    async def fetch(self, query: FetchQuery[K]) -> Page[T, K]:
        return await self._fetch(query)
