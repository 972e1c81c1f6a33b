from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .filter import FilterSpec

T = TypeVar("T")
K = TypeVar("K")

_UNSET: Any = object()


class FetchQuery(BaseModel, Generic[K]):
    """Parameters for fetching one page.

    Type Parameters:
        K: The page key type (int offsets, cursor strings, document handles).

    Attributes:
        page_size: Number of items requested.
        page_key: Which page to fetch. None means the first page.
        filter: Optional filtering and sorting applied by the page source.

    Examples:
        >>> FetchQuery[int](page_size=20)
        >>> FetchQuery[str](page_size=20, page_key="cursor-abc")
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    page_size: int = Field(gt=0)
    page_key: K | None = None
    filter: FilterSpec | None = None

    @property
    def is_first_page(self) -> bool:
        return self.page_key is None

    def copy_with(
        self,
        *,
        page_size: int | None = None,
        page_key: Any = _UNSET,
        filter: Any = _UNSET,
    ) -> "FetchQuery[K]":
        """Return a new query with the given fields replaced.

        Unlike page_size, page_key and filter may be explicitly reset to None.
        """
        return type(self)(
            page_size=self.page_size if page_size is None else page_size,
            page_key=self.page_key if page_key is _UNSET else page_key,
            filter=self.filter if filter is _UNSET else filter,
        )


class Page(BaseModel, Generic[T, K]):
    """A slice of data returned by a page source.

    Attributes:
        items: The items in this page, in display order.
        next_key: Key of the following page. None on the last page.
        is_last: Whether no further pages exist.
        total_count: Total item count across all pages, when known.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    items: tuple[T, ...] = ()
    next_key: K | None = None
    is_last: bool = False
    total_count: int | None = Field(default=None, ge=0)


class PageStatus(str, Enum):
    """Lifecycle of a paginator.

    - idle: before the first load, and right after a reset
    - loading: a next page is being fetched (existing items stay visible)
    - ready: the last load succeeded
    - error: the last load failed; earlier items are kept
    """

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
