from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from .page import PageStatus

T = TypeVar("T")


@dataclass(frozen=True)
class PageState(Generic[T]):
    """Immutable snapshot of a paginator.

    A new snapshot is produced on every transition; subscribers always
    receive a value that will never change underneath them.

    Attributes:
        items: Everything loaded so far in the current pagination run.
        status: Current lifecycle status.
        error: Failure of the last load, if it failed.
        has_more: Whether another page can be requested.
        is_from_cache: Whether the most recent page came from the cache.
        is_refreshing: Whether a background fetch is replacing cached data.
        retry_attempt: Number of the retry in progress, if any.
    """

    items: tuple[T, ...] = ()
    status: PageStatus = PageStatus.IDLE
    error: Exception | None = None
    has_more: bool = True
    is_from_cache: bool = False
    is_refreshing: bool = False
    retry_attempt: int | None = None

    @classmethod
    def initial(cls) -> "PageState[T]":
        return cls()

    def replace(self, **changes: Any) -> "PageState[T]":
        return replace(self, **changes)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def is_loading(self) -> bool:
        return self.status is PageStatus.LOADING

    @property
    def has_error(self) -> bool:
        return self.status is PageStatus.ERROR
