"""Pure data types shared by every part of pageflow."""

from .exceptions import (
    CacheNotConfiguredError,
    CachePolicyError,
    NoCachedDataError,
    PaginationError,
)
from .filter import (
    CustomOperation,
    FilterField,
    FilterOperation,
    FilterOperator,
    FilterSpec,
    SortField,
    operation_code,
)
from .page import FetchQuery, Page, PageStatus
from .state import PageState

__all__ = [
    # Queries and pages
    "FetchQuery",
    "Page",
    "PageStatus",
    "PageState",
    # Filtering
    "CustomOperation",
    "FilterField",
    "FilterOperation",
    "FilterOperator",
    "FilterSpec",
    "SortField",
    "operation_code",
    # Errors
    "CacheNotConfiguredError",
    "CachePolicyError",
    "NoCachedDataError",
    "PaginationError",
]
