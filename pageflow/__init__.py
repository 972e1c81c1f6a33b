"""pageflow - Backend-agnostic async pagination engine for Python.

This module provides the public API for paginating any backend with
caching, retries and an observable state.
"""

from .application import (
    CachePolicy,
    CacheStore,
    InfiniteScroll,
    InMemoryCacheStore,
    PageSource,
    Paginator,
    PaginatorSettings,
    RetryPolicy,
    Subscription,
    ViewKind,
    classify_view,
    derive_cache_key,
)
from .domain import (
    CacheNotConfiguredError,
    CachePolicyError,
    CustomOperation,
    FetchQuery,
    FilterField,
    FilterOperator,
    FilterSpec,
    NoCachedDataError,
    Page,
    PageState,
    PageStatus,
    PaginationError,
    SortField,
)

__all__ = [
    # Engine
    "Paginator",
    "PaginatorSettings",
    "CachePolicy",
    "RetryPolicy",
    "Subscription",
    # Contracts
    "PageSource",
    "CacheStore",
    "InMemoryCacheStore",
    "derive_cache_key",
    # Domain primitives
    "FetchQuery",
    "Page",
    "PageState",
    "PageStatus",
    "FilterSpec",
    "FilterField",
    "FilterOperator",
    "CustomOperation",
    "SortField",
    # Errors
    "PaginationError",
    "CachePolicyError",
    "CacheNotConfiguredError",
    "NoCachedDataError",
    # List views
    "InfiniteScroll",
    "ViewKind",
    "classify_view",
]
