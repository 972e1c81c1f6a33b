"""Pagination engine infrastructure for pageflow.

This package contains the behaviour around the domain types: cache
addressing and storage, the page source contract and its retry loop, the
Paginator engine with its cache policies, and configuration.
"""

from .cache import CacheEntry, CacheStore, InMemoryCacheStore, derive_cache_key
from .config import PaginatorSettings
from .fetching import CallablePageSource, PageSource, RetryPolicy, fetch_with_retry
from .paginator import (
    CacheFirst,
    CacheOnly,
    CachePolicy,
    InfiniteScroll,
    ListenerRegistry,
    LoadStrategy,
    NetworkFirst,
    NetworkOnly,
    PageLoad,
    Paginator,
    StateListener,
    Subscription,
    ViewKind,
    classify_view,
    trailing_slots,
)

__all__ = [
    # Cache
    "CacheEntry",
    "CacheStore",
    "InMemoryCacheStore",
    "derive_cache_key",
    # Fetching
    "CallablePageSource",
    "PageSource",
    "RetryPolicy",
    "fetch_with_retry",
    # Engine
    "CacheFirst",
    "CacheOnly",
    "CachePolicy",
    "LoadStrategy",
    "NetworkFirst",
    "NetworkOnly",
    "PageLoad",
    "Paginator",
    "PaginatorSettings",
    # Observation
    "ListenerRegistry",
    "StateListener",
    "Subscription",
    # List views
    "InfiniteScroll",
    "ViewKind",
    "classify_view",
    "trailing_slots",
]
