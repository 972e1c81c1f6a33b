"""The pagination engine, its cache policies and observation helpers."""

from .observers import ListenerRegistry, StateListener, Subscription
from .paginator import DEFAULT_PAGE_SIZE, PageLoad, Paginator
from .policies import (
    CacheFirst,
    CacheOnly,
    CachePolicy,
    LoadStrategy,
    NetworkFirst,
    NetworkOnly,
)
from .scrolling import InfiniteScroll, ViewKind, classify_view, trailing_slots

__all__ = [
    # Engine
    "DEFAULT_PAGE_SIZE",
    "PageLoad",
    "Paginator",
    # Policies
    "CacheFirst",
    "CacheOnly",
    "CachePolicy",
    "LoadStrategy",
    "NetworkFirst",
    "NetworkOnly",
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
