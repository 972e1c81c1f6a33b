"""Exceptions raised by the pagination engine itself.

Errors raised by page sources are never wrapped: they reach
PageState.error exactly as the source raised them.
"""


class PaginationError(Exception):
    """Base class for errors produced by pageflow."""

    pass


class CachePolicyError(PaginationError):
    """Raised when a cache policy cannot be satisfied.

    These are configuration-class failures and are never retried.
    """

    pass


class CacheNotConfiguredError(CachePolicyError):
    """A cache-only paginator was created without a cache store."""

    def __init__(self) -> None:
        super().__init__("Cache-only policy requires a cache store to be configured")


class NoCachedDataError(CachePolicyError):
    """A cache-only load found nothing stored for its query."""

    def __init__(self, cache_key: str) -> None:
        super().__init__("No cached data available for this query")
        self.cache_key = cache_key
