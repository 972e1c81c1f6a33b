"""Page fetching: the backend contract and the retry loop wrapped around it."""

from .retry import RetryPolicy, fetch_with_retry
from .source import CallablePageSource, PageSource

__all__ = [
    "CallablePageSource",
    "PageSource",
    "RetryPolicy",
    "fetch_with_retry",
]
