"""Paginator configuration using pydantic-settings."""

from datetime import timedelta
from functools import cached_property
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

from .cache import InMemoryCacheStore
from .cache.store import DEFAULT_MAX_ENTRIES
from .fetching import RetryPolicy
from .paginator.policies import CachePolicy


class PaginatorSettings(BaseSettings):
    """Configuration and factory for paginators.

    All settings can be configured via environment variables with the
    PAGEFLOW_ prefix. For example:
    - PAGEFLOW_PAGE_SIZE=50
    - PAGEFLOW_CACHE_POLICY=network_first
    - PAGEFLOW_RETRY_MAX_ATTEMPTS=3

    Attributes:
        page_size: Items requested per page.
        cache_policy: Cache/network strategy for every load.
        retry_max_attempts: Total fetch attempts. 0 disables retries.
        retry_initial_delay_seconds: Wait before the first retry.
        retry_max_delay_seconds: Cap for the doubling retry delay.
        cache_max_entries: Capacity of the in-memory cache store.
        cache_ttl_seconds: Lifetime of cached pages. None keeps them until
            evicted.

    Example:
        >>> settings = PaginatorSettings(cache_policy="network_first")
        >>> paginator = Paginator.from_settings(ProductSource(), settings)
    """

    page_size: int = Field(default=20, gt=0)
    cache_policy: CachePolicy = CachePolicy.CACHE_FIRST

    # Retry (0 attempts = single attempt, no retries)
    retry_max_attempts: int = Field(default=0, ge=0)
    retry_initial_delay_seconds: float = Field(default=1.0, ge=0)
    retry_max_delay_seconds: float = Field(default=30.0, ge=0)

    # In-memory cache store
    cache_max_entries: int = Field(default=DEFAULT_MAX_ENTRIES, gt=0)
    cache_ttl_seconds: float | None = Field(default=None, gt=0)

    model_config = {"env_prefix": "PAGEFLOW_"}

    @model_validator(mode="after")
    def check_retry_delays(self) -> "PaginatorSettings":
        if self.retry_max_delay_seconds < self.retry_initial_delay_seconds:
            raise ValueError("retry_max_delay_seconds must not be shorter than retry_initial_delay_seconds")
        return self

    @cached_property
    def retry_policy(self) -> RetryPolicy:
        """Retry policy built from the retry_* settings."""
        if self.retry_max_attempts == 0:
            return RetryPolicy.none()
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            initial_delay=timedelta(seconds=self.retry_initial_delay_seconds),
            max_delay=timedelta(seconds=self.retry_max_delay_seconds),
        )

    @cached_property
    def cache_ttl(self) -> timedelta | None:
        if self.cache_ttl_seconds is None:
            return None
        return timedelta(seconds=self.cache_ttl_seconds)

    def create_cache_store(self) -> InMemoryCacheStore[Any, Any]:
        """Create a fresh in-memory store sized by cache_max_entries."""
        return InMemoryCacheStore(max_entries=self.cache_max_entries)
