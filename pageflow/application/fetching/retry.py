"""Bounded exponential-backoff retry around a single fetch attempt."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from datetime import timedelta
from typing import TypeVar

LOGGER = logging.getLogger(__name__)

R = TypeVar("R")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """How failed fetches are retried.

    Attributes:
        max_attempts: Total attempts allowed, the first one included.
            0 and 1 both mean the first failure is final; the first attempt
            always runs.
        initial_delay: Wait before the first retry.
        max_delay: Upper bound for the doubling delay.
        retry_if: Optional predicate. When given, only errors it accepts are
            retried.

    Examples:
        Three attempts, waiting 1s then 2s:

        >>> RetryPolicy(max_attempts=3)

        Only retry timeouts:

        >>> RetryPolicy(max_attempts=5, retry_if=lambda e: isinstance(e, TimeoutError))
    """

    max_attempts: int = 3
    initial_delay: timedelta = timedelta(seconds=1)
    max_delay: timedelta = timedelta(seconds=30)
    retry_if: Callable[[Exception], bool] | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be non-negative")
        if self.initial_delay < timedelta(0):
            raise ValueError("initial_delay must be non-negative")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must not be shorter than initial_delay")

    @classmethod
    def exponential(
        cls,
        max_attempts: int = 3,
        initial_delay: timedelta = timedelta(seconds=1),
    ) -> "RetryPolicy":
        return cls(max_attempts=max_attempts, initial_delay=initial_delay)

    @classmethod
    def none(cls) -> "RetryPolicy":
        """A policy that never retries."""
        return cls(max_attempts=0, initial_delay=timedelta(0), max_delay=timedelta(0))

    def should_retry(self, attempt: int, error: Exception) -> bool:
        """Decide whether the failure of attempt (0-based) gets another try."""
        if attempt + 1 >= self.max_attempts:
            return False
        return self.retry_if is None or self.retry_if(error)

    def delays(self) -> Iterator[timedelta]:
        """Yield the backoff sequence d, min(2d, M), min(4d, M), ..."""
        delay = self.initial_delay
        while True:
            yield delay
            delay = min(delay * 2, self.max_delay)


async def fetch_with_retry(
    attempt_fn: Callable[[], Awaitable[R]],
    policy: RetryPolicy,
    on_attempt: Callable[[int], None] | None = None,
    sleep: Sleep = asyncio.sleep,
) -> R:
    """Run attempt_fn, retrying failures according to policy.

    Retries are invisible to the caller except through on_attempt and the
    final outcome.

    Args:
        attempt_fn: Zero-argument coroutine function performing one attempt.
        policy: Retry configuration.
        on_attempt: Called with the retry number (1, 2, ...) right before
            each retry. The initial attempt is not reported.
        sleep: Coroutine used to wait between attempts.

    Returns:
        The result of the first successful attempt.

    Raises:
        Exception: The last attempt's error, unchanged, once the budget is
            spent or the policy's predicate rejects it.
    """
    delays = policy.delays()
    attempt = 0
    while True:
        if attempt > 0 and on_attempt is not None:
            on_attempt(attempt)
        try:
            return await attempt_fn()
        except Exception as e:
            if not policy.should_retry(attempt, e):
                LOGGER.debug(
                    "Giving up after %d attempt(s)",
                    attempt + 1,
                    extra={"attempt": attempt + 1, "max_attempts": policy.max_attempts},
                )
                raise
            delay = next(delays)
            LOGGER.warning(
                f"Fetch failed on attempt {attempt + 1}/{policy.max_attempts}: {e}",
                extra={
                    "attempt": attempt + 1,
                    "max_attempts": policy.max_attempts,
                    "delay_seconds": delay.total_seconds(),
                },
            )
            await sleep(delay.total_seconds())
            attempt += 1
