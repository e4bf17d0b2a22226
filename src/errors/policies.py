"""Retry policy and the retry governor used for every provider call.

The governor is oblivious to what the wrapped operation does. It inspects
the error message for markers of transient provider conditions and retries
those with exponential backoff; anything else propagates unchanged.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from src.config import settings
from src.errors.exceptions import RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


# =============================================================================
# Transient Error Detection
# =============================================================================


# Case-insensitive substrings marking rate limits, quota exhaustion
# and server overload
TRANSIENT_ERROR_MARKERS: tuple[str, ...] = (
    "429",
    "503",
    "quota",
    "resource exhausted",
    "rate limit",
    "overloaded",
)


def is_transient_error(error: BaseException) -> bool:
    """Determine if an error is a transient provider condition.

    Args:
        error: The exception that occurred

    Returns:
        True if the error should be retried
    """
    if isinstance(error, RateLimitError):
        return True
    message = str(error).lower()
    return any(marker in message for marker in TRANSIENT_ERROR_MARKERS)


# =============================================================================
# RetryPolicy Configuration
# =============================================================================


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry behavior on transient errors.

    Attributes:
        max_retries: Retries after the initial attempt
        initial_delay: Delay before the first retry, in seconds
        backoff_factor: Multiplier applied to the delay after each retry
    """

    max_retries: int = 3
    initial_delay: float = 2.0
    backoff_factor: float = 2.0

    def get_delay(self, retry_index: int) -> float:
        """Calculate delay before the retry with the given 0-based index."""
        delay = self.initial_delay * (self.backoff_factor ** retry_index)
        return delay

    @property
    def worst_case_wait(self) -> float:
        """Total time spent sleeping if every retry is used."""
        return sum(self.get_delay(i) for i in range(self.max_retries))


NO_RETRY_POLICY = RetryPolicy(max_retries=0)
"""Single attempt, no retries."""


def default_retry_policy() -> RetryPolicy:
    """Build the retry policy configured in settings."""
    return RetryPolicy(
        max_retries=settings.max_retries,
        initial_delay=settings.retry_initial_delay,
    )


# =============================================================================
# Retry Governor
# =============================================================================


async def attempt_with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 2.0,
    *,
    backoff_factor: float = 2.0,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run *operation*, retrying transient failures with exponential backoff.

    With the defaults the worst-case waits are 2s, 4s and 8s.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt
        max_retries: Retries left after this attempt
        initial_delay: Seconds to wait before the next attempt
        backoff_factor: Delay multiplier per retry
        sleep: Awaitable sleep, injectable for tests

    Returns:
        The operation's result

    Raises:
        The operation's error, unchanged, when it is not transient or
        retries are exhausted.
    """
    try:
        return await operation()
    except Exception as e:
        if not is_transient_error(e) or max_retries <= 0:
            raise
        logger.warning(
            f"Provider limit hit ({e}). Retrying in {initial_delay:.1f}s "
            f"({max_retries} retries left)"
        )
    await sleep(initial_delay)
    return await attempt_with_retry(
        operation,
        max_retries - 1,
        initial_delay * backoff_factor,
        backoff_factor=backoff_factor,
        sleep=sleep,
    )


async def run_with_policy(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run *operation* through the retry governor using *policy*."""
    return await attempt_with_retry(
        operation,
        max_retries=policy.max_retries,
        initial_delay=policy.initial_delay,
        backoff_factor=policy.backoff_factor,
        sleep=sleep,
    )
