"""
Retry-with-backoff as a decorator around an operation.

The queue knows nothing about retries: callers wrap an operation with
``with_retry`` and submit the wrapped operation instead, so every attempt
runs inside the same queue slot.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeAlias, TypeVar

from jaguar_flux.errors import JaguarAPIError, JaguarTimeoutError, JaguarValidationError
from jaguar_flux.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Sleep: TypeAlias = Callable[[float], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """
    How often and how long to wait between attempts.

    Attributes:
        max_retries: Extra attempts after the first one (0 disables retries)
        base_delay_seconds: Delay before retry n is ``base_delay_seconds * n``
        cold_start_delay_seconds: Delay after a 503, the backend's cold-start signal
        max_delay_seconds: Upper bound for any single delay
        jitter: Scale each delay by a random factor in [0.5, 1.5)
    """

    max_retries: int = 1
    base_delay_seconds: float = 1.0
    cold_start_delay_seconds: float = 5.0
    max_delay_seconds: float = 30.0
    jitter: bool = False

    def delay_for(self, attempt: int, exc: Exception) -> float:
        """Seconds to wait before retry number ``attempt`` (1-based)."""
        if isinstance(exc, JaguarAPIError) and exc.status_code == 503:
            delay = self.cold_start_delay_seconds
        else:
            delay = self.base_delay_seconds * attempt
        if self.jitter:
            delay = delay * (0.5 + random.random())
        return min(delay, self.max_delay_seconds)


def is_retryable(exc: Exception) -> bool:
    """Timeouts and local validation failures are final; anything else may be transient."""
    return not isinstance(exc, (JaguarTimeoutError, JaguarValidationError))


def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    retryable: Callable[[Exception], bool] = is_retryable,
    sleep: Sleep = asyncio.sleep,
    name: str | None = None,
) -> Callable[[], Awaitable[T]]:
    """
    Wrap a zero-argument coroutine function with bounded retries.

    Args:
        operation: The operation to wrap
        policy: Retry policy (defaults to one retry)
        retryable: Predicate deciding whether an exception may be retried
        sleep: Awaitable sleep, injectable for tests
        name: Label used in log events

    Returns:
        A new zero-argument coroutine function. The last exception is re-raised
        unchanged once attempts are exhausted.
    """
    policy = policy or RetryPolicy()
    label = name or getattr(operation, "__name__", "operation")

    async def _attempt() -> T:
        attempt = 0
        while True:
            try:
                return await operation()
            except Exception as exc:
                if attempt >= policy.max_retries or not retryable(exc):
                    if attempt:
                        logger.error(
                            "request_retry_exhausted",
                            operation=label,
                            attempts=attempt + 1,
                            error=str(exc),
                        )
                    raise

                attempt += 1
                delay = policy.delay_for(attempt, exc)
                logger.warning(
                    "request_retry",
                    operation=label,
                    attempt=attempt,
                    max_retries=policy.max_retries,
                    delay_seconds=f"{delay:.2f}",
                    error=str(exc),
                )
                await sleep(delay)

    return _attempt
