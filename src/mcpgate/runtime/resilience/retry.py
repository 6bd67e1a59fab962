"""RetryPolicy: re-run failed calls with exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from mcpgate.runtime.errors import CircuitOpenError, RetriesExhaustedError
from mcpgate.runtime.resilience.transient import is_retryable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExponentialBackoff:
    """Delay ``base ** attempt`` seconds before retry number *attempt* (1-indexed).

    With the default base of 2 the waits are 2s, 4s, 8s, ...
    """

    def __init__(self, base: float = 2.0, max_delay: float | None = None) -> None:
        self.base = base
        self.max_delay = max_delay

    def delay(self, attempt: int) -> float:
        d = self.base**attempt
        return min(d, self.max_delay) if self.max_delay is not None else d


class RetryPolicy:
    """Retry an operation while it fails with a retryable error.

    Makes at most ``max_retries + 1`` attempts.  By default transient
    failures and every downstream :class:`ApiError` (4xx included) are
    retried; anything else propagates unchanged after the first failure,
    and a :class:`CircuitOpenError` is always surfaced immediately.  When
    every attempt fails a :class:`RetriesExhaustedError` is raised.

    Parameters
    ----------
    max_retries:
        Retries after the first attempt (default ``3``).
    backoff:
        Delay strategy (default :class:`ExponentialBackoff` with base 2).
    retry_on:
        Predicate deciding which exceptions are retryable.
    sleep:
        Awaitable sleep, injectable for tests.
    """

    def __init__(
        self,
        max_retries: int = 3,
        *,
        backoff: ExponentialBackoff | None = None,
        retry_on: Callable[[BaseException], bool] = is_retryable,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.max_retries = max_retries
        self.backoff = backoff or ExponentialBackoff()
        self._retry_on = retry_on
        self._sleep = sleep

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except CircuitOpenError:
                raise
            except Exception as exc:
                if not self._retry_on(exc):
                    raise
                if attempt > self.max_retries:
                    raise RetriesExhaustedError(attempt, exc) from exc
                delay = self.backoff.delay(attempt)
                logger.warning("Retry %d after %.0fms: %s", attempt, delay * 1000, exc)
                await self._sleep(delay)
