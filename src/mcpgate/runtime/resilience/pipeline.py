"""ResiliencePipeline — retry ⊃ circuit breaker ⊃ timeout around one operation.

The timeout bounds a single attempt, the breaker observes every attempt and
may reject it before it starts, and retry decides how many attempts are made
and how long to wait between them.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from mcpgate.runtime.resilience.breaker import CircuitBreaker, CircuitListener
from mcpgate.runtime.resilience.models import ResilienceConfig
from mcpgate.runtime.resilience.retry import ExponentialBackoff, RetryPolicy
from mcpgate.runtime.resilience.timeout import TimeoutPolicy
from mcpgate.utils.telemetry import ATTR_CIRCUIT_STATE, ATTR_TARGET, get_tracer

_tracer = get_tracer(__name__)

T = TypeVar("T")


class ResiliencePipeline:
    """Composes the three policies by explicit decorator chaining.

    Usage::

        pipeline = ResiliencePipeline.from_config(ResilienceConfig(), target="api")
        data = await pipeline.execute(lambda: client.get("/customers/1"))
    """

    def __init__(
        self,
        *,
        retry: RetryPolicy,
        breaker: CircuitBreaker,
        timeout: TimeoutPolicy,
    ) -> None:
        self.retry = retry
        self.breaker = breaker
        self.timeout = timeout

    @classmethod
    def from_config(
        cls,
        config: ResilienceConfig,
        *,
        target: str = "default",
        listener: CircuitListener | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> ResiliencePipeline:
        return cls(
            retry=RetryPolicy(
                config.max_retry_attempts,
                backoff=ExponentialBackoff(config.backoff_base, config.max_backoff_seconds),
                sleep=sleep,
            ),
            breaker=CircuitBreaker(
                target,
                failure_threshold=config.circuit_breaker_threshold,
                recovery_time=config.circuit_breaker_duration_seconds,
                listener=listener,
                clock=clock,
            ),
            timeout=TimeoutPolicy(config.timeout_seconds),
        )

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run *operation* through retry, breaker and timeout.

        Raises:
            RetriesExhaustedError: Every attempt failed transiently.
            CircuitOpenError: The circuit rejected an attempt.
            Exception: Any non-transient error from *operation*, unchanged.
        """
        with _tracer.start_as_current_span("resilience.execute") as span:
            span.set_attribute(ATTR_TARGET, self.breaker.target)
            try:
                return await self.retry.execute(self._attempt(operation))
            finally:
                span.set_attribute(ATTR_CIRCUIT_STATE, self.breaker.state.value)

    def _attempt(self, operation: Callable[[], Awaitable[T]]) -> Callable[[], Awaitable[T]]:
        async def guarded() -> T:
            return await self.breaker.call(lambda: self.timeout.execute(operation))

        return guarded


class PipelineRegistry:
    """One lazily-created pipeline (and circuit) per target, shared by all callers."""

    def __init__(
        self,
        config: ResilienceConfig | None = None,
        *,
        listener: CircuitListener | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or ResilienceConfig()
        self._listener = listener
        self._sleep = sleep
        self._clock = clock
        self._lock = threading.Lock()
        self._pipelines: dict[str, ResiliencePipeline] = {}

    @property
    def config(self) -> ResilienceConfig:
        return self._config

    def get(self, target: str) -> ResiliencePipeline:
        """Return the pipeline for *target*, creating it on first use."""
        with self._lock:
            pipeline = self._pipelines.get(target)
            if pipeline is None:
                pipeline = ResiliencePipeline.from_config(
                    self._config,
                    target=target,
                    listener=self._listener,
                    sleep=self._sleep,
                    clock=self._clock,
                )
                self._pipelines[target] = pipeline
            return pipeline

    def circuits(self) -> dict[str, dict[str, Any]]:
        """Breaker stats keyed by target."""
        with self._lock:
            pipelines = dict(self._pipelines)
        return {target: p.breaker.stats() for target, p in pipelines.items()}
