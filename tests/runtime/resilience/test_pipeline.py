"""Tests for ResiliencePipeline composition and PipelineRegistry."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from mcpgate.runtime.errors import (
    ApiError,
    AttemptTimeoutError,
    CircuitOpenError,
    RetriesExhaustedError,
    TransientError,
)
from mcpgate.runtime.resilience.breaker import CircuitState
from mcpgate.runtime.resilience.models import ResilienceConfig
from mcpgate.runtime.resilience.pipeline import PipelineRegistry, ResiliencePipeline


class Counter:
    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise TransientError(503)
        return "ok"


class TestResilienceConfig:
    def test_defaults(self) -> None:
        config = ResilienceConfig()
        assert config.timeout_seconds == 30.0
        assert config.max_retry_attempts == 3
        assert config.circuit_breaker_threshold == 5
        assert config.circuit_breaker_duration_seconds == 30.0
        assert config.backoff_base == 2.0
        assert config.max_backoff_seconds is None

    def test_accepts_camel_case(self) -> None:
        config = ResilienceConfig.model_validate(
            {"timeoutSeconds": 5, "maxRetryAttempts": 1, "circuitBreakerThreshold": 2}
        )
        assert config.timeout_seconds == 5
        assert config.max_retry_attempts == 1
        assert config.circuit_breaker_threshold == 2

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValueError):
            ResilienceConfig(timeout_seconds=0)

    def test_max_backoff_camel_case(self) -> None:
        config = ResilienceConfig.model_validate({"maxBackoffSeconds": 3})
        assert config.max_backoff_seconds == 3

    def test_rejects_non_positive_max_backoff(self) -> None:
        with pytest.raises(ValueError):
            ResilienceConfig(max_backoff_seconds=0)


class TestResiliencePipeline:
    def test_from_config(self) -> None:
        config = ResilienceConfig(
            timeout_seconds=7,
            max_retry_attempts=2,
            circuit_breaker_threshold=4,
            circuit_breaker_duration_seconds=12,
        )
        pipeline = ResiliencePipeline.from_config(config, target="api")
        assert pipeline.timeout.seconds == 7
        assert pipeline.retry.max_retries == 2
        assert pipeline.breaker.target == "api"
        assert pipeline.breaker.state is CircuitState.CLOSED

    async def test_success(self, sleeps: Any) -> None:
        pipeline = ResiliencePipeline.from_config(ResilienceConfig(), sleep=sleeps)
        assert await pipeline.execute(Counter()) == "ok"

    async def test_fail_twice_then_succeed(self, sleeps: Any) -> None:
        pipeline = ResiliencePipeline.from_config(ResilienceConfig(), sleep=sleeps)
        op = Counter(failures=2)
        assert await pipeline.execute(op) == "ok"
        assert op.calls == 3
        assert sleeps.delays == [2.0, 4.0]
        assert pipeline.breaker.failures == 0

    async def test_timeouts_are_retried(self, sleeps: Any) -> None:
        config = ResilienceConfig(timeout_seconds=0.01, max_retry_attempts=1)
        pipeline = ResiliencePipeline.from_config(config, sleep=sleeps)
        calls = 0

        async def slow() -> None:
            nonlocal calls
            calls += 1
            await asyncio.sleep(5)

        with pytest.raises(RetriesExhaustedError) as excinfo:
            await pipeline.execute(slow)
        assert calls == 2
        assert isinstance(excinfo.value.last_error, AttemptTimeoutError)

    async def test_breaker_opens_mid_retry(self, sleeps: Any, clock: Any) -> None:
        config = ResilienceConfig(max_retry_attempts=3, circuit_breaker_threshold=2)
        pipeline = ResiliencePipeline.from_config(config, sleep=sleeps, clock=clock)
        op = Counter(failures=100)

        with pytest.raises(CircuitOpenError):
            await pipeline.execute(op)
        assert op.calls == 2
        assert sleeps.delays == [2.0, 4.0]
        assert pipeline.breaker.state is CircuitState.OPEN

    async def test_open_circuit_fails_fast(self, sleeps: Any, clock: Any) -> None:
        config = ResilienceConfig(max_retry_attempts=0, circuit_breaker_threshold=1)
        pipeline = ResiliencePipeline.from_config(config, sleep=sleeps, clock=clock)
        op = Counter(failures=100)

        with pytest.raises(RetriesExhaustedError):
            await pipeline.execute(op)
        with pytest.raises(CircuitOpenError):
            await pipeline.execute(op)
        assert op.calls == 1

    async def test_recovers_after_cool_down(self, sleeps: Any, clock: Any) -> None:
        config = ResilienceConfig(
            max_retry_attempts=0,
            circuit_breaker_threshold=1,
            circuit_breaker_duration_seconds=30,
        )
        pipeline = ResiliencePipeline.from_config(config, sleep=sleeps, clock=clock)
        op = Counter(failures=1)

        with pytest.raises(RetriesExhaustedError):
            await pipeline.execute(op)
        clock.advance(30)
        assert await pipeline.execute(op) == "ok"
        assert pipeline.breaker.state is CircuitState.CLOSED

    async def test_non_transient_error_unchanged(self, sleeps: Any) -> None:
        pipeline = ResiliencePipeline.from_config(ResilienceConfig(), sleep=sleeps)

        async def bad() -> None:
            raise ValueError("nope")

        with pytest.raises(ValueError, match="nope"):
            await pipeline.execute(bad)
        assert sleeps.delays == []

    async def test_client_error_retried_without_tripping(self, sleeps: Any, clock: Any) -> None:
        config = ResilienceConfig(circuit_breaker_threshold=1)
        pipeline = ResiliencePipeline.from_config(config, sleep=sleeps, clock=clock)
        calls = 0

        async def bad_request() -> None:
            nonlocal calls
            calls += 1
            raise ApiError(400, "bad request")

        with pytest.raises(RetriesExhaustedError) as excinfo:
            await pipeline.execute(bad_request)
        assert calls == 4
        assert isinstance(excinfo.value.last_error, ApiError)
        assert sleeps.delays == [2.0, 4.0, 8.0]
        assert pipeline.breaker.failures == 0
        assert pipeline.breaker.state is CircuitState.CLOSED

    async def test_max_backoff_caps_delays(self, sleeps: Any) -> None:
        config = ResilienceConfig(max_backoff_seconds=3)
        pipeline = ResiliencePipeline.from_config(config, sleep=sleeps)
        assert pipeline.retry.backoff.max_delay == 3

        with pytest.raises(RetriesExhaustedError):
            await pipeline.execute(Counter(failures=100))
        assert sleeps.delays == [2.0, 3.0, 3.0]


class TestPipelineRegistry:
    def test_same_target_shares_pipeline(self) -> None:
        registry = PipelineRegistry()
        assert registry.get("a") is registry.get("a")
        assert registry.get("a") is not registry.get("b")

    def test_uses_config(self) -> None:
        registry = PipelineRegistry(ResilienceConfig(max_retry_attempts=1))
        assert registry.config.max_retry_attempts == 1
        assert registry.get("a").retry.max_retries == 1

    async def test_circuits_are_isolated(self, sleeps: Any, clock: Any) -> None:
        config = ResilienceConfig(max_retry_attempts=0, circuit_breaker_threshold=1)
        registry = PipelineRegistry(config, sleep=sleeps, clock=clock)

        with pytest.raises(RetriesExhaustedError):
            await registry.get("broken").execute(Counter(failures=1))
        assert await registry.get("healthy").execute(Counter()) == "ok"

        circuits = registry.circuits()
        assert circuits["broken"]["state"] == "open"
        assert circuits["healthy"]["state"] == "closed"

    def test_circuits_empty_before_use(self) -> None:
        assert PipelineRegistry().circuits() == {}
