"""Resilience pipeline — retry, circuit breaker and timeout policies."""

from mcpgate.runtime.resilience.breaker import CircuitBreaker, CircuitListener, CircuitState
from mcpgate.runtime.resilience.models import ResilienceConfig
from mcpgate.runtime.resilience.pipeline import PipelineRegistry, ResiliencePipeline
from mcpgate.runtime.resilience.retry import ExponentialBackoff, RetryPolicy
from mcpgate.runtime.resilience.timeout import TimeoutPolicy
from mcpgate.runtime.resilience.transient import (
    is_retryable,
    is_transient,
    is_transient_status,
    trips_circuit,
)

__all__ = [
    "CircuitBreaker",
    "CircuitListener",
    "CircuitState",
    "ExponentialBackoff",
    "PipelineRegistry",
    "ResilienceConfig",
    "ResiliencePipeline",
    "RetryPolicy",
    "TimeoutPolicy",
    "is_retryable",
    "is_transient",
    "is_transient_status",
    "trips_circuit",
]
