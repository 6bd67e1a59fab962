"""Configuration model for the resilience pipeline."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ResilienceConfig(BaseModel):
    """Knobs for retry, circuit breaker and timeout.

    Accepts both the snake_case attribute names and the camelCase names used
    in settings files (``timeoutSeconds``, ``maxRetryAttempts``, ...).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    timeout_seconds: float = Field(default=30.0, gt=0, alias="timeoutSeconds")
    max_retry_attempts: int = Field(default=3, ge=0, alias="maxRetryAttempts")
    circuit_breaker_threshold: int = Field(default=5, ge=1, alias="circuitBreakerThreshold")
    circuit_breaker_duration_seconds: float = Field(
        default=30.0, ge=0, alias="circuitBreakerDurationSeconds"
    )
    backoff_base: float = Field(default=2.0, ge=1.0, alias="backoffBase")
    max_backoff_seconds: float | None = Field(default=None, gt=0, alias="maxBackoffSeconds")
