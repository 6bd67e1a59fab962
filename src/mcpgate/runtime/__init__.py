"""Runtime layer — resilience policies and the downstream API client."""

from mcpgate.runtime.api_client import ApiClient
from mcpgate.runtime.errors import (
    ApiError,
    AttemptTimeoutError,
    CircuitOpenError,
    ResilienceError,
    RetriesExhaustedError,
    TransientError,
)

__all__ = [
    "ApiClient",
    "ApiError",
    "AttemptTimeoutError",
    "CircuitOpenError",
    "ResilienceError",
    "RetriesExhaustedError",
    "TransientError",
]
