"""Shared error types for the runtime layer — resilience and downstream API failures."""

from __future__ import annotations


class ResilienceError(Exception):
    """Base error for all resilience-policy failures."""


class AttemptTimeoutError(ResilienceError):
    """A single attempt exceeded the configured timeout."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Attempt timed out after {timeout}s")


class CircuitOpenError(ResilienceError):
    """The circuit for a target is open (or probing) and the call was rejected."""

    def __init__(self, target: str, retry_after: float | None = None) -> None:
        self.target = target
        self.retry_after = retry_after
        msg = f"Circuit open for target: {target}"
        if retry_after is not None:
            msg += f" (retry in {retry_after:.0f}s)"
        super().__init__(msg)


class RetriesExhaustedError(ResilienceError):
    """Every permitted attempt failed with a transient error."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Retries exhausted after {attempts} attempt(s): {last_error}")


class ApiError(Exception):
    """The downstream API answered with a non-success status."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        msg = f"API error {status_code}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class TransientError(ApiError):
    """A downstream failure that is expected to recover on retry (5xx, 408, 429)."""
