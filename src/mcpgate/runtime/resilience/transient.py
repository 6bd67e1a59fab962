"""Classification of failures as transient (retry-recoverable) or not."""

from __future__ import annotations

import httpx

from mcpgate.runtime.errors import (
    ApiError,
    AttemptTimeoutError,
    CircuitOpenError,
    TransientError,
)

TRANSIENT_STATUS_CODES = frozenset({408, 429})
RATE_LIMITED = 429


def is_transient_status(status_code: int) -> bool:
    """Return ``True`` for 5xx responses and the retryable 4xx codes (408, 429)."""
    return status_code >= 500 or status_code in TRANSIENT_STATUS_CODES


def is_transient(exc: BaseException) -> bool:
    """Return ``True`` if *exc* is expected to recover on retry.

    Transient: attempt timeouts, :class:`TransientError`, httpx transport
    errors (connect, read, timeout), transient HTTP statuses and the builtin
    ``TimeoutError``/``ConnectionError``.  A :class:`CircuitOpenError` is
    never transient.
    """
    if isinstance(exc, CircuitOpenError):
        return False
    if isinstance(exc, (AttemptTimeoutError, TransientError, httpx.TransportError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return is_transient_status(exc.response.status_code)
    return isinstance(exc, (TimeoutError, ConnectionError))


def is_retryable(exc: BaseException) -> bool:
    """Return ``True`` if the retry policy should re-run after *exc*.

    Every transient failure qualifies, and so does any non-success answer
    from the downstream API (:class:`ApiError`, 4xx included).
    """
    if isinstance(exc, CircuitOpenError):
        return False
    return isinstance(exc, ApiError) or is_transient(exc)


def _status_code(exc: BaseException) -> int | None:
    if isinstance(exc, ApiError):
        return exc.status_code
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


def trips_circuit(exc: BaseException) -> bool:
    """Return ``True`` if *exc* counts as a failure for the circuit breaker.

    Same as :func:`is_transient` except that rate limiting (429) is left
    to the retry policy and never opens the circuit.
    """
    return is_transient(exc) and _status_code(exc) != RATE_LIMITED
