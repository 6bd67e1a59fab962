"""CircuitBreaker — shared fail-fast state machine for one call target.

State machine::

    CLOSED    → consecutive transient failures reach threshold → OPEN
    OPEN      → cool-down elapses                              → HALF_OPEN
    HALF_OPEN → trial call succeeds                            → CLOSED
    HALF_OPEN → trial call fails                               → OPEN

One instance is shared by every caller of a target.  State checks and
transitions happen under a ``threading.Lock`` that is never held across an
``await``, so concurrent callers always observe a consistent state and only
a single trial call is admitted while half-open.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Protocol, TypeVar, runtime_checkable

from mcpgate.runtime.errors import CircuitOpenError
from mcpgate.runtime.resilience.transient import trips_circuit

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@runtime_checkable
class CircuitListener(Protocol):
    """Optional observer notified after each state transition."""

    def on_break(self, target: str, failures: int, duration: float) -> None: ...
    def on_reset(self, target: str) -> None: ...
    def on_half_open(self, target: str) -> None: ...


class CircuitBreaker:
    """Consecutive-failure circuit breaker.

    Only failures accepted by *trip_on* count towards the threshold; by
    default that is every transient failure except rate limiting (429).
    Other failures leave the counter untouched, and such an outcome of a
    half-open trial releases the trial slot without changing state.

    Usage::

        breaker = CircuitBreaker("customers-api", failure_threshold=5)
        result = await breaker.call(lambda: client.get("/customers/1"))
    """

    def __init__(
        self,
        target: str = "default",
        *,
        failure_threshold: int = 5,
        recovery_time: float = 30.0,
        trip_on: Callable[[BaseException], bool] = trips_circuit,
        listener: CircuitListener | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._target = target
        self._failure_threshold = failure_threshold
        self._recovery_time = recovery_time
        self._trip_on = trip_on
        self._listener = listener
        self._clock = clock

        self._lock = threading.Lock()
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = 0.0
        self._trial_in_flight = False

    @property
    def target(self) -> str:
        return self._target

    @property
    def state(self) -> CircuitState:
        """Current state (evaluates the OPEN → HALF_OPEN transition)."""
        with self._lock:
            entered_half_open = self._evaluate()
            state = self._state
        if entered_half_open:
            self._notify_half_open()
        return state

    @property
    def failures(self) -> int:
        """Consecutive failures counted so far."""
        with self._lock:
            return self._failures

    @property
    def retry_after(self) -> float | None:
        """Seconds until the cool-down ends, or ``None`` if not open."""
        with self._lock:
            return self._remaining()

    def stats(self) -> dict[str, Any]:
        """Snapshot for health checks and monitoring."""
        state = self.state
        with self._lock:
            return {
                "target": self._target,
                "state": state.value,
                "failures": self._failures,
                "retry_after": self._remaining(),
            }

    def reset(self) -> None:
        """Force the circuit back to CLOSED."""
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failures = 0
            self._trial_in_flight = False

    async def call(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run *operation* if the circuit admits it.

        Raises:
            CircuitOpenError: If the circuit is open, or half-open with a
                trial call already in flight.  *operation* is not invoked.
        """
        is_trial = self._acquire()
        try:
            result = await operation()
        except BaseException as exc:
            if isinstance(exc, Exception) and self._trip_on(exc):
                self._record_failure(is_trial)
            else:
                self._release(is_trial)
            raise
        self._record_success(is_trial)
        return result

    # -- state machine ------------------------------------------------------

    def _evaluate(self) -> bool:
        """Move OPEN → HALF_OPEN once the cool-down has elapsed. Caller holds the lock."""
        if (
            self._state is CircuitState.OPEN
            and self._clock() - self._opened_at >= self._recovery_time
        ):
            self._state = CircuitState.HALF_OPEN
            self._trial_in_flight = False
            return True
        return False

    def _remaining(self) -> float | None:
        if self._state is not CircuitState.OPEN:
            return None
        return max(0.0, self._recovery_time - (self._clock() - self._opened_at))

    def _acquire(self) -> bool:
        """Admit a call or raise. Returns ``True`` when the call is the half-open trial."""
        with self._lock:
            entered_half_open = self._evaluate()
            state = self._state
            retry_after = self._remaining()
            is_trial = False
            if state is CircuitState.HALF_OPEN and not self._trial_in_flight:
                self._trial_in_flight = True
                is_trial = True
        if entered_half_open:
            self._notify_half_open()
        if state is CircuitState.OPEN:
            raise CircuitOpenError(self._target, retry_after)
        if state is CircuitState.HALF_OPEN and not is_trial:
            raise CircuitOpenError(self._target)
        return is_trial

    def _record_success(self, is_trial: bool) -> None:
        reset = False
        with self._lock:
            if is_trial:
                self._state = CircuitState.CLOSED
                self._failures = 0
                self._trial_in_flight = False
                reset = True
            elif self._state is CircuitState.CLOSED:
                self._failures = 0
        if reset:
            logger.info("Circuit %s closed after successful trial call", self._target)
            if self._listener is not None:
                self._listener.on_reset(self._target)

    def _record_failure(self, is_trial: bool) -> None:
        opened = False
        with self._lock:
            self._failures += 1
            if is_trial or (
                self._state is CircuitState.CLOSED
                and self._failures >= self._failure_threshold
            ):
                self._state = CircuitState.OPEN
                self._opened_at = self._clock()
                self._trial_in_flight = False
                opened = True
            failures = self._failures
        if opened:
            logger.warning(
                "Circuit %s opened after %d failure(s); failing fast for %.0fs",
                self._target,
                failures,
                self._recovery_time,
            )
            if self._listener is not None:
                self._listener.on_break(self._target, failures, self._recovery_time)

    def _release(self, is_trial: bool) -> None:
        if not is_trial:
            return
        with self._lock:
            self._trial_in_flight = False

    def _notify_half_open(self) -> None:
        logger.info("Circuit %s half-open; admitting one trial call", self._target)
        if self._listener is not None:
            self._listener.on_half_open(self._target)
