"""
Circuit breaker for outbound AWS calls.
"""

from __future__ import annotations

import enum
import threading
import time
from typing import Any, Callable

from prometheus_client import Counter, Gauge


# =============================================================================
# Prometheus Metrics
# =============================================================================

CIRCUIT_STATE = Gauge(
    "gateway_circuit_breaker_state",
    "Circuit breaker state (0=closed, 1=open, 2=half_open)",
    ["name"],
)

CIRCUIT_TRIPS = Counter(
    "gateway_circuit_breaker_trips_total",
    "Number of times the circuit breaker tripped to OPEN",
    ["name"],
)


# =============================================================================
# Circuit Breaker
# =============================================================================

class CircuitState(enum.Enum):
    CLOSED = 0
    OPEN = 1
    HALF_OPEN = 2


class CircuitOpenError(Exception):
    """Raised when the circuit breaker is OPEN and calls are rejected."""

    def __init__(self, name: str, retry_after: float) -> None:
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"Circuit '{name}' is OPEN (retry after {retry_after:.0f}s)")


class CircuitBreaker:
    """Thread-safe circuit breaker.

    - CLOSED: calls pass through; consecutive failures are counted.
    - ``failure_threshold`` consecutive failures trip the circuit to OPEN.
    - OPEN: ``CircuitOpenError`` is raised without calling AWS.
    - After ``recovery_timeout`` seconds one probe call goes through (HALF_OPEN).
    - Probe success -> CLOSED; probe failure -> OPEN.

    When ``is_failure`` is given, only exceptions it accepts count as
    failures, so caller mistakes (e.g. an unknown instance id) do not trip
    the circuit.
    """

    def __init__(
        self,
        name: str = "default",
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
        is_failure: Callable[[Exception], bool] | None = None,
    ) -> None:
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.is_failure = is_failure

        self._lock = threading.Lock()
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: float = 0.0

        CIRCUIT_STATE.labels(name=self.name).set(CircuitState.CLOSED.value)

    @property
    def state(self) -> CircuitState:
        with self._lock:
            self._maybe_half_open()
            return self._state

    def call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Execute *func* through the circuit breaker.

        The lock is released before the call so concurrent requests are
        not serialized on the network round-trip.
        """
        with self._lock:
            self._maybe_half_open()
            if self._state == CircuitState.OPEN:
                retry_after = self.recovery_timeout - (time.monotonic() - self._last_failure_time)
                raise CircuitOpenError(self.name, max(0.0, retry_after))

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            if self.is_failure is None or self.is_failure(e):
                self._record_failure()
            raise

        self._record_success()
        return result

    def reset(self) -> None:
        """Force-reset the circuit to CLOSED (admin / tests)."""
        with self._lock:
            self._set_state(CircuitState.CLOSED)
            self._failure_count = 0
            self._last_failure_time = 0.0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _set_state(self, state: CircuitState) -> None:
        # Caller holds _lock
        self._state = state
        CIRCUIT_STATE.labels(name=self.name).set(state.value)

    def _maybe_half_open(self) -> None:
        if (
            self._state == CircuitState.OPEN
            and time.monotonic() - self._last_failure_time >= self.recovery_timeout
        ):
            self._set_state(CircuitState.HALF_OPEN)

    def _record_success(self) -> None:
        with self._lock:
            self._failure_count = 0
            if self._state == CircuitState.HALF_OPEN:
                self._set_state(CircuitState.CLOSED)

    def _record_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = time.monotonic()

            if self._state == CircuitState.HALF_OPEN or (
                self._state == CircuitState.CLOSED
                and self._failure_count >= self.failure_threshold
            ):
                self._set_state(CircuitState.OPEN)
                CIRCUIT_TRIPS.labels(name=self.name).inc()
