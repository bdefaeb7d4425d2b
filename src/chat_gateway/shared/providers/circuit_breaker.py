"""Circuit breaker — stops sending traffic to a repeatedly failing provider.

State machine:
    CLOSED    → (N consecutive failures)  → OPEN
    OPEN      → (cooldown expires)        → HALF_OPEN   (on the next acquire)
    HALF_OPEN → (probe succeeds)          → CLOSED
    HALF_OPEN → (probe fails)             → OPEN        (openedAt refreshed)

Callers ``acquire()`` a ``Permit`` before each attempt and hand it back with
the outcome.  Every permit is stamped with the breaker's generation; the
generation advances whenever the circuit opens, closes after a probe, or is
reset, so outcomes of calls started in an earlier generation are ignored.
HALF_OPEN always means a single probe is in flight: the transition from
OPEN to HALF_OPEN and the probe hand-out happen under one lock acquisition.

Each breaker owns its lock; the table never locks, since its mapping is
fixed at construction.
"""

from __future__ import annotations

import enum
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator

import structlog

from chat_gateway.domain.exceptions import ProviderNotFoundError
from chat_gateway.shared.observability.metrics import CIRCUIT_TRANSITIONS
from chat_gateway.shared.providers.types import ProviderDescriptor

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]


class CircuitState(str, enum.Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class Permit:
    """Ticket for one attempt against a provider."""

    provider_id: str
    generation: int
    probe: bool = False


@dataclass(frozen=True)
class BreakerSnapshot:
    provider_id: str
    state: CircuitState
    consecutive_failures: int
    opened_at: float | None


class CircuitBreaker:
    """Per-provider circuit breaker with a single half-open probe."""

    def __init__(
        self,
        provider_id: str,
        *,
        failure_threshold: int = 3,
        cooldown_seconds: float = 30.0,
        clock: Clock = time.monotonic,
    ) -> None:
        self._provider_id = provider_id
        self._failure_threshold = failure_threshold
        self._cooldown = cooldown_seconds
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at: float | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def provider_id(self) -> str:
        return self._provider_id

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._state

    @property
    def consecutive_failures(self) -> int:
        with self._lock:
            return self._consecutive_failures

    def snapshot(self) -> BreakerSnapshot:
        with self._lock:
            return BreakerSnapshot(
                provider_id=self._provider_id,
                state=self._state,
                consecutive_failures=self._consecutive_failures,
                opened_at=self._opened_at,
            )

    def is_available(self) -> bool:
        """Would ``acquire()`` succeed right now?  Reserves nothing."""
        with self._lock:
            if self._state == CircuitState.CLOSED:
                return True
            if self._state == CircuitState.OPEN:
                return self._cooldown_elapsed()
            return False

    # ── Permits ──────────────────────────────────────────────
    def acquire(self) -> Permit | None:
        """Ask to attempt a call.  ``None`` means skip this provider."""
        with self._lock:
            if self._state == CircuitState.CLOSED:
                return Permit(self._provider_id, self._generation)

            if self._state == CircuitState.OPEN and self._cooldown_elapsed():
                self._transition(CircuitState.HALF_OPEN)
                logger.info(
                    "circuit_breaker_half_open",
                    provider=self._provider_id,
                    elapsed_s=round(self._clock() - (self._opened_at or 0.0), 1),
                )
                return Permit(self._provider_id, self._generation, probe=True)

            # OPEN within cooldown, or HALF_OPEN with the probe already out
            return None

    def record_success(self, permit: Permit) -> None:
        """Record a successful call; closes the circuit after a probe."""
        with self._lock:
            if permit.probe:
                if self._is_current_probe(permit):
                    prev = self._state
                    self._close()
                    logger.info(
                        "circuit_breaker_closed",
                        provider=self._provider_id,
                        previous_state=prev.value,
                    )
                return

            if self._state == CircuitState.CLOSED:
                self._consecutive_failures = 0

    def record_failure(self, permit: Permit) -> None:
        """Record a failed call; may trip the circuit."""
        with self._lock:
            if permit.probe:
                if self._is_current_probe(permit):
                    self._open()
                    logger.warning(
                        "circuit_breaker_reopened",
                        provider=self._provider_id,
                        failures=self._consecutive_failures,
                    )
                return

            if permit.generation != self._generation:
                logger.debug(
                    "circuit_breaker_stale_failure_ignored",
                    provider=self._provider_id,
                    permit_generation=permit.generation,
                    generation=self._generation,
                )
                return

            self._consecutive_failures += 1
            if self._consecutive_failures >= self._failure_threshold:
                self._open()
                logger.warning(
                    "circuit_breaker_opened",
                    provider=self._provider_id,
                    failures=self._consecutive_failures,
                    cooldown_s=self._cooldown,
                )

    def release(self, permit: Permit) -> None:
        """Hand back a permit without an outcome (the attempt was cancelled)."""
        with self._lock:
            if permit.probe and self._is_current_probe(permit):
                # Back to OPEN with the original openedAt: the next caller may probe.
                self._transition(CircuitState.OPEN)
                logger.info("circuit_breaker_probe_released", provider=self._provider_id)

    def reset(self) -> None:
        """Force-reset the circuit to CLOSED (for admin override)."""
        with self._lock:
            self._close()
            logger.info("circuit_breaker_force_reset", provider=self._provider_id)

    # ── Internals (caller holds lock) ────────────────────────
    def _cooldown_elapsed(self) -> bool:
        if self._opened_at is None:
            return True
        return self._clock() - self._opened_at >= self._cooldown

    def _is_current_probe(self, permit: Permit) -> bool:
        return (
            self._state == CircuitState.HALF_OPEN
            and permit.generation == self._generation
        )

    def _open(self) -> None:
        self._opened_at = self._clock()
        self._generation += 1
        self._transition(CircuitState.OPEN)

    def _close(self) -> None:
        self._consecutive_failures = 0
        self._opened_at = None
        self._generation += 1
        self._transition(CircuitState.CLOSED)

    def _transition(self, new_state: CircuitState) -> None:
        if new_state != self._state:
            CIRCUIT_TRANSITIONS.labels(
                provider=self._provider_id, to_state=new_state.value
            ).inc()
        self._state = new_state


class CircuitBreakerTable:
    """One breaker per registered provider, created once and shared by all calls."""

    def __init__(
        self,
        descriptors: Iterable[ProviderDescriptor],
        *,
        clock: Clock = time.monotonic,
    ) -> None:
        self._breakers: dict[str, CircuitBreaker] = {
            d.provider_id: CircuitBreaker(
                d.provider_id,
                failure_threshold=d.max_consecutive_failures,
                cooldown_seconds=d.cooldown_s,
                clock=clock,
            )
            for d in descriptors
        }

    def get(self, provider_id: str) -> CircuitBreaker:
        try:
            return self._breakers[provider_id]
        except KeyError:
            raise ProviderNotFoundError(provider_id) from None

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._breakers

    def __iter__(self) -> Iterator[CircuitBreaker]:
        return iter(self._breakers.values())

    def snapshot(self) -> dict[str, BreakerSnapshot]:
        return {pid: cb.snapshot() for pid, cb in self._breakers.items()}
