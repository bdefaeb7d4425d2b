"""Sliding-window health tracker for a single provider.

Keeps cumulative outcome counters plus a rolling window of latencies for
percentile reporting.  Purely observational: routing decisions belong to the
circuit breaker.
"""

from __future__ import annotations

import threading
import time
from collections import Counter, deque
from dataclasses import dataclass
from typing import Callable

from chat_gateway.domain.enums import GatewayErrorKind
from chat_gateway.shared.providers.types import ProviderHealth


@dataclass
class _Sample:
    timestamp: float
    success: bool
    latency_ms: float


class ProviderHealthTracker:
    """Thread-safe, sliding-window health tracker."""

    def __init__(
        self,
        provider_id: str,
        *,
        window_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider_id = provider_id
        self._window = window_seconds
        self._clock = clock

        self._samples: deque[_Sample] = deque()
        self._lock = threading.Lock()

        # Cumulative counters (never evicted)
        self._total_requests = 0
        self._total_successes = 0
        self._total_skipped = 0
        self._failures_by_kind: Counter[str] = Counter()
        self._last_error: str | None = None
        self._last_error_time: float | None = None

    # ── Recording ────────────────────────────────────────────
    def record_success(self, latency_ms: float) -> None:
        with self._lock:
            self._samples.append(_Sample(self._clock(), True, latency_ms))
            self._total_requests += 1
            self._total_successes += 1
            self._evict()

    def record_failure(self, kind: GatewayErrorKind, latency_ms: float = 0.0) -> None:
        with self._lock:
            self._samples.append(_Sample(self._clock(), False, latency_ms))
            self._total_requests += 1
            self._failures_by_kind[kind.value] += 1
            self._last_error = kind.value
            self._last_error_time = self._clock()
            self._evict()

    def record_skip(self) -> None:
        with self._lock:
            self._total_skipped += 1

    # ── Snapshot ─────────────────────────────────────────────
    def health(self) -> ProviderHealth:
        with self._lock:
            self._evict()
            window_total = len(self._samples)
            window_ok = sum(1 for s in self._samples if s.success)
            latencies = sorted(s.latency_ms for s in self._samples if s.success)
            failures = sum(self._failures_by_kind.values())

            return ProviderHealth(
                provider_id=self._provider_id,
                total_requests=self._total_requests,
                total_successes=self._total_successes,
                total_failures=failures,
                total_skipped=self._total_skipped,
                success_rate=round(window_ok / window_total, 4) if window_total else 1.0,
                latency_p50_ms=_percentile(latencies, 0.50),
                latency_p95_ms=_percentile(latencies, 0.95),
                latency_p99_ms=_percentile(latencies, 0.99),
                failures_by_kind=dict(self._failures_by_kind),
                last_error=self._last_error,
                last_error_time=self._last_error_time,
            )

    def reset(self) -> None:
        with self._lock:
            self._samples.clear()

    # ── Internals ────────────────────────────────────────────
    def _evict(self) -> None:
        """Remove samples outside the sliding window (caller holds lock)."""
        cutoff = self._clock() - self._window
        while self._samples and self._samples[0].timestamp < cutoff:
            self._samples.popleft()


def _percentile(sorted_values: list[float], p: float) -> float:
    if not sorted_values:
        return 0.0
    idx = min(int(len(sorted_values) * p), len(sorted_values) - 1)
    return round(sorted_values[idx], 2)
