"""Prometheus metrics for the chat gateway."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


# ── HTTP metrics ─────────────────────────────────────────────
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── Gateway metrics ──────────────────────────────────────────
CHAT_REQUESTS_TOTAL = Counter(
    "chat_requests_total",
    "Chat messages answered, by answering provider (including fallback)",
    ["provider"],
)

PROVIDER_ATTEMPTS = Counter(
    "provider_attempts_total",
    "Provider attempts by outcome",
    ["provider", "outcome"],  # success / <error kind> / circuit_open
)

PROVIDER_LATENCY = Histogram(
    "provider_latency_seconds",
    "Upstream provider response latency",
    ["provider"],
    buckets=(0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0),
)

CIRCUIT_TRANSITIONS = Counter(
    "circuit_breaker_transitions_total",
    "Circuit breaker state transitions",
    ["provider", "to_state"],
)
