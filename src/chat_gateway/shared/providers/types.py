"""Core types for the multi-provider gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from chat_gateway.domain.enums import GatewayErrorKind, ProviderKind
from chat_gateway.domain.models import FALLBACK_PROVIDER_ID, CanonicalResponse


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static configuration for a single upstream provider.

    Attributes:
        provider_id:  Unique identifier (e.g. "deepseek", "gemini").
        display_name: Human readable name for the UI.
        kind:         Which adapter speaks this provider's wire format.
        priority:     Lower = tried first.
        endpoint_url: Base URL of the provider's API.
        model:        Model name sent upstream.
        timeout_s:    Per-attempt timeout in seconds.
        max_consecutive_failures: Consecutive failures before the circuit opens.
        cooldown_s:   Seconds an open circuit waits before a half-open probe.
        enabled:      Disabled providers are never iterated but keep breaker history.
        api_key:      Credential injected by the adapter (never logged).
        confidence:   Score reported in response metadata.
        metadata:     Arbitrary extra config (API version, generation params).
    """

    provider_id: str
    display_name: str
    kind: ProviderKind
    priority: int = 10
    endpoint_url: str = ""
    model: str = ""
    timeout_s: float = 30.0
    max_consecutive_failures: int = 3
    cooldown_s: float = 30.0
    enabled: bool = True
    api_key: str = field(default="", repr=False)
    confidence: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if not self.provider_id:
            raise ValueError("provider_id must not be empty")
        if self.provider_id == FALLBACK_PROVIDER_ID:
            raise ValueError(f"{FALLBACK_PROVIDER_ID!r} is reserved for synthesized replies")
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be positive")
        if self.max_consecutive_failures < 1:
            raise ValueError("max_consecutive_failures must be >= 1")
        if self.cooldown_s < 0:
            raise ValueError("cooldown_s must be >= 0")


@dataclass(frozen=True)
class GatewayError:
    """A single provider attempt's failure.  Returned as a value, never raised."""

    kind: GatewayErrorKind
    provider_id: str
    status: int | None = None
    detail: str = ""

    @classmethod
    def timeout(cls, provider_id: str, detail: str = "") -> GatewayError:
        return cls(GatewayErrorKind.TIMEOUT, provider_id, detail=detail)

    @classmethod
    def http_error(
        cls, provider_id: str, status: int | None, detail: str = ""
    ) -> GatewayError:
        return cls(GatewayErrorKind.HTTP_ERROR, provider_id, status=status, detail=detail)

    @classmethod
    def rate_limited(
        cls, provider_id: str, status: int | None = 429, detail: str = ""
    ) -> GatewayError:
        return cls(GatewayErrorKind.RATE_LIMITED, provider_id, status=status, detail=detail)

    @classmethod
    def malformed(cls, provider_id: str, detail: str = "") -> GatewayError:
        return cls(GatewayErrorKind.MALFORMED_RESPONSE, provider_id, detail=detail)

    def __str__(self) -> str:
        status = f"({self.status})" if self.status is not None else ""
        detail = f": {self.detail}" if self.detail else ""
        return f"[{self.provider_id}] {self.kind.value}{status}{detail}"


@dataclass(frozen=True)
class CallResult:
    """Outcome of one adapter call: exactly one of ``response``/``error`` is set."""

    response: CanonicalResponse | None = None
    error: GatewayError | None = None

    def __post_init__(self) -> None:
        if (self.response is None) == (self.error is None):
            raise ValueError("CallResult needs exactly one of response or error")

    @property
    def ok(self) -> bool:
        return self.response is not None

    @classmethod
    def success(cls, response: CanonicalResponse) -> CallResult:
        return cls(response=response)

    @classmethod
    def failure(cls, error: GatewayError) -> CallResult:
        return cls(error=error)


@dataclass
class ProviderHealth:
    """Read-only snapshot of a provider's current health."""

    provider_id: str
    enabled: bool = True
    total_requests: int = 0
    total_successes: int = 0
    total_failures: int = 0
    total_skipped: int = 0
    success_rate: float = 1.0
    latency_p50_ms: float = 0.0
    latency_p95_ms: float = 0.0
    latency_p99_ms: float = 0.0
    failures_by_kind: dict[str, int] = field(default_factory=dict)
    last_error: str | None = None
    last_error_time: float | None = None
    circuit_state: str = "closed"
    consecutive_failures: int = 0
