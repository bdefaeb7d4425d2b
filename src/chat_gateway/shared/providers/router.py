"""Fallback router — walks the provider chain until one answers.

For each enabled provider in priority order the router asks its circuit
breaker for a permit (no permit → skip without a network call), invokes the
adapter under the provider's timeout, and reports the outcome back to the
breaker.  The first success is returned immediately.  When the chain is
exhausted a synthesized fallback reply is returned instead of raising.

Attempts within one request are strictly sequential; concurrency happens
across requests, which share only the breaker table.
"""

from __future__ import annotations

import asyncio
import dataclasses
import time
from typing import Mapping

import structlog

from chat_gateway.domain.enums import GatewayErrorKind
from chat_gateway.domain.exceptions import ConfigurationError
from chat_gateway.domain.models import CanonicalRequest, CanonicalResponse
from chat_gateway.domain.services.fallback import compose_fallback
from chat_gateway.ports.outbound import ProviderAdapter
from chat_gateway.shared.observability.metrics import PROVIDER_ATTEMPTS, PROVIDER_LATENCY
from chat_gateway.shared.providers.circuit_breaker import CircuitBreakerTable, Permit
from chat_gateway.shared.providers.health import ProviderHealthTracker
from chat_gateway.shared.providers.registry import ProviderRegistry
from chat_gateway.shared.providers.types import (
    CallResult,
    GatewayError,
    ProviderDescriptor,
)

logger = structlog.get_logger(__name__)


class FallbackRouter:
    def __init__(
        self,
        registry: ProviderRegistry,
        breakers: CircuitBreakerTable,
        adapters: Mapping[str, ProviderAdapter],
        *,
        health_trackers: Mapping[str, ProviderHealthTracker] | None = None,
    ) -> None:
        missing = [d.provider_id for d in registry.list() if d.provider_id not in adapters]
        if missing:
            raise ConfigurationError(f"No adapter configured for providers: {missing}")

        self._registry = registry
        self._breakers = breakers
        self._adapters = dict(adapters)
        self._health = dict(health_trackers or {})

    # ── Chain building ───────────────────────────────────────
    def fallback_chain(self, preferred: str | None = None) -> list[ProviderDescriptor]:
        """Enabled providers in priority order, ``preferred`` moved to the front."""
        chain = list(self._registry.list())
        if preferred:
            preferred_cfg = next((d for d in chain if d.provider_id == preferred), None)
            if preferred_cfg:
                chain.remove(preferred_cfg)
                chain.insert(0, preferred_cfg)
        return chain

    # ── Main entry-point ─────────────────────────────────────
    async def route(
        self,
        request: CanonicalRequest,
        *,
        preferred_provider: str | None = None,
    ) -> CanonicalResponse:
        started = time.monotonic()
        attempted: list[str] = []
        errors: list[GatewayError] = []

        for descriptor in self.fallback_chain(preferred_provider):
            pid = descriptor.provider_id
            permit = self._breakers.get(pid).acquire()
            if permit is None:
                self._record_skip(pid)
                continue

            attempted.append(pid)
            result, latency_ms = await self._attempt(descriptor, permit, request)
            response, error = result.response, result.error

            if response is not None:
                if len(attempted) > 1:
                    logger.info(
                        "provider_failover_success",
                        provider=pid,
                        attempts=len(attempted),
                        failed_providers=attempted[:-1],
                    )
                return dataclasses.replace(
                    response,
                    provider=pid,
                    metadata=dataclasses.replace(
                        response.metadata,
                        latency_ms=round(latency_ms, 1),
                        attempted_providers=tuple(attempted),
                    ),
                )
            if error is not None:
                errors.append(error)

        total_ms = (time.monotonic() - started) * 1000
        logger.warning(
            "all_providers_exhausted",
            attempted=attempted,
            errors=[str(e) for e in errors],
        )
        return compose_fallback(
            attempted,
            [e.kind for e in errors],
            latency_ms=round(total_ms, 1),
            network_failures=sum(
                1
                for e in errors
                if e.kind == GatewayErrorKind.HTTP_ERROR and e.status is None
            ),
        )

    # ── Single attempt ───────────────────────────────────────
    async def _attempt(
        self,
        descriptor: ProviderDescriptor,
        permit: Permit,
        request: CanonicalRequest,
    ) -> tuple[CallResult, float]:
        pid = descriptor.provider_id
        breaker = self._breakers.get(pid)
        adapter = self._adapters[pid]
        log = logger.bind(provider=pid, probe=permit.probe)

        start = time.monotonic()
        try:
            result = await asyncio.wait_for(adapter.call(request), timeout=descriptor.timeout_s)
        except asyncio.TimeoutError:
            result = CallResult.failure(
                GatewayError.timeout(pid, f"no reply within {descriptor.timeout_s}s")
            )
        except asyncio.CancelledError:
            breaker.release(permit)
            raise
        except Exception as exc:
            log.exception("provider_adapter_crashed")
            result = CallResult.failure(
                GatewayError.malformed(pid, f"{type(exc).__name__}: {exc}")
            )
        latency_ms = (time.monotonic() - start) * 1000

        if result.response is not None and not result.response.message.strip():
            result = CallResult.failure(GatewayError.malformed(pid, "empty reply"))

        tracker = self._health.get(pid)
        error = result.error
        if error is None:
            breaker.record_success(permit)
            if tracker:
                tracker.record_success(latency_ms)
            PROVIDER_ATTEMPTS.labels(provider=pid, outcome="success").inc()
            PROVIDER_LATENCY.labels(provider=pid).observe(latency_ms / 1000)
            log.info("provider_request_success", latency_ms=round(latency_ms, 1))
        else:
            breaker.record_failure(permit)
            if tracker:
                tracker.record_failure(error.kind, latency_ms)
            PROVIDER_ATTEMPTS.labels(provider=pid, outcome=error.kind.value).inc()
            log.warning(
                "provider_request_failed",
                error_kind=error.kind.value,
                status=error.status,
                detail=error.detail,
                latency_ms=round(latency_ms, 1),
            )
        return result, latency_ms

    def _record_skip(self, pid: str) -> None:
        if tracker := self._health.get(pid):
            tracker.record_skip()
        PROVIDER_ATTEMPTS.labels(provider=pid, outcome="circuit_open").inc()
        logger.debug("provider_skipped_circuit_open", provider=pid)
