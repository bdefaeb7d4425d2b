"""Chat gateway facade — the single entry-point the application talks to.

Composes the provider registry, circuit breaker table, health trackers,
context builder and fallback router from one explicit ``GatewayConfig``.
Build one ``ChatGateway`` per process and share it: all breaker state lives
on the instance, nothing is module-global.

Usage::

    gateway = ChatGateway(GatewayConfig(providers=descriptors, adapters=adapters))
    response = await gateway.send_message("How much should I save?")

``send_message`` always resolves to a well-formed ``CanonicalResponse``;
provider failures never surface as exceptions.
"""

from __future__ import annotations

import asyncio
import dataclasses
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

import structlog

from chat_gateway.domain.enums import Persona
from chat_gateway.domain.exceptions import ProviderNotFoundError, ValidationError
from chat_gateway.domain.models import (
    FALLBACK_PROVIDER_ID,
    CanonicalResponse,
    ConversationTurn,
    FinancialContext,
)
from chat_gateway.domain.services.context_builder import (
    DEFAULT_HISTORY_WINDOW,
    ContextBuilder,
)
from chat_gateway.domain.services.personas import system_preamble
from chat_gateway.domain.services.response_insights import (
    detect_action,
    extract_suggestions,
)
from chat_gateway.ports.outbound import ProviderAdapter
from chat_gateway.shared.observability.metrics import CHAT_REQUESTS_TOTAL
from chat_gateway.shared.providers.circuit_breaker import CircuitBreakerTable
from chat_gateway.shared.providers.health import ProviderHealthTracker
from chat_gateway.shared.providers.registry import ProviderRegistry
from chat_gateway.shared.providers.router import FallbackRouter
from chat_gateway.shared.providers.types import ProviderDescriptor, ProviderHealth

logger = structlog.get_logger(__name__)

PROBE_MESSAGE = "Hello, this is a connectivity test."


@dataclass(frozen=True)
class GatewayConfig:
    """Everything the gateway needs, constructed once at startup."""

    providers: Sequence[ProviderDescriptor]
    adapters: Mapping[str, ProviderAdapter]
    history_window: int = DEFAULT_HISTORY_WINDOW
    max_tokens: int = 500
    max_message_length: int = 5000
    currency_symbol: str = "R"
    clock: Callable[[], float] = time.monotonic


class ChatGateway:
    def __init__(self, config: GatewayConfig) -> None:
        self._config = config
        self._registry = ProviderRegistry(config.providers)
        self._breakers = CircuitBreakerTable(self._registry.all(), clock=config.clock)
        self._health = {
            d.provider_id: ProviderHealthTracker(d.provider_id, clock=config.clock)
            for d in self._registry.all()
        }
        self._adapters = dict(config.adapters)
        self._router = FallbackRouter(
            self._registry,
            self._breakers,
            self._adapters,
            health_trackers=self._health,
        )
        self._context = ContextBuilder(
            history_window=config.history_window,
            currency_symbol=config.currency_symbol,
        )
        logger.info(
            "chat_gateway_ready",
            providers=self.get_available_providers(),
            registered=len(self._registry),
        )

    # ── Chat ─────────────────────────────────────────────────
    async def send_message(
        self,
        message: str,
        history: Sequence[ConversationTurn] = (),
        financial_context: FinancialContext | Mapping[str, Any] | None = None,
        *,
        persona: Persona | None = None,
        preferred_provider: str | None = None,
    ) -> CanonicalResponse:
        """Answer one chat message, failing over across providers as needed.

        Raises:
            ValidationError: If ``message`` is empty or too long.  Provider
                failures never raise; they end in a fallback reply.
        """
        text = self._validate(message)
        if isinstance(financial_context, Mapping):
            financial_context = FinancialContext.from_dict(dict(financial_context))

        request = self._context.build_request(
            text,
            history,
            financial_context,
            system_preamble(persona),
            max_tokens=self._config.max_tokens,
        )
        response = await self._router.route(request, preferred_provider=preferred_provider)

        if not response.is_fallback:
            response = dataclasses.replace(
                response,
                suggestions=extract_suggestions(response.message),
                action=detect_action(response.message),
            )
        CHAT_REQUESTS_TOTAL.labels(provider=response.provider).inc()
        return response

    # ── Provider introspection ───────────────────────────────
    def get_available_providers(self) -> list[str]:
        """Enabled providers in priority order, regardless of breaker state."""
        return [d.provider_id for d in self._registry.list()]

    def get_current_provider(self) -> str:
        """Prediction of who answers next: first enabled provider not held open."""
        for d in self._registry.list():
            if self._breakers.get(d.provider_id).is_available():
                return d.provider_id
        return FALLBACK_PROVIDER_ID

    def get_provider_details(self) -> list[dict[str, Any]]:
        return [
            {
                "provider_id": d.provider_id,
                "name": d.display_name,
                "kind": d.kind.value,
                "model": d.model,
                "priority": d.priority,
                "enabled": d.enabled,
                "circuit_state": self._breakers.get(d.provider_id).state.value,
            }
            for d in self._registry.all()
        ]

    def get_health(self, provider_id: str | None = None) -> list[ProviderHealth]:
        descriptors = self._registry.all()
        if provider_id is not None:
            descriptors = (self._require(provider_id),)

        results: list[ProviderHealth] = []
        for d in descriptors:
            health = self._health[d.provider_id].health()
            snap = self._breakers.get(d.provider_id).snapshot()
            health.enabled = d.enabled
            health.circuit_state = snap.state.value
            health.consecutive_failures = snap.consecutive_failures
            results.append(health)
        return results

    # ── Admin ────────────────────────────────────────────────
    def reset_provider(self, provider_id: str) -> None:
        """Admin reset: force-closes the provider's circuit breaker."""
        self._require(provider_id)
        self._breakers.get(provider_id).reset()
        self._health[provider_id].reset()
        logger.info("provider_admin_reset", provider=provider_id)

    async def test_provider(self, provider_id: str) -> bool:
        """Send one probe message straight to a provider, bypassing its breaker."""
        descriptor = self._require(provider_id)
        adapter = self._adapters.get(provider_id)
        if adapter is None:
            return False

        request = self._context.build_request(
            PROBE_MESSAGE, (), None, system_preamble(), max_tokens=self._config.max_tokens
        )
        try:
            result = await asyncio.wait_for(adapter.call(request), timeout=descriptor.timeout_s)
        except asyncio.TimeoutError:
            logger.warning("provider_test_timeout", provider=provider_id)
            return False
        except Exception:
            logger.exception("provider_test_crashed", provider=provider_id)
            return False

        if result.response is None or not result.response.message.strip():
            logger.warning(
                "provider_test_failed",
                provider=provider_id,
                error=str(result.error) if result.error else "empty reply",
            )
            return False
        return True

    async def close(self) -> None:
        for adapter in self._adapters.values():
            await adapter.close()

    # ── Internals ────────────────────────────────────────────
    def _validate(self, message: str) -> str:
        text = (message or "").strip()
        if not text:
            raise ValidationError("Message cannot be empty")
        if len(text) > self._config.max_message_length:
            raise ValidationError(
                f"Message too long; keep it under {self._config.max_message_length} characters"
            )
        return text

    def _require(self, provider_id: str) -> ProviderDescriptor:
        descriptor = self._registry.get(provider_id)
        if descriptor is None:
            raise ProviderNotFoundError(provider_id)
        return descriptor
