"""Health, Chat, Providers — REST routers."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from chat_gateway import __version__
from chat_gateway.application.dtos import (
    ChatRequest,
    ChatResponse,
    CurrentProviderResponse,
    HealthResponse,
    ProviderDetailResponse,
    ProviderHealthResponse,
    ProviderResetResponse,
)
from chat_gateway.config import Settings
from chat_gateway.dependencies import get_app_settings, get_gateway
from chat_gateway.domain.models import FALLBACK_PROVIDER_ID
from chat_gateway.shared.providers import ChatGateway


# ═══════════════════════════════════════════════════════════════
#  Health
# ═══════════════════════════════════════════════════════════════
health_router = APIRouter(tags=["Health"])


@health_router.get("/health", response_model=HealthResponse)
async def health_check(
    gateway: ChatGateway = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    # Fallback replies keep chat usable, so no eligible provider is degraded, not down
    current = gateway.get_current_provider()
    return HealthResponse(
        status="ok" if current != FALLBACK_PROVIDER_ID else "degraded",
        version=__version__,
        environment=settings.app_env.value,
        providers={
            d["provider_id"]: d["circuit_state"]
            for d in gateway.get_provider_details()
            if d["enabled"]
        },
    )


@health_router.get("/metrics")
async def prometheus_metrics() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


# ═══════════════════════════════════════════════════════════════
#  Chat
# ═══════════════════════════════════════════════════════════════
chat_router = APIRouter(tags=["Chat"])


@chat_router.post("/chat", response_model=ChatResponse)
async def send_chat_message(
    body: ChatRequest,
    gateway: ChatGateway = Depends(get_gateway),
) -> ChatResponse:
    """Answer a chat message; always returns a reply, possibly the fallback one."""
    response = await gateway.send_message(
        body.message,
        body.history_turns(),
        body.financial_context.to_domain() if body.financial_context else None,
        persona=body.persona,
        preferred_provider=body.preferred_provider,
    )
    return ChatResponse.from_domain(response)


# ═══════════════════════════════════════════════════════════════
#  Providers
# ═══════════════════════════════════════════════════════════════
providers_router = APIRouter(prefix="/providers", tags=["Providers"])


@providers_router.get("", response_model=list[str])
async def list_providers(gateway: ChatGateway = Depends(get_gateway)) -> list[str]:
    """Enabled providers in priority order."""
    return gateway.get_available_providers()


@providers_router.get("/current", response_model=CurrentProviderResponse)
async def current_provider(
    gateway: ChatGateway = Depends(get_gateway),
) -> CurrentProviderResponse:
    return CurrentProviderResponse(provider_id=gateway.get_current_provider())


@providers_router.get("/details", response_model=list[ProviderDetailResponse])
async def provider_details(
    gateway: ChatGateway = Depends(get_gateway),
) -> list[ProviderDetailResponse]:
    return [ProviderDetailResponse(**d) for d in gateway.get_provider_details()]


@providers_router.get("/health", response_model=list[ProviderHealthResponse])
async def provider_health(
    gateway: ChatGateway = Depends(get_gateway),
) -> list[ProviderHealthResponse]:
    """Health snapshots for all registered providers."""
    return [ProviderHealthResponse.model_validate(h) for h in gateway.get_health()]


@providers_router.post("/{provider_id}/reset", response_model=ProviderResetResponse)
async def reset_provider(
    provider_id: str,
    gateway: ChatGateway = Depends(get_gateway),
) -> ProviderResetResponse:
    """Admin: force-close a provider's circuit breaker."""
    gateway.reset_provider(provider_id)
    return ProviderResetResponse(provider_id=provider_id)
