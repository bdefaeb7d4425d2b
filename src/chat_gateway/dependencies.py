"""Dependency injection container — wires adapters to the gateway.

The gateway is built exactly once per application from ``Settings`` and
kept on ``app.state``; FastAPI's ``Depends()`` hands it to route handlers.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Request

from chat_gateway.adapters.outbound.llm import build_adapters, build_provider_descriptors
from chat_gateway.config import Settings, get_settings
from chat_gateway.shared.providers import ChatGateway, GatewayConfig


# ── Settings ─────────────────────────────────────────────────
@lru_cache(maxsize=1)
def get_cached_settings() -> Settings:
    return get_settings()


# ── Gateway construction ─────────────────────────────────────
def build_gateway_config(settings: Settings) -> GatewayConfig:
    """Translate settings into the explicit gateway configuration.

    Each adapter owns an httpx client sized to its own timeout; the
    gateway closes them on shutdown.
    """
    descriptors = build_provider_descriptors(settings)
    return GatewayConfig(
        providers=descriptors,
        adapters=build_adapters(descriptors),
        history_window=settings.history_window,
        max_tokens=settings.max_tokens,
        max_message_length=settings.max_message_length,
        currency_symbol=settings.currency_symbol,
    )


def build_gateway(settings: Settings | None = None) -> ChatGateway:
    return ChatGateway(build_gateway_config(settings or get_cached_settings()))


# ── Request-scoped accessors ─────────────────────────────────
def get_gateway(request: Request) -> ChatGateway:
    return request.app.state.gateway


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
