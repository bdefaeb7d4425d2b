"""Multi-provider gateway framework.

Provides priority failover, per-provider circuit breaking, health tracking
and a never-raising chat facade over any set of provider adapters.
"""

from chat_gateway.shared.providers.types import (
    CallResult,
    GatewayError,
    ProviderDescriptor,
    ProviderHealth,
)
from chat_gateway.shared.providers.registry import ProviderRegistry
from chat_gateway.shared.providers.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerTable,
    CircuitState,
    Permit,
)
from chat_gateway.shared.providers.health import ProviderHealthTracker
from chat_gateway.shared.providers.router import FallbackRouter
from chat_gateway.shared.providers.gateway import ChatGateway, GatewayConfig

__all__ = [
    "CallResult",
    "ChatGateway",
    "CircuitBreaker",
    "CircuitBreakerTable",
    "CircuitState",
    "FallbackRouter",
    "GatewayConfig",
    "GatewayError",
    "Permit",
    "ProviderDescriptor",
    "ProviderHealth",
    "ProviderHealthTracker",
    "ProviderRegistry",
]
