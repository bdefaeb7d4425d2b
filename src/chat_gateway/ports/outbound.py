"""Outbound ports — interfaces that infrastructure adapters must implement.

These are the *driven* ports in hexagonal architecture.  The gateway
depends only on this abstraction, never on a concrete HTTP client.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from chat_gateway.domain.models import CanonicalRequest

if TYPE_CHECKING:
    from chat_gateway.shared.providers.types import CallResult


class ProviderAdapter(ABC):
    """One upstream language-model service.

    ``call`` translates the canonical request into the provider's wire
    format and its reply back into a ``CanonicalResponse``.  Every expected
    failure (timeout, HTTP status, rate limit, unparseable body) comes back
    as ``CallResult.failure``; raising is reserved for programming errors.
    """

    @property
    @abstractmethod
    def provider_id(self) -> str: ...

    @abstractmethod
    async def call(self, request: CanonicalRequest) -> CallResult: ...

    async def close(self) -> None:
        """Release transport resources.  Default: nothing to release."""
