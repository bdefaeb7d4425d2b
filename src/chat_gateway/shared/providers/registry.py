"""Provider descriptor registry — the static, priority-ordered provider list.

Read-only after construction, so concurrent readers need no locking.
Disabled providers stay registered (their breaker history survives) but are
left out of iteration.
"""

from __future__ import annotations

from typing import Iterable

import structlog

from chat_gateway.domain.exceptions import ConfigurationError
from chat_gateway.shared.providers.types import ProviderDescriptor

logger = structlog.get_logger(__name__)


class ProviderRegistry:
    def __init__(self, descriptors: Iterable[ProviderDescriptor]) -> None:
        registered = list(descriptors)
        if not registered:
            raise ConfigurationError("At least one provider must be registered")

        seen: set[str] = set()
        for d in registered:
            if d.provider_id in seen:
                raise ConfigurationError(f"Duplicate provider id {d.provider_id!r}")
            seen.add(d.provider_id)

        # sorted() is stable: equal priorities keep registration order
        self._ordered: tuple[ProviderDescriptor, ...] = tuple(
            sorted(registered, key=lambda d: d.priority)
        )
        self._by_id = {d.provider_id: d for d in self._ordered}

        enabled = [d for d in self._ordered if d.enabled]
        priorities = [d.priority for d in enabled]
        if len(priorities) != len(set(priorities)):
            logger.warning(
                "provider_priority_collision",
                providers=[(d.provider_id, d.priority) for d in enabled],
            )
        if not enabled:
            logger.warning("no_enabled_providers", registered=list(self._by_id))

    def list(self) -> tuple[ProviderDescriptor, ...]:
        """Enabled providers, ascending by priority."""
        return tuple(d for d in self._ordered if d.enabled)

    def all(self) -> tuple[ProviderDescriptor, ...]:
        """Every registered provider (enabled or not), ascending by priority."""
        return self._ordered

    def get(self, provider_id: str) -> ProviderDescriptor | None:
        return self._by_id.get(provider_id)

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._by_id
