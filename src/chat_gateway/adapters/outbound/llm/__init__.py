"""LLM provider adapters — one class per wire protocol.

``build_provider_descriptors`` turns ``Settings`` into the ordered
descriptor list, ``build_adapters`` instantiates the matching adapter for
each descriptor.  Adapter selection is by ``ProviderKind`` only; provider
names never drive branching.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING

import httpx
import structlog

from chat_gateway.adapters.outbound.llm.anthropic import AnthropicAdapter
from chat_gateway.adapters.outbound.llm.base import HttpProviderAdapter
from chat_gateway.adapters.outbound.llm.gemini import GeminiAdapter
from chat_gateway.adapters.outbound.llm.huggingface import HuggingFaceAdapter
from chat_gateway.adapters.outbound.llm.mock import MockAdapter
from chat_gateway.adapters.outbound.llm.ollama import OllamaAdapter
from chat_gateway.adapters.outbound.llm.openai_compatible import OpenAICompatibleAdapter
from chat_gateway.domain.enums import ProviderKind
from chat_gateway.ports.outbound import ProviderAdapter
from chat_gateway.shared.providers.types import ProviderDescriptor

if TYPE_CHECKING:
    from chat_gateway.config import Settings

logger = structlog.get_logger(__name__)

__all__ = [
    "ADAPTER_TYPES",
    "AnthropicAdapter",
    "GeminiAdapter",
    "HttpProviderAdapter",
    "HuggingFaceAdapter",
    "MockAdapter",
    "OllamaAdapter",
    "OpenAICompatibleAdapter",
    "build_adapter",
    "build_adapters",
    "build_provider_descriptors",
]

ADAPTER_TYPES: dict[ProviderKind, type[ProviderAdapter]] = {
    ProviderKind.OPENAI_COMPATIBLE: OpenAICompatibleAdapter,
    ProviderKind.ANTHROPIC: AnthropicAdapter,
    ProviderKind.GEMINI: GeminiAdapter,
    ProviderKind.OLLAMA: OllamaAdapter,
    ProviderKind.HUGGINGFACE: HuggingFaceAdapter,
    ProviderKind.MOCK: MockAdapter,
}


def build_adapter(
    descriptor: ProviderDescriptor,
    client: httpx.AsyncClient | None = None,
) -> ProviderAdapter:
    """Instantiate the adapter for ``descriptor.kind``.

    A shared ``client`` is borrowed, not owned: closing the adapter leaves
    it open.
    """
    adapter_cls = ADAPTER_TYPES[descriptor.kind]
    return adapter_cls(descriptor, client=client)  # type: ignore[call-arg]


def build_adapters(
    descriptors: Iterable[ProviderDescriptor],
    client: httpx.AsyncClient | None = None,
) -> dict[str, ProviderAdapter]:
    return {d.provider_id: build_adapter(d, client) for d in descriptors}


def build_provider_descriptors(settings: Settings) -> tuple[ProviderDescriptor, ...]:
    """Build the provider list from settings values.

    Position in ``llm_provider_priority`` becomes the priority; providers
    left out of that list keep registration order after the listed ones.
    A provider is enabled only when its credential (or flag) is present.
    """
    s = settings
    common = {
        "max_consecutive_failures": s.circuit_breaker_failure_threshold,
        "cooldown_s": s.circuit_breaker_cooldown_seconds,
    }
    registered = [
        ProviderDescriptor(
            provider_id="deepseek",
            display_name="DeepSeek",
            kind=ProviderKind.OPENAI_COMPATIBLE,
            endpoint_url=s.deepseek_base_url,
            model=s.deepseek_model,
            timeout_s=s.provider_timeout_seconds,
            enabled=bool(s.deepseek_api_key),
            api_key=s.deepseek_api_key,
            confidence=0.9,
            **common,
        ),
        ProviderDescriptor(
            provider_id="gemini",
            display_name="Google Gemini",
            kind=ProviderKind.GEMINI,
            endpoint_url=s.gemini_base_url,
            model=s.gemini_model,
            timeout_s=s.provider_timeout_seconds,
            enabled=bool(s.gemini_api_key),
            api_key=s.gemini_api_key,
            confidence=0.9,
            **common,
        ),
        ProviderDescriptor(
            provider_id="openai",
            display_name="OpenAI",
            kind=ProviderKind.OPENAI_COMPATIBLE,
            endpoint_url=s.openai_base_url,
            model=s.openai_model,
            timeout_s=s.provider_timeout_seconds,
            enabled=bool(s.openai_api_key),
            api_key=s.openai_api_key,
            confidence=0.95,
            **common,
        ),
        ProviderDescriptor(
            provider_id="anthropic",
            display_name="Anthropic Claude",
            kind=ProviderKind.ANTHROPIC,
            endpoint_url=s.anthropic_base_url,
            model=s.anthropic_model,
            timeout_s=s.provider_timeout_seconds,
            enabled=bool(s.anthropic_api_key),
            api_key=s.anthropic_api_key,
            confidence=0.92,
            metadata={"api_version": "2023-06-01"},
            **common,
        ),
        ProviderDescriptor(
            provider_id="huggingface",
            display_name="Hugging Face",
            kind=ProviderKind.HUGGINGFACE,
            endpoint_url=s.huggingface_base_url,
            model=s.huggingface_model,
            timeout_s=s.provider_timeout_seconds,
            enabled=bool(s.huggingface_api_key),
            api_key=s.huggingface_api_key,
            confidence=0.8,
            **common,
        ),
        ProviderDescriptor(
            provider_id="openrouter",
            display_name="OpenRouter",
            kind=ProviderKind.OPENAI_COMPATIBLE,
            endpoint_url=s.openrouter_base_url,
            model=s.openrouter_model,
            timeout_s=s.provider_timeout_seconds,
            enabled=bool(s.openrouter_api_key),
            api_key=s.openrouter_api_key,
            confidence=0.85,
            **common,
        ),
        ProviderDescriptor(
            provider_id="local",
            display_name="Local Llama",
            kind=ProviderKind.OLLAMA,
            endpoint_url=s.local_llm_url,
            model=s.local_llm_model,
            timeout_s=s.local_llm_timeout_seconds,
            enabled=s.local_llm_enabled,
            confidence=0.85,
            **common,
        ),
        ProviderDescriptor(
            provider_id="mock",
            display_name="Mock AI",
            kind=ProviderKind.MOCK,
            model="mock",
            timeout_s=s.provider_timeout_seconds,
            enabled=s.mock_enabled,
            confidence=0.8,
            **common,
        ),
    ]

    known = {d.provider_id for d in registered}
    order: list[str] = []
    for name in s.llm_provider_priority.split(","):
        pid = name.strip().lower()
        if not pid:
            continue
        if pid not in known:
            logger.warning("unknown_provider_in_priority", provider=pid)
            continue
        if pid not in order:
            order.append(pid)
    order.extend(d.provider_id for d in registered if d.provider_id not in order)

    rank = {pid: idx + 1 for idx, pid in enumerate(order)}
    return tuple(
        sorted(
            (replace(d, priority=rank[d.provider_id]) for d in registered),
            key=lambda d: d.priority,
        )
    )
