"""OpenAI-style ``/chat/completions`` providers (OpenAI, DeepSeek, OpenRouter)."""

from __future__ import annotations

from typing import Any

from chat_gateway.adapters.outbound.llm.base import HttpProviderAdapter
from chat_gateway.domain.models import CanonicalRequest


class OpenAICompatibleAdapter(HttpProviderAdapter):
    rate_limit_markers = ("rate_limit_exceeded", "insufficient_quota", "rate limit")

    def build_url(self) -> str:
        return f"{self.descriptor.endpoint_url.rstrip('/')}/chat/completions"

    def build_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.descriptor.api_key}",
            "Content-Type": "application/json",
        }

    def build_payload(self, request: CanonicalRequest) -> dict[str, Any]:
        return {
            "model": self.descriptor.model,
            "messages": self.chat_messages(request),
            "max_tokens": request.max_tokens,
            "temperature": self.temperature,
            "stream": False,
        }

    def extract_text(self, data: Any) -> str | None:
        return data["choices"][0]["message"]["content"]

    def extract_tokens(self, data: Any) -> int | None:
        usage = data.get("usage") or {}
        total = usage.get("total_tokens")
        return int(total) if total is not None else None
