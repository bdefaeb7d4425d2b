"""Anthropic Messages API adapter."""

from __future__ import annotations

from typing import Any

from chat_gateway.adapters.outbound.llm.base import HttpProviderAdapter
from chat_gateway.domain.models import CanonicalRequest

DEFAULT_API_VERSION = "2023-06-01"


class AnthropicAdapter(HttpProviderAdapter):
    rate_limit_markers = ("rate_limit_error",)

    def build_url(self) -> str:
        return f"{self.descriptor.endpoint_url.rstrip('/')}/messages"

    def build_headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.descriptor.api_key,
            "anthropic-version": self.descriptor.metadata.get("api_version", DEFAULT_API_VERSION),
            "content-type": "application/json",
        }

    def build_payload(self, request: CanonicalRequest) -> dict[str, Any]:
        # System prompt travels separately; roles are only user/assistant
        return {
            "model": self.descriptor.model,
            "max_tokens": request.max_tokens,
            "temperature": self.temperature,
            "system": request.system_prompt,
            "messages": self.chat_messages(request, include_system=False),
        }

    def extract_text(self, data: Any) -> str | None:
        for block in data["content"]:
            if block.get("type", "text") == "text":
                return block.get("text")
        return None

    def extract_tokens(self, data: Any) -> int | None:
        usage = data.get("usage")
        if not usage:
            return None
        return int(usage.get("input_tokens", 0)) + int(usage.get("output_tokens", 0))
