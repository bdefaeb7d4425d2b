"""Hugging Face Inference API adapter (text-generation models)."""

from __future__ import annotations

from typing import Any

from chat_gateway.adapters.outbound.llm.base import HttpProviderAdapter
from chat_gateway.domain.models import CanonicalRequest

MAX_NEW_TOKENS = 256


class HuggingFaceAdapter(HttpProviderAdapter):
    rate_limit_markers = ("rate limit reached", "too many requests")

    def build_url(self) -> str:
        return f"{self.descriptor.endpoint_url.rstrip('/')}/{self.descriptor.model}"

    def build_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.descriptor.api_key}",
            "Content-Type": "application/json",
        }

    def build_payload(self, request: CanonicalRequest) -> dict[str, Any]:
        return {
            "inputs": request.prompt,
            "parameters": {
                "max_new_tokens": min(request.max_tokens, MAX_NEW_TOKENS),
                "temperature": self.temperature,
                "return_full_text": False,
            },
        }

    def extract_text(self, data: Any) -> str | None:
        # Either [{"generated_text": ...}] or a bare object
        item = data[0] if isinstance(data, list) else data
        return item.get("generated_text") or item.get("summary_text")
