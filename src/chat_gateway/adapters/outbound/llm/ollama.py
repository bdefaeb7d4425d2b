"""Local Ollama ``/generate`` adapter (offline use)."""

from __future__ import annotations

from typing import Any

from chat_gateway.adapters.outbound.llm.base import HttpProviderAdapter
from chat_gateway.domain.models import CanonicalRequest


class OllamaAdapter(HttpProviderAdapter):
    def build_url(self) -> str:
        return f"{self.descriptor.endpoint_url.rstrip('/')}/generate"

    def build_payload(self, request: CanonicalRequest) -> dict[str, Any]:
        return {
            "model": self.descriptor.model,
            "prompt": request.prompt,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "top_p": 0.8,
                "top_k": 40,
                "num_predict": request.max_tokens,
                "repeat_penalty": 1.1,
            },
        }

    def extract_text(self, data: Any) -> str | None:
        return data["response"]

    def extract_tokens(self, data: Any) -> int | None:
        if "eval_count" not in data:
            return None
        return int(data.get("prompt_eval_count", 0)) + int(data["eval_count"])
