"""Google Gemini ``generateContent`` adapter."""

from __future__ import annotations

from typing import Any

from chat_gateway.adapters.outbound.llm.base import HttpProviderAdapter
from chat_gateway.domain.models import CanonicalRequest

SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]
UNRATED_CONFIDENCE_PENALTY = 0.1


class GeminiAdapter(HttpProviderAdapter):
    rate_limit_markers = ("RESOURCE_EXHAUSTED", "quota")

    def build_url(self) -> str:
        base = self.descriptor.endpoint_url.rstrip("/")
        return f"{base}/models/{self.descriptor.model}:generateContent"

    def build_headers(self) -> dict[str, str]:
        return {
            "x-goog-api-key": self.descriptor.api_key,
            "Content-Type": "application/json",
        }

    def build_payload(self, request: CanonicalRequest) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": request.prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": request.max_tokens,
                "topP": 0.8,
                "topK": 10,
            },
            "safetySettings": SAFETY_SETTINGS,
        }

    def extract_text(self, data: Any) -> str | None:
        return data["candidates"][0]["content"]["parts"][0]["text"]

    def extract_tokens(self, data: Any) -> int | None:
        total = (data.get("usageMetadata") or {}).get("totalTokenCount")
        return int(total) if total is not None else None

    def extract_confidence(self, data: Any) -> float | None:
        base = self.descriptor.confidence
        if base is None:
            return None
        if data["candidates"][0].get("safetyRatings"):
            return base
        return round(base - UNRATED_CONFIDENCE_PENALTY, 2)
