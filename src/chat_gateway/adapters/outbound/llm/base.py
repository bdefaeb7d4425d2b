"""Shared plumbing for HTTP-based provider adapters.

Each provider-specific subclass only describes its wire format: where to
POST, which headers carry the credential, how the body looks, and where
the reply text lives.  Turning transport errors, HTTP statuses and
unparseable bodies into ``GatewayError`` values happens here, once.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

import httpx
import structlog

from chat_gateway.domain.models import (
    CanonicalRequest,
    CanonicalResponse,
    ResponseMetadata,
)
from chat_gateway.ports.outbound import ProviderAdapter
from chat_gateway.shared.providers.types import (
    CallResult,
    GatewayError,
    ProviderDescriptor,
)

logger = structlog.get_logger(__name__)

DEFAULT_TEMPERATURE = 0.7
_ERROR_SNIPPET = 200


class HttpProviderAdapter(ProviderAdapter):
    """Base adapter: POST a JSON body, map the reply to canonical shape."""

    #: Lower-cased substrings of an error payload that signal rate limiting.
    rate_limit_markers: tuple[str, ...] = ("rate limit", "rate_limit")

    def __init__(
        self,
        descriptor: ProviderDescriptor,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._descriptor = descriptor
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=descriptor.timeout_s)

    @property
    def provider_id(self) -> str:
        return self._descriptor.provider_id

    @property
    def descriptor(self) -> ProviderDescriptor:
        return self._descriptor

    # ── Wire format hooks ────────────────────────────────────
    @abstractmethod
    def build_url(self) -> str: ...

    @abstractmethod
    def build_payload(self, request: CanonicalRequest) -> dict[str, Any]: ...

    @abstractmethod
    def extract_text(self, data: Any) -> str | None:
        """Reply text, or None when the expected field is absent."""

    def build_headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    def extract_tokens(self, data: Any) -> int | None:
        return None

    def extract_confidence(self, data: Any) -> float | None:
        return self._descriptor.confidence

    # ── ProviderAdapter ──────────────────────────────────────
    async def call(self, request: CanonicalRequest) -> CallResult:
        pid = self.provider_id
        try:
            response = await self._client.post(
                self.build_url(),
                headers=self.build_headers(),
                json=self.build_payload(request),
            )
        except httpx.TimeoutException as exc:
            return CallResult.failure(GatewayError.timeout(pid, type(exc).__name__))
        except httpx.HTTPError as exc:
            # Connection refused, DNS, protocol errors: no status to report
            return CallResult.failure(
                GatewayError.http_error(pid, None, f"{type(exc).__name__}: {exc}")
            )

        status = response.status_code
        data = self._decode(response)

        if status == 429 or self.is_rate_limited(status, data):
            return CallResult.failure(
                GatewayError.rate_limited(pid, status, self._error_text(data))
            )
        if status >= 400:
            return CallResult.failure(
                GatewayError.http_error(pid, status, self._error_text(data))
            )
        if data is None:
            return CallResult.failure(GatewayError.malformed(pid, "body is not JSON"))

        try:
            text = self.extract_text(data)
        except (KeyError, IndexError, TypeError, AttributeError):
            text = None
        if not isinstance(text, str) or not text.strip():
            return CallResult.failure(GatewayError.malformed(pid, "reply text missing"))

        d = self._descriptor
        return CallResult.success(
            CanonicalResponse(
                message=text.strip(),
                provider=pid,
                metadata=ResponseMetadata(
                    model=d.model,
                    tokens=self._safe(self.extract_tokens, data),
                    confidence=self._safe(self.extract_confidence, data),
                ),
            )
        )

    def is_rate_limited(self, status: int, data: Any) -> bool:
        """Provider-specific rate-limit signal carried in the payload."""
        text = self._error_text(data).lower()
        return bool(text) and any(m.lower() in text for m in self.rate_limit_markers)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ── Helpers for subclasses ───────────────────────────────
    @property
    def temperature(self) -> float:
        return float(self._descriptor.metadata.get("temperature", DEFAULT_TEMPERATURE))

    @staticmethod
    def chat_messages(
        request: CanonicalRequest, *, include_system: bool = True
    ) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if include_system and request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.extend({"role": t.role.value, "content": t.text} for t in request.history)
        messages.append({"role": "user", "content": request.user_message or request.prompt})
        return messages

    # ── Internals ────────────────────────────────────────────
    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _error_text(data: Any) -> str:
        """Flatten the usual ``{"error": ...}`` shapes into one string."""
        if not isinstance(data, dict):
            return ""
        error = data.get("error")
        if isinstance(error, str):
            return error[:_ERROR_SNIPPET]
        if isinstance(error, dict):
            parts = [
                str(error[k])
                for k in ("type", "code", "status", "message")
                if error.get(k) is not None
            ]
            return " ".join(parts)[:_ERROR_SNIPPET]
        return ""

    def _safe(self, fn: Any, data: Any) -> Any:
        try:
            return fn(data)
        except (KeyError, IndexError, TypeError, AttributeError, ValueError):
            logger.debug("provider_optional_field_unparsed", provider=self.provider_id)
            return None
