"""Offline mock provider with canned personal-finance answers.

Only enabled in development (or when explicitly switched on); lets the
chat screen work without any API key.
"""

from __future__ import annotations

import asyncio

from chat_gateway.domain.models import (
    CanonicalRequest,
    CanonicalResponse,
    ResponseMetadata,
)
from chat_gateway.ports.outbound import ProviderAdapter
from chat_gateway.shared.providers.types import CallResult, ProviderDescriptor

# (keywords, reply) checked in order against the user's latest message
CANNED_REPLIES: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("learn", "education", "teach"),
        "Great choice! Learning about finance is one of the best investments you "
        "can make. I can help you with budgeting basics, South African banking, "
        "investment options like the JSE, and cryptocurrency for unbanked users. "
        "Which topic would you like to learn about first?",
    ),
    (
        ("budget", "spending"),
        "Let's create a budget that works for South African conditions! I recommend "
        "starting with the 50/30/20 rule: 50% for essentials (rent, groceries, "
        "transport), 30% for lifestyle and 20% for savings and debt repayment. "
        "Keep an emergency fund for unexpected costs.",
    ),
    (
        ("invest", "save"),
        "Smart thinking! A Tax-Free Savings Account (R36,000 annual limit) and "
        "low-cost JSE Top 40 index funds are good places to start. I suggest "
        "setting up a monthly debit order of R500 so saving happens automatically.",
    ),
)
DEFAULT_REPLY = (
    "Hi there! I'm your South African financial assistant. I can help with "
    "budgeting, local banking, investments and even crypto options for "
    "unbanked users. What would you like to explore today?"
)


class MockAdapter(ProviderAdapter):
    """Deterministic adapter that never touches the network."""

    def __init__(self, descriptor: ProviderDescriptor, **_: object) -> None:
        self._descriptor = descriptor
        self._delay_s = float(descriptor.metadata.get("delay_s", 0.0))

    @property
    def provider_id(self) -> str:
        return self._descriptor.provider_id

    async def call(self, request: CanonicalRequest) -> CallResult:
        if self._delay_s:
            await asyncio.sleep(self._delay_s)
        return CallResult.success(
            CanonicalResponse(
                message=self.reply_for(request),
                provider=self.provider_id,
                metadata=ResponseMetadata(
                    model=self._descriptor.model or "mock",
                    tokens=0,
                    confidence=self._descriptor.confidence,
                ),
            )
        )

    @staticmethod
    def reply_for(request: CanonicalRequest) -> str:
        # The financial summary precedes the message, separated by a blank line
        latest = (request.user_message or request.prompt).rsplit("\n\n", 1)[-1].lower()
        for keywords, reply in CANNED_REPLIES:
            if any(k in latest for k in keywords):
                return reply
        return DEFAULT_REPLY
