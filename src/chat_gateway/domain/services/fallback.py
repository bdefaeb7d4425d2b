"""Synthesized reply used when every provider was skipped or failed.

The wording depends only on what was attempted and which error kinds were
seen, so identical outcomes always produce identical replies.
"""

from __future__ import annotations

from typing import Sequence

from chat_gateway.domain.enums import GatewayErrorKind
from chat_gateway.domain.models import (
    FALLBACK_PROVIDER_ID,
    CanonicalResponse,
    ResponseMetadata,
)

NOT_CONNECTED_MESSAGE = (
    "I'm not able to reach any of my AI services right now. "
    "Please try again in a minute."
)
RATE_LIMITED_MESSAGE = (
    "I'm currently receiving too many requests. "
    "Please wait a moment and try again."
)
NETWORK_MESSAGE = (
    "I'm unable to connect to my AI services right now (network error). "
    "Please check your connection and try again."
)
GENERIC_MESSAGE = (
    "Sorry, I'm having technical difficulties. I tried {count} AI service(s) "
    "but none could answer. Please try again shortly."
)

_NETWORK_KINDS = frozenset({GatewayErrorKind.TIMEOUT})


def compose_fallback(
    attempted: Sequence[str],
    error_kinds: Sequence[GatewayErrorKind],
    *,
    latency_ms: float = 0.0,
    network_failures: int = 0,
) -> CanonicalResponse:
    """Build the clearly-labelled ``provider="fallback"`` reply.

    ``network_failures`` counts HTTP errors that never produced a status
    (connection refused, DNS); together with timeouts they select the
    network wording.
    """
    if not attempted:
        message = NOT_CONNECTED_MESSAGE
        suggestions = ("Try again in a minute", "Check your AI provider settings")
    elif GatewayErrorKind.RATE_LIMITED in error_kinds:
        message = RATE_LIMITED_MESSAGE
        suggestions = ("Wait 30-60 seconds", "Send fewer messages in a row")
    elif _all_network(error_kinds, network_failures):
        message = NETWORK_MESSAGE
        suggestions = ("Check your internet connection", "Try again in a few moments")
    else:
        message = GENERIC_MESSAGE.format(count=len(attempted))
        suggestions = (
            "Try again in a few moments",
            "Contact support if the problem persists",
        )

    return CanonicalResponse(
        message=message,
        provider=FALLBACK_PROVIDER_ID,
        metadata=ResponseMetadata(
            model=FALLBACK_PROVIDER_ID,
            tokens=0,
            latency_ms=latency_ms,
            attempted_providers=tuple(attempted),
            error_kinds=tuple(error_kinds),
        ),
        suggestions=suggestions,
    )


def _all_network(error_kinds: Sequence[GatewayErrorKind], network_failures: int) -> bool:
    if not error_kinds:
        return False
    timeouts = sum(1 for k in error_kinds if k in _NETWORK_KINDS)
    return timeouts + network_failures == len(error_kinds)
