"""Tests for response insights, fallback composition and personas."""

from __future__ import annotations

import pytest

from chat_gateway.domain.enums import ActionType, GatewayErrorKind, Persona
from chat_gateway.domain.services.fallback import (
    GENERIC_MESSAGE,
    NETWORK_MESSAGE,
    NOT_CONNECTED_MESSAGE,
    RATE_LIMITED_MESSAGE,
    compose_fallback,
)
from chat_gateway.domain.services.personas import (
    DEFAULT_INTRO,
    GUIDELINES,
    PERSONA_INTROS,
    system_preamble,
)
from chat_gateway.domain.services.response_insights import detect_action, extract_suggestions


# ═══════════════════════════════════════════════════════════════
#  Response insights
# ═══════════════════════════════════════════════════════════════
class TestDetectAction:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Let's create a budget together.", ActionType.CREATE_BUDGET),
            ("You can set up a budget in the app.", ActionType.CREATE_BUDGET),
            ("Why not set a goal for December?", ActionType.SET_GOAL),
            ("A savings goal keeps you motivated.", ActionType.SET_GOAL),
            ("Track every expense for a week.", ActionType.TRACK_EXPENSE),
            ("Want to learn more about ETFs?", ActionType.EDUCATE),
            ("Interest is the cost of borrowing.", None),
        ],
    )
    def test_detects(self, text: str, expected: ActionType | None) -> None:
        assert detect_action(text) == expected

    def test_budget_cue_wins_over_goal(self) -> None:
        assert detect_action("Create a budget, then set a goal.") == ActionType.CREATE_BUDGET


class TestExtractSuggestions:
    def test_lead_in_phrases(self) -> None:
        text = (
            "I suggest saving ten percent of your salary. "
            "You could also cancel unused subscriptions! "
            "Perhaps review insurance premiums yearly? "
            "Maybe compare bank fees before switching."
        )
        assert extract_suggestions(text) == (
            "saving ten percent of your salary",
            "also cancel unused subscriptions",
            "review insurance premiums yearly",
        )

    def test_short_fragments_ignored(self) -> None:
        assert "it" not in extract_suggestions("Maybe it. Consider it.")

    def test_falls_back_to_actionable_sentences(self) -> None:
        text = (
            "Inflation is high right now. Start an emergency fund. "
            "Review your debit orders monthly. Prices rise every year."
        )
        assert extract_suggestions(text) == (
            "Start an emergency fund.",
            "Review your debit orders monthly.",
        )

    def test_nothing_actionable(self) -> None:
        assert extract_suggestions("Hello there. Nice weather today.") == ()


# ═══════════════════════════════════════════════════════════════
#  Fallback reply
# ═══════════════════════════════════════════════════════════════
class TestComposeFallback:
    def test_nothing_attempted(self) -> None:
        resp = compose_fallback([], [])
        assert resp.message == NOT_CONNECTED_MESSAGE
        assert resp.provider == "fallback"
        assert resp.is_fallback

    def test_rate_limit_wins(self) -> None:
        resp = compose_fallback(
            ["a", "b"], [GatewayErrorKind.HTTP_ERROR, GatewayErrorKind.RATE_LIMITED]
        )
        assert resp.message == RATE_LIMITED_MESSAGE

    def test_timeouts_and_connection_errors_are_network(self) -> None:
        resp = compose_fallback(
            ["a", "b"],
            [GatewayErrorKind.TIMEOUT, GatewayErrorKind.HTTP_ERROR],
            network_failures=1,
        )
        assert resp.message == NETWORK_MESSAGE

    def test_generic_mentions_attempt_count(self) -> None:
        resp = compose_fallback(
            ["a", "b", "c"],
            [GatewayErrorKind.HTTP_ERROR, GatewayErrorKind.TIMEOUT, GatewayErrorKind.MALFORMED_RESPONSE],
        )
        assert resp.message == GENERIC_MESSAGE.format(count=3)
        assert "3" in resp.message

    def test_metadata_and_determinism(self) -> None:
        args = (["a"], [GatewayErrorKind.MALFORMED_RESPONSE])
        first = compose_fallback(*args, latency_ms=12.0)
        assert first == compose_fallback(*args, latency_ms=12.0)
        assert first.metadata.model == "fallback"
        assert first.metadata.tokens == 0
        assert first.metadata.attempted_providers == ("a",)
        assert first.metadata.error_kinds == (GatewayErrorKind.MALFORMED_RESPONSE,)
        assert first.suggestions


# ═══════════════════════════════════════════════════════════════
#  Personas
# ═══════════════════════════════════════════════════════════════
class TestPersonas:
    def test_default(self) -> None:
        assert system_preamble() == f"{DEFAULT_INTRO}\n\n{GUIDELINES}"

    @pytest.mark.parametrize("persona", list(Persona))
    def test_every_persona_has_intro(self, persona: Persona) -> None:
        preamble = system_preamble(persona)
        assert preamble.startswith(PERSONA_INTROS[persona])
        assert GUIDELINES in preamble
