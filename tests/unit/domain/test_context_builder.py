"""Tests for prompt assembly: truncation, financial summary, determinism."""

from __future__ import annotations

import pytest

from chat_gateway.domain.enums import Role
from chat_gateway.domain.models import (
    ConversationTurn,
    Expense,
    FinancialContext,
    SavingsGoal,
)
from chat_gateway.domain.services.context_builder import ContextBuilder
from chat_gateway.domain.services.personas import PRIVACY_NOTE, system_preamble


@pytest.fixture
def builder() -> ContextBuilder:
    return ContextBuilder(history_window=10)


class TestBuild:
    def test_identical_inputs_identical_prompts(self, builder, sample_history, sample_context) -> None:
        first = builder.build(sample_history, sample_context, system_preamble())
        second = builder.build(list(sample_history), sample_context, system_preamble())
        assert first == second

    def test_identical_requests(self, builder, sample_history, sample_context) -> None:
        a = builder.build_request("How am I doing?", sample_history, sample_context)
        b = builder.build_request("How am I doing?", sample_history, sample_context)
        assert a == b

    def test_section_order(self, builder, sample_context) -> None:
        prompt = builder.build(
            [ConversationTurn.assistant("Earlier answer"), ConversationTurn.user("Now what?")],
            sample_context,
            "SYSTEM",
        )
        assert prompt.startswith("SYSTEM")
        assert prompt.index("Earlier answer") < prompt.index("Financial context:")
        assert prompt.index("Financial context:") < prompt.index("User: Now what?")
        assert prompt.endswith("Assistant:")

    def test_trailing_assistant_turn_is_history(self, builder) -> None:
        prompt = builder.build([ConversationTurn.user("q"), ConversationTurn.assistant("a")])
        assert "User:" not in prompt
        assert "user: q\nassistant: a" in prompt

    def test_no_context_no_summary(self, builder, sample_history) -> None:
        prompt = builder.build(sample_history)
        assert "Financial context" not in prompt

    def test_request_renditions_agree(self, builder, sample_history, sample_context) -> None:
        req = builder.build_request("Latest?", sample_history, sample_context, "SYS", max_tokens=77)
        assert req.max_tokens == 77
        assert req.system_prompt == "SYS"
        assert req.user_message.endswith("Latest?")
        assert "R1500.00" in req.user_message
        assert req.history == tuple(sample_history)
        assert "User: Latest?" in req.prompt


class TestTruncation:
    @pytest.mark.parametrize("window,expected", [(0, []), (1, ["t9"]), (3, ["t7", "t8", "t9"])])
    def test_keeps_most_recent_in_order(self, window, expected) -> None:
        turns = [ConversationTurn.user(f"t{i}") for i in range(10)]
        kept = ContextBuilder(history_window=window).truncate(turns)
        assert [t.text for t in kept] == expected

    def test_shorter_history_untouched(self, builder, sample_history) -> None:
        assert builder.truncate(sample_history) == sample_history

    def test_latest_turn_survives_window(self) -> None:
        builder = ContextBuilder(history_window=2)
        turns = [ConversationTurn.user(f"old {i}") for i in range(5)]
        prompt = builder.build([*turns, ConversationTurn.user("newest")])
        assert "User: newest" in prompt
        assert "old 2" not in prompt
        assert "old 3" in prompt and "old 4" in prompt

    def test_negative_window_rejected(self) -> None:
        with pytest.raises(ValueError):
            ContextBuilder(history_window=-1)


class TestSummary:
    def test_balance_and_category(self, builder, sample_context) -> None:
        summary = builder.summarize(sample_context)
        assert "R1500.00" in summary
        assert "food R500.00 (1 expense)" in summary

    def test_top_three_categories_by_spend(self, builder) -> None:
        ctx = FinancialContext(
            recent_expenses=(
                Expense(100, "transport", "2025-07-01"),
                Expense(300, "food", "2025-07-01"),
                Expense(250, "food", "2025-07-02"),
                Expense(400, "rent", "2025-07-01"),
                Expense(50, "airtime", "2025-07-03"),
                Expense(100, "data", "2025-07-03"),
            )
        )
        summary = builder.summarize(ctx)
        assert "food R550.00 (2 expenses), rent R400.00 (1 expense), data R100.00" in summary
        assert "transport" not in summary  # tie with data, loses on name
        assert "airtime" not in summary

    def test_goals_limited_to_two(self, builder) -> None:
        ctx = FinancialContext(
            goals=(
                SavingsGoal("Emergency fund", 10_000, 2_500),
                SavingsGoal("Holiday", 5_000, 1_000),
                SavingsGoal("Car", 80_000, 0),
            )
        )
        summary = builder.summarize(ctx)
        assert "Emergency fund: R2500.00 of R10000.00 (25.0%)" in summary
        assert "Holiday" in summary
        assert "Car" not in summary

    def test_empty_context(self, builder) -> None:
        assert builder.summarize(None) == ""
        assert builder.summarize(FinancialContext()) == ""

    def test_currency_symbol_configurable(self) -> None:
        summary = ContextBuilder(currency_symbol="$").summarize(FinancialContext(balance=12.5))
        assert "$12.50" in summary

    def test_no_consent_adds_privacy_note(self, builder) -> None:
        ctx = FinancialContext(balance=10, data_sharing_consent=False)
        req = builder.build_request("hi", (), ctx, "SYS")
        assert req.system_prompt.endswith(PRIVACY_NOTE)
        assert PRIVACY_NOTE in req.prompt

    def test_consent_given_no_privacy_note(self, builder) -> None:
        ctx = FinancialContext(balance=10, data_sharing_consent=True)
        assert PRIVACY_NOTE not in builder.build_request("hi", (), ctx, "SYS").prompt


class TestModels:
    def test_from_dict_accepts_camel_case(self) -> None:
        ctx = FinancialContext.from_dict(
            {
                "balance": 900,
                "recentExpenses": [{"amount": "20", "category": "coffee", "date": "2025-07-01"}],
                "financialGoals": [{"title": "Bike", "targetAmount": 3000, "currentAmount": 300}],
                "dataSharingConsent": True,
            }
        )
        assert ctx.recent_expenses[0].amount == 20.0
        assert ctx.goals[0].progress_pct == pytest.approx(10.0)
        assert ctx.data_sharing_consent is True

    def test_turn_role_coerced(self) -> None:
        turn = ConversationTurn("assistant", "hi")  # type: ignore[arg-type]
        assert turn.role is Role.ASSISTANT

    def test_unknown_role_rejected(self) -> None:
        with pytest.raises(ValueError):
            ConversationTurn("system", "hi")  # type: ignore[arg-type]
