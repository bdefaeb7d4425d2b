"""Context builder — turns conversation history and financial context into a
bounded, deterministic prompt payload.

Policy:
    * only the most recent ``history_window`` earlier turns are kept
      (oldest dropped first, order preserved);
    * an optional financial context is summarised (balance, top spending
      categories, goals) and placed directly ahead of the latest user turn;
    * identical inputs always render identical prompts.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Sequence

from chat_gateway.domain.enums import Role
from chat_gateway.domain.models import (
    CanonicalRequest,
    ConversationTurn,
    FinancialContext,
)
from chat_gateway.domain.services.personas import PRIVACY_NOTE

DEFAULT_HISTORY_WINDOW = 10
TOP_CATEGORIES = 3
TOP_GOALS = 2


class ContextBuilder:
    """Pure prompt assembly; holds configuration only, never per-call state."""

    def __init__(
        self,
        *,
        history_window: int = DEFAULT_HISTORY_WINDOW,
        currency_symbol: str = "R",
    ) -> None:
        if history_window < 0:
            raise ValueError("history_window must be >= 0")
        self._window = history_window
        self._currency = currency_symbol

    @property
    def history_window(self) -> int:
        return self._window

    # ── Public API ───────────────────────────────────────────
    def build(
        self,
        history: Sequence[ConversationTurn],
        financial_context: FinancialContext | None = None,
        system_preamble: str = "",
    ) -> str:
        """Render the flattened prompt.

        The last element of ``history`` is treated as the latest turn when
        it was spoken by the user; everything before it is truncated to
        the history window.
        """
        earlier, latest = self._split_latest(history)
        earlier = self.truncate(earlier)

        sections: list[str] = []
        system = self._system_text(system_preamble, financial_context)
        if system:
            sections.append(system)
        if earlier:
            lines = "\n".join(f"{t.role.value}: {t.text}" for t in earlier)
            sections.append(f"Conversation history:\n{lines}")
        summary = self.summarize(financial_context)
        if summary:
            sections.append(summary)
        if latest is not None:
            sections.append(f"User: {latest.text}")
        sections.append("Assistant:")
        return "\n\n".join(sections)

    def build_request(
        self,
        message: str,
        history: Sequence[ConversationTurn] = (),
        financial_context: FinancialContext | None = None,
        system_preamble: str = "",
        *,
        max_tokens: int = 500,
    ) -> CanonicalRequest:
        turns = [*history, ConversationTurn.user(message)]
        prompt = self.build(turns, financial_context, system_preamble)

        summary = self.summarize(financial_context)
        user_message = f"{summary}\n\n{message}" if summary else message

        return CanonicalRequest(
            prompt=prompt,
            history=tuple(self.truncate(history)),
            max_tokens=max_tokens,
            system_prompt=self._system_text(system_preamble, financial_context),
            user_message=user_message,
        )

    def truncate(self, history: Sequence[ConversationTurn]) -> list[ConversationTurn]:
        if self._window == 0:
            return []
        return list(history)[-self._window :]

    def summarize(self, ctx: FinancialContext | None) -> str:
        """Compact natural-language account summary, or "" when absent."""
        if ctx is None:
            return ""

        lines: list[str] = []
        if ctx.balance is not None:
            lines.append(f"- Current balance: {self._money(ctx.balance)}")

        if ctx.recent_expenses:
            totals: dict[str, float] = defaultdict(float)
            counts: dict[str, int] = defaultdict(int)
            for expense in ctx.recent_expenses:
                totals[expense.category] += expense.amount
                counts[expense.category] += 1
            ranked = sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))
            parts = [
                f"{category} {self._money(total)} ({counts[category]} "
                f"{'expense' if counts[category] == 1 else 'expenses'})"
                for category, total in ranked[:TOP_CATEGORIES]
            ]
            lines.append(f"- Top spending categories: {', '.join(parts)}")

        for goal in ctx.goals[:TOP_GOALS]:
            lines.append(
                f"- Goal {goal.title}: {self._money(goal.current_amount)} of "
                f"{self._money(goal.target_amount)} ({goal.progress_pct:.1f}%)"
            )

        if not lines:
            return ""
        return "Financial context:\n" + "\n".join(lines)

    # ── Internals ────────────────────────────────────────────
    @staticmethod
    def _split_latest(
        history: Sequence[ConversationTurn],
    ) -> tuple[list[ConversationTurn], ConversationTurn | None]:
        turns = list(history)
        if turns and turns[-1].role == Role.USER:
            return turns[:-1], turns[-1]
        return turns, None

    @staticmethod
    def _system_text(preamble: str, ctx: FinancialContext | None) -> str:
        if ctx is not None and ctx.data_sharing_consent is False:
            return f"{preamble}\n\n{PRIVACY_NOTE}" if preamble else PRIVACY_NOTE
        return preamble

    def _money(self, amount: float) -> str:
        return f"{self._currency}{amount:.2f}"
