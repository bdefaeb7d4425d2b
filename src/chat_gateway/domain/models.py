"""Domain value objects — immutable chat and finance payloads.

Conversation turns and financial context are supplied by collaborators
outside the gateway (history store, budget screens) and are read-only here.
Canonical request/response are the single normalised shapes every adapter
translates to and from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from chat_gateway.domain.enums import ActionType, GatewayErrorKind, Role


# ═══════════════════════════════════════════════════════════════
#  Conversation
# ═══════════════════════════════════════════════════════════════
@dataclass(frozen=True, slots=True)
class ConversationTurn:
    """One message in the caller-owned conversation history."""

    role: Role
    text: str

    def __post_init__(self) -> None:
        if not isinstance(self.role, Role):
            object.__setattr__(self, "role", Role(self.role))

    @classmethod
    def user(cls, text: str) -> ConversationTurn:
        return cls(Role.USER, text)

    @classmethod
    def assistant(cls, text: str) -> ConversationTurn:
        return cls(Role.ASSISTANT, text)


# ═══════════════════════════════════════════════════════════════
#  Financial context
# ═══════════════════════════════════════════════════════════════
@dataclass(frozen=True, slots=True)
class Expense:
    amount: float
    category: str
    date: str  # ISO date, as produced by the expense screens


@dataclass(frozen=True, slots=True)
class SavingsGoal:
    title: str
    target_amount: float
    current_amount: float

    @property
    def progress_pct(self) -> float:
        if self.target_amount <= 0:
            return 0.0
        return self.current_amount / self.target_amount * 100


@dataclass(frozen=True, slots=True)
class FinancialContext:
    """Account summary used only to personalise the prompt."""

    balance: float | None = None
    recent_expenses: tuple[Expense, ...] = ()
    goals: tuple[SavingsGoal, ...] = ()
    data_sharing_consent: bool | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "recent_expenses", tuple(self.recent_expenses))
        object.__setattr__(self, "goals", tuple(self.goals))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FinancialContext:
        """Build from the camelCase/snake_case dicts the app screens emit."""
        expenses = data.get("recent_expenses", data.get("recentExpenses")) or []
        goals = data.get("goals", data.get("financialGoals")) or []
        balance = data.get("balance")
        return cls(
            balance=float(balance) if balance is not None else None,
            recent_expenses=tuple(
                Expense(
                    amount=float(e["amount"]),
                    category=str(e["category"]),
                    date=str(e.get("date", "")),
                )
                for e in expenses
            ),
            goals=tuple(
                SavingsGoal(
                    title=str(g["title"]),
                    target_amount=float(g.get("target_amount", g.get("targetAmount", 0))),
                    current_amount=float(g.get("current_amount", g.get("currentAmount", 0))),
                )
                for g in goals
            ),
            data_sharing_consent=data.get(
                "data_sharing_consent", data.get("dataSharingConsent")
            ),
        )


# ═══════════════════════════════════════════════════════════════
#  Canonical request / response
# ═══════════════════════════════════════════════════════════════
@dataclass(frozen=True, slots=True)
class CanonicalRequest:
    """Normalised payload every adapter consumes.

    ``prompt`` is the flattened single-string rendition used by completion
    style providers.  Chat style providers use ``system_prompt``,
    ``history`` and ``user_message`` instead; both renditions carry the
    same content.
    """

    prompt: str
    history: tuple[ConversationTurn, ...]
    max_tokens: int
    system_prompt: str = ""
    user_message: str = ""


@dataclass(frozen=True, slots=True)
class ResponseMetadata:
    model: str
    tokens: int | None = None
    latency_ms: float = 0.0
    confidence: float | None = None
    attempted_providers: tuple[str, ...] = ()
    error_kinds: tuple[GatewayErrorKind, ...] = ()


@dataclass(frozen=True, slots=True)
class CanonicalResponse:
    """The only shape the gateway ever returns, success or fallback."""

    message: str
    provider: str
    metadata: ResponseMetadata
    suggestions: tuple[str, ...] = field(default_factory=tuple)
    action: ActionType | None = None

    @property
    def is_fallback(self) -> bool:
        return self.provider == FALLBACK_PROVIDER_ID


FALLBACK_PROVIDER_ID = "fallback"
