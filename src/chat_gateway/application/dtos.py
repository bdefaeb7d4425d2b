"""Data Transfer Objects — Pydantic models for API boundaries.

DTOs handle serialisation, validation, and documentation.  They live in the
application layer because they are *not* domain objects: they adapt between
the external world and the domain.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from chat_gateway.domain.enums import ActionType, GatewayErrorKind, Persona, ProviderKind, Role
from chat_gateway.domain.models import (
    CanonicalResponse,
    ConversationTurn,
    Expense,
    FinancialContext,
    SavingsGoal,
)


# ═══════════════════════════════════════════════════════════════
#  Common
# ═══════════════════════════════════════════════════════════════
class ErrorResponse(BaseModel):
    code: str
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    environment: str = "development"
    providers: dict[str, str] = Field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════
#  Chat
# ═══════════════════════════════════════════════════════════════
class TurnDTO(BaseModel):
    role: Role
    text: str


class ExpenseDTO(BaseModel):
    amount: float
    category: str
    date: str = ""


class GoalDTO(BaseModel):
    title: str
    target_amount: float = Field(..., ge=0)
    current_amount: float = Field(0, ge=0)


class FinancialContextDTO(BaseModel):
    balance: float | None = None
    recent_expenses: list[ExpenseDTO] = Field(default_factory=list)
    goals: list[GoalDTO] = Field(default_factory=list)
    data_sharing_consent: bool | None = None

    def to_domain(self) -> FinancialContext:
        return FinancialContext(
            balance=self.balance,
            recent_expenses=tuple(
                Expense(amount=e.amount, category=e.category, date=e.date)
                for e in self.recent_expenses
            ),
            goals=tuple(
                SavingsGoal(
                    title=g.title,
                    target_amount=g.target_amount,
                    current_amount=g.current_amount,
                )
                for g in self.goals
            ),
            data_sharing_consent=self.data_sharing_consent,
        )


class ChatRequest(BaseModel):
    # Length limits are enforced by the gateway so REST and library callers agree
    message: str
    history: list[TurnDTO] = Field(default_factory=list)
    financial_context: FinancialContextDTO | None = None
    persona: Persona | None = None
    preferred_provider: str | None = None

    def history_turns(self) -> list[ConversationTurn]:
        return [ConversationTurn(t.role, t.text) for t in self.history]


class ResponseMetadataDTO(BaseModel):
    model: str
    tokens: int | None = None
    latency_ms: float
    confidence: float | None = None
    attempted_providers: list[str] = Field(default_factory=list)
    error_kinds: list[GatewayErrorKind] = Field(default_factory=list)


class ChatResponse(BaseModel):
    message: str
    provider: str
    metadata: ResponseMetadataDTO
    suggestions: list[str] = Field(default_factory=list)
    action: ActionType | None = None
    is_fallback: bool = False

    @classmethod
    def from_domain(cls, response: CanonicalResponse) -> ChatResponse:
        meta = response.metadata
        return cls(
            message=response.message,
            provider=response.provider,
            metadata=ResponseMetadataDTO(
                model=meta.model,
                tokens=meta.tokens,
                latency_ms=round(meta.latency_ms, 2),
                confidence=meta.confidence,
                attempted_providers=list(meta.attempted_providers),
                error_kinds=list(meta.error_kinds),
            ),
            suggestions=list(response.suggestions),
            action=response.action,
            is_fallback=response.is_fallback,
        )


# ═══════════════════════════════════════════════════════════════
#  Providers
# ═══════════════════════════════════════════════════════════════
class CurrentProviderResponse(BaseModel):
    provider_id: str


class ProviderDetailResponse(BaseModel):
    provider_id: str
    name: str
    kind: ProviderKind
    model: str
    priority: int
    enabled: bool
    circuit_state: str


class ProviderHealthResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    provider_id: str
    enabled: bool
    total_requests: int
    total_successes: int
    total_failures: int
    total_skipped: int
    success_rate: float
    latency_p50_ms: float
    latency_p95_ms: float
    latency_p99_ms: float
    failures_by_kind: dict[str, int]
    last_error: str | None = None
    circuit_state: str
    consecutive_failures: int


class ProviderResetResponse(BaseModel):
    status: str = "reset"
    provider_id: str
