"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from chat_gateway.domain.models import ConversationTurn, Expense, FinancialContext
from chat_gateway.shared.providers import ChatGateway, GatewayConfig
from chat_gateway.shared.providers.types import ProviderDescriptor
from fakes import FakeClock, StubAdapter, descriptor


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def three_providers() -> list[ProviderDescriptor]:
    return [descriptor("p1", 1), descriptor("p2", 2), descriptor("p3", 3)]


@pytest.fixture
def make_gateway(clock: FakeClock) -> Callable[..., ChatGateway]:
    """Build a gateway over stub adapters; pass descriptors and adapters."""

    def _make(
        providers: list[ProviderDescriptor],
        adapters: list[StubAdapter],
        **config: object,
    ) -> ChatGateway:
        return ChatGateway(
            GatewayConfig(
                providers=providers,
                adapters={a.provider_id: a for a in adapters},
                clock=clock,
                **config,  # type: ignore[arg-type]
            )
        )

    return _make


@pytest.fixture
def sample_history() -> list[ConversationTurn]:
    return [
        ConversationTurn.user("Hi"),
        ConversationTurn.assistant("Hello! How can I help with your money today?"),
        ConversationTurn.user("I overspend on takeaways"),
        ConversationTurn.assistant("Let's look at your food budget."),
    ]


@pytest.fixture
def sample_context() -> FinancialContext:
    return FinancialContext(
        balance=1500,
        recent_expenses=(Expense(amount=500, category="food", date="2025-07-01"),),
    )


_PROVIDER_ENV = (
    "APP_ENV",
    "LLM_PROVIDER_PRIORITY",
    "DEEPSEEK_API_KEY",
    "GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "HUGGINGFACE_API_KEY",
    "OPENROUTER_API_KEY",
    "LOCAL_LLM_ENABLED",
    "MOCK_PROVIDER_ENABLED",
)


@pytest.fixture(autouse=True)
def _clean_provider_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer credentials in the shell from leaking into settings tests."""
    for name in _PROVIDER_ENV:
        monkeypatch.delenv(name, raising=False)
