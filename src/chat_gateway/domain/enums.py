"""Domain enumerations for the chat gateway."""

from __future__ import annotations

import enum


class Role(str, enum.Enum):
    """Speaker of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class ProviderKind(str, enum.Enum):
    """Closed set of upstream wire protocols an adapter can speak."""

    OPENAI_COMPATIBLE = "openai_compatible"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    OLLAMA = "ollama"
    HUGGINGFACE = "huggingface"
    MOCK = "mock"


class GatewayErrorKind(str, enum.Enum):
    """Why a single provider attempt failed."""

    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    RATE_LIMITED = "rate_limited"
    MALFORMED_RESPONSE = "malformed_response"


class ActionType(str, enum.Enum):
    """Follow-up action the UI may offer after a reply."""

    CREATE_BUDGET = "create_budget"
    SET_GOAL = "set_goal"
    TRACK_EXPENSE = "track_expense"
    EDUCATE = "educate"


class Persona(str, enum.Enum):
    """Specialist assistant personas selectable per message."""

    BANKING = "banking"
    BUDGETING = "budgeting"
    SAVINGS = "savings"
    EDUCATION = "education"
    CRYPTO = "crypto"
    INCOME = "income"
