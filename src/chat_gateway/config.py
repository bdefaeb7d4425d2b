"""Chat Gateway — Application Configuration."""

from __future__ import annotations

import enum
import warnings
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PRIORITY = "deepseek,gemini,openai,anthropic,huggingface,openrouter,local,mock"


class Environment(str, enum.Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Centralised, validated configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────
    app_name: str = "chat-gateway"
    app_env: Environment = Environment.DEVELOPMENT
    app_debug: bool = False
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:8081"])

    # ── Providers ────────────────────────────────────────────
    deepseek_api_key: str = ""
    deepseek_base_url: str = "https://api.deepseek.com/v1"
    deepseek_model: str = "deepseek-chat"

    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-1.5-flash"

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"

    anthropic_api_key: str = ""
    anthropic_base_url: str = "https://api.anthropic.com/v1"
    anthropic_model: str = "claude-3-5-haiku-latest"

    huggingface_api_key: str = ""
    huggingface_base_url: str = "https://api-inference.huggingface.co/models"
    huggingface_model: str = "HuggingFaceH4/zephyr-7b-beta"

    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "openai/gpt-4o-mini"

    local_llm_enabled: bool = False
    local_llm_url: str = "http://localhost:11434/api"
    local_llm_model: str = "llama3.2:3b"

    mock_provider_enabled: bool = False

    # ── Provider Resilience ──────────────────────────────────
    llm_provider_priority: str = DEFAULT_PRIORITY

    # Circuit breaker
    circuit_breaker_failure_threshold: int = Field(default=3, ge=1)
    circuit_breaker_cooldown_seconds: float = Field(default=30.0, ge=0)

    # Per-attempt timeouts
    provider_timeout_seconds: float = Field(default=30.0, gt=0)
    local_llm_timeout_seconds: float = Field(default=45.0, gt=0)

    # ── Conversation ─────────────────────────────────────────
    history_window: int = Field(default=10, ge=0)
    max_tokens: int = Field(default=500, ge=1)
    max_message_length: int = Field(default=5000, ge=1)
    currency_symbol: str = "R"

    # ── Observability ────────────────────────────────────────
    prometheus_enabled: bool = True

    # ── Derived helpers ──────────────────────────────────────
    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION

    @property
    def mock_enabled(self) -> bool:
        return self.mock_provider_enabled or self.app_env == Environment.DEVELOPMENT

    @property
    def has_real_provider(self) -> bool:
        return self.local_llm_enabled or any(
            (
                self.deepseek_api_key,
                self.gemini_api_key,
                self.openai_api_key,
                self.anthropic_api_key,
                self.huggingface_api_key,
                self.openrouter_api_key,
            )
        )

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def _warn_production_without_providers(self) -> Settings:
        if self.is_production and not self.has_real_provider:
            warnings.warn(
                "no provider credentials configured in production; every chat "
                "request will receive the fallback reply",
                UserWarning,
                stacklevel=2,
            )
        return self


def get_settings(**overrides: Any) -> Settings:
    """Factory that allows test-time overrides."""
    return Settings(**overrides)
