"""Tests for settings and settings-driven gateway wiring."""

from __future__ import annotations

import warnings

import pytest

from chat_gateway.adapters.outbound.llm import (
    GeminiAdapter,
    MockAdapter,
    OpenAICompatibleAdapter,
    build_provider_descriptors,
)
from chat_gateway.config import Environment, get_settings
from chat_gateway.dependencies import build_gateway, build_gateway_config
from chat_gateway.domain.enums import ProviderKind


class TestSettings:
    def test_defaults(self) -> None:
        s = get_settings()
        assert s.circuit_breaker_failure_threshold == 3
        assert s.circuit_breaker_cooldown_seconds == 30.0
        assert s.history_window == 10
        assert s.currency_symbol == "R"

    def test_log_level_upper_cased(self) -> None:
        assert get_settings(log_level="debug").log_level == "DEBUG"

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("CIRCUIT_BREAKER_FAILURE_THRESHOLD", "7")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        s = get_settings()
        assert s.circuit_breaker_failure_threshold == 7
        assert s.openai_api_key == "sk-env"

    def test_invalid_threshold_rejected(self) -> None:
        with pytest.raises(ValueError):
            get_settings(circuit_breaker_failure_threshold=0)

    def test_production_without_providers_warns(self) -> None:
        with pytest.warns(UserWarning, match="fallback reply"):
            get_settings(app_env="production")

    def test_production_with_provider_is_quiet(self) -> None:
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            get_settings(app_env="production", gemini_api_key="AIza-test")


class TestProviderDescriptors:
    def test_default_order(self) -> None:
        ids = [d.provider_id for d in build_provider_descriptors(get_settings())]
        assert ids == [
            "deepseek",
            "gemini",
            "openai",
            "anthropic",
            "huggingface",
            "openrouter",
            "local",
            "mock",
        ]

    def test_enabled_follows_credentials(self) -> None:
        s = get_settings(
            app_env=Environment.STAGING,
            openai_api_key="sk-1",
            local_llm_enabled=True,
        )
        enabled = [d.provider_id for d in build_provider_descriptors(s) if d.enabled]
        assert enabled == ["openai", "local"]

    def test_mock_only_in_development_unless_forced(self) -> None:
        def mock_enabled(**kw) -> bool:
            return next(d for d in build_provider_descriptors(get_settings(**kw)) if d.provider_id == "mock").enabled

        assert mock_enabled(app_env="development") is True
        assert mock_enabled(app_env="staging") is False
        assert mock_enabled(app_env="staging", mock_provider_enabled=True) is True

    def test_custom_priority_with_unknown_and_duplicates(self) -> None:
        s = get_settings(llm_provider_priority="openai, bogus, gemini, openai")
        descriptors = build_provider_descriptors(s)
        ids = [d.provider_id for d in descriptors]
        assert ids[:3] == ["openai", "gemini", "deepseek"]
        assert [d.priority for d in descriptors] == list(range(1, 9))

    def test_breaker_and_timeouts_propagate(self) -> None:
        s = get_settings(
            circuit_breaker_failure_threshold=5,
            circuit_breaker_cooldown_seconds=12,
            provider_timeout_seconds=20,
            local_llm_timeout_seconds=60,
        )
        by_id = {d.provider_id: d for d in build_provider_descriptors(s)}
        assert by_id["openai"].max_consecutive_failures == 5
        assert by_id["openai"].cooldown_s == 12
        assert by_id["openai"].timeout_s == 20
        assert by_id["local"].timeout_s == 60
        assert by_id["gemini"].kind == ProviderKind.GEMINI


class TestGatewayWiring:
    def test_config_has_adapter_per_provider(self) -> None:
        config = build_gateway_config(get_settings(gemini_api_key="AIza-x", history_window=4))
        assert set(config.adapters) == {d.provider_id for d in config.providers}
        assert isinstance(config.adapters["gemini"], GeminiAdapter)
        assert isinstance(config.adapters["openrouter"], OpenAICompatibleAdapter)
        assert isinstance(config.adapters["mock"], MockAdapter)
        assert config.history_window == 4

    @pytest.mark.asyncio
    async def test_development_gateway_answers_with_mock(self) -> None:
        gateway = build_gateway(get_settings(app_env="development"))
        try:
            assert gateway.get_available_providers() == ["mock"]
            resp = await gateway.send_message("Help me budget")
            assert resp.provider == "mock"
        finally:
            await gateway.close()
