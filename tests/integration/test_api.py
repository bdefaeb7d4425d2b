"""Integration tests for API endpoints using FastAPI TestClient."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from chat_gateway.config import get_settings
from chat_gateway.domain.enums import GatewayErrorKind
from chat_gateway.main import create_app
from chat_gateway.shared.providers import ChatGateway, GatewayConfig
from fakes import StubAdapter, descriptor, failure

BUDGET_REPLY = "I recommend you create a budget with the 50/30/20 rule."


@pytest.fixture
def settings():
    return get_settings(app_env="staging", max_message_length=200)


@pytest.fixture
def adapters() -> dict[str, StubAdapter]:
    return {
        "primary": StubAdapter("primary", failure(GatewayErrorKind.RATE_LIMITED, 429)),
        "backup": StubAdapter("backup", BUDGET_REPLY),
    }


@pytest.fixture
def gateway(adapters) -> ChatGateway:
    return ChatGateway(
        GatewayConfig(
            providers=[
                descriptor("primary", 1, max_consecutive_failures=2),
                descriptor("backup", 2),
            ],
            adapters=adapters,
            max_message_length=200,
        )
    )


@pytest.fixture
def client(settings, gateway):
    with TestClient(create_app(settings, gateway)) as c:
        yield c


class TestHealthEndpoints:
    def test_health_check(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["environment"] == "staging"
        assert data["providers"] == {"primary": "closed", "backup": "closed"}

    def test_metrics_endpoint(self, client):
        client.get("/api/v1/health")
        resp = client.get("/api/v1/metrics")
        assert resp.status_code == 200
        assert b"http_requests_total" in resp.content

    def test_request_id_echoed(self, client):
        resp = client.get("/api/v1/health", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"


class TestChatEndpoint:
    def test_chat_fails_over_and_adds_insights(self, client, adapters):
        resp = client.post(
            "/api/v1/chat",
            json={
                "message": "How do I start budgeting?",
                "history": [{"role": "user", "text": "Hi"}, {"role": "assistant", "text": "Hello!"}],
                "financial_context": {
                    "balance": 1500,
                    "recent_expenses": [{"amount": 500, "category": "food", "date": "2025-07-01"}],
                },
                "persona": "budgeting",
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["provider"] == "backup"
        assert data["message"] == BUDGET_REPLY
        assert data["action"] == "create_budget"
        assert data["is_fallback"] is False
        assert data["metadata"]["attempted_providers"] == ["primary", "backup"]

        prompt = adapters["backup"].requests[0].prompt
        assert "1500" in prompt and "food" in prompt

    def test_chat_fallback_when_everything_fails(self, client, adapters):
        adapters["backup"]._outcomes = [failure(GatewayErrorKind.RATE_LIMITED, 429)]
        resp = client.post("/api/v1/chat", json={"message": "Hello"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["provider"] == "fallback"
        assert data["is_fallback"] is True
        assert data["message"]
        assert data["metadata"]["error_kinds"] == ["rate_limited", "rate_limited"]

    @pytest.mark.parametrize("message", ["   ", "x" * 201])
    def test_invalid_message_is_422(self, client, message):
        resp = client.post("/api/v1/chat", json={"message": message})
        assert resp.status_code == 422
        assert resp.json()["code"] == "VALIDATION_ERROR"

    def test_bad_role_rejected_by_schema(self, client):
        resp = client.post(
            "/api/v1/chat",
            json={"message": "hi", "history": [{"role": "system", "text": "x"}]},
        )
        assert resp.status_code == 422


class TestProviderEndpoints:
    def test_list_and_current(self, client):
        assert client.get("/api/v1/providers").json() == ["primary", "backup"]
        assert client.get("/api/v1/providers/current").json() == {"provider_id": "primary"}

    def test_breaker_opens_then_admin_reset(self, client):
        for _ in range(2):
            client.post("/api/v1/chat", json={"message": "hi"})
        assert client.get("/api/v1/providers/current").json()["provider_id"] == "backup"

        details = {d["provider_id"]: d for d in client.get("/api/v1/providers/details").json()}
        assert details["primary"]["circuit_state"] == "open"

        resp = client.post("/api/v1/providers/primary/reset")
        assert resp.status_code == 200
        assert resp.json() == {"status": "reset", "provider_id": "primary"}
        assert client.get("/api/v1/providers/current").json()["provider_id"] == "primary"

    def test_provider_health(self, client):
        client.post("/api/v1/chat", json={"message": "hi"})
        health = {h["provider_id"]: h for h in client.get("/api/v1/providers/health").json()}
        assert health["primary"]["failures_by_kind"] == {"rate_limited": 1}
        assert health["backup"]["total_successes"] == 1

    def test_reset_unknown_provider_is_404(self, client):
        resp = client.post("/api/v1/providers/nope/reset")
        assert resp.status_code == 404
        assert resp.json()["code"] == "PROVIDER_NOT_FOUND"
