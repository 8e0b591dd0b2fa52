"""Pytest fixtures: test client, test DB (in-memory SQLite), sahte AI gateway."""
import json
import os
import uuid

import httpx
import pytest
from fastapi.testclient import TestClient
from openai import OpenAI

# Test ortamında in-memory SQLite (app import edilmeden önce set edilmeli)
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("AI_GATEWAY_API_KEY", "")
os.environ.setdefault("ANALYSIS_MODE", "remote")
# Offline modda yapay gecikme olmasın
os.environ.setdefault("MOCK_LATENCY_SECONDS", "0")
os.environ.setdefault("SUMMARY_DELAY_SECONDS", "0")
# Rate limit yüksek olsun ki tüm testler geçebilsin
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "10000")

from app.core.config import settings
from app.main import app
from app.services import analyze


@pytest.fixture(scope="function")
def client():
    """TestClient; lifespan ile in-memory DB ve tablolar hazır olur."""
    with TestClient(app) as c:
        yield c


def _register_and_login(c: TestClient, display_name: str = "") -> dict:
    email = f"user-{uuid.uuid4().hex[:10]}@example.com"
    r = c.post("/auth/register", data={"email": email, "password": "test123456", "display_name": display_name})
    assert r.status_code == 200, f"Register failed: {r.status_code} {r.text}"
    r = c.post("/auth/login", data={"email": email, "password": "test123456"})
    assert r.status_code == 200, f"Login failed: {r.status_code} {r.text}"
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def auth_headers(client: TestClient) -> dict:
    """Her test için yeni kullanıcı; geçmiş ve profil testler arasında karışmaz."""
    return _register_and_login(client, display_name="Test User")


@pytest.fixture
def make_user(client: TestClient):
    return lambda display_name="": _register_and_login(client, display_name)


def completion_body(content: str | None) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "test-model",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


class FakeGateway:
    """OpenAI uyumlu /chat/completions taklidi (httpx.MockTransport)."""

    def __init__(self) -> None:
        self.status = 200
        self.content: str | None = json.dumps(
            {
                "productName": "Oat Crunch Cereal",
                "healthScore": 6,
                "summary": "A fairly balanced cereal with some added sugar.",
                "concerns": ["Added sugar"],
                "insights": [
                    {
                        "name": "Cane Sugar",
                        "explanation": "Refined sweetener.",
                        "healthImpact": "concern",
                        "impacts": ["Raises blood sugar"],
                        "confidence": "high",
                    }
                ],
                "recommendations": ["Pair with protein"],
                "allergenAlerts": ["Gluten"],
                "drugInteractions": [],
            }
        )
        self.requests: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.status != 200:
            return httpx.Response(self.status, json={"error": {"message": "upstream error"}})
        return httpx.Response(200, json=completion_body(self.content))

    def client(self) -> OpenAI:
        return OpenAI(
            api_key="test-key",
            base_url="https://gateway.test/v1",
            max_retries=0,
            http_client=httpx.Client(transport=httpx.MockTransport(self.handler)),
        )


@pytest.fixture
def fake_gateway(monkeypatch) -> FakeGateway:
    gateway = FakeGateway()
    client = gateway.client()
    monkeypatch.setattr(settings, "ai_gateway_api_key", "test-key")
    monkeypatch.setattr(analyze, "_get_client", lambda: client)
    return gateway
