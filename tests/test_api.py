"""Tests for the FastAPI app in stancechat/api.py."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from config.config_loader import load_config
from stancechat.api import create_app
from stancechat.errors import EmptyUpstreamResponseError, UpstreamError
from stancechat.services import build_services
from tests.conftest import MockProvider


@pytest.fixture
def mock_client(sample_app_config) -> TestClient:
    """App with no credential configured."""
    return TestClient(create_app(build_services(sample_app_config)))


@pytest.fixture
def live_provider() -> MockProvider:
    return MockProvider("That assumes growth pays for the cuts.")


@pytest.fixture
def live_client(sample_app_config, live_provider) -> TestClient:
    return TestClient(create_app(build_services(sample_app_config, provider=live_provider)))


def test_chat_mock_reply_end_to_end(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("STANCECHAT_SETTINGS", raising=False)
    client = TestClient(create_app(build_services(load_config())))

    response = client.post("/chat", json={"message": "Tax cuts help everyone", "mode": "contrarian"})

    assert response.status_code == 200
    assert response.json()["response"].startswith(
        "I'd challenge that assumption, but I'm not properly configured yet. "
    )


def test_chat_live_reply(live_client, live_provider):
    response = live_client.post("/chat", json={"message": "Tax cuts help everyone", "mode": "contrarian"})
    assert response.status_code == 200
    assert response.json() == {"response": "That assumes growth pays for the cuts."}
    live_provider.generate.assert_awaited_once()


def test_chat_debate_turn(mock_client):
    response = mock_client.post(
        "/chat",
        json={"message": "AI-2 speaks on: Cats", "mode": "debate", "topic": "Cats", "speaker": "AI-2"},
    )
    assert response.status_code == 200
    assert response.json()["response"].startswith("AI-2:")


def test_invalid_json(mock_client):
    response = mock_client.post("/chat", content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON"}


def test_empty_body_is_invalid_json(mock_client):
    response = mock_client.post("/chat", content=b"")
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON"}


def test_non_object_body(mock_client):
    response = mock_client.post("/chat", json=["hello"])
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


def test_empty_message(mock_client):
    response = mock_client.post("/chat", json={"message": "", "mode": "contrarian"})
    assert response.status_code == 400
    assert response.json() == {"error": "Message content is required"}


def test_invalid_mode(mock_client):
    response = mock_client.post("/chat", json={"message": "hi", "mode": "bogus"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid mode specified"}


def test_debate_turn_missing_topic(mock_client):
    response = mock_client.post("/chat", json={"message": "", "mode": "debate", "topic": "", "speaker": "AI-1"})
    assert response.status_code == 400
    assert response.json() == {"error": "Please enter a debate topic"}


def test_upstream_status_and_body_surfaced(live_client, live_provider):
    live_provider.generate = AsyncMock(
        side_effect=UpstreamError("Failed to communicate with AI service", 429, '{"error":"rate_limited"}')
    )
    response = live_client.post("/chat", json={"message": "hi", "mode": "agreeable"})
    assert response.status_code == 429
    assert response.json() == {
        "error": "Failed to communicate with AI service",
        "details": '{"error":"rate_limited"}',
    }


def test_empty_upstream_response_is_500(live_client, live_provider):
    live_provider.generate = AsyncMock(side_effect=EmptyUpstreamResponseError())
    response = live_client.post("/chat", json={"message": "hi", "mode": "agreeable"})
    assert response.status_code == 500
    assert response.json() == {"error": "No response text received from API"}


def test_transport_failure_is_500_with_detail(live_client, live_provider):
    live_provider.generate = AsyncMock(side_effect=OSError("connection refused"))
    response = live_client.post("/chat", json={"message": "hi", "mode": "agreeable"})
    assert response.status_code == 500
    assert response.json()["details"] == "connection refused"


def test_health_without_key(mock_client):
    response = mock_client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["hasApiKey"] is False
    datetime.fromisoformat(body["timestamp"])


def test_health_with_key(live_client):
    assert live_client.get("/health").json()["hasApiKey"] is True


def test_options_returns_empty_200(mock_client):
    response = mock_client.options("/chat")
    assert response.status_code == 200
    assert response.content == b""


def test_cors_preflight(mock_client):
    response = mock_client.options(
        "/chat",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "POST, GET, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type"


def test_cors_preflight_with_extra_request_headers(mock_client):
    response = mock_client.options(
        "/chat",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization",
        },
    )
    assert response.status_code == 200
    assert response.content == b""


def test_options_on_unknown_path_is_empty_200(mock_client):
    response = mock_client.options("/anything/at/all")
    assert response.status_code == 200
    assert response.content == b""


def test_cors_header_on_simple_request(mock_client):
    response = mock_client.get("/health", headers={"Origin": "http://localhost:3000"})
    assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.parametrize("method, path", [("GET", "/nope"), ("POST", "/health"), ("GET", "/chat")])
def test_unmatched_route_is_json_404(mock_client, method, path):
    response = mock_client.request(method, path)
    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}
