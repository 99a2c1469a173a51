"""Unit tests for the HTTP API routes."""

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tastychat.api.app import create_app
from tastychat.api.dependencies import get_chat_service
from tastychat.chat import ChatService, create_chat_service
from tastychat.config import Settings
from tastychat.providers.embedding import MockEmbeddingProvider
from tastychat.providers.llm import MockLLMExecutor


@pytest.fixture
def chat_service() -> ChatService:
    """Service wired with mock providers."""
    return create_chat_service(
        Settings(classifier={"use_embeddings": False}),
        executor=MockLLMExecutor(default_response="Réponse du modèle de test."),
        embedding_provider=MockEmbeddingProvider(dimensions=8),
    )


@pytest.fixture
def app(chat_service: ChatService) -> FastAPI:
    """Application with the chat service overridden."""
    app = create_app()
    app.dependency_overrides[get_chat_service] = lambda: chat_service
    return app


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Test client sharing one event loop across requests."""
    with TestClient(app) as client:
        yield client


def _start_session(client: TestClient, message: str = "Bonjour") -> str:
    response = client.post(
        "/v1/chat", json={"message": message, "session_id": "web-1", "user_email": "a@b.be"}
    )
    assert response.status_code == 200
    return response.json()["session_id"]


class TestChatEndpoint:
    """Tests for POST /v1/chat."""

    def test_greeting(self, client: TestClient) -> None:
        response = client.post("/v1/chat", json={"message": "Bonjour"})

        assert response.status_code == 200
        data = response.json()
        assert data["session_id"]
        assert data["state"] == "active_conversation"
        assert data["response"].startswith("Bonjour!")
        assert data["escalate"] is False
        assert data["metadata"]["strategy"] == "template"

    def test_same_session_continues(self, client: TestClient) -> None:
        session_id = _start_session(client)

        response = client.post(
            "/v1/chat", json={"message": "Est-ce que la viande est halal ?", "session_id": session_id}
        )

        data = response.json()
        assert data["session_id"] == session_id
        assert data["state"] == "faq_mode"
        assert data["metadata"]["transitions"] == ["faq"]

    def test_escalation_reported(self, client: TestClient) -> None:
        response = client.post(
            "/v1/chat",
            json={"message": "Il manque un article dans ma commande 12345", "user_email": "a@b.be"},
        )

        data = response.json()
        assert data["escalate"] is True
        assert data["state"] == "escalation_pending"
        assert data["metadata"]["ticket_id"]

    def test_empty_message_rejected(self, client: TestClient) -> None:
        response = client.post("/v1/chat", json={"message": ""})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_REQUEST"
        assert error["details"][0]["field"] == "body.message"

    def test_missing_message_rejected(self, client: TestClient) -> None:
        response = client.post("/v1/chat", json={"session_id": "x"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"


class TestSessionEndpoints:
    """Tests for /v1/sessions."""

    def test_get_session(self, client: TestClient) -> None:
        session_id = _start_session(client)

        response = client.get(f"/v1/sessions/{session_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["session_id"] == "web-1"
        assert data["user_email"] == "a@b.be"
        assert [t["role"] for t in data["turns"]] == ["user", "assistant"]
        assert data["turns"][0]["intent"] == "greeting"
        assert "Bonjour" in data["transcript"]

    def test_get_unknown_session(self, client: TestClient) -> None:
        response = client.get("/v1/sessions/missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"

    def test_close_session(self, client: TestClient) -> None:
        session_id = _start_session(client)

        assert client.delete(f"/v1/sessions/{session_id}").status_code == 204
        assert client.get(f"/v1/sessions/{session_id}").status_code == 404
        assert client.delete(f"/v1/sessions/{session_id}").status_code == 404


class TestHealthAndMetrics:
    """Tests for /health and /metrics."""

    def test_health(self, client: TestClient) -> None:
        _start_session(client)

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["active_sessions"] == 1
        assert "version" in data

    def test_metrics(self, client: TestClient) -> None:
        _start_session(client)

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "tastychat_turns_processed_total" in response.text
