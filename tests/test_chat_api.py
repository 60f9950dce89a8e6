"""
API tests for the chat relay endpoints.

The app is built with create_app() over an in-memory store and a relay
whose Gemini calls go to httpx.MockTransport.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient
from loguru import logger

from src.api.app import create_app
from src.config.constants import GENERIC_ERROR_MESSAGE, HISTORY_ERROR_MESSAGE
from src.llm.client import CannedRelay


def sent_prompt(transport: httpx.MockTransport, index: int = -1) -> str:
    return json.loads(transport.requests[index].content)["contents"][0]["parts"][0]["text"]


@pytest.fixture
def transport(reply_with):
    return reply_with("  Paying on time raises your score.  ")


@pytest.fixture
def client(settings, store, make_relay, transport):
    app = create_app(config=settings, store=store, relay=make_relay(transport))
    with TestClient(app) as test_client:
        yield test_client


class TestSendMessage:
    """POST /api/chat"""

    def test_success(self, client, store):
        response = client.post("/api/chat", json={"message": "  How do I raise my score?  ", "userId": "user-456"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["response"] == "Paying on time raises your score."
        assert data["conversationId"].startswith("conv_")
        assert data["messageId"]
        assert data["timestamp"]
        assert len(store) == 1

    def test_round_trip_through_history(self, client):
        sent = client.post(
            "/api/chat",
            json={"message": "What is my tier?", "userId": "user-456", "conversationId": "conv_1"},
        ).json()

        history = client.get("/api/chat/history", params={"userId": "user-456"}).json()

        assert history["success"] is True
        assert history["count"] == 1
        assert history["total"] == 1
        item = history["history"][0]
        assert item == {
            "id": sent["messageId"],
            "userMessage": "What is my tier?",
            "aiResponse": "Paying on time raises your score.",
            "timestamp": sent["timestamp"],
            "conversationId": "conv_1",
        }

    def test_follow_up_carries_conversation_context(self, client, transport):
        first = client.post("/api/chat", json={"message": "What is a credit score?"}).json()
        client.post("/api/chat", json={"message": "How can I improve it?", "conversationId": first["conversationId"]})

        assert "CONVERSATION HISTORY:" not in sent_prompt(transport, 0)
        prompt = sent_prompt(transport, 1)
        assert "User: What is a credit score?" in prompt
        assert "Assistant: Paying on time raises your score." in prompt
        assert "QUESTION: How can I improve it?" in prompt

    def test_other_conversations_are_not_included(self, client, transport):
        client.post("/api/chat", json={"message": "secret question", "conversationId": "conv_other"})
        client.post("/api/chat", json={"message": "new topic", "conversationId": "conv_mine"})

        assert "secret question" not in sent_prompt(transport)

    def test_anonymous_user(self, client):
        client.post("/api/chat", json={"message": "Hello"})

        history = client.get("/api/chat/history", params={"userId": "anonymous"}).json()
        assert history["count"] == 1


class TestSendMessageValidation:
    """Invalid requests get 400 and never reach the relay"""

    @pytest.mark.parametrize(
        "body,error",
        [
            ({}, "Message is required"),
            ({"message": ""}, "Message cannot be empty"),
            ({"message": "   \n "}, "Message cannot be empty"),
            ({"message": 42}, "Message must be a string"),
        ],
    )
    def test_invalid_message(self, client, transport, store, body, error):
        response = client.post("/api/chat", json=body)

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"] == error
        assert data["field"] == "message"
        assert transport.requests == []
        assert len(store) == 0

    def test_message_too_long(self, client, transport):
        response = client.post("/api/chat", json={"message": "x" * 4001})

        assert response.status_code == 400
        data = response.json()
        assert data["field"] == "message"
        assert data["maxLength"] == 4000
        assert data["currentLength"] == 4001
        assert transport.requests == []

    def test_message_at_limit(self, client):
        assert client.post("/api/chat", json={"message": "x" * 4000}).status_code == 200

    def test_missing_body(self, client):
        response = client.post("/api/chat")

        assert response.status_code == 400
        assert response.json()["field"] == "message"

    def test_malformed_json(self, client):
        response = client.post("/api/chat", content="{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["field"] == "body"

    def test_invalid_user_id(self, client):
        response = client.post("/api/chat", json={"message": "Hello", "userId": 12})

        assert response.status_code == 400
        assert response.json()["field"] == "userId"


class TestUpstreamFailures:
    """Relay failures become 500 with a polite message"""

    @pytest.fixture
    def transport(self, respond_status):
        return respond_status(429, '{"error": {"code": 429, "status": "RESOURCE_EXHAUSTED"}}')

    def test_rate_limited(self, client, transport, store):
        response = client.post("/api/chat", json={"message": "Hello"})

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert "busy" in data["error"]
        assert data["errorType"] == "rate_limited"
        assert "429" in data["details"]
        assert len(transport.requests) == 1
        assert len(store) == 0

    def test_details_hidden_in_production(self, production_settings, store, make_relay, transport):
        app = create_app(config=production_settings, store=store, relay=make_relay(transport, production_settings))
        with TestClient(app) as client:
            response = client.post("/api/chat", json={"message": "Hello"})

        assert response.status_code == 500
        assert "details" not in response.json()

    def test_timeout(self, settings, store, make_relay, mock_transport):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        app = create_app(config=settings, store=store, relay=make_relay(mock_transport(handler)))
        with TestClient(app) as client:
            data = client.post("/api/chat", json={"message": "Hello"}).json()

        assert data["errorType"] == "timeout"
        assert "took too long" in data["error"]


class TestHistory:
    """GET /api/chat/history"""

    def test_filters_by_conversation(self, client):
        client.post("/api/chat", json={"message": "one", "userId": "u1", "conversationId": "conv_a"})
        client.post("/api/chat", json={"message": "two", "userId": "u1", "conversationId": "conv_b"})
        client.post("/api/chat", json={"message": "three", "userId": "u2", "conversationId": "conv_a"})

        data = client.get("/api/chat/history", params={"conversationId": "conv_a"}).json()
        assert [item["userMessage"] for item in data["history"]] == ["one", "three"]

        data = client.get("/api/chat/history", params={"userId": "u1", "conversationId": "conv_a"}).json()
        assert [item["userMessage"] for item in data["history"]] == ["one"]

    def test_limit_keeps_most_recent(self, client):
        for n in range(4):
            client.post("/api/chat", json={"message": f"message {n}", "userId": "u1"})

        data = client.get("/api/chat/history", params={"userId": "u1", "limit": 2}).json()

        assert data["count"] == 2
        assert data["total"] == 4
        assert [item["userMessage"] for item in data["history"]] == ["message 2", "message 3"]

    def test_empty_history(self, client):
        data = client.get("/api/chat/history", params={"userId": "nobody"}).json()
        assert data == {"success": True, "history": [], "count": 0, "total": 0}

    def test_invalid_limit(self, client):
        response = client.get("/api/chat/history", params={"limit": 0})

        assert response.status_code == 400
        assert response.json()["field"] == "limit"

    def test_store_failure(self, settings):
        class BrokenStore:
            async def init(self):
                return None

            async def list_exchanges(self, user_id=None, conversation_id=None, limit=50):
                raise RuntimeError("database is locked")

            async def close(self):
                return None

        app = create_app(config=settings, store=BrokenStore(), relay=CannedRelay())
        with TestClient(app) as client:
            response = client.get("/api/chat/history")

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == HISTORY_ERROR_MESSAGE
        assert data["details"] == "database is locked"


class TestServiceEndpoints:
    """Status, health, root, 404 and unhandled errors"""

    def test_status(self, client, transport):
        data = client.get("/api/chat/status").json()

        assert data["status"] == "online"
        assert data["service"] == "HEVA Chat Assistant"
        assert "connected" not in data
        assert transport.requests == []

    def test_status_with_connection_check(self, client, transport):
        data = client.get("/api/chat/status", params={"check": "true"}).json()

        assert data["connected"] is True
        assert len(transport.requests) == 1

    def test_health(self, client):
        data = client.get("/health").json()

        assert data["status"] == "OK"
        assert data["uptime"] >= 0
        assert data["environment"] == "development"

    def test_root(self, client):
        data = client.get("/").json()
        assert data["endpoints"]["chat"] == "/api/chat"

    def test_not_found(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Not Found - /api/nope"

    def test_unhandled_error(self, settings, store):
        class ExplodingRelay(CannedRelay):
            async def respond(self, message, history=(), client_context=None):
                raise RuntimeError("boom")

        errors = []
        sink_id = logger.add(lambda message: errors.append(message.record), level="ERROR")
        app = create_app(config=settings, store=store, relay=ExplodingRelay())
        try:
            with TestClient(app, raise_server_exceptions=False) as client:
                response = client.post("/api/chat", json={"message": "Hello"})
        finally:
            logger.remove(sink_id)

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == GENERIC_ERROR_MESSAGE
        assert data["details"] == "boom"
        # One summary line, the traceback is left to the server log
        assert len(errors) == 1
        assert "RuntimeError: boom" in errors[0]["message"]
        assert errors[0]["exception"] is None

    def test_oversized_body_is_rejected(self, settings, store, make_relay, transport):
        config = settings.model_copy(update={"max_request_bytes": 1024})
        app = create_app(config=config, store=store, relay=make_relay(transport))
        with TestClient(app) as client:
            response = client.post("/api/chat", json={"message": "x" * 5000})

        assert response.status_code == 413
        data = response.json()
        assert data["success"] is False
        assert data["maxBytes"] == 1024
        assert "currentLength" not in data
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert transport.requests == []
        assert len(store) == 0

    def test_default_body_limit(self, client, transport):
        body = json.dumps({"message": "x" * (11 * 1024 * 1024)})

        response = client.post("/api/chat", content=body, headers={"Content-Type": "application/json"})

        assert response.status_code == 413
        assert response.json()["maxBytes"] == 10 * 1024 * 1024
        assert transport.requests == []

    def test_body_under_limit_still_validated(self, settings, store, make_relay, transport):
        config = settings.model_copy(update={"max_request_bytes": 1024})
        app = create_app(config=config, store=store, relay=make_relay(transport))
        with TestClient(app) as client:
            response = client.post("/api/chat", json={"message": "Hello"})

        assert response.status_code == 200

    def test_security_headers(self, client):
        for response in (client.get("/health"), client.get("/api/nope")):
            assert response.headers["X-Content-Type-Options"] == "nosniff"
            assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
            assert response.headers["Referrer-Policy"] == "no-referrer"

    def test_large_responses_are_compressed(self, client):
        client.post("/api/chat", json={"message": "y" * 3000, "userId": "u-gzip"})

        response = client.get(
            "/api/chat/history",
            params={"userId": "u-gzip"},
            headers={"Accept-Encoding": "gzip"},
        )

        assert response.status_code == 200
        assert response.headers["Content-Encoding"] == "gzip"
        assert response.json()["history"][0]["userMessage"] == "y" * 3000

    def test_small_responses_are_not_compressed(self, client):
        response = client.get("/health", headers={"Accept-Encoding": "gzip"})
        assert "Content-Encoding" not in response.headers

    def test_canned_provider_end_to_end(self, settings, store):
        app = create_app(config=settings, store=store, relay=CannedRelay())
        with TestClient(app) as client:
            data = client.post("/api/chat", json={
                "message": "What's my credit score?",
                "context": {"page": "score", "userScore": 720, "userTier": "Good"},
            }).json()

        assert data["success"] is True
        assert "credit score of 720" in data["response"]
