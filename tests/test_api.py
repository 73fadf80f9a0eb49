"""Tests for the API endpoints."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from api.channels.base import ChannelResponse
from llm.orchestrator import MALFORMED_REPLY


@pytest.fixture
def reply_channel():
    channel = AsyncMock()
    channel.send_message.return_value = ChannelResponse(success=True, message_id="1")
    return channel


@pytest.fixture
def client(monkeypatch, pipeline, store, audit_sink, reply_channel):
    """FastAPI test client wired to the in-memory pipeline."""
    from api.main import app
    from api.services import get_services

    services = get_services()
    monkeypatch.setattr(services, "pipeline", pipeline)
    monkeypatch.setattr(services, "sessions", store)
    monkeypatch.setattr(services, "audit_logger", audit_sink)
    monkeypatch.setattr(services, "reply_channel", reply_channel)
    monkeypatch.setattr(services, "_initialized", True)
    return TestClient(app)


def telegram_update(text, user_id=42, first_name="Ann", username="ann"):
    sender = {"id": user_id, "is_bot": False, "first_name": first_name, "username": username}
    return {
        "update_id": 1000,
        "message": {
            "message_id": 1,
            "from": sender,
            "chat": {"id": user_id, "type": "private"},
            "date": 1700000000,
            "text": text,
        },
    }


def test_root_endpoint(client):
    resp = client.get("/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "operational"
    assert "version" in data


def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


class TestTelegramWebhook:
    def test_get_confirms_setup(self, client):
        resp = client.get("/api/v1/telegram/webhook")
        assert resp.status_code == 200
        assert resp.json() == {"message": "Webhook is set up correctly"}

    def test_start_greets(self, client, reply_channel, audit_sink, provider):
        resp = client.post("/api/v1/telegram/webhook", json=telegram_update("/start"))
        assert resp.status_code == 200
        sent = reply_channel.send_message.await_args.args[0]
        assert sent.to == "42"
        assert sent.content == "Hi, Ann! I'm the coffee bot. How can I help?"
        audit_sink.record_bot_message.assert_awaited_once()
        assert provider.calls == []

    def test_text_runs_pipeline(self, client, reply_channel, provider):
        provider.replies = ["<response>One cappuccino, got it! <order>cappuccino</order></response>"]
        resp = client.post("/api/v1/telegram/webhook", json=telegram_update("A cappuccino please"))
        assert resp.status_code == 200
        sent = reply_channel.send_message.await_args.args[0]
        assert sent.content == "One cappuccino, got it!"

    def test_username_used_without_first_name(self, client, provider):
        provider.replies = ["<response>Hi</response>"]
        client.post("/api/v1/telegram/webhook", json=telegram_update("hey", first_name=None))
        assert "ann" in provider.calls[0]["system"]

    def test_malformed_reply_forwarded(self, client, reply_channel, provider):
        provider.replies = ["no block"]
        client.post("/api/v1/telegram/webhook", json=telegram_update("hello"))
        assert reply_channel.send_message.await_args.args[0].content == MALFORMED_REPLY

    def test_reset_clears_session(self, client, store, provider):
        provider.replies = ["<response>Hi <name>Ann</name></response>"]
        client.post("/api/v1/telegram/webhook", json=telegram_update("I'm Ann"))
        assert "42" in store
        client.post("/api/v1/telegram/webhook", json=telegram_update("/reset"))
        assert "42" not in store

    def test_non_text_update_ignored(self, client, reply_channel):
        resp = client.post("/api/v1/telegram/webhook", json={"update_id": 1, "edited_channel_post": {}})
        assert resp.status_code == 200
        reply_channel.send_message.assert_not_called()


class TestChatRoutes:
    def test_chat(self, client, provider):
        provider.replies = ["<response>Hello Bo! <name>Bo</name></response>"]
        resp = client.post("/api/v1/chat", json={"user_id": "u1", "display_name": "Bo", "message": "hi"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["reply"] == "Hello Bo!"
        assert data["outcome"] == "ok"
        assert data["slots"] == {"name": "Bo"}
        assert "email" in data["missing_slots"]

    def test_chat_empty_message(self, client):
        resp = client.post("/api/v1/chat", json={"user_id": "u1", "message": ""})
        assert resp.status_code == 422

    def test_session_view_and_reset(self, client, provider):
        provider.replies = ["<response>Hi <name>Bo</name></response>"]
        client.post("/api/v1/chat", json={"user_id": "u1", "display_name": "Bo", "message": "hi"})

        view = client.get("/api/v1/sessions/u1")
        assert view.status_code == 200
        assert [t["role"] for t in view.json()["history"]] == ["user", "assistant"]
        assert view.json()["delivered"] is False

        assert client.delete("/api/v1/sessions/u1").status_code == 200
        assert client.get("/api/v1/sessions/u1").status_code == 404
        assert client.delete("/api/v1/sessions/u1").status_code == 404

    def test_stats(self, client):
        resp = client.get("/api/v1/chat/stats")
        assert resp.status_code == 200
        assert resp.json()["total_sessions"] == 0
