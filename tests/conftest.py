"""Shared fixtures for Barista Bot tests."""

import os
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

# Ensure we use test settings
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")
os.environ.setdefault("CATALOG_PATH", "/nonexistent/coffee_data.json")

from llm.conversation_store import SessionStore
from llm.orchestrator import ConversationPipeline
from ordering.catalog import DEFAULT_CATALOG


class ScriptedProvider:
    """Model provider returning canned replies in order."""

    def __init__(self, replies: Optional[List[object]] = None):
        self.replies = list(replies or [])
        self.calls: List[Dict[str, object]] = []

    async def generate_with_history(self, messages, system, cancel_event=None):
        self.calls.append({"messages": messages, "system": system})
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def order_sink():
    sink = AsyncMock()
    sink.submit.return_value = True
    return sink


@pytest.fixture
def audit_sink():
    sink = AsyncMock()
    sink.record.return_value = True
    return sink


@pytest.fixture
def pipeline(store, provider, order_sink, audit_sink):
    return ConversationPipeline(
        sessions=store,
        provider=provider,
        catalog=dict(DEFAULT_CATALOG),
        order_sink=order_sink,
        audit_sink=audit_sink,
    )


@pytest.fixture
def complete_slots():
    return {
        "name": "Ann",
        "email": "ann@example.com",
        "phone": "+1 555 0100",
        "address": "12 Bean Street",
        "order": "2 cappuccinos",
    }
