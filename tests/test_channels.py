"""Tests for the Telegram channel and audit log."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from api.analytics.audit_log import AuditLogger, format_dialog
from api.channels.base import ChannelMessage, ChannelResponse
from api.channels.telegram import TelegramChannel


def make_channel(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TelegramChannel("TOKEN", client=client)


class TestTelegramChannel:
    @pytest.mark.asyncio
    async def test_send_message(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 17}})

        result = await make_channel(handler).send_message(ChannelMessage(to="42", content="Hello"))
        assert result.success
        assert result.message_id == "17"
        assert str(seen[0].url) == "https://api.telegram.org/botTOKEN/sendMessage"
        assert json.loads(seen[0].content) == {"chat_id": "42", "text": "Hello"}

    @pytest.mark.asyncio
    async def test_not_ok(self):
        def handler(request):
            return httpx.Response(200, json={"ok": False, "description": "chat not found"})

        result = await make_channel(handler).send_message(ChannelMessage(to="42", content="x"))
        assert not result.success
        assert result.error == "chat not found"

    @pytest.mark.asyncio
    async def test_http_error(self):
        def handler(request):
            return httpx.Response(403, json={"ok": False})

        result = await make_channel(handler).send_message(ChannelMessage(to="42", content="x"))
        assert not result.success

    @pytest.mark.asyncio
    async def test_health_check(self):
        def handler(request):
            assert request.url.path.endswith("/getMe")
            return httpx.Response(200, json={"ok": True, "result": {}})

        assert await make_channel(handler).health_check()


class TestAuditLogger:
    def test_format_dialog(self):
        assert format_dialog("Ann", "Hi", "Hello!") == "Dialog:\nUser Ann: Hi\nBot: Hello!"

    @pytest.mark.asyncio
    async def test_record(self):
        channel = AsyncMock()
        channel.send_message.return_value = ChannelResponse(success=True)
        audit = AuditLogger(channel, "-200")
        assert await audit.record("Ann", "Hi", "Hello!")
        sent = channel.send_message.await_args.args[0]
        assert sent.to == "-200"
        assert sent.content == "Dialog:\nUser Ann: Hi\nBot: Hello!"

    @pytest.mark.asyncio
    async def test_bot_message(self):
        channel = AsyncMock()
        channel.send_message.return_value = ChannelResponse(success=True)
        await AuditLogger(channel, "-200").record_bot_message("Ann", "Hi, Ann!")
        assert channel.send_message.await_args.args[0].content == "Bot to Ann: Hi, Ann!"

    @pytest.mark.asyncio
    async def test_disabled(self):
        audit = AuditLogger(None, None)
        assert not audit.enabled
        assert not await audit.record("Ann", "Hi", "Hello!")
