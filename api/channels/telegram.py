"""
Telegram Channel Provider for Barista Bot.

Sends messages through the Telegram Bot API. Separate bots are used for
customer replies, the audit log chat and the order chat.
"""

import logging
from typing import Optional

import httpx

from .base import ChannelProvider, ChannelMessage, ChannelResponse

logger = logging.getLogger(__name__)


class TelegramChannel(ChannelProvider):
    """Telegram via the Bot API."""

    BASE_URL = "https://api.telegram.org"

    def __init__(self, bot_token: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        self.bot_token = bot_token
        self.timeout = timeout
        self._client = client

    def _url(self, method: str) -> str:
        return f"{self.BASE_URL}/bot{self.bot_token}/{method}"

    async def _post(self, method: str, payload: dict) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self._url(method), json=payload, timeout=self.timeout)
        async with httpx.AsyncClient() as client:
            return await client.post(self._url(method), json=payload, timeout=self.timeout)

    async def send_message(self, message: ChannelMessage) -> ChannelResponse:
        payload = {"chat_id": message.to, "text": message.content}
        try:
            resp = await self._post("sendMessage", payload)
            resp.raise_for_status()
            data = resp.json()
            if not data.get("ok"):
                return ChannelResponse(success=False, error=data.get("description", "unknown error"))
            msg_id = data.get("result", {}).get("message_id")
            return ChannelResponse(success=True, message_id=str(msg_id) if msg_id is not None else None)
        except Exception as e:
            logger.error(f"Telegram send failed: {e}")
            return ChannelResponse(success=False, error=str(e))

    async def health_check(self) -> bool:
        try:
            resp = await self._post("getMe", {})
            return resp.status_code == 200 and resp.json().get("ok", False)
        except Exception:
            return False
