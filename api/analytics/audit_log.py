"""
Dialog Audit Log for Barista Bot.

Forwards each exchange to a staff chat so conversations can be reviewed.
"""

import logging
from typing import Optional

from ..channels.base import ChannelMessage, ChannelProvider

logger = logging.getLogger(__name__)


def format_dialog(display_name: str, user_message: str, reply: str) -> str:
    return f"Dialog:\nUser {display_name}: {user_message}\nBot: {reply}"


class AuditLogger:
    """Records dialog lines to an audit channel; failures are logged only."""

    def __init__(self, channel: Optional[ChannelProvider], chat_id: Optional[str]):
        self.channel = channel
        self.chat_id = chat_id

    @property
    def enabled(self) -> bool:
        return bool(self.channel and self.chat_id)

    async def send(self, text: str) -> bool:
        if not self.enabled:
            logger.debug("Audit channel not configured, skipping")
            return False
        result = await self.channel.send_message(ChannelMessage(to=self.chat_id, content=text))
        if not result.success:
            logger.error(f"Audit log delivery failed: {result.error}")
        return result.success

    async def record(self, display_name: str, user_message: str, reply: str) -> bool:
        """Record one user message with the cleaned bot reply."""
        return await self.send(format_dialog(display_name, user_message, reply))

    async def record_bot_message(self, display_name: str, text: str) -> bool:
        """Record an unsolicited bot message such as the /start greeting."""
        return await self.send(f"Bot to {display_name}: {text}")
