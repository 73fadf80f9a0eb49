"""
Telegram Webhook Routes for Barista Bot.

Receives Telegram updates and replies in the same chat.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException

from ..channels.base import ChannelMessage
from ..services import get_services
from llm.orchestrator import InboundMessage
from llm.prompt_templates import PromptTemplates

logger = logging.getLogger(__name__)

router = APIRouter()

RESET_REPLY = "Your order has been cleared. What would you like to order?"


def _display_name(sender: Dict[str, Any]) -> str:
    return sender.get("first_name") or sender.get("username") or str(sender.get("id", ""))


# ── Endpoints ─────────────────────────────────────────────────────

@router.get("/telegram/webhook")
async def webhook_status():
    """Confirm the webhook URL is reachable."""
    return {"message": "Webhook is set up correctly"}


@router.post("/telegram/webhook")
async def telegram_webhook(update: Dict[str, Any]):
    """
    Handle one Telegram update.

    /start greets the user, /reset drops their session, any other text
    goes through the conversation pipeline.
    """
    services = get_services()
    if not services.is_ready:
        raise HTTPException(status_code=503, detail="Service not ready")

    message = update.get("message") or update.get("edited_message")
    if not message or not message.get("text") or "from" not in message:
        logger.debug(f"Ignoring non-text update {update.get('update_id')}")
        return {"ok": True}

    sender = message["from"]
    chat_id = str(message.get("chat", {}).get("id", sender["id"]))
    user_id = str(sender["id"])
    display_name = _display_name(sender)
    text = message["text"]

    logger.info("Received a message from Telegram")

    if text.startswith("/start"):
        greeting = PromptTemplates.greeting(display_name)
        await _reply(chat_id, greeting)
        logger.info(f"Dialog:\nBot to {display_name}: {greeting}")
        await services.audit_logger.record_bot_message(display_name, greeting)
        return {"ok": True}

    if text.startswith("/reset"):
        await services.sessions.reset_serialized(user_id)
        await _reply(chat_id, RESET_REPLY)
        return {"ok": True}

    result = await services.pipeline.process(
        InboundMessage(user_id=user_id, display_name=display_name, text=text)
    )
    logger.info(f"Sending response to {display_name} ({user_id}): {result.reply}")
    await _reply(chat_id, result.reply)
    return {"ok": True}


# ── Helpers ───────────────────────────────────────────────────────

async def _reply(chat_id: str, text: str) -> Optional[str]:
    """Send a reply through the main bot; returns the Telegram message id."""
    channel = get_services().reply_channel
    if channel is None:
        logger.warning(f"No reply channel configured, dropping reply to chat {chat_id}")
        return None
    result = await channel.send_message(ChannelMessage(to=chat_id, content=text))
    if not result.success:
        logger.error(f"Reply to chat {chat_id} failed: {result.error}")
    return result.message_id
