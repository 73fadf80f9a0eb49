"""
API Routes for Barista Bot.
"""

from . import chat, telegram

__all__ = ["chat", "telegram"]
