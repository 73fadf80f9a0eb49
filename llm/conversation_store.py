"""
Session store for Barista Bot.

Process-wide registry mapping a user id to its conversation history and
partially collected order slots. Sessions live for the process lifetime
only; nothing is evicted or persisted.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ordering.slot_validator import SlotValidator

logger = logging.getLogger(__name__)

USER = "user"
ASSISTANT = "assistant"
ROLES = (USER, ASSISTANT)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Turn:
    """One message in a conversation."""
    role: str
    content: str

    def to_message(self) -> Dict[str, str]:
        """Format for the Messages API."""
        return {"role": self.role, "content": self.content}


@dataclass
class Session:
    """Per-user conversation history plus accumulated order slots."""
    user_id: str
    display_name: str
    history: List[Turn] = field(default_factory=list)
    slots: Dict[str, str] = field(default_factory=dict)
    delivered: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


class SessionStore:
    """
    In-memory session registry.

    Operations for one user id must run under ``lock(user_id)``; different
    users never share state and can proceed in parallel.
    """

    def __init__(self, validator: Optional[SlotValidator] = None):
        self._validator = validator or SlotValidator()
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def lock(self, user_id: str) -> asyncio.Lock:
        """Get the lock that serializes turns for a user."""
        return self._locks.setdefault(user_id, asyncio.Lock())

    def get(self, user_id: str) -> Optional[Session]:
        return self._sessions.get(user_id)

    def get_or_create(self, user_id: str, display_name: str) -> Session:
        """
        Get a session, creating an empty one on first contact.

        Args:
            user_id: Transport-level user identifier
            display_name: Name shown to the model

        Returns:
            The user's session
        """
        session = self._sessions.get(user_id)
        if session is None:
            session = Session(user_id=user_id, display_name=display_name)
            self._sessions[user_id] = session
            logger.info(f"Session created for user {user_id}")
        return session

    def append_turn(self, user_id: str, role: str, content: str) -> Turn:
        """
        Append a turn to a user's history.

        Raises:
            KeyError: if the session does not exist
            ValueError: if the role is not user/assistant
        """
        if role not in ROLES:
            raise ValueError(f"Unsupported role: {role}")
        session = self._sessions[user_id]
        turn = Turn(role=role, content=content)
        session.history.append(turn)
        session.updated_at = _utcnow()
        return turn

    def merge_slots(self, user_id: str, new_slots: Dict[str, str]) -> Session:
        """Merge extracted slots into a session (last write wins)."""
        session = self._sessions[user_id]
        session, _ = self._validator.apply(session, new_slots)
        session.updated_at = _utcnow()
        return session

    def mark_delivered(self, user_id: str) -> None:
        session = self._sessions[user_id]
        if session.delivered:
            logger.warning(f"Order for user {user_id} already marked delivered")
            return
        session.delivered = True
        session.updated_at = _utcnow()

    def reset(self, user_id: str) -> bool:
        """Drop a user's session so the next message starts a fresh order."""
        removed = self._sessions.pop(user_id, None)
        if removed is not None:
            logger.info(f"Session reset for user {user_id}")
        return removed is not None

    async def reset_serialized(self, user_id: str) -> bool:
        """Reset once any in-flight turn for the user has finished."""
        async with self.lock(user_id):
            return self.reset(user_id)

    def stats(self) -> Dict[str, int]:
        return {
            "total_sessions": len(self._sessions),
            "delivered_orders": sum(1 for s in self._sessions.values() if s.delivered),
            "total_turns": sum(len(s.history) for s in self._sessions.values()),
        }

    def close(self) -> None:
        """Tear down all sessions (called at shutdown)."""
        logger.info(f"Closing session store with {len(self._sessions)} sessions")
        self._sessions.clear()
        self._locks.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._sessions
