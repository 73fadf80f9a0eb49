"""
Transcript normalization for the Messages API.

The API rejects two consecutive user messages, which happens when an
earlier turn failed before an assistant reply was recorded.
"""

from typing import Iterable, List, Optional

from .conversation_store import ASSISTANT, USER, Turn

FILLER_TEXT = "Please continue."


def ensure_alternating_roles(turns: Iterable[Turn], filler: str = FILLER_TEXT) -> List[Turn]:
    """
    Insert a filler assistant turn between consecutive user turns.

    Repeated assistant turns are passed through unchanged; only the
    user-after-user case is repaired.

    Args:
        turns: Conversation history, oldest first
        filler: Content of the synthetic assistant turn

    Returns:
        New list, never shorter than the input
    """
    fixed: List[Turn] = []
    last_role: Optional[str] = None
    for turn in turns:
        if turn.role == last_role and turn.role == USER:
            fixed.append(Turn(role=ASSISTANT, content=filler))
        fixed.append(turn)
        last_role = turn.role
    return fixed
