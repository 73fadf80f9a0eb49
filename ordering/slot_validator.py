"""
Order slot validation for Barista Bot.

Merges slots extracted from model replies into the order collected so far
and decides when the order is complete.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# Allow-list of recognized order fields; also the required set.
SLOT_NAMES = ("name", "email", "phone", "address", "order")


class SlotValidator:
    """
    Validates and merges order slots.

    Merge is last-write-wins per key and idempotent; completeness needs
    every slot present with non-blank text.
    """

    def __init__(self, required: Optional[Tuple[str, ...]] = None):
        self.required = required or SLOT_NAMES

    def merge(self, current: Mapping[str, str], extracted: Mapping[str, str]) -> Dict[str, str]:
        """
        Merge newly extracted slots over the current ones.

        Args:
            current: Slots collected on earlier turns
            extracted: Slots from this turn

        Returns:
            New slot mapping; unknown keys are dropped
        """
        merged = {k: v for k, v in current.items() if k in SLOT_NAMES}
        for key, value in extracted.items():
            if key not in SLOT_NAMES:
                logger.debug(f"Dropping unrecognized slot '{key}'")
                continue
            merged[key] = value
        return merged

    def missing(self, slots: Mapping[str, str]) -> List[str]:
        """List required slots that are absent or blank."""
        return [name for name in self.required if not (slots.get(name) or "").strip()]

    def is_complete(self, slots: Mapping[str, str]) -> bool:
        return not self.missing(slots)

    def apply(self, session: Any, extracted: Mapping[str, str]) -> Tuple[Any, bool]:
        """
        Merge extracted slots into a session and re-check completeness.

        Completeness is evaluated on every call; guarding against repeat
        submission is left to the caller (see ``Session.delivered``).

        Returns:
            (session, is_complete)
        """
        session.slots = self.merge(session.slots, extracted)
        return session, self.is_complete(session.slots)
