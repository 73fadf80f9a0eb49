"""
Response parsing for Barista Bot.

The model wraps its reply in a <response> block and reports order fields
as simple tags inside it:

    <response>Thanks, Ann! What's your email?
    <name>Ann</name></response>
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from ordering.slot_validator import SLOT_NAMES

logger = logging.getLogger(__name__)


@dataclass
class ParsedResponse:
    """Result of parsing one model reply."""
    block: str                                   # raw content of the <response> block
    reply: str                                   # user-facing text, tags removed
    slots: Dict[str, str] = field(default_factory=dict)


class ResponseParser:
    """
    Extracts the user-facing reply and order slots from model output.

    Only the first <response> block is considered. Inside it, tags are
    matched pairwise by name without requiring tags to nest properly
    with each other; anything off the allow-list is ignored.
    """

    RESPONSE_PATTERN = re.compile(r"<response>(.*?)</response>", re.DOTALL)
    TAG_PATTERN = re.compile(r"<(\w+)>(.*?)</\1>", re.DOTALL)
    # Single-line tag pairs are hidden from the user
    STRIP_PATTERN = re.compile(r"<[^>]+>.*?</[^>]+>")

    def __init__(self, allowed_tags=SLOT_NAMES):
        self.allowed_tags = frozenset(allowed_tags)

    def parse(self, raw_text: str) -> Optional[ParsedResponse]:
        """
        Parse a raw model reply.

        Args:
            raw_text: Text returned by the model

        Returns:
            ParsedResponse, or None if there is no <response> block
        """
        match = self.RESPONSE_PATTERN.search(raw_text or "")
        if not match:
            logger.warning("No <response> block found in model output")
            return None

        block = match.group(1)
        return ParsedResponse(
            block=block,
            reply=self.clean(block),
            slots=self.extract_tags(block),
        )

    def extract_tags(self, text: str) -> Dict[str, str]:
        """Collect allow-listed tags; later occurrences of a tag win."""
        tags: Dict[str, str] = {}
        for match in self.TAG_PATTERN.finditer(text):
            name, value = match.group(1), match.group(2)
            if name in self.allowed_tags:
                tags[name] = value.strip()
        return tags

    def clean(self, text: str) -> str:
        return self.STRIP_PATTERN.sub("", text).strip()
