"""
Order Router for Barista Bot.

Delivers completed orders to the shop's order chat.
"""

import logging
from typing import Mapping, Optional

from api.channels.base import ChannelMessage, ChannelProvider

logger = logging.getLogger(__name__)

ORDER_LABELS = (
    ("name", "Name"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("address", "Address"),
    ("order", "Order"),
)


def format_order(slots: Mapping[str, str]) -> str:
    """Render the order summary sent to staff."""
    lines = ["New order:"]
    for key, label in ORDER_LABELS:
        lines.append(f"{label}: {slots.get(key, '')}")
    return "\n".join(lines)


class OrderRouter:
    """
    Routes completed orders to a messaging channel.

    Delivery failures are logged and reported to the caller; they are
    never retried and never surfaced to the end user.
    """

    def __init__(self, channel: Optional[ChannelProvider], chat_id: Optional[str]):
        """
        Initialize the order router.

        Args:
            channel: Channel used for delivery (None disables delivery)
            chat_id: Destination chat for order summaries
        """
        self.channel = channel
        self.chat_id = chat_id
        self._delivered_count = 0

    async def submit(self, user_id: str, slots: Mapping[str, str]) -> bool:
        """
        Send an order summary.

        Args:
            user_id: Customer the order belongs to
            slots: Complete order slots

        Returns:
            True if the channel accepted the message
        """
        if not self.channel or not self.chat_id:
            logger.warning(f"No order channel configured, order for user {user_id} not delivered")
            return False

        result = await self.channel.send_message(
            ChannelMessage(to=self.chat_id, content=format_order(slots))
        )
        if not result.success:
            logger.error(f"Order delivery failed for user {user_id}: {result.error}")
            return False

        self._delivered_count += 1
        logger.info(f"Order sent for user {user_id}")
        return True

    @property
    def delivered_count(self) -> int:
        return self._delivered_count
