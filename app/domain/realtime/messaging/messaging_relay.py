"""Direct message, receipt and typing relays.

Messages reach the relay after an external write path has persisted them; the
relay only forwards to a receiver who is online right now. Nothing is queued
for later delivery.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger

from app.domain.utils.clock import utc_now
from app.schemas import OutboundEvent

from ..delivery import Delivery, deliver_to
from ..presence import PresenceRegistry
from .messaging_models import DeliveryReceiptOut, ReadReceiptOut, TypingOut

# Keys a persisted message may carry its id under.
MESSAGE_ID_KEYS = ("messageId", "_id", "id")


def message_id_of(message: dict[str, Any]) -> str | None:
    for key in MESSAGE_ID_KEYS:
        value = message.get(key)
        if value not in (None, ""):
            return str(value)
    return None


class MessagingRelay:
    """Forward persisted messages and read receipts between two users."""

    def __init__(self, presence: PresenceRegistry, clock: Callable[[], datetime] = utc_now):
        self._presence = presence
        self._clock = clock

    def send(
        self,
        sender_id: str,
        receiver_id: str,
        message: dict[str, Any],
        sender_connection_id: str | None = None,
    ) -> list[Delivery]:
        """Deliver ``message`` and acknowledge the sender, if the receiver is online.

        The receipt goes to ``sender_connection_id`` when given (the connection
        that sent the message), otherwise to the sender's current session.
        """
        receiver_conn = self._presence.connection_for(receiver_id)
        if receiver_conn is None:
            logger.debug("Receiver offline, message not relayed: {} -> {}", sender_id, receiver_id)
            return []

        deliveries = [deliver_to(receiver_conn, OutboundEvent.MESSAGE_RECEIVE, message)]

        sender_conn = sender_connection_id or self._presence.connection_for(sender_id)
        if sender_conn is not None:
            receipt = DeliveryReceiptOut(message_id=message_id_of(message), delivered_at=self._clock())
            deliveries.append(deliver_to(sender_conn, OutboundEvent.MESSAGE_DELIVERED, receipt))

        logger.debug("Message relayed: {} -> {}", sender_id, receiver_id)
        return deliveries

    def mark_read(self, message_ids: list[str], sender_id: str, reader_id: str) -> list[Delivery]:
        """Tell the original sender that ``reader_id`` has read ``message_ids``."""
        sender_conn = self._presence.connection_for(sender_id)
        if sender_conn is None:
            logger.debug("Sender offline, read receipt dropped: reader={} sender={}", reader_id, sender_id)
            return []

        receipt = ReadReceiptOut(message_ids=message_ids, read_by=reader_id, read_at=self._clock())
        return [deliver_to(sender_conn, OutboundEvent.MESSAGE_READ, receipt)]


class TypingIndicatorRelay:
    """Unbuffered at-most-once typing state forwarding.

    There are no server-side timers; the typing client sends ``stop`` itself
    after its own inactivity window.
    """

    def __init__(self, presence: PresenceRegistry):
        self._presence = presence

    def start(self, sender_id: str, receiver_id: str) -> list[Delivery]:
        return self._forward(OutboundEvent.TYPING_START, sender_id, receiver_id)

    def stop(self, sender_id: str, receiver_id: str) -> list[Delivery]:
        return self._forward(OutboundEvent.TYPING_STOP, sender_id, receiver_id)

    def _forward(self, event: OutboundEvent, sender_id: str, receiver_id: str) -> list[Delivery]:
        receiver_conn = self._presence.connection_for(receiver_id)
        if receiver_conn is None:
            return []
        return [deliver_to(receiver_conn, event, TypingOut(user_id=sender_id))]
