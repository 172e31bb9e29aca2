"""Messaging wire models."""

from datetime import datetime

from app.schemas import WireModel


class DeliveryReceiptOut(WireModel):
    message_id: str | None
    delivered_at: datetime


class ReadReceiptOut(WireModel):
    message_ids: list[str]
    read_by: str
    read_at: datetime


class TypingOut(WireModel):
    user_id: str
