"""Outbound delivery records produced by realtime state transitions."""

from dataclasses import dataclass
from typing import Any

from app.schemas import OutboundEvent, WireModel


@dataclass(frozen=True, slots=True)
class Delivery:
    """A single event to emit once the current command has been applied.

    ``to`` is a connection id. ``None`` means every connected client.
    """

    event: str
    payload: Any
    to: str | None = None

    @property
    def is_broadcast(self) -> bool:
        return self.to is None


def deliver_to(connection_id: str, event: OutboundEvent, payload: WireModel | Any) -> Delivery:
    if isinstance(payload, WireModel):
        payload = payload.to_wire()
    return Delivery(event=event.value, payload=payload, to=connection_id)


def broadcast(event: OutboundEvent, payload: WireModel | Any) -> Delivery:
    if isinstance(payload, WireModel):
        payload = payload.to_wire()
    return Delivery(event=event.value, payload=payload, to=None)
