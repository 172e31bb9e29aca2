"""Shared enums and wire schemas for the realtime hub."""

from .call_status import CallStatus
from .events import InboundEvent, OutboundEvent
from .wire import WireModel

__all__ = [
    "CallStatus",
    "InboundEvent",
    "OutboundEvent",
    "WireModel",
]
