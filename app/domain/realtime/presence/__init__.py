from .presence_models import ClosedConnection, PresenceSnapshot, Session
from .presence_registry import DisconnectHook, PresenceRegistry

__all__ = [
    "ClosedConnection",
    "DisconnectHook",
    "PresenceRegistry",
    "PresenceSnapshot",
    "Session",
]
