from .commands import ClientEvent, Command, Connect, Disconnect, NotifyFollowers, ReadSnapshot
from .dispatcher import DeliverySink, EventDispatcher, FollowerLookup
from .hub import HubResult, RealtimeHub

__all__ = [
    "ClientEvent",
    "Command",
    "Connect",
    "DeliverySink",
    "Disconnect",
    "EventDispatcher",
    "FollowerLookup",
    "HubResult",
    "NotifyFollowers",
    "ReadSnapshot",
    "RealtimeHub",
]
