from .live_coordinator import LiveBroadcastCoordinator
from .live_models import DEFAULT_STREAM_TITLE, FollowerInfo, LiveStream, StreamSummary
from .stream_registry import StreamRegistry

__all__ = [
    "DEFAULT_STREAM_TITLE",
    "FollowerInfo",
    "LiveBroadcastCoordinator",
    "LiveStream",
    "StreamRegistry",
    "StreamSummary",
]
