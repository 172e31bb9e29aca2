"""Socket event names exchanged with clients."""

from enum import Enum


class InboundEvent(str, Enum):
    """Events a connected client may send."""

    TYPING_START = "typing-start"
    TYPING_STOP = "typing-stop"

    MESSAGE_SEND = "message-send"
    MESSAGE_READ = "message-read"

    CALL_INITIATE = "call-initiate"
    CALL_ANSWER = "call-answer"
    CALL_REJECT = "call-reject"
    CALL_END = "call-end"
    CALL_ICE_CANDIDATE = "call-ice-candidate"

    LIVE_START = "live-start"
    LIVE_LIST = "live-list"
    LIVE_JOIN = "live-join"
    LIVE_LEAVE = "live-leave"
    LIVE_END = "live-end"
    LIVE_SIGNAL_OFFER = "live-signal-offer"
    LIVE_SIGNAL_ANSWER = "live-signal-answer"
    LIVE_SIGNAL_ICE = "live-signal-ice"

    def __str__(self) -> str:
        return self.value


class OutboundEvent(str, Enum):
    """Events the server emits to clients."""

    USER_ONLINE = "user-online"
    USER_OFFLINE = "user-offline"

    TYPING_START = "typing-start"
    TYPING_STOP = "typing-stop"

    MESSAGE_RECEIVE = "message-receive"
    MESSAGE_DELIVERED = "message-delivered"
    MESSAGE_READ = "message-read"

    INCOMING_CALL = "incoming-call"
    CALL_ANSWERED = "call-answered"
    CALL_REJECTED = "call-rejected"
    CALL_ENDED = "call-ended"
    CALL_ICE_CANDIDATE = "call-ice-candidate"

    STREAMS_UPDATED = "streams-updated"
    VIEWER_JOINED = "viewer-joined"
    VIEWER_LEFT = "viewer-left"
    STREAM_ENDED = "stream-ended"
    LIVE_FRIEND_STARTED = "live-friend-started"
    LIVE_SIGNAL_OFFER = "live-signal-offer"
    LIVE_SIGNAL_ANSWER = "live-signal-answer"
    LIVE_SIGNAL_ICE = "live-signal-ice"

    def __str__(self) -> str:
        return self.value


__all__ = ["InboundEvent", "OutboundEvent"]
