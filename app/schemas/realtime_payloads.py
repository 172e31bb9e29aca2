"""Inbound socket payload schemas.

Field names are snake_case in Python and camelCase on the wire. Opaque
signaling blobs (session descriptions, candidates) are typed as ``Any`` since
the coordinators never look inside them.
"""

from typing import Any

from pydantic import Field

from .wire import WireModel


class TypingIn(WireModel):
    receiver_id: str = Field(min_length=1)


class MessageSendIn(WireModel):
    receiver_id: str = Field(min_length=1)
    message: dict[str, Any]


class MessageReadIn(WireModel):
    message_ids: list[str]
    sender_id: str = Field(min_length=1)


class CallInitiateIn(WireModel):
    receiver_id: str = Field(min_length=1)
    # Generated server-side when omitted.
    call_id: str | None = Field(default=None, min_length=1)
    offer: Any = None


class CallAnswerIn(WireModel):
    call_id: str = Field(min_length=1)
    answer: Any = None


class CallRefIn(WireModel):
    call_id: str = Field(min_length=1)


class CallIceCandidateIn(WireModel):
    call_id: str = Field(min_length=1)
    candidate: Any = None
    target_user_id: str = Field(min_length=1)


class LiveStartIn(WireModel):
    title: str | None = None


class LiveStreamRefIn(WireModel):
    stream_id: str = Field(min_length=1)


class LiveSignalOfferIn(WireModel):
    stream_id: str = Field(min_length=1)
    to: str = Field(min_length=1)
    offer: Any = None


class LiveSignalAnswerIn(WireModel):
    stream_id: str = Field(min_length=1)
    answer: Any = None


class LiveSignalIceIn(WireModel):
    stream_id: str = Field(min_length=1)
    to: str | None = None
    candidate: Any = None
