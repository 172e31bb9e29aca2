"""Live broadcast domain models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.schemas import WireModel

DEFAULT_STREAM_TITLE = "Live Stream"


class LiveStream(BaseModel):
    """Live broadcast record.

    ``viewers`` holds connection ids; every entry has its own peer link to the
    host's connection.
    """

    stream_id: str
    host_user_id: str
    host_connection_id: str
    title: str = DEFAULT_STREAM_TITLE
    started_at: datetime
    viewers: set[str] = Field(default_factory=set)

    def summary(self) -> "StreamSummary":
        return StreamSummary(
            stream_id=self.stream_id,
            title=self.title,
            host_user_id=self.host_user_id,
            started_at=self.started_at,
            viewer_count=len(self.viewers),
        )


class StreamSummary(WireModel):
    """Directory entry for one live stream."""

    stream_id: str
    title: str
    host_user_id: str
    started_at: datetime
    viewer_count: int


class LiveStartOut(WireModel):
    ok: bool = True
    stream_id: str | None = None


class ViewerOut(WireModel):
    stream_id: str
    viewer_connection_id: str


class StreamRefOut(WireModel):
    stream_id: str


class FriendStartedOut(WireModel):
    stream_id: str
    host_user_id: str
    host_name: str | None = None
    title: str


class SignalOfferOut(WireModel):
    stream_id: str
    offer: Any = None
    from_: str = Field(alias="from")


class SignalAnswerOut(WireModel):
    stream_id: str
    from_: str = Field(alias="from")
    answer: Any = None


class SignalIceOut(WireModel):
    stream_id: str
    from_: str = Field(alias="from")
    candidate: Any = None


class FollowerInfo(BaseModel):
    """Result of a follower lookup for a stream host."""

    host_name: str | None = None
    follower_ids: list[str] = Field(default_factory=list)
