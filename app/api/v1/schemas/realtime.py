from datetime import datetime

from pydantic import BaseModel


class StreamOut(BaseModel):
    stream_id: str
    title: str
    host_user_id: str
    started_at: datetime
    viewer_count: int


class OnlineUsersOut(BaseModel):
    count: int
    user_ids: list[str]
