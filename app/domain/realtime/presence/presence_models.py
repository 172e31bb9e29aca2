"""Presence domain models."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel

from app.schemas import WireModel


class Session(BaseModel):
    """Live binding between a user and its current connection."""

    user_id: str
    connection_id: str
    connected_at: datetime


@dataclass(frozen=True, slots=True)
class ClosedConnection:
    """Passed to disconnect hooks.

    ``session_ended`` is False when the connection had already been replaced by
    a newer one for the same user, in which case user-scoped state survives.
    """

    user_id: str
    connection_id: str
    session_ended: bool


class PresenceOut(WireModel):
    user_id: str


class PresenceSnapshot(BaseModel):
    count: int
    user_ids: list[str]
