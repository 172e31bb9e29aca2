"""Commands accepted by the realtime hub."""

from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass(frozen=True, slots=True)
class Connect:
    """An authenticated connection becomes the user's session."""

    connection_id: str
    user_id: str


@dataclass(frozen=True, slots=True)
class Disconnect:
    connection_id: str


@dataclass(frozen=True, slots=True)
class ClientEvent:
    """A named event sent by a connected client, payload not yet validated."""

    connection_id: str
    event: str
    data: Any = None


@dataclass(frozen=True, slots=True)
class NotifyFollowers:
    """Follower lookup finished for a stream that was started earlier."""

    stream_id: str
    host_name: str | None
    follower_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ReadSnapshot:
    """Read-only view for the HTTP layer, taken between two commands."""

    kind: Literal["streams", "presence"]


Command = Connect | Disconnect | ClientEvent | NotifyFollowers | ReadSnapshot
