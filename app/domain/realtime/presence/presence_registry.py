"""Presence registry: who is connected right now."""

from collections.abc import Callable
from datetime import datetime

from loguru import logger

from app.domain.utils.clock import utc_now
from app.schemas import OutboundEvent

from ..delivery import Delivery, broadcast
from .presence_models import ClosedConnection, PresenceOut, PresenceSnapshot, Session

DisconnectHook = Callable[[ClosedConnection], list[Delivery]]


class PresenceRegistry:
    """Single source of truth for online users.

    One session per user id; a newer connection replaces the previous one.
    Connection ids of every authenticated connection are tracked separately so
    a replaced connection can still be resolved to its user until it closes.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._bound: dict[str, str] = {}
        self._disconnect_hooks: list[DisconnectHook] = []

    def register_disconnect_hook(self, hook: DisconnectHook) -> None:
        self._disconnect_hooks.append(hook)

    # ==================== SESSIONS ====================

    def add_session(self, user_id: str, connection_id: str) -> list[Delivery]:
        """Bind ``connection_id`` as the user's session and announce it."""
        previous = self._sessions.get(user_id)
        if previous and previous.connection_id != connection_id:
            logger.info(
                "Session replaced: user_id={} old={} new={}",
                user_id,
                previous.connection_id,
                connection_id,
            )

        self._sessions[user_id] = Session(
            user_id=user_id,
            connection_id=connection_id,
            connected_at=self._clock(),
        )
        self._bound[connection_id] = user_id

        logger.info("User online: user_id={} connection_id={} total={}", user_id, connection_id, len(self))
        return [broadcast(OutboundEvent.USER_ONLINE, PresenceOut(user_id=user_id))]

    def remove_session(self, user_id: str) -> list[Delivery]:
        """Drop the user's session, announce it and run the cleanup hooks."""
        session = self._sessions.pop(user_id, None)
        if session is None:
            return []

        self._bound.pop(session.connection_id, None)
        logger.info("User offline: user_id={} total={}", user_id, len(self))

        deliveries = [broadcast(OutboundEvent.USER_OFFLINE, PresenceOut(user_id=user_id))]
        deliveries.extend(
            self._run_hooks(ClosedConnection(user_id, session.connection_id, session_ended=True))
        )
        return deliveries

    def remove_connection(self, connection_id: str) -> list[Delivery]:
        """Handle a transport disconnect.

        Removes the session only if ``connection_id`` is still the user's
        current connection. Connection-scoped hooks run either way.
        """
        user_id = self._bound.get(connection_id)
        if user_id is None:
            logger.debug("Disconnect of unknown connection: {}", connection_id)
            return []

        session = self._sessions.get(user_id)
        if session and session.connection_id == connection_id:
            return self.remove_session(user_id)

        self._bound.pop(connection_id, None)
        logger.info("Replaced connection closed: user_id={} connection_id={}", user_id, connection_id)
        return self._run_hooks(ClosedConnection(user_id, connection_id, session_ended=False))

    def _run_hooks(self, closed: ClosedConnection) -> list[Delivery]:
        deliveries: list[Delivery] = []
        for hook in self._disconnect_hooks:
            deliveries.extend(hook(closed))
        return deliveries

    # ==================== LOOKUPS ====================

    def is_online(self, user_id: str) -> bool:
        return user_id in self._sessions

    def get_session(self, user_id: str) -> Session | None:
        return self._sessions.get(user_id)

    def connection_for(self, user_id: str) -> str | None:
        session = self._sessions.get(user_id)
        return session.connection_id if session else None

    def user_for(self, connection_id: str) -> str | None:
        return self._bound.get(connection_id)

    def online_user_ids(self) -> list[str]:
        return list(self._sessions)

    def snapshot(self) -> PresenceSnapshot:
        user_ids = self.online_user_ids()
        return PresenceSnapshot(count=len(user_ids), user_ids=user_ids)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions
