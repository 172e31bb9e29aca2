"""Live broadcast signaling in a star topology.

The host keeps one independent peer link per viewer; the coordinator only
brokers the signaling for each (stream, viewer connection) pair and never
touches media. Viewers are addressed by connection id, not user id.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger

from app.domain.utils.clock import utc_now
from app.domain.utils.idgen import new_stream_id
from app.schemas import OutboundEvent

from ..delivery import Delivery, broadcast, deliver_to
from ..presence import ClosedConnection, PresenceRegistry
from .live_models import (
    DEFAULT_STREAM_TITLE,
    FriendStartedOut,
    LiveStream,
    SignalAnswerOut,
    SignalIceOut,
    SignalOfferOut,
    StreamRefOut,
    StreamSummary,
    ViewerOut,
)
from .stream_registry import StreamRegistry


class LiveBroadcastCoordinator:
    """Stream registry owner and per-viewer signaling broker."""

    def __init__(
        self,
        presence: PresenceRegistry,
        registry: StreamRegistry | None = None,
        id_factory: Callable[[], str] = new_stream_id,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._presence = presence
        self._registry = registry if registry is not None else StreamRegistry()
        self._id_factory = id_factory
        self._clock = clock
        presence.register_disconnect_hook(self.on_connection_closed)

    @property
    def registry(self) -> StreamRegistry:
        return self._registry

    def get_stream(self, stream_id: str) -> LiveStream | None:
        return self._registry.get(stream_id)

    # ==================== DIRECTORY ====================

    def list_streams(self) -> list[StreamSummary]:
        """Point-in-time directory of live streams."""
        return [stream.summary() for stream in self._registry]

    def _directory_update(self) -> Delivery:
        return broadcast(OutboundEvent.STREAMS_UPDATED, [entry.to_wire() for entry in self.list_streams()])

    # ==================== LIFECYCLE ====================

    def start(
        self,
        host_user_id: str,
        host_connection_id: str,
        title: str | None = None,
    ) -> tuple[LiveStream, list[Delivery]]:
        """Open a stream hosted by ``host_connection_id`` and announce it."""
        stream = LiveStream(
            stream_id=self._id_factory(),
            host_user_id=host_user_id,
            host_connection_id=host_connection_id,
            title=(title or "").strip() or DEFAULT_STREAM_TITLE,
            started_at=self._clock(),
        )
        self._registry.add(stream)
        logger.info(
            "Live stream started: stream_id={} host={} title={!r}",
            stream.stream_id,
            host_user_id,
            stream.title,
        )
        return stream, [self._directory_update()]

    def join(self, stream_id: str, viewer_connection_id: str) -> tuple[bool, list[Delivery]]:
        """Add a viewer and ask the host to open a peer link for it.

        Returns whether the stream exists. Joining twice keeps a single entry
        and does not notify the host again.
        """
        stream = self._registry.get(stream_id)
        if stream is None:
            logger.debug("Join for unknown stream dropped: {}", stream_id)
            return False, []

        if viewer_connection_id == stream.host_connection_id:
            logger.debug("Host cannot join its own stream: {}", stream_id)
            return False, []

        if not self._registry.add_viewer(stream_id, viewer_connection_id):
            return True, []

        logger.info(
            "Viewer joined: stream_id={} viewer={} viewers={}",
            stream_id,
            viewer_connection_id,
            len(stream.viewers),
        )
        out = ViewerOut(stream_id=stream_id, viewer_connection_id=viewer_connection_id)
        return True, [
            deliver_to(stream.host_connection_id, OutboundEvent.VIEWER_JOINED, out),
            self._directory_update(),
        ]

    def leave(self, stream_id: str, viewer_connection_id: str) -> list[Delivery]:
        """Remove a viewer and tell the host to tear down that peer link."""
        stream = self._registry.get(stream_id)
        if stream is None or not self._registry.remove_viewer(stream_id, viewer_connection_id):
            logger.debug("Leave dropped: stream_id={} viewer={}", stream_id, viewer_connection_id)
            return []

        logger.info("Viewer left: stream_id={} viewer={}", stream_id, viewer_connection_id)
        return [self._viewer_left(stream, viewer_connection_id), self._directory_update()]

    def end(self, stream_id: str, requester_connection_id: str | None = None) -> list[Delivery]:
        """Close a stream; only its host connection may do so."""
        stream = self._registry.get(stream_id)
        if stream is None:
            logger.debug("End for unknown stream dropped: {}", stream_id)
            return []

        if requester_connection_id is not None and requester_connection_id != stream.host_connection_id:
            logger.warning(
                "End from non-host dropped: stream_id={} requester={}",
                stream_id,
                requester_connection_id,
            )
            return []

        deliveries = self._close(stream)
        deliveries.append(self._directory_update())
        return deliveries

    def _close(self, stream: LiveStream) -> list[Delivery]:
        viewers = sorted(stream.viewers)
        self._registry.remove(stream.stream_id)
        logger.info("Live stream ended: stream_id={} viewers={}", stream.stream_id, len(viewers))

        out = StreamRefOut(stream_id=stream.stream_id)
        return [deliver_to(viewer, OutboundEvent.STREAM_ENDED, out) for viewer in viewers]

    def _viewer_left(self, stream: LiveStream, viewer_connection_id: str) -> Delivery:
        out = ViewerOut(stream_id=stream.stream_id, viewer_connection_id=viewer_connection_id)
        return deliver_to(stream.host_connection_id, OutboundEvent.VIEWER_LEFT, out)

    # ==================== SIGNALING ====================

    def relay_offer(self, stream_id: str, sender_connection_id: str, to: str, offer: Any) -> list[Delivery]:
        """Host -> viewer session description."""
        stream = self._registry.get(stream_id)
        if stream is None or sender_connection_id != stream.host_connection_id or to not in stream.viewers:
            logger.debug("Offer dropped: stream_id={} from={} to={}", stream_id, sender_connection_id, to)
            return []

        out = SignalOfferOut(stream_id=stream_id, offer=offer, from_=sender_connection_id)
        return [deliver_to(to, OutboundEvent.LIVE_SIGNAL_OFFER, out)]

    def relay_answer(self, stream_id: str, sender_connection_id: str, answer: Any) -> list[Delivery]:
        """Viewer -> host session description."""
        stream = self._registry.get(stream_id)
        if stream is None or sender_connection_id not in stream.viewers:
            logger.debug("Answer dropped: stream_id={} from={}", stream_id, sender_connection_id)
            return []

        out = SignalAnswerOut(stream_id=stream_id, from_=sender_connection_id, answer=answer)
        return [deliver_to(stream.host_connection_id, OutboundEvent.LIVE_SIGNAL_ANSWER, out)]

    def relay_candidate(
        self,
        stream_id: str,
        sender_connection_id: str,
        candidate: Any,
        to: str | None = None,
    ) -> list[Delivery]:
        """Connectivity candidate in either direction.

        Without ``to`` the candidate comes from a viewer and goes to the host.
        """
        stream = self._registry.get(stream_id)
        if stream is None:
            logger.debug("Candidate for unknown stream dropped: {}", stream_id)
            return []

        host = stream.host_connection_id
        if to is None or to == host:
            allowed = sender_connection_id in stream.viewers
            target = host
        else:
            allowed = sender_connection_id == host and to in stream.viewers
            target = to

        if not allowed:
            logger.debug("Candidate dropped: stream_id={} from={} to={}", stream_id, sender_connection_id, to)
            return []

        out = SignalIceOut(stream_id=stream_id, from_=sender_connection_id, candidate=candidate)
        return [deliver_to(target, OutboundEvent.LIVE_SIGNAL_ICE, out)]

    # ==================== FOLLOWERS ====================

    def notify_followers(
        self,
        stream_id: str,
        host_name: str | None,
        follower_ids: list[str],
    ) -> list[Delivery]:
        """Tell online followers that the host went live, if the stream still runs."""
        stream = self._registry.get(stream_id)
        if stream is None:
            return []

        out = FriendStartedOut(
            stream_id=stream_id,
            host_user_id=stream.host_user_id,
            host_name=host_name,
            title=stream.title,
        )
        deliveries = []
        for follower_id in dict.fromkeys(follower_ids):
            if follower_id == stream.host_user_id:
                continue
            connection_id = self._presence.connection_for(follower_id)
            if connection_id is not None:
                deliveries.append(deliver_to(connection_id, OutboundEvent.LIVE_FRIEND_STARTED, out))

        logger.info("Followers notified: stream_id={} online={}", stream_id, len(deliveries))
        return deliveries

    # ==================== CLEANUP ====================

    def on_connection_closed(self, closed: ClosedConnection) -> list[Delivery]:
        """End streams hosted by the connection and drop it from every viewer set."""
        connection_id = closed.connection_id
        deliveries: list[Delivery] = []
        changed = False

        for stream_id in self._registry.hosted_by(connection_id):
            stream = self._registry.get(stream_id)
            if stream is not None:
                deliveries.extend(self._close(stream))
                changed = True

        for stream_id in self._registry.viewed_by(connection_id):
            stream = self._registry.get(stream_id)
            if stream is not None and self._registry.remove_viewer(stream_id, connection_id):
                logger.info("Viewer dropped on disconnect: stream_id={} viewer={}", stream_id, connection_id)
                deliveries.append(self._viewer_left(stream, connection_id))
                changed = True

        if changed:
            deliveries.append(self._directory_update())
        return deliveries
