"""One-to-one call signaling.

Relays offer, answer and connectivity candidates between exactly two users
and drives each call through ``ringing -> active -> ended``. Signaling aimed at
an unknown call, or sent by someone who is not on the call, is dropped without
telling anyone; users recover by redialing.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger

from app.domain.utils.clock import utc_now
from app.schemas import CallStatus, OutboundEvent

from ..delivery import Delivery, deliver_to
from ..presence import ClosedConnection, PresenceRegistry
from .call_models import (
    Call,
    CallAnsweredOut,
    CallIceCandidateOut,
    CallRefOut,
    IncomingCallOut,
)
from .call_registry import CallRegistry
from .call_state_machine import CallStateMachine


class CallSignalingCoordinator:
    """Call registry owner and signaling relay."""

    def __init__(
        self,
        presence: PresenceRegistry,
        registry: CallRegistry | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._presence = presence
        self._registry = registry if registry is not None else CallRegistry()
        self._clock = clock
        presence.register_disconnect_hook(self.on_connection_closed)

    @property
    def registry(self) -> CallRegistry:
        return self._registry

    def get_call(self, call_id: str) -> Call | None:
        return self._registry.get(call_id)

    # ==================== LIFECYCLE ====================

    def initiate(self, caller_id: str, receiver_id: str, call_id: str, offer: Any) -> list[Delivery]:
        """Create a ringing call and ring the receiver if they are online.

        The record is created even when the receiver is offline; the caller
        is not told and relies on its own ringing timeout.
        """
        if not self._presence.is_online(caller_id):
            logger.debug("Call initiate from offline caller dropped: call_id={} caller={}", call_id, caller_id)
            return []

        if caller_id == receiver_id:
            logger.warning("Self call dropped: call_id={} user={}", call_id, caller_id)
            return []

        if call_id in self._registry:
            logger.warning("Duplicate call_id dropped: call_id={} caller={}", call_id, caller_id)
            return []

        call = Call(
            call_id=call_id,
            caller_id=caller_id,
            receiver_id=receiver_id,
            offer=offer,
            created_at=self._clock(),
        )
        self._registry.add(call)
        logger.info("Call initiated: call_id={} caller={} receiver={}", call_id, caller_id, receiver_id)

        receiver_conn = self._presence.connection_for(receiver_id)
        if receiver_conn is None:
            logger.info("Call receiver offline, nothing delivered: call_id={} receiver={}", call_id, receiver_id)
            return []

        out = IncomingCallOut(call_id=call_id, caller_id=caller_id, offer=offer)
        return [deliver_to(receiver_conn, OutboundEvent.INCOMING_CALL, out)]

    def answer(self, call_id: str, answer: Any, answerer_id: str | None = None) -> list[Delivery]:
        """Accept a ringing call; only the caller hears about it."""
        call = self._registry.get(call_id)
        if call is None:
            logger.debug("Answer for unknown call dropped: {}", call_id)
            return []

        if answerer_id is not None and answerer_id != call.receiver_id:
            logger.warning("Answer from non-receiver dropped: call_id={} user={}", call_id, answerer_id)
            return []

        if not CallStateMachine.can_transition(call.status, CallStatus.ACTIVE):
            logger.debug("Answer ignored, call_id={} is {}", call_id, call.status)
            return []

        call.answer = answer
        call.transition(CallStatus.ACTIVE, self._clock())
        logger.info("Call answered: call_id={}", call_id)

        return self._send_to_user(
            call.caller_id,
            OutboundEvent.CALL_ANSWERED,
            CallAnsweredOut(call_id=call_id, answer=answer),
        )

    def reject(self, call_id: str, requester_id: str | None = None) -> list[Delivery]:
        """Decline a call; the caller is told and the record is deleted."""
        call = self._registry.get(call_id)
        if call is None:
            logger.debug("Reject for unknown call dropped: {}", call_id)
            return []

        if requester_id is not None and requester_id != call.receiver_id:
            logger.warning("Reject from non-receiver dropped: call_id={} user={}", call_id, requester_id)
            return []

        self._finish(call)
        logger.info("Call rejected: call_id={}", call_id)
        return self._send_to_user(call.caller_id, OutboundEvent.CALL_REJECTED, CallRefOut(call_id=call_id))

    def end(self, call_id: str, requester_id: str) -> list[Delivery]:
        """Hang up; the other party is told and the record is deleted."""
        call = self._registry.get(call_id)
        if call is None:
            logger.debug("End for unknown call dropped: {}", call_id)
            return []

        if not call.is_participant(requester_id):
            logger.warning("End from non-participant dropped: call_id={} user={}", call_id, requester_id)
            return []

        self._finish(call)
        other = call.other_party(requester_id)
        logger.info("Call ended: call_id={} by={}", call_id, requester_id)
        return self._send_to_user(other, OutboundEvent.CALL_ENDED, CallRefOut(call_id=call_id))

    def relay_candidate(
        self,
        call_id: str,
        candidate: Any,
        target_user_id: str,
        sender_id: str,
    ) -> list[Delivery]:
        """Forward a connectivity candidate to the other leg of a live call."""
        call = self._registry.get(call_id)
        if call is None:
            logger.debug("Candidate for unknown call dropped: {}", call_id)
            return []

        if not call.is_participant(sender_id) or call.other_party(sender_id) != target_user_id:
            logger.debug(
                "Candidate with mismatched parties dropped: call_id={} from={} to={}",
                call_id,
                sender_id,
                target_user_id,
            )
            return []

        out = CallIceCandidateOut(call_id=call_id, candidate=candidate, from_user_id=sender_id)
        return self._send_to_user(target_user_id, OutboundEvent.CALL_ICE_CANDIDATE, out)

    # ==================== CLEANUP ====================

    def on_connection_closed(self, closed: ClosedConnection) -> list[Delivery]:
        """Force-end every call naming a user whose session just ended."""
        if not closed.session_ended:
            return []

        deliveries: list[Delivery] = []
        for call_id in self._registry.call_ids_for_user(closed.user_id):
            call = self._registry.get(call_id)
            if call is None:
                continue
            self._finish(call)
            other = call.other_party(closed.user_id)
            logger.info("Call force-ended on disconnect: call_id={} user={}", call_id, closed.user_id)
            deliveries.extend(
                self._send_to_user(other, OutboundEvent.CALL_ENDED, CallRefOut(call_id=call_id))
            )
        return deliveries

    # ==================== HELPERS ====================

    def _finish(self, call: Call) -> None:
        call.transition(CallStatus.ENDED, self._clock())
        self._registry.remove(call.call_id)

    def _send_to_user(self, user_id: str, event: OutboundEvent, payload: Any) -> list[Delivery]:
        connection_id = self._presence.connection_for(user_id)
        if connection_id is None:
            logger.debug("Call event {} dropped, user offline: {}", event, user_id)
            return []
        return [deliver_to(connection_id, event, payload)]
