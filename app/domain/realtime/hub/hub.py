"""Realtime hub: routes commands to the registries and coordinators.

``handle`` is a synchronous transition: it validates the command, mutates the
in-memory state and returns the deliveries to emit plus an optional ack for
the sender. It never awaits, so one command is always applied completely
before the next one is looked at.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from pydantic import BaseModel, ValidationError

from app.domain.utils.idgen import new_call_id
from app.schemas import InboundEvent
from app.schemas.realtime_payloads import (
    CallAnswerIn,
    CallIceCandidateIn,
    CallInitiateIn,
    CallRefIn,
    LiveSignalAnswerIn,
    LiveSignalIceIn,
    LiveSignalOfferIn,
    LiveStartIn,
    LiveStreamRefIn,
    MessageReadIn,
    MessageSendIn,
    TypingIn,
)
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from ..call import CallSignalingCoordinator
from ..call.call_models import CallInitiateOut
from ..delivery import Delivery
from ..live import LiveBroadcastCoordinator, LiveStream
from ..live.live_models import LiveStartOut
from ..messaging import MessagingRelay, TypingIndicatorRelay
from ..presence import PresenceRegistry
from .commands import ClientEvent, Command, Connect, Disconnect, NotifyFollowers, ReadSnapshot


@dataclass
class HubResult:
    deliveries: list[Delivery] = field(default_factory=list)
    ack: Any = None
    started_stream: LiveStream | None = None


EventHandler = Callable[[str, str, Any], HubResult]


class RealtimeHub:
    """Owns the registries for one process and wires the coordinators to them."""

    def __init__(
        self,
        presence: PresenceRegistry | None = None,
        calls: CallSignalingCoordinator | None = None,
        live: LiveBroadcastCoordinator | None = None,
    ):
        self.presence = presence if presence is not None else PresenceRegistry()
        self.messaging = MessagingRelay(self.presence)
        self.typing = TypingIndicatorRelay(self.presence)
        self.calls = calls if calls is not None else CallSignalingCoordinator(self.presence)
        self.live = live if live is not None else LiveBroadcastCoordinator(self.presence)

        self._handlers: dict[str, EventHandler] = {
            InboundEvent.TYPING_START.value: self._on_typing_start,
            InboundEvent.TYPING_STOP.value: self._on_typing_stop,
            InboundEvent.MESSAGE_SEND.value: self._on_message_send,
            InboundEvent.MESSAGE_READ.value: self._on_message_read,
            InboundEvent.CALL_INITIATE.value: self._on_call_initiate,
            InboundEvent.CALL_ANSWER.value: self._on_call_answer,
            InboundEvent.CALL_REJECT.value: self._on_call_reject,
            InboundEvent.CALL_END.value: self._on_call_end,
            InboundEvent.CALL_ICE_CANDIDATE.value: self._on_call_ice_candidate,
            InboundEvent.LIVE_START.value: self._on_live_start,
            InboundEvent.LIVE_LIST.value: self._on_live_list,
            InboundEvent.LIVE_JOIN.value: self._on_live_join,
            InboundEvent.LIVE_LEAVE.value: self._on_live_leave,
            InboundEvent.LIVE_END.value: self._on_live_end,
            InboundEvent.LIVE_SIGNAL_OFFER.value: self._on_live_signal_offer,
            InboundEvent.LIVE_SIGNAL_ANSWER.value: self._on_live_signal_answer,
            InboundEvent.LIVE_SIGNAL_ICE.value: self._on_live_signal_ice,
        }

    @property
    def client_events(self) -> list[str]:
        return list(self._handlers)

    def handle(self, command: Command) -> HubResult:
        if isinstance(command, Connect):
            return HubResult(self.presence.add_session(command.user_id, command.connection_id))

        if isinstance(command, Disconnect):
            return HubResult(self.presence.remove_connection(command.connection_id))

        if isinstance(command, ClientEvent):
            return self._handle_client_event(command)

        if isinstance(command, NotifyFollowers):
            return HubResult(
                self.live.notify_followers(command.stream_id, command.host_name, command.follower_ids)
            )

        if isinstance(command, ReadSnapshot):
            if command.kind == "streams":
                return HubResult(ack=self.live.list_streams())
            return HubResult(ack=self.presence.snapshot())

        raise TypeError(f"Unsupported command: {command!r}")

    def _handle_client_event(self, command: ClientEvent) -> HubResult:
        user_id = self.presence.user_for(command.connection_id)
        if user_id is None:
            logger.warning("Event {} from unauthenticated connection {} dropped", command.event, command.connection_id)
            return HubResult()

        handler = self._handlers.get(command.event)
        try:
            if handler is None:
                raise AppError(
                    errcode=AppErrorCode.E_UNKNOWN_EVENT,
                    errmesg=f"Unknown event: {command.event}",
                    status_code=HttpStatusCode.BAD_REQUEST,
                )
            return handler(command.connection_id, user_id, command.data)
        except AppError as exc:
            logger.warning(
                "{} {} event={} connection_id={} msg={} caller={}",
                exc.errcode,
                exc.erresid,
                command.event,
                command.connection_id,
                exc.errmesg,
                exc.caller_info,
            )
            return HubResult()

    @staticmethod
    def _parse(model: type[BaseModel], data: Any) -> Any:
        try:
            return model.model_validate(data if data is not None else {})
        except ValidationError as exc:
            raise AppError(
                errcode=AppErrorCode.E_INVALID_PARAMS,
                errmesg=f"{model.__name__}: {exc.errors(include_url=False)}",
                status_code=HttpStatusCode.UNPROCESSABLE_ENTITY,
            ) from exc

    # ==================== MESSAGING ====================

    def _on_typing_start(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(TypingIn, data)
        return HubResult(self.typing.start(user_id, payload.receiver_id))

    def _on_typing_stop(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(TypingIn, data)
        return HubResult(self.typing.stop(user_id, payload.receiver_id))

    def _on_message_send(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(MessageSendIn, data)
        return HubResult(
            self.messaging.send(user_id, payload.receiver_id, payload.message, sender_connection_id=connection_id)
        )

    def _on_message_read(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(MessageReadIn, data)
        return HubResult(self.messaging.mark_read(payload.message_ids, payload.sender_id, user_id))

    # ==================== CALLS ====================

    def _on_call_initiate(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(CallInitiateIn, data)
        call_id = payload.call_id or new_call_id()
        existed = call_id in self.calls.registry

        deliveries = self.calls.initiate(user_id, payload.receiver_id, call_id, payload.offer)
        created = not existed and call_id in self.calls.registry
        return HubResult(deliveries, ack=CallInitiateOut(ok=created, call_id=call_id).to_wire())

    def _on_call_answer(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(CallAnswerIn, data)
        return HubResult(self.calls.answer(payload.call_id, payload.answer, answerer_id=user_id))

    def _on_call_reject(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(CallRefIn, data)
        return HubResult(self.calls.reject(payload.call_id, requester_id=user_id))

    def _on_call_end(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(CallRefIn, data)
        return HubResult(self.calls.end(payload.call_id, requester_id=user_id))

    def _on_call_ice_candidate(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(CallIceCandidateIn, data)
        return HubResult(
            self.calls.relay_candidate(payload.call_id, payload.candidate, payload.target_user_id, sender_id=user_id)
        )

    # ==================== LIVE ====================

    def _on_live_start(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(LiveStartIn, data)
        stream, deliveries = self.live.start(user_id, connection_id, payload.title)
        ack = LiveStartOut(stream_id=stream.stream_id).to_wire()
        return HubResult(deliveries, ack=ack, started_stream=stream)

    def _on_live_list(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        return HubResult(ack=[entry.to_wire() for entry in self.live.list_streams()])

    def _on_live_join(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(LiveStreamRefIn, data)
        joined, deliveries = self.live.join(payload.stream_id, connection_id)
        return HubResult(deliveries, ack=joined)

    def _on_live_leave(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(LiveStreamRefIn, data)
        return HubResult(self.live.leave(payload.stream_id, connection_id))

    def _on_live_end(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(LiveStreamRefIn, data)
        return HubResult(self.live.end(payload.stream_id, requester_connection_id=connection_id))

    def _on_live_signal_offer(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(LiveSignalOfferIn, data)
        return HubResult(self.live.relay_offer(payload.stream_id, connection_id, payload.to, payload.offer))

    def _on_live_signal_answer(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(LiveSignalAnswerIn, data)
        return HubResult(self.live.relay_answer(payload.stream_id, connection_id, payload.answer))

    def _on_live_signal_ice(self, connection_id: str, user_id: str, data: Any) -> HubResult:
        payload = self._parse(LiveSignalIceIn, data)
        return HubResult(
            self.live.relay_candidate(payload.stream_id, connection_id, payload.candidate, to=payload.to)
        )
