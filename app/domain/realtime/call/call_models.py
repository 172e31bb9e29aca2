"""Call domain models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from app.schemas import CallStatus, WireModel
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from .call_state_machine import CallStateMachine


class Call(BaseModel):
    """One-to-one call record, owned by the call registry."""

    call_id: str
    caller_id: str
    receiver_id: str
    offer: Any = None
    answer: Any = None
    status: CallStatus = CallStatus.RINGING
    created_at: datetime
    answered_at: datetime | None = None
    ended_at: datetime | None = None

    def transition(self, new_status: CallStatus, at: datetime) -> None:
        """Move to ``new_status``.

        Raises:
            AppError: E_INVALID_TRANSITION if the move is not allowed.
        """
        if not CallStateMachine.can_transition(self.status, new_status):
            allowed = sorted(str(s) for s in CallStateMachine.get_valid_transitions(self.status))
            raise AppError(
                errcode=AppErrorCode.E_INVALID_TRANSITION,
                errmesg=f"Call {self.call_id}: {self.status} -> {new_status} not allowed (allowed: {allowed})",
                status_code=HttpStatusCode.CONFLICT,
            )
        self.status = new_status
        if new_status == CallStatus.ACTIVE:
            self.answered_at = at
        elif CallStateMachine.is_terminal(new_status):
            self.ended_at = at

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.caller_id, self.receiver_id)

    def other_party(self, user_id: str) -> str:
        """The participant on the other leg relative to ``user_id``."""
        return self.receiver_id if user_id == self.caller_id else self.caller_id


class IncomingCallOut(WireModel):
    call_id: str
    caller_id: str
    offer: Any = None


class CallAnsweredOut(WireModel):
    call_id: str
    answer: Any = None


class CallRefOut(WireModel):
    call_id: str


class CallIceCandidateOut(WireModel):
    call_id: str
    candidate: Any = None
    from_user_id: str


class CallInitiateOut(WireModel):
    ok: bool
    call_id: str
