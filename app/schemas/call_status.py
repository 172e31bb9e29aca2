"""Call lifecycle states."""

from enum import Enum


class CallStatus(str, Enum):
    """One-to-one call lifecycle states.

    State Transition Flow:

    RINGING → ACTIVE → ENDED
       ↓
     ENDED

    State Descriptions:
    - RINGING: Offer sent by the caller, waiting for the receiver. Set by call-initiate.
    - ACTIVE: Receiver answered. Set by call-answer.
    - ENDED: Rejected, hung up, or a participant disconnected.

    Terminal states (no further transitions): ENDED
    """

    RINGING = "ringing"
    ACTIVE = "active"
    ENDED = "ended"

    def __str__(self) -> str:
        return self.value


__all__ = ["CallStatus"]
