"""Call state machine for managing state transitions."""

from app.schemas import CallStatus


class CallStateMachine:
    """State machine for one-to-one call transitions.

    State flow with triggers:
    - RINGING (call-initiate) -> ACTIVE (call-answer from the receiver) | ENDED
    - ACTIVE -> ENDED (call-end from either party, or a participant disconnect)
    - ENDED is terminal

    Detailed triggers:
    1. RINGING: Set when the caller initiates with an offer
    2. ACTIVE: Set when the receiver answers; only valid from RINGING
    3. ENDED: Set by call-reject (from RINGING), call-end, or disconnect cleanup
    """

    TRANSITIONS: dict[CallStatus, set[CallStatus]] = {
        CallStatus.RINGING: {CallStatus.ACTIVE, CallStatus.ENDED},
        CallStatus.ACTIVE: {CallStatus.ENDED},
        CallStatus.ENDED: set(),
    }

    TERMINAL_STATES: set[CallStatus] = {CallStatus.ENDED}

    @classmethod
    def can_transition(cls, current: CallStatus, new: CallStatus) -> bool:
        """Check if state transition is valid.

        Args:
            current: Current call status
            new: Target status to transition to

        Returns:
            True if transition is valid, False otherwise
        """
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def is_terminal(cls, state: CallStatus) -> bool:
        return state in cls.TERMINAL_STATES

    @classmethod
    def get_valid_transitions(cls, state: CallStatus) -> set[CallStatus]:
        return cls.TRANSITIONS.get(state, set())

