"""Tests for CallStateMachine state transitions."""

import itertools

import pytest

from app.domain.realtime.call import Call, CallStateMachine
from app.schemas import CallStatus
from app.utils.app_errors import AppError
from tests.fixtures.realtime_fixtures import FIXED_NOW


class TestCanTransition:
    """Tests for CallStateMachine.can_transition method."""

    def test_ringing_to_active_valid(self):
        """Test RINGING -> ACTIVE is a valid transition (receiver answered)."""
        assert CallStateMachine.can_transition(CallStatus.RINGING, CallStatus.ACTIVE) is True

    def test_ringing_to_ended_valid(self):
        """Test RINGING -> ENDED is a valid transition (rejected or hung up while ringing)."""
        assert CallStateMachine.can_transition(CallStatus.RINGING, CallStatus.ENDED) is True

    def test_active_to_ended_valid(self):
        """Test ACTIVE -> ENDED is a valid transition."""
        assert CallStateMachine.can_transition(CallStatus.ACTIVE, CallStatus.ENDED) is True

    def test_active_to_ringing_invalid(self):
        """Test ACTIVE -> RINGING is invalid (no moving backward)."""
        assert CallStateMachine.can_transition(CallStatus.ACTIVE, CallStatus.RINGING) is False

    def test_ended_is_terminal(self):
        """Test ENDED has no outgoing transitions."""
        for target in CallStatus:
            assert CallStateMachine.can_transition(CallStatus.ENDED, target) is False

    def test_self_transitions_invalid(self):
        for status in CallStatus:
            assert CallStateMachine.can_transition(status, status) is False

    def test_only_forward_paths_exist(self):
        """Every allowed edge moves forward along ringing -> active -> ended."""
        order = [CallStatus.RINGING, CallStatus.ACTIVE, CallStatus.ENDED]
        for current, new in itertools.product(CallStatus, CallStatus):
            if CallStateMachine.can_transition(current, new):
                assert order.index(new) > order.index(current)


class TestHelpers:
    def test_is_terminal(self):
        assert CallStateMachine.is_terminal(CallStatus.ENDED) is True
        assert CallStateMachine.is_terminal(CallStatus.RINGING) is False
        assert CallStateMachine.is_terminal(CallStatus.ACTIVE) is False

    def test_get_valid_transitions(self):
        assert CallStateMachine.get_valid_transitions(CallStatus.RINGING) == {
            CallStatus.ACTIVE,
            CallStatus.ENDED,
        }
        assert CallStateMachine.get_valid_transitions(CallStatus.ENDED) == set()


class TestCallTransition:
    """Tests for Call.transition."""

    def _call(self) -> Call:
        return Call(call_id="c1", caller_id="alice", receiver_id="bob", created_at=FIXED_NOW)

    def test_answer_sets_answered_at(self):
        call = self._call()

        call.transition(CallStatus.ACTIVE, FIXED_NOW)

        assert call.status == CallStatus.ACTIVE
        assert call.answered_at == FIXED_NOW

    def test_end_sets_ended_at(self):
        call = self._call()

        call.transition(CallStatus.ENDED, FIXED_NOW)

        assert call.status == CallStatus.ENDED
        assert call.ended_at == FIXED_NOW

    def test_backward_move_raises(self):
        call = self._call()
        call.transition(CallStatus.ACTIVE, FIXED_NOW)

        with pytest.raises(AppError) as exc_info:
            call.transition(CallStatus.RINGING, FIXED_NOW)

        assert exc_info.value.errcode == "E_INVALID_TRANSITION"
        assert exc_info.value.status_code == 409
        assert "allowed: ['ended']" in exc_info.value.errmesg
        assert call.status == CallStatus.ACTIVE

    def test_other_party(self):
        call = self._call()

        assert call.other_party("alice") == "bob"
        assert call.other_party("bob") == "alice"
        assert call.is_participant("carol") is False
