"""Tests for CallSignalingCoordinator."""

import pytest

from app.domain.realtime.call import CallRegistry, CallSignalingCoordinator
from app.schemas import CallStatus
from tests.fixtures.realtime_fixtures import FIXED_NOW, deliveries_to

OFFER = {"type": "offer", "sdp": "v=0 offer"}
ANSWER = {"type": "answer", "sdp": "v=0 answer"}


@pytest.fixture
def calls(presence, fixed_clock):
    presence.add_session("alice", "ca")
    presence.add_session("bob", "cb")
    return CallSignalingCoordinator(presence, registry=CallRegistry(), clock=fixed_clock)


class TestInitiate:
    def test_rings_receiver(self, calls):
        deliveries = calls.initiate("alice", "bob", "c1", OFFER)

        assert [(d.to, d.event) for d in deliveries] == [("cb", "incoming-call")]
        assert deliveries[0].payload == {"callId": "c1", "callerId": "alice", "offer": OFFER}
        call = calls.get_call("c1")
        assert call is not None
        assert call.status == CallStatus.RINGING
        assert call.created_at == FIXED_NOW

    def test_offline_receiver_creates_record_silently(self, calls):
        deliveries = calls.initiate("alice", "carol", "c1", OFFER)

        assert deliveries == []
        assert "c1" in calls.registry

    def test_offline_caller_is_dropped(self, calls):
        assert calls.initiate("dave", "bob", "c1", OFFER) == []
        assert "c1" not in calls.registry

    def test_duplicate_call_id_is_dropped(self, calls, presence):
        presence.add_session("carol", "cc")
        calls.initiate("alice", "bob", "c1", OFFER)

        deliveries = calls.initiate("carol", "bob", "c1", OFFER)

        assert deliveries == []
        assert calls.get_call("c1").caller_id == "alice"

    def test_self_call_is_dropped(self, calls):
        assert calls.initiate("alice", "alice", "c1", OFFER) == []
        assert len(calls.registry) == 0


class TestAnswer:
    def test_caller_gets_answer_and_call_is_active(self, calls):
        calls.initiate("alice", "bob", "c1", OFFER)

        deliveries = calls.answer("c1", ANSWER, answerer_id="bob")

        assert [(d.to, d.event, d.payload) for d in deliveries] == [
            ("ca", "call-answered", {"callId": "c1", "answer": ANSWER})
        ]
        call = calls.get_call("c1")
        assert call.status == CallStatus.ACTIVE
        assert call.answer == ANSWER

    def test_answer_from_caller_is_dropped(self, calls):
        calls.initiate("alice", "bob", "c1", OFFER)

        assert calls.answer("c1", ANSWER, answerer_id="alice") == []
        assert calls.get_call("c1").status == CallStatus.RINGING

    def test_second_answer_is_ignored(self, calls):
        calls.initiate("alice", "bob", "c1", OFFER)
        calls.answer("c1", ANSWER, answerer_id="bob")

        assert calls.answer("c1", {"sdp": "again"}, answerer_id="bob") == []
        assert calls.get_call("c1").answer == ANSWER

    def test_unknown_call_is_dropped(self, calls):
        assert calls.answer("nope", ANSWER, answerer_id="bob") == []


class TestRejectAndEnd:
    def test_reject_notifies_caller_and_removes_record(self, calls):
        calls.initiate("alice", "bob", "c1", OFFER)

        deliveries = calls.reject("c1", requester_id="bob")

        assert [(d.to, d.event, d.payload) for d in deliveries] == [("ca", "call-rejected", {"callId": "c1"})]
        assert "c1" not in calls.registry
        assert calls.registry.call_ids_for_user("alice") == []

    def test_reject_from_caller_is_dropped(self, calls):
        calls.initiate("alice", "bob", "c1", OFFER)

        assert calls.reject("c1", requester_id="alice") == []
        assert "c1" in calls.registry

    @pytest.mark.parametrize(("requester", "other_conn"), [("alice", "cb"), ("bob", "ca")])
    def test_end_notifies_other_party(self, calls, requester, other_conn):
        calls.initiate("alice", "bob", "c1", OFFER)
        calls.answer("c1", ANSWER, answerer_id="bob")

        deliveries = calls.end("c1", requester_id=requester)

        assert [(d.to, d.event) for d in deliveries] == [(other_conn, "call-ended")]
        assert "c1" not in calls.registry

    def test_end_while_ringing(self, calls):
        calls.initiate("alice", "bob", "c1", OFFER)

        deliveries = calls.end("c1", requester_id="alice")

        assert [(d.to, d.event) for d in deliveries] == [("cb", "call-ended")]

    def test_end_from_outsider_is_dropped(self, calls, presence):
        presence.add_session("carol", "cc")
        calls.initiate("alice", "bob", "c1", OFFER)

        assert calls.end("c1", requester_id="carol") == []
        assert "c1" in calls.registry


class TestRelayCandidate:
    def test_candidate_reaches_other_party_with_sender(self, calls):
        calls.initiate("alice", "bob", "c1", OFFER)
        candidate = {"candidate": "candidate:1 1 udp 2122260223 10.0.0.1 5000 typ host"}

        deliveries = calls.relay_candidate("c1", candidate, target_user_id="bob", sender_id="alice")

        assert [(d.to, d.event) for d in deliveries] == [("cb", "call-ice-candidate")]
        assert deliveries[0].payload == {"callId": "c1", "candidate": candidate, "fromUserId": "alice"}

    def test_candidate_for_unknown_call_is_dropped(self, calls):
        assert calls.relay_candidate("nope", {}, target_user_id="bob", sender_id="alice") == []

    def test_candidate_to_outsider_is_dropped(self, calls, presence):
        presence.add_session("carol", "cc")
        calls.initiate("alice", "bob", "c1", OFFER)

        assert calls.relay_candidate("c1", {}, target_user_id="carol", sender_id="alice") == []

    def test_candidate_from_outsider_is_dropped(self, calls, presence):
        presence.add_session("carol", "cc")
        calls.initiate("alice", "bob", "c1", OFFER)

        assert calls.relay_candidate("c1", {}, target_user_id="bob", sender_id="carol") == []


class TestDisconnectCleanup:
    @pytest.mark.parametrize("answered", [False, True])
    @pytest.mark.parametrize(("leaving", "leaving_conn", "other_conn"), [("alice", "ca", "cb"), ("bob", "cb", "ca")])
    def test_counterpart_gets_call_ended_once(self, calls, presence, answered, leaving, leaving_conn, other_conn):
        # Arrange
        calls.initiate("alice", "bob", "c1", OFFER)
        if answered:
            calls.answer("c1", ANSWER, answerer_id="bob")

        # Act
        deliveries = presence.remove_connection(leaving_conn)

        # Assert
        ended = deliveries_to(deliveries, other_conn, "call-ended")
        assert len(ended) == 1
        assert ended[0].payload == {"callId": "c1"}
        assert "c1" not in calls.registry
        assert calls.registry.call_ids_for_user("alice") == []
        assert calls.registry.call_ids_for_user("bob") == []

    def test_every_call_of_the_user_is_ended(self, calls, presence):
        presence.add_session("carol", "cc")
        calls.initiate("alice", "bob", "c1", OFFER)
        calls.initiate("carol", "alice", "c2", OFFER)

        deliveries = presence.remove_connection("ca")

        assert len(deliveries_to(deliveries, "cb", "call-ended")) == 1
        assert len(deliveries_to(deliveries, "cc", "call-ended")) == 1
        assert len(calls.registry) == 0

    def test_replaced_connection_keeps_calls(self, calls, presence):
        calls.initiate("alice", "bob", "c1", OFFER)
        presence.add_session("alice", "ca2")

        deliveries = presence.remove_connection("ca")

        assert deliveries == []
        assert "c1" in calls.registry

    def test_unrelated_calls_survive(self, calls, presence):
        presence.add_session("carol", "cc")
        presence.add_session("dave", "cd")
        calls.initiate("carol", "dave", "c2", OFFER)

        presence.remove_connection("ca")

        assert "c2" in calls.registry
