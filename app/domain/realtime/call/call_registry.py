"""In-memory call registry keyed by call id, indexed by participant."""

from collections import defaultdict
from collections.abc import Iterator

from .call_models import Call


class CallRegistry:
    """Owns every live call record.

    ``_by_user`` is kept in step with ``_calls`` so disconnect cleanup only
    visits the calls that name the departing user.
    """

    def __init__(self):
        self._calls: dict[str, Call] = {}
        self._by_user: defaultdict[str, set[str]] = defaultdict(set)

    def add(self, call: Call) -> None:
        self._calls[call.call_id] = call
        self._by_user[call.caller_id].add(call.call_id)
        self._by_user[call.receiver_id].add(call.call_id)

    def get(self, call_id: str) -> Call | None:
        return self._calls.get(call_id)

    def remove(self, call_id: str) -> Call | None:
        call = self._calls.pop(call_id, None)
        if call is None:
            return None
        for user_id in (call.caller_id, call.receiver_id):
            call_ids = self._by_user.get(user_id)
            if call_ids is None:
                continue
            call_ids.discard(call_id)
            if not call_ids:
                del self._by_user[user_id]
        return call

    def call_ids_for_user(self, user_id: str) -> list[str]:
        return list(self._by_user.get(user_id, ()))

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._calls

    def __len__(self) -> int:
        return len(self._calls)

    def __iter__(self) -> Iterator[Call]:
        return iter(list(self._calls.values()))
