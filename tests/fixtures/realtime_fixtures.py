"""Realtime test fixtures: fresh registries per test, fixed clock, recording sink."""

import itertools
from datetime import datetime, timezone

import pytest

from app.domain.realtime.call import CallSignalingCoordinator
from app.domain.realtime.delivery import Delivery
from app.domain.realtime.hub import Connect, RealtimeHub
from app.domain.realtime.live import LiveBroadcastCoordinator
from app.domain.realtime.presence import PresenceRegistry

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

__all__ = [
    "FIXED_NOW",
    "RecordingSink",
    "connect_user",
    "deliveries_to",
    "fixed_clock",
    "hub",
    "presence",
    "sequential_ids",
]


class RecordingSink:
    """DeliverySink that keeps every emitted delivery in order."""

    def __init__(self):
        self.deliveries: list[Delivery] = []

    async def emit(self, delivery: Delivery) -> None:
        self.deliveries.append(delivery)

    def events_to(self, connection_id: str) -> list[str]:
        return [d.event for d in self.deliveries if d.to == connection_id]

    def broadcasts(self, event: str) -> list[Delivery]:
        return [d for d in self.deliveries if d.is_broadcast and d.event == event]


def deliveries_to(deliveries: list[Delivery], connection_id: str, event: str | None = None) -> list[Delivery]:
    return [d for d in deliveries if d.to == connection_id and (event is None or d.event == event)]


def connect_user(hub: RealtimeHub, user_id: str, connection_id: str) -> list[Delivery]:
    return hub.handle(Connect(connection_id=connection_id, user_id=user_id)).deliveries


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def sequential_ids():
    counter = itertools.count(1)
    return lambda: f"s{next(counter)}"


@pytest.fixture
def presence(fixed_clock) -> PresenceRegistry:
    return PresenceRegistry(clock=fixed_clock)


@pytest.fixture
def hub(presence, fixed_clock, sequential_ids) -> RealtimeHub:
    return RealtimeHub(
        presence=presence,
        calls=CallSignalingCoordinator(presence, clock=fixed_clock),
        live=LiveBroadcastCoordinator(presence, id_factory=sequential_ids, clock=fixed_clock),
    )
