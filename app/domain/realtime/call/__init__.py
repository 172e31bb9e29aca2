from .call_coordinator import CallSignalingCoordinator
from .call_models import Call
from .call_registry import CallRegistry
from .call_state_machine import CallStateMachine

__all__ = [
    "Call",
    "CallRegistry",
    "CallSignalingCoordinator",
    "CallStateMachine",
]
