from itera.managers.circuit_breaker import (
    CircuitBreaker,
    CircuitState,
    ai_circuit_breaker,
    image_circuit_breaker,
)
from itera.managers.debouncer import DestinationDebouncer, ValidationState, ValidationStatus
from itera.managers.plan_state import PlanState, swap_activity
from itera.managers.snapshot import SnapshotStore, dump_snapshot, strip_images

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "DestinationDebouncer",
    "PlanState",
    "SnapshotStore",
    "ValidationState",
    "ValidationStatus",
    "ai_circuit_breaker",
    "dump_snapshot",
    "image_circuit_breaker",
    "strip_images",
    "swap_activity",
]
