from itera.errors.ai import (
    ActivitySwapError,
    AiAuthenticationError,
    AiError,
    AIGenerationError,
    AiNetworkError,
    AiQuotaExceededError,
    AiResponseError,
    ImageGenerationError,
    InvalidDestinationError,
    ItineraryGenerationError,
    MalformedResponseError,
    SchemaViolationError,
)
from itera.errors.base import BaseAppError
from itera.errors.circuit_breaker import CircuitBreakerError
from itera.errors.persistence import (
    CorruptValueError,
    PersistenceError,
    StorageQuotaExceededError,
)
from itera.errors.state import PlanStateError

__all__ = [
    "ActivitySwapError",
    "AiAuthenticationError",
    "AiError",
    "AIGenerationError",
    "AiNetworkError",
    "AiQuotaExceededError",
    "AiResponseError",
    "BaseAppError",
    "CircuitBreakerError",
    "CorruptValueError",
    "ImageGenerationError",
    "InvalidDestinationError",
    "ItineraryGenerationError",
    "MalformedResponseError",
    "PersistenceError",
    "PlanStateError",
    "SchemaViolationError",
    "StorageQuotaExceededError",
]
