# itera/managers/circuit_breaker.py
"""
Circuit breakers guarding the Gemini text and image endpoints.

After ``failure_threshold`` consecutive failures a breaker opens and rejects
calls with ``CircuitBreakerError`` until ``cooldown`` seconds have passed.
The first call after the cooldown is a trial: success closes the breaker,
failure opens it for another cooldown.
"""

from asyncio import Lock
from collections.abc import Awaitable, Callable
from enum import Enum
from logging import getLogger
from time import monotonic
from typing import Any, TypeVar

from itera.configs import file_logger
from itera.errors import CircuitBreakerError

logger = file_logger(getLogger(__name__))

T = TypeVar("T")


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    TRIAL = "trial"


class CircuitBreaker:
    """
    Consecutive-failure breaker for one upstream endpoint.

    Args:
        name: Shown in logs and carried by ``CircuitBreakerError``.
        failure_threshold: Consecutive failures that open the breaker.
        cooldown: Seconds an open breaker rejects calls.
    """

    def __init__(self, name: str, failure_threshold: int = 5, cooldown: float = 60.0) -> None:
        self.name = name
        self.failure_threshold = failure_threshold
        self.cooldown = cooldown
        self.failures = 0
        self._opened_at: float | None = None
        self._trial_running = False
        self._lock = Lock()

    @property
    def state(self) -> CircuitState:
        if self._opened_at is None:
            return CircuitState.CLOSED
        if self._trial_running or self._remaining() == 0:
            return CircuitState.TRIAL
        return CircuitState.OPEN

    def _remaining(self) -> float:
        if self._opened_at is None:
            return 0.0
        return max(0.0, self.cooldown - (monotonic() - self._opened_at))

    async def _admit(self) -> None:
        async with self._lock:
            if self._opened_at is None:
                return
            remaining = self._remaining()
            if remaining > 0 or self._trial_running:
                logger.warning(f"Circuit '{self.name}' is open, rejecting call")
                raise CircuitBreakerError(
                    detail=f"Service '{self.name}' temporarily unavailable",
                    retry_after=remaining,
                    circuit_name=self.name,
                )
            self._trial_running = True
            logger.info(f"Circuit '{self.name}' cooled down, allowing a trial call")

    async def _record(self, ok: bool) -> None:
        async with self._lock:
            self._trial_running = False
            if ok:
                if self._opened_at is not None:
                    logger.info(f"Circuit '{self.name}' closed again")
                self.failures = 0
                self._opened_at = None
                return
            self.failures += 1
            if self._opened_at is not None or self.failures >= self.failure_threshold:
                self._opened_at = monotonic()
                logger.error(f"Circuit '{self.name}' opened after {self.failures} failures")

    async def call(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,  # noqa: ANN401
        **kwargs: Any,  # noqa: ANN401
    ) -> T:
        """
        Run ``func`` unless the breaker is open.

        Raises:
            CircuitBreakerError: If the breaker is open.
            Exception: Whatever ``func`` raised, after counting it.
        """
        await self._admit()
        try:
            result = await func(*args, **kwargs)
        except Exception:
            await self._record(ok=False)
            raise
        await self._record(ok=True)
        return result

    def reset(self) -> None:
        self.failures = 0
        self._opened_at = None
        self._trial_running = False


ai_circuit_breaker = CircuitBreaker("gemini_ai", failure_threshold=5, cooldown=60.0)

# Image failures are expected and non-fatal; keep them from tripping the text breaker.
image_circuit_breaker = CircuitBreaker("gemini_image", failure_threshold=20, cooldown=30.0)
