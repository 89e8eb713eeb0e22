# itera/managers/debouncer.py

"""
Debounced destination validation.

A validation runs only after the input has been quiet for the debounce
period. Every input bumps a generation token; a result is applied only if
its token is still the newest, because an already-sent request cannot be
aborted and may arrive after the input moved on.
"""

from asyncio import AbstractEventLoop, Task, TimerHandle, gather, get_running_loop
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger

from itera.configs.settings import (
    INVALID_DESTINATION_MESSAGE,
    MIN_DESTINATION_LENGTH,
    VALIDATION_DEBOUNCE_MS,
    file_logger,
)
from itera.schemas.itinerary import DestinationValidation

logger = file_logger(getLogger(__name__))

Validate = Callable[[str], Awaitable[DestinationValidation]]


class ValidationStatus(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True)
class ValidationState:
    """What the form should show for the current destination input."""

    status: ValidationStatus = ValidationStatus.IDLE
    message: str = ""
    destination: str = ""
    corrected_name: str | None = None
    generation: int = 0


class DestinationDebouncer:
    """
    Schedule destination validation after a quiet period.

    Args:
        validate: Coroutine function performing one validation.
        on_change: Optional callback invoked with every new state.
        delay_ms: Quiet period in milliseconds.
        min_length: Inputs shorter than this (after stripping) are not validated.
    """

    def __init__(
        self,
        validate: Validate,
        on_change: Callable[[ValidationState], None] | None = None,
        delay_ms: int = VALIDATION_DEBOUNCE_MS,
        min_length: int = MIN_DESTINATION_LENGTH,
    ) -> None:
        self._validate = validate
        self._on_change = on_change
        self._delay = delay_ms / 1000
        self._min_length = min_length
        self._generation = 0
        self._timer: TimerHandle | None = None
        self._in_flight: set[Task[None]] = set()
        self._state = ValidationState()

    @property
    def state(self) -> ValidationState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def _set_state(self, state: ValidationState) -> None:
        self._state = state
        if self._on_change is not None:
            self._on_change(state)

    def submit(self, value: str) -> None:
        """
        Record a new input value; must be called from a running event loop.

        Any validation still waiting for its quiet period is cancelled.
        A validation already sent keeps running, but its result will be
        discarded on arrival.
        """
        self._generation += 1
        token = self._generation
        self._cancel_timer()

        destination = value.strip()
        if len(destination) < self._min_length:
            self._set_state(ValidationState(destination=destination, generation=token))
            return

        self._set_state(
            ValidationState(
                status=ValidationStatus.LOADING,
                destination=destination,
                generation=token,
            ),
        )
        loop: AbstractEventLoop = get_running_loop()
        self._timer = loop.call_later(self._delay, self._fire, destination, token)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, destination: str, token: int) -> None:
        self._timer = None
        task = get_running_loop().create_task(self._run(destination, token))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run(self, destination: str, token: int) -> None:
        logger.debug(f"Validating destination {destination!r} (generation {token})")
        try:
            result = await self._validate(destination)
        except Exception:
            # Validation never blocks the user.
            logger.exception(f"Destination validation failed for {destination!r}")
            result = DestinationValidation(is_valid=True, corrected_name=destination)

        if token != self._generation:
            logger.debug(f"Discarding stale validation for {destination!r} (generation {token})")
            return

        if not result.is_valid:
            self._set_state(
                ValidationState(
                    status=ValidationStatus.INVALID,
                    message=INVALID_DESTINATION_MESSAGE,
                    destination=destination,
                    generation=token,
                ),
            )
            return

        corrected = result.corrected_name.strip()
        changed = bool(corrected) and corrected.lower() != destination.lower()
        self._set_state(
            ValidationState(
                status=ValidationStatus.VALID,
                destination=destination,
                corrected_name=corrected if changed else None,
                generation=token,
            ),
        )

    @property
    def pending(self) -> bool:
        """True while a validation is scheduled or in flight."""
        return self._timer is not None or bool(self._in_flight)

    async def drain(self) -> None:
        """Wait for every in-flight validation to finish."""
        while pending := [task for task in self._in_flight if not task.done()]:
            await gather(*pending)

    def cancel(self) -> None:
        """Cancel the scheduled validation and invalidate any in-flight result."""
        self._generation += 1
        self._cancel_timer()
