# itera/services/planner.py

"""
Orchestration boundary for trip planning.

Every external-call failure is caught here and mapped to a specific,
user-facing error; on failure the current plan and its snapshot are left
exactly as they were.
"""

from asyncio import Lock
from collections.abc import Callable
from logging import getLogger

from itera.clients.ai_client import AiClient
from itera.clients.kv_store import FileStore, KeyValueStoreProtocol, MemoryStore
from itera.configs.settings import (
    ACTIVITY_SWAP_ERROR,
    AUTH_ERROR_MESSAGE,
    INVALID_DESTINATION_MESSAGE,
    INVALID_RESPONSE_MESSAGE,
    ITINERARY_GENERATION_ERROR,
    QUOTA_ERROR_MESSAGE,
    SNAPSHOT_KEY,
    file_logger,
)
from itera.errors import (
    ActivitySwapError,
    AiAuthenticationError,
    AiQuotaExceededError,
    AiResponseError,
    InvalidDestinationError,
    ItineraryGenerationError,
    PlanStateError,
)
from itera.managers.debouncer import DestinationDebouncer, ValidationState
from itera.managers.plan_state import PlanState
from itera.managers.snapshot import SnapshotStore
from itera.schemas.itinerary import DestinationValidation, ItineraryPlan, PersistedSnapshot
from itera.schemas.trip import TripPreferences
from itera.services.consistency import check_plan_consistency
from itera.services.destination import DestinationValidator
from itera.services.images import ImageFanOut
from itera.services.prompts import itinerary_prompt, swap_prompt
from itera.services.reconciler import reconcile_activity, reconcile_plan

logger = file_logger(getLogger(__name__))


class Planner:
    """
    High-level trip planning operations.

    Args:
        ai_client: Gemini client used for text and image generation.
        store: Durable key-value store for the snapshot; in-memory by default.
        snapshot_key: Name of the snapshot record.
    """

    def __init__(
        self,
        ai_client: AiClient,
        store: KeyValueStoreProtocol | None = None,
        snapshot_key: str = SNAPSHOT_KEY,
    ) -> None:
        self._ai_client = ai_client
        self.validator = DestinationValidator(ai_client)
        self.images = ImageFanOut(ai_client.generate_image)
        self.state = PlanState(SnapshotStore(store or MemoryStore(), snapshot_key))
        # Swaps address activities by position; run them one at a time.
        self._swap_lock = Lock()

    @classmethod
    def from_settings(cls) -> "Planner":
        """Build a planner backed by Gemini and a file store, both from settings."""
        return cls(AiClient(), store=FileStore())

    @property
    def plan(self) -> ItineraryPlan | None:
        return self.state.current

    @property
    def preferences(self) -> TripPreferences | None:
        return self.state.preferences

    async def validate_destination(self, destination: str) -> DestinationValidation:
        """Validate a destination; never raises for AI failures."""
        return await self.validator.validate(destination)

    def debouncer(self, on_change: Callable[[ValidationState], None] | None = None) -> DestinationDebouncer:
        """Create a debouncer that validates through this planner."""
        return DestinationDebouncer(self.validate_destination, on_change=on_change)

    async def generate(self, preferences: TripPreferences) -> ItineraryPlan:
        """
        Validate the destination, generate a plan with images and commit it.

        Returns:
            The committed plan.

        Raises:
            InvalidDestinationError: If the destination is not a real place.
            ItineraryGenerationError: With a specific message for auth, quota,
                malformed output or any other failure.
        """
        validation = await self.validate_destination(preferences.destination)
        if not validation.is_valid:
            raise InvalidDestinationError(
                INVALID_DESTINATION_MESSAGE,
                destination=preferences.destination,
            )
        corrected = preferences.with_destination(
            validation.corrected_name or preferences.destination,
        )

        try:
            text = await self._ai_client.generate_json(itinerary_prompt(corrected))
            plan = reconcile_plan(text)
        except Exception as e:
            logger.exception("Error generating itinerary")
            raise self._generation_error(e) from e

        if anomalies := check_plan_consistency(plan, corrected):
            logger.warning(f"Generated plan has anomalies: {'; '.join(anomalies)}")

        plan = await self.images.attach_images(plan, corrected.destination)
        await self.state.replace(plan, corrected)
        return plan

    @staticmethod
    def _generation_error(e: Exception) -> ItineraryGenerationError:
        if isinstance(e, AiAuthenticationError):
            return ItineraryGenerationError(AUTH_ERROR_MESSAGE)
        if isinstance(e, AiQuotaExceededError):
            return ItineraryGenerationError(QUOTA_ERROR_MESSAGE)
        if isinstance(e, AiResponseError):
            return ItineraryGenerationError(INVALID_RESPONSE_MESSAGE)
        return ItineraryGenerationError(ITINERARY_GENERATION_ERROR)

    async def swap(self, day_index: int, activity_index: int) -> ItineraryPlan:
        """
        Replace one activity with a new AI suggestion and commit it.

        Returns:
            The updated plan.

        Raises:
            PlanStateError: If there is no plan, the slot does not exist, or the
                plan was replaced while the new activity was being generated.
            ActivitySwapError: With the "invalid format" message when the answer
                cannot be parsed, or a specific message for other failures.
        """
        async with self._swap_lock:
            plan, preferences = self.state.current, self.state.preferences
            if plan is None or preferences is None:
                msg = "No itinerary to swap an activity in"
                raise PlanStateError(msg)
            if not 0 <= day_index < len(plan.itinerary):
                msg = f"Day index {day_index} out of range"
                raise PlanStateError(msg)
            day = plan.itinerary[day_index]
            if not 0 <= activity_index < len(day.activities):
                msg = f"Activity index {activity_index} out of range for day {day.day}"
                raise PlanStateError(msg)

            try:
                text = await self._ai_client.generate_json(
                    swap_prompt(preferences, day, day.activities[activity_index]),
                )
                activity = reconcile_activity(text)
            except ActivitySwapError:
                raise
            except Exception as e:
                logger.exception("Error swapping activity")
                raise self._swap_error(e) from e

            image_url = await self.images.image_for(activity, preferences.destination)
            if self.state.current is not plan:
                logger.warning(
                    f"Itinerary changed while swapping day index {day_index}, "
                    f"activity {activity_index}; discarding the new activity",
                )
                msg = "The itinerary changed before the new activity arrived"
                raise PlanStateError(msg)
            activity = activity.model_copy(update={"image_url": image_url})
            return await self.state.swap(day_index, activity_index, activity)

    @staticmethod
    def _swap_error(e: Exception) -> ActivitySwapError:
        if isinstance(e, AiAuthenticationError):
            return ActivitySwapError(AUTH_ERROR_MESSAGE)
        if isinstance(e, AiQuotaExceededError):
            return ActivitySwapError(QUOTA_ERROR_MESSAGE)
        return ActivitySwapError(ACTIVITY_SWAP_ERROR)

    async def load_saved(self) -> PersistedSnapshot | None:
        """Look for a saved trip; a corrupt one is dropped and reported as absent."""
        return await self.state.load_saved()

    def restore_saved(self) -> ItineraryPlan:
        """Make the loaded saved trip current (images are not restored)."""
        return self.state.restore()

    async def dismiss_saved(self) -> None:
        await self.state.dismiss_saved()

    async def reset(self) -> None:
        await self.state.reset()

    async def close(self) -> None:
        await self._ai_client.close()

