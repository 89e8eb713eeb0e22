# itera/managers/plan_state.py

"""
Single owner of the current itinerary plan.

The plan is replaced only in whole (regeneration, restore, reset) or one
activity at a time (swap). Each mutation is a single synchronous assignment
made after every awaited input is ready, so no half-applied plan is ever
observable; the persisted snapshot is refreshed afterwards.
"""

from logging import getLogger

from itera.configs.settings import file_logger
from itera.errors import PlanStateError
from itera.managers.snapshot import SnapshotStore, strip_images
from itera.schemas.itinerary import Activity, ItineraryPlan, PersistedSnapshot
from itera.schemas.trip import TripPreferences

logger = file_logger(getLogger(__name__))


def swap_activity(
    plan: ItineraryPlan,
    day_index: int,
    activity_index: int,
    activity: Activity,
) -> ItineraryPlan:
    """
    Return a new plan with exactly one activity replaced.

    Only the addressed day is copied; every other day object is reused as is.

    Raises:
        PlanStateError: If the day or activity index is out of range.
    """
    if not 0 <= day_index < len(plan.itinerary):
        msg = f"Day index {day_index} out of range for a {len(plan.itinerary)}-day plan"
        raise PlanStateError(msg)

    day = plan.itinerary[day_index]
    if not 0 <= activity_index < len(day.activities):
        msg = f"Activity index {activity_index} out of range for day {day.day}"
        raise PlanStateError(msg)

    activities = list(day.activities)
    activities[activity_index] = activity
    days = list(plan.itinerary)
    days[day_index] = day.model_copy(update={"activities": activities})
    return plan.model_copy(update={"itinerary": days})


class PlanState:
    """
    Owned state container for the current plan and its preferences.

    Readers get the immutable objects themselves; writers go through
    ``replace``, ``swap``, ``restore`` and ``reset``.
    """

    def __init__(self, snapshots: SnapshotStore) -> None:
        self._snapshots = snapshots
        self._plan: ItineraryPlan | None = None
        self._preferences: TripPreferences | None = None
        self._saved: PersistedSnapshot | None = None

    @property
    def current(self) -> ItineraryPlan | None:
        return self._plan

    @property
    def preferences(self) -> TripPreferences | None:
        return self._preferences

    @property
    def saved(self) -> PersistedSnapshot | None:
        """The last snapshot loaded or written, if any."""
        return self._saved

    async def _persist(self) -> bool:
        if self._plan is None or self._preferences is None:
            return False
        if not await self._snapshots.save(self._plan, self._preferences):
            return False
        self._saved = PersistedSnapshot(
            plan=strip_images(self._plan),
            preferences=self._preferences,
        )
        return True

    async def replace(self, plan: ItineraryPlan, preferences: TripPreferences) -> bool:
        """
        Replace the whole plan after a successful generation.

        Returns:
            Whether the snapshot was written.
        """
        self._plan, self._preferences = plan, preferences
        logger.info(f"Plan replaced: {len(plan.itinerary)} days for {preferences.destination!r}")
        return await self._persist()

    async def swap(self, day_index: int, activity_index: int, activity: Activity) -> ItineraryPlan:
        """
        Replace one activity in the current plan and refresh the snapshot.

        Raises:
            PlanStateError: If there is no plan or the slot does not exist.
        """
        if self._plan is None:
            msg = "No itinerary to swap an activity in"
            raise PlanStateError(msg)

        self._plan = swap_activity(self._plan, day_index, activity_index, activity)
        logger.info(f"Swapped activity {activity_index} of day index {day_index}")
        await self._persist()
        return self._plan

    async def load_saved(self) -> PersistedSnapshot | None:
        """Read the persisted snapshot, if one survives, without applying it."""
        self._saved = await self._snapshots.load()
        return self._saved

    def restore(self) -> ItineraryPlan:
        """
        Make the loaded snapshot the current plan.

        Raises:
            PlanStateError: If no snapshot has been loaded.
        """
        if self._saved is None:
            msg = "No saved itinerary to restore"
            raise PlanStateError(msg)
        self._plan, self._preferences = self._saved.plan, self._saved.preferences
        return self._plan

    async def dismiss_saved(self) -> None:
        """Forget the saved snapshot without touching the current plan."""
        await self._snapshots.clear()
        self._saved = None

    async def reset(self) -> None:
        """Drop the current plan, its preferences and the saved snapshot."""
        self._plan = None
        self._preferences = None
        await self.dismiss_saved()
