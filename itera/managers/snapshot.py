# itera/managers/snapshot.py

"""
Durable, image-stripped snapshots of the current plan.

Image payloads are base64 data URLs and easily exceed a key-value store's
quota, so they never enter a snapshot. A snapshot that cannot be read back
is treated as absent and removed.
"""

from logging import getLogger
from typing import Any

from pydantic import ValidationError

from itera.clients.kv_store import KeyValueStoreProtocol
from itera.configs.settings import SNAPSHOT_KEY, file_logger
from itera.errors import CorruptValueError, PersistenceError
from itera.schemas.itinerary import ItineraryPlan, PersistedSnapshot
from itera.schemas.trip import TripPreferences

logger = file_logger(getLogger(__name__))

# Exclusion mask removing image_url from every activity of every day.
_IMAGE_MASK: dict[str, Any] = {"itinerary": {"__all__": {"activities": {"__all__": {"image_url"}}}}}


def strip_images(plan: ItineraryPlan) -> ItineraryPlan:
    """Return a copy of the plan with every activity's image removed."""
    days = [
        day.model_copy(
            update={
                "activities": [
                    activity.model_copy(update={"image_url": None})
                    for activity in day.activities
                ],
            },
        )
        for day in plan.itinerary
    ]
    return plan.model_copy(update={"itinerary": days})


def dump_snapshot(plan: ItineraryPlan, preferences: TripPreferences) -> str:
    """Serialize a snapshot to JSON, omitting every image field."""
    snapshot = PersistedSnapshot(plan=plan, preferences=preferences)
    return snapshot.model_dump_json(by_alias=True, exclude={"plan": _IMAGE_MASK})


class SnapshotStore:
    """Save, load and clear the single persisted snapshot."""

    def __init__(self, store: KeyValueStoreProtocol, key: str = SNAPSHOT_KEY) -> None:
        self._store = store
        self.key = key

    async def save(self, plan: ItineraryPlan, preferences: TripPreferences) -> bool:
        """
        Overwrite the snapshot with the given plan and preferences.

        Returns:
            True if written; False if the store rejected the write, in which
            case the failure has been logged and the in-memory plan stands.
        """
        payload = dump_snapshot(plan, preferences)
        try:
            await self._store.set(self.key, payload)
        except PersistenceError as e:
            logger.error(f"Failed to save itinerary snapshot: {e}")
            return False
        logger.info(f"Saved itinerary snapshot ({len(payload)} bytes)")
        return True

    async def load(self) -> PersistedSnapshot | None:
        """
        Read the snapshot back.

        Returns:
            The snapshot, or None when nothing is stored or the stored value
            is unreadable (the corrupt record is dropped).
        """
        try:
            raw = await self._store.get(self.key)
        except CorruptValueError as e:
            logger.error(f"Saved itinerary is unreadable, discarding it: {e}")
            await self.clear()
            return None
        except PersistenceError as e:
            logger.error(f"Failed to read itinerary snapshot: {e}")
            return None
        if raw is None:
            return None

        try:
            return PersistedSnapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Failed to load saved itinerary, discarding it: {e.error_count()} errors")
            await self.clear()
            return None

    async def clear(self) -> None:
        """Remove the snapshot; failures are logged, not raised."""
        try:
            await self._store.delete(self.key)
        except PersistenceError as e:
            logger.error(f"Failed to remove itinerary snapshot: {e}")
