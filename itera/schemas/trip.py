"""
Schemas for the traveler's trip preferences.

Preferences are an immutable request parameter: the UI replaces them
wholesale and the planner only ever reads them.
"""

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from itera.configs.settings import (
    MAX_DESTINATION_LENGTH,
    MAX_TRIP_DURATION,
    MIN_TRIP_DURATION,
)


class TravelCompanion(StrEnum):
    SOLO = "Solo"
    COUPLE = "Couple"
    FAMILY = "Family"
    FRIENDS = "Friends"


class ActivityType(StrEnum):
    BEACHES = "Beaches & Sun"
    CITY_SIGHTSEEING = "City Sightseeing"
    OUTDOOR_ADVENTURES = "Outdoor Adventures"
    FESTIVALS_EVENTS = "Festivals & Events"
    FOOD_EXPLORATION = "Food Exploration"
    NIGHTLIFE = "Nightlife"
    SHOPPING = "Shopping"
    WELLNESS = "Wellness & Spa"


class BudgetTier(StrEnum):
    BUDGET_FRIENDLY = "Budget-Friendly"
    MID_RANGE = "Mid-Range"
    LUXURY = "Luxury"


class TravelPace(StrEnum):
    RELAXED = "Relaxed"
    BALANCED = "Balanced"
    ACTION_PACKED = "Action-Packed"


class TripPreferences(BaseModel):
    """
    Traveler preferences used to build every planning prompt.

    Example:
        >>> prefs = TripPreferences(
        ...     destination="Paris",
        ...     start_date=date(2026, 5, 1),
        ...     duration=3,
        ...     pace=TravelPace.BALANCED,
        ... )
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    destination: str = Field(
        ...,
        max_length=MAX_DESTINATION_LENGTH,
        description="Free-text travel destination",
        examples=["Paris"],
    )
    start_date: date = Field(default_factory=date.today, description="First day of the trip")
    duration: int = Field(
        default=7,
        ge=MIN_TRIP_DURATION,
        le=MAX_TRIP_DURATION,
        description="The duration of the trip in days",
    )
    companion: TravelCompanion = TravelCompanion.SOLO
    activities: list[ActivityType] = Field(
        default_factory=list,
        description="Activity interests, without duplicates",
    )
    budget: BudgetTier = BudgetTier.MID_RANGE
    pace: TravelPace = TravelPace.BALANCED

    @field_validator("destination")
    @classmethod
    def strip_destination(cls, v: str) -> str:
        return v.strip()

    @field_validator("activities")
    @classmethod
    def dedupe_activities(cls, v: list[ActivityType]) -> list[ActivityType]:
        """Keep the first occurrence of each interest tag."""
        return list(dict.fromkeys(v))

    def with_destination(self, destination: str) -> "TripPreferences":
        """Return a copy of these preferences pointing at another destination."""
        return self.model_copy(update={"destination": destination})

    @property
    def interests(self) -> str:
        return ", ".join(a.value for a in self.activities)
