from itera.schemas.itinerary import (
    Activity,
    DestinationValidation,
    EventInfo,
    HotelSuggestion,
    ItineraryDay,
    ItineraryPlan,
    PackingItem,
    PersistedSnapshot,
    SafetyInfo,
    WeatherInfo,
)
from itera.schemas.trip import (
    ActivityType,
    BudgetTier,
    TravelCompanion,
    TravelPace,
    TripPreferences,
)

__all__ = [
    "Activity",
    "ActivityType",
    "BudgetTier",
    "DestinationValidation",
    "EventInfo",
    "HotelSuggestion",
    "ItineraryDay",
    "ItineraryPlan",
    "PackingItem",
    "PersistedSnapshot",
    "SafetyInfo",
    "TravelCompanion",
    "TravelPace",
    "TripPreferences",
    "WeatherInfo",
]
