# itera/schemas/itinerary.py

"""
Schemas for AI-generated itinerary plans.

Field names are snake_case in Python and camelCase on the wire, which is
the shape the Gemini contracts ask the model to answer in.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from itera.schemas.trip import TripPreferences

WeatherIcon = Literal["Sunny", "PartlyCloudy", "Cloudy", "Rainy", "Thunderstorm"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Activity(CamelModel):
    time: str = Field(..., description="Time-of-day label, e.g. 'Morning'")
    description: str
    transport: str
    location: str = Field(..., description="Searchable location name")
    estimated_cost: str = Field(..., description="Cost range in local currency, e.g. '€20 - €30'")
    image_url: str | None = Field(default=None, description="Generated image as a data URL")


class ItineraryDay(CamelModel):
    day: int = Field(..., description="1-based day number")
    title: str
    activities: list[Activity]


class WeatherInfo(CamelModel):
    day: int
    forecast: str
    icon: WeatherIcon
    temp_high: int
    temp_low: int


class EventInfo(CamelModel):
    name: str
    description: str


class SafetyInfo(CamelModel):
    cultural_etiquette: list[str]
    scams_to_avoid: list[str]
    general_advice: list[str]


class PackingItem(CamelModel):
    item: str
    description: str
    google_search_url: str


class HotelSuggestion(CamelModel):
    day: int
    name: str
    price_range: str
    google_search_url: str


class ItineraryPlan(CamelModel):
    """The complete structured plan returned for a trip."""

    itinerary: list[ItineraryDay]
    weather_forecast: list[WeatherInfo]
    best_time_to_visit: str
    upcoming_events: list[EventInfo]
    youtube_search_url: str
    safety_tips: SafetyInfo
    packing_list: list[PackingItem]
    hotel_suggestions: list[HotelSuggestion]
    local_currency_code: str
    country_code: str

    def activities(self) -> list[Activity]:
        """Return every activity, flattened in day order."""
        return [activity for day in self.itinerary for activity in day.activities]


class DestinationValidation(CamelModel):
    is_valid: bool
    corrected_name: str


class PersistedSnapshot(CamelModel):
    """Durable projection of a plan (images stripped) and its preferences."""

    plan: ItineraryPlan
    preferences: TripPreferences
