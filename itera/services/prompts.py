# itera/services/prompts.py

"""
Prompt construction for every Gemini-backed operation.

All builders are pure: the same inputs always produce the same prompt text
and contract, with no network access and no hidden state.
"""

from dataclasses import dataclass
from enum import StrEnum

from itera.configs.settings import DENSITY_BY_PACE
from itera.schemas.contracts import (
    ACTIVITY_CONTRACT,
    PLAN_CONTRACT,
    VALIDATION_CONTRACT,
    Contract,
)
from itera.schemas.itinerary import Activity, ItineraryDay
from itera.schemas.trip import TravelPace, TripPreferences


class PromptKind(StrEnum):
    VALIDATE_DESTINATION = "validate-destination"
    GENERATE_PLAN = "generate-plan"
    SWAP_ACTIVITY = "swap-activity"


@dataclass(frozen=True)
class PromptRequest:
    """An instruction for the model plus the contract its answer must follow."""

    kind: PromptKind
    text: str
    contract: Contract
    system_instruction: str
    temperature: float = 0.7


SYSTEM_INSTRUCTION = "You are an expert travel planner who answers only with JSON."


def density_label(pace: TravelPace) -> str:
    """Return the activities-per-day range for a pace, e.g. '3-5' or '5+'."""
    low, high = DENSITY_BY_PACE[pace.value]
    return f"{low}+" if high is None else f"{low}-{high}"


def validation_prompt(destination: str) -> PromptRequest:
    """
    Create the prompt that checks a destination is a real place.

    Args:
        destination: Raw destination text as typed by the user.

    Returns:
        The validation prompt request.
    """
    text = f"""
    Please validate if the following is a real and valid travel destination.
    Destination: "{destination}"
    Consider common typos or variations. If it's a fictional place or doesn't exist, it's invalid.
    Respond ONLY with the JSON object based on the provided schema.
    """
    return PromptRequest(
        kind=PromptKind.VALIDATE_DESTINATION,
        text=text,
        contract=VALIDATION_CONTRACT,
        system_instruction=SYSTEM_INSTRUCTION,
        temperature=0.0,
    )


def _pace_block(preferences: TripPreferences) -> str:
    return (
        f"- Travel Pace: {preferences.pace.value}. This means:\n"
        f"        - 'Relaxed': Fewer ({density_label(TravelPace.RELAXED)}) "
        "well-spaced activities per day.\n"
        f"        - 'Balanced': A moderate amount ({density_label(TravelPace.BALANCED)}) "
        "of activities per day.\n"
        f"        - 'Action-Packed': A full day with many ({density_label(TravelPace.ACTION_PACKED)}) "
        "activities."
    )


def itinerary_prompt(preferences: TripPreferences) -> PromptRequest:
    """
    Create a detailed prompt for full plan generation.

    Args:
        preferences: The traveler's preferences.

    Returns:
        The plan generation prompt request.
    """
    destination = preferences.destination
    duration = preferences.duration
    budget = preferences.budget.value

    text = f"""
    Create a comprehensive travel plan based on the following preferences. You must provide all requested sections.

    **User Preferences:**
    - Destination: {destination}
    - Travel Date: Starting {preferences.start_date.isoformat()}
    - Duration: {duration} days
    - Companion(s): {preferences.companion.value}
    - Interests: {preferences.interests}
    - Budget: {budget}
    {_pace_block(preferences)}

    **Required Output Sections (Respond ONLY with the JSON object based on the schema):**

    1.  **Itinerary:** A detailed, day-by-day plan for exactly {duration} days reflecting the user's chosen travel pace. Number the days from 1. For each activity, include a time, a description, suggested transportation, a *specific, searchable location name*, and an **estimated cost**. The cost MUST be an approximate range in the **local currency** of the destination (e.g., '€20 - €30', 'Approx. ¥5000', or 'Free') and should be tailored to the user's selected budget.
    2.  **Weather Forecast:** A daily forecast for the trip duration ({duration} days) with description, icon keyword (Sunny, PartlyCloudy, Cloudy, Rainy, Thunderstorm), and high/low temps in Celsius.
    3.  **Best Time to Visit:** A short paragraph about the best time to visit {destination}.
    4.  **Upcoming Events:** List significant events in {destination} around the travel dates. If there are none, state that clearly.
    5.  **YouTube Search Link:** A single, valid YouTube search URL for travel vlogs/guides for {destination}.
    6.  **Safety Tips:** Provide essential safety and cultural advice for a traveler in {destination}. This must include:
        - A list of cultural etiquette points (do's and don'ts).
        - A list of common scams to be aware of.
        - A list of general safety advice.
    7.  **Personalized Packing List:** Generate a packing list based on weather, activities, and trip duration. For each item, provide its name, a brief description of why it's needed, and a valid Google search URL to find the product.
    8.  **Hotel Suggestions:** Provide one hotel suggestion for each day of the trip. The hotel should be conveniently located for that day's activities and align with the user's budget ({budget}). For each hotel, include the day number it corresponds to, its name, an approximate price range per night in the local currency, and a valid Google search URL for it.
    9.  **Local Currency Code:** Provide the three-letter ISO 4217 currency code for the destination (e.g., "EUR" for Paris, "JPY" for Tokyo).
    10. **Country Code:** Provide the two-letter ISO 3166-1 alpha-2 country code for the destination (e.g., "FR" for France, "JP" for Japan, "US" for California).
    """
    return PromptRequest(
        kind=PromptKind.GENERATE_PLAN,
        text=text,
        contract=PLAN_CONTRACT,
        system_instruction=SYSTEM_INSTRUCTION,
        temperature=0.4,
    )


def swap_prompt(
    preferences: TripPreferences,
    day: ItineraryDay,
    activity: Activity,
) -> PromptRequest:
    """
    Create the prompt asking for one replacement activity.

    The prompt lists every activity already planned for the day so the model
    does not suggest a duplicate, and pins the replacement to a similar time.
    """
    existing = ", ".join(a.description for a in day.activities)

    text = f"""
    Based on the following travel preferences, suggest a *new and different* activity to replace an existing one.

    **User Preferences:**
    - Destination: {preferences.destination}
    - Interests: {preferences.interests}
    - Budget: {preferences.budget.value}
    - Companion(s): {preferences.companion.value}

    **Day's Context:**
    - Day Theme: {day.title}
    - Existing Activities for the day: {existing}
    - Activity to Replace: "{activity.description}" at {activity.time}

    **Task:**
    Generate ONE new activity that fits the user's interests and the day's theme. It must be different from all other activities listed for the day and must not duplicate any of them. The new activity's time should be similar to the one it's replacing ({activity.time}).

    Respond ONLY with a single JSON object for the new activity based on the provided schema.
    """
    return PromptRequest(
        kind=PromptKind.SWAP_ACTIVITY,
        text=text,
        contract=ACTIVITY_CONTRACT,
        system_instruction=SYSTEM_INSTRUCTION,
        temperature=0.8,
    )


def image_prompt(description: str, destination: str) -> str:
    """Create the prompt for one activity image."""
    return (
        "A vibrant, photorealistic image representing the following travel activity: "
        f'"{description}" in {destination}. '
        "Focus on the atmosphere and key elements of the activity."
    )
