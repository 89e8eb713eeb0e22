# tests/conftest.py
"""Root pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import date
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from orjson import dumps

from itera.clients.ai_client import AiClient
from itera.clients.kv_store import MemoryStore
from itera.errors import AIGenerationError
from itera.schemas.itinerary import ItineraryPlan
from itera.schemas.trip import ActivityType, BudgetTier, TravelCompanion, TravelPace, TripPreferences
from itera.services.prompts import PromptKind, PromptRequest

PlanFactory = Callable[..., dict[str, Any]]

TIMES = ("Morning", "Late Morning", "Afternoon", "Evening", "Night", "Late Night")


def build_plan_data(days: int = 3, activities_per_day: int = 3) -> dict[str, Any]:
    """Build a camelCase plan payload shaped like a Gemini answer."""
    return {
        "itinerary": [
            {
                "day": day,
                "title": f"Day {day} in Paris",
                "activities": [
                    {
                        "time": TIMES[slot % len(TIMES)],
                        "description": f"Activity {day}.{slot + 1}",
                        "transport": "Metro",
                        "location": f"Place {day}.{slot + 1}",
                        "estimatedCost": "€20 - €30",
                    }
                    for slot in range(activities_per_day)
                ],
            }
            for day in range(1, days + 1)
        ],
        "weatherForecast": [
            {
                "day": day,
                "forecast": "Mild with some sun",
                "icon": "PartlyCloudy",
                "tempHigh": 21,
                "tempLow": 12,
            }
            for day in range(1, days + 1)
        ],
        "bestTimeToVisit": "Spring and early autumn.",
        "upcomingEvents": [{"name": "Fête de la Musique", "description": "Street concerts."}],
        "youtubeSearchUrl": "https://www.youtube.com/results?search_query=Paris+travel",
        "safetyTips": {
            "culturalEtiquette": ["Greet shopkeepers with 'Bonjour'."],
            "scamsToAvoid": ["Petition signers near landmarks."],
            "generalAdvice": ["Watch for pickpockets on the metro."],
        },
        "packingList": [
            {
                "item": "Umbrella",
                "description": "Spring showers are common.",
                "googleSearchUrl": "https://www.google.com/search?q=travel+umbrella",
            },
        ],
        "hotelSuggestions": [
            {
                "day": day,
                "name": f"Hotel {day}",
                "priceRange": "€120 - €180",
                "googleSearchUrl": f"https://www.google.com/search?q=Hotel+{day}",
            }
            for day in range(1, days + 1)
        ],
        "localCurrencyCode": "EUR",
        "countryCode": "FR",
    }


def to_json(data: Any) -> str:  # noqa: ANN401
    return dumps(data).decode()


@pytest.fixture
def plan_factory() -> PlanFactory:
    return build_plan_data


@pytest.fixture
def plan_data() -> dict[str, Any]:
    return build_plan_data()


@pytest.fixture
def plan_json(plan_data: dict[str, Any]) -> str:
    return to_json(plan_data)


@pytest.fixture
def sample_plan(plan_data: dict[str, Any]) -> ItineraryPlan:
    return ItineraryPlan.model_validate(plan_data)


@pytest.fixture
def activity_json() -> str:
    return to_json(
        {
            "time": "Morning",
            "description": "Guided tour of the Louvre",
            "transport": "Metro line 1",
            "location": "Musée du Louvre",
            "estimatedCost": "€17 - €22",
        },
    )


@pytest.fixture
def sample_preferences() -> TripPreferences:
    return TripPreferences(
        destination="Paris",
        start_date=date(2026, 5, 1),
        duration=3,
        companion=TravelCompanion.COUPLE,
        activities=[ActivityType.CITY_SIGHTSEEING, ActivityType.FOOD_EXPLORATION],
        budget=BudgetTier.MID_RANGE,
        pace=TravelPace.BALANCED,
    )


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def mock_ai_client() -> MagicMock:
    """
    AiClient double answering from per-operation queues.

    Queue answers with ``mock_ai_client.answers[PromptKind.X].append(...)``;
    an exception in the queue is raised instead of returned. Image prompts
    containing any text in ``failing_images`` fail.
    """
    client = MagicMock(spec=AiClient)
    client.answers = {kind: [] for kind in PromptKind}
    client.failing_images = set()

    async def generate_json(request: PromptRequest) -> str:
        answer = client.answers[request.kind].pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def generate_image(prompt: str) -> str:
        if any(marker in prompt for marker in client.failing_images):
            msg = "No image data returned from API."
            raise AIGenerationError(detail=msg)
        return "data:image/png;base64,aW1hZ2U="

    client.generate_json = AsyncMock(side_effect=generate_json)
    client.generate_image = AsyncMock(side_effect=generate_image)
    client.close = AsyncMock()
    return client
