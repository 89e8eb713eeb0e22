# itera/schemas/contracts.py

"""
Response contracts for every AI-backed operation.

Each contract pairs the schema sent to Gemini (schema-guided generation)
with the pydantic model that gates parsing of the answer.
"""

from dataclasses import dataclass
from typing import Any

from google.genai.types import Type
from pydantic import BaseModel

from itera.schemas.itinerary import Activity, DestinationValidation, ItineraryPlan

VALIDATION_SCHEMA: dict[str, Any] = {
    "type": Type.OBJECT,
    "properties": {
        "isValid": {
            "type": Type.BOOLEAN,
            "description": (
                "True if the destination is a valid, real place for travel "
                "(e.g., city, country, famous landmark/region), false otherwise."
            ),
        },
        "correctedName": {
            "type": Type.STRING,
            "description": (
                "If valid, the corrected or standardized name of the destination "
                '(e.g., "Pari" -> "Paris"). If invalid, return an empty string.'
            ),
        },
    },
    "required": ["isValid", "correctedName"],
}

ACTIVITY_SCHEMA: dict[str, Any] = {
    "type": Type.OBJECT,
    "properties": {
        "time": {
            "type": Type.STRING,
            "description": (
                "Suggested time for the activity, e.g., "
                "'Morning (9:00 AM - 1:00 PM)', 'Afternoon', 'Evening'."
            ),
        },
        "description": {
            "type": Type.STRING,
            "description": "A detailed description of the activity.",
        },
        "transport": {
            "type": Type.STRING,
            "description": (
                "Suggested mode of transport to this activity from the previous one. "
                "The first activity of the day can have transport from accommodation."
            ),
        },
        "location": {
            "type": Type.STRING,
            "description": (
                "A precise, searchable location name for the activity "
                "(e.g., 'Eiffel Tower, Paris, France')."
            ),
        },
        "estimatedCost": {
            "type": Type.STRING,
            "description": (
                "An approximate cost range for this activity in the LOCAL CURRENCY of the "
                "destination (e.g., '€20 - €30', 'Approx. ¥5000', 'Free'). This estimate "
                "must be tailored to the user's selected budget."
            ),
        },
    },
    "required": ["time", "description", "transport", "location", "estimatedCost"],
}


def _string_list(description: str) -> dict[str, Any]:
    return {"type": Type.ARRAY, "items": {"type": Type.STRING}, "description": description}


PLAN_SCHEMA: dict[str, Any] = {
    "type": Type.OBJECT,
    "properties": {
        "itinerary": {
            "type": Type.ARRAY,
            "description": "Array of daily itinerary plans.",
            "items": {
                "type": Type.OBJECT,
                "properties": {
                    "day": {"type": Type.INTEGER, "description": "The day number, starting from 1."},
                    "title": {
                        "type": Type.STRING,
                        "description": "A catchy title for the day's theme or main event.",
                    },
                    "activities": {
                        "type": Type.ARRAY,
                        "description": "A list of activities for the day.",
                        "items": ACTIVITY_SCHEMA,
                    },
                },
                "required": ["day", "title", "activities"],
            },
        },
        "weatherForecast": {
            "type": Type.ARRAY,
            "description": "A daily weather forecast for the duration of the trip.",
            "items": {
                "type": Type.OBJECT,
                "properties": {
                    "day": {"type": Type.INTEGER, "description": "The day number of the trip."},
                    "forecast": {
                        "type": Type.STRING,
                        "description": "A brief description of the expected weather.",
                    },
                    "icon": {
                        "type": Type.STRING,
                        "description": (
                            "An icon keyword. Must be one of: "
                            "Sunny, PartlyCloudy, Cloudy, Rainy, Thunderstorm."
                        ),
                    },
                    "tempHigh": {
                        "type": Type.INTEGER,
                        "description": "The expected high temperature in Celsius.",
                    },
                    "tempLow": {
                        "type": Type.INTEGER,
                        "description": "The expected low temperature in Celsius.",
                    },
                },
                "required": ["day", "forecast", "icon", "tempHigh", "tempLow"],
            },
        },
        "bestTimeToVisit": {
            "type": Type.STRING,
            "description": (
                "A summary of the best months to visit the destination, "
                "considering weather and tourist seasons."
            ),
        },
        "upcomingEvents": {
            "type": Type.ARRAY,
            "description": "A list of notable upcoming events or festivals in the destination.",
            "items": {
                "type": Type.OBJECT,
                "properties": {
                    "name": {"type": Type.STRING, "description": "The name of the event."},
                    "description": {
                        "type": Type.STRING,
                        "description": "A brief description of the event.",
                    },
                },
                "required": ["name", "description"],
            },
        },
        "youtubeSearchUrl": {
            "type": Type.STRING,
            "description": (
                "A valid YouTube search URL for travel guides or vlogs about the destination, "
                "e.g., https://www.youtube.com/results?search_query=travel+guide+tokyo"
            ),
        },
        "safetyTips": {
            "type": Type.OBJECT,
            "description": "A collection of safety and cultural tips for the destination.",
            "properties": {
                "culturalEtiquette": _string_list("Key cultural do's and don'ts."),
                "scamsToAvoid": _string_list("Common scams to be aware of."),
                "generalAdvice": _string_list("General safety advice."),
            },
            "required": ["culturalEtiquette", "scamsToAvoid", "generalAdvice"],
        },
        "packingList": {
            "type": Type.ARRAY,
            "description": "A personalized packing list with Google search links for items.",
            "items": {
                "type": Type.OBJECT,
                "properties": {
                    "item": {"type": Type.STRING, "description": "The name of the packing item."},
                    "description": {
                        "type": Type.STRING,
                        "description": "A brief reason why this item is recommended.",
                    },
                    "googleSearchUrl": {
                        "type": Type.STRING,
                        "description": "A valid Google search URL for the item.",
                    },
                },
                "required": ["item", "description", "googleSearchUrl"],
            },
        },
        "hotelSuggestions": {
            "type": Type.ARRAY,
            "description": (
                "A list of hotel suggestions, one for each day of the itinerary. Hotels should "
                "be located near the day's main activities and align with the user's budget."
            ),
            "items": {
                "type": Type.OBJECT,
                "properties": {
                    "day": {
                        "type": Type.INTEGER,
                        "description": "The day number this hotel suggestion corresponds to.",
                    },
                    "name": {"type": Type.STRING, "description": "The name of the hotel."},
                    "priceRange": {
                        "type": Type.STRING,
                        "description": (
                            "The approximate price range per night in the local currency, "
                            "reflecting the user's budget."
                        ),
                    },
                    "googleSearchUrl": {
                        "type": Type.STRING,
                        "description": "A valid Google search URL for the hotel.",
                    },
                },
                "required": ["day", "name", "priceRange", "googleSearchUrl"],
            },
        },
        "localCurrencyCode": {
            "type": Type.STRING,
            "description": (
                "The three-letter ISO 4217 currency code for the destination "
                '(e.g., "EUR" for Paris, "JPY" for Tokyo, "USD" for New York City).'
            ),
        },
        "countryCode": {
            "type": Type.STRING,
            "description": (
                "The two-letter ISO 3166-1 alpha-2 country code for the destination "
                '(e.g., "FR" for Paris, "JP" for Tokyo, "US" for California).'
            ),
        },
    },
    "required": [
        "itinerary",
        "weatherForecast",
        "bestTimeToVisit",
        "upcomingEvents",
        "youtubeSearchUrl",
        "safetyTips",
        "packingList",
        "hotelSuggestions",
        "localCurrencyCode",
        "countryCode",
    ],
}


@dataclass(frozen=True)
class Contract:
    """A response schema and the model that parses answers to it."""

    name: str
    schema: dict[str, Any]
    model: type[BaseModel]


VALIDATION_CONTRACT = Contract("destination_validation", VALIDATION_SCHEMA, DestinationValidation)
ACTIVITY_CONTRACT = Contract("activity", ACTIVITY_SCHEMA, Activity)
PLAN_CONTRACT = Contract("itinerary_plan", PLAN_SCHEMA, ItineraryPlan)
