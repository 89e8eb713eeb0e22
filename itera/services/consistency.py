# itera/services/consistency.py

"""
Advisory semantic checks on a generated plan.

Shape is enforced by the reconciler; these checks only flag anomalies
(wrong day count, gaps in numbering, density off the requested pace) so
they can be logged. A plan is never rejected because of them.
"""

from itera.configs.settings import DENSITY_BY_PACE
from itera.schemas.itinerary import ItineraryPlan
from itera.schemas.trip import TripPreferences


def check_plan_consistency(plan: ItineraryPlan, preferences: TripPreferences) -> list[str]:
    """Return a human-readable list of anomalies; empty when none are found."""
    anomalies: list[str] = []
    duration = preferences.duration

    if len(plan.itinerary) != duration:
        anomalies.append(f"expected {duration} days, got {len(plan.itinerary)}")

    numbers = [day.day for day in plan.itinerary]
    if numbers != list(range(1, len(numbers) + 1)):
        anomalies.append(f"day numbers are not contiguous from 1: {numbers}")

    if len(plan.weather_forecast) != len(plan.itinerary):
        anomalies.append(
            f"{len(plan.weather_forecast)} weather entries for {len(plan.itinerary)} days",
        )
    if len(plan.hotel_suggestions) != len(plan.itinerary):
        anomalies.append(
            f"{len(plan.hotel_suggestions)} hotel suggestions for {len(plan.itinerary)} days",
        )

    low, high = DENSITY_BY_PACE[preferences.pace.value]
    for day in plan.itinerary:
        count = len(day.activities)
        if count < low or (high is not None and count > high):
            anomalies.append(
                f"day {day.day} has {count} activities for a {preferences.pace.value} pace",
            )
    return anomalies
