# itera/services/export.py

"""Plain-text rendering of a plan, for email and clipboard sharing."""

from collections.abc import Callable
from datetime import date, timedelta
from urllib.parse import quote, urlencode

from itera.schemas.itinerary import ItineraryPlan

PriceFormatter = Callable[[str | None], str]

RULE = "-" * 40


def day_date(start_date: date, index: int) -> str:
    """Return the human date of the day at ``index``, e.g. 'Friday, May 1'."""
    day = start_date + timedelta(days=index)
    return f"{day:%A}, {day:%B} {day.day}"


def maps_url(location: str) -> str:
    return "https://www.google.com/maps/search/?" + urlencode(
        {"api": 1, "query": location},
        quote_via=quote,
    )


def plan_to_text(
    plan: ItineraryPlan,
    destination: str,
    start_date: date,
    price_formatter: PriceFormatter | None = None,
) -> str:
    """
    Render the day-by-day itinerary as plain text.

    Args:
        plan: The plan to render.
        destination: Destination name for the greeting.
        start_date: Date of day 1.
        price_formatter: Converts cost strings for display; defaults to identity.

    Returns:
        The text body.
    """
    fmt = price_formatter or (lambda price: price or "N/A")
    lines = [
        "Hello!",
        "",
        f"Here is the travel itinerary for the trip to {destination}.",
        "",
        RULE,
    ]
    for index, day in enumerate(plan.itinerary):
        lines.append("")
        lines.append(f"Day {day.day}: {day.title} ({day_date(start_date, index)})")
        lines.append("-" * 20)
        for activity in day.activities:
            lines.append(f"  • {activity.time}: {activity.description}")
            lines.append(f"    Location: {activity.location}")
            lines.append(f"    Transport: {activity.transport}")
            lines.append(f"    Estimated Cost: {fmt(activity.estimated_cost)}")
            lines.append("")

    lines.append("")
    lines.append("Powered by Itera AI.")
    return "\n".join(lines)
