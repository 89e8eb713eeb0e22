# itera/services/currency.py

"""
Price conversion for display.

Costs in a plan are free-form strings in the destination's currency
("€20 - €30", "Approx. ¥5000", "Free"); conversion pulls the numbers out,
multiplies them by the exchange rate and rebuilds a plain price string.
"""

from logging import getLogger
from re import compile as re_compile
from typing import Protocol, runtime_checkable

from itera.configs.settings import file_logger

logger = file_logger(getLogger(__name__))

SUPPORTED_CURRENCIES = ("USD", "EUR", "GBP", "JPY", "INR")

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "GBP": "£",
    "EUR": "€",
    "JPY": "¥",
    "INR": "₹",
}

MOCK_RATES: dict[str, dict[str, float]] = {
    "EUR": {"USD": 1.08, "GBP": 0.85, "JPY": 169.50, "INR": 90.15, "EUR": 1},
    "JPY": {"USD": 0.0064, "GBP": 0.0051, "EUR": 0.0059, "INR": 0.53, "JPY": 1},
    "USD": {"EUR": 0.93, "GBP": 0.79, "JPY": 156.45, "INR": 83.60, "USD": 1},
    "GBP": {"USD": 1.27, "EUR": 1.18, "JPY": 198.85, "INR": 105.75, "GBP": 1},
    "INR": {"USD": 0.012, "EUR": 0.011, "GBP": 0.0095, "JPY": 1.88, "INR": 1},
}

_NUMBER = re_compile(r"\d+(?:\.\d+)?")


@runtime_checkable
class RateProviderProtocol(Protocol):
    """Source of exchange rates: target currency code -> multiplier from base."""

    async def fetch_rates(self, base_currency: str) -> dict[str, float]: ...


class StaticRateProvider:
    """Rate provider backed by a fixed table; unknown bases fall back to USD."""

    def __init__(self, table: dict[str, dict[str, float]] | None = None) -> None:
        self._table = table or MOCK_RATES

    async def fetch_rates(self, base_currency: str) -> dict[str, float]:
        base = base_currency.upper()
        logger.info(f"Fetching rates for base currency: {base}")
        # Copy so callers can never mutate the table.
        return dict(self._table.get(base) or self._table["USD"])


def convert_and_format_price(
    price: str | None,
    target_currency: str,
    base_currency: str,
    rates: dict[str, float] | None,
) -> str:
    """
    Convert a free-form price string into the target currency.

    Args:
        price: Cost string from the plan, e.g. "€20 - €30".
        target_currency: Currency to display.
        base_currency: Currency the plan's prices are in.
        rates: Rates from ``base_currency``; None when not yet available.

    Returns:
        "N/A" for an empty price; the price unchanged when there is nothing to
        convert; otherwise "<symbol><value>" or "<symbol><low> - <symbol><high>".
    """
    if not price:
        return "N/A"
    target = target_currency.upper()
    if not rates or target == base_currency.upper():
        return price

    rate = rates.get(target)
    if not rate:
        return price

    numbers = [float(n) for n in _NUMBER.findall(price.replace(",", ""))]
    if not numbers:
        return price

    converted = [f"{n * rate:.2f}" for n in numbers]
    symbol = CURRENCY_SYMBOLS.get(target, f"{target} ")
    if len(converted) > 1:
        return f"{symbol}{converted[0]} - {symbol}{converted[1]}"
    return f"{symbol}{converted[0]}"
