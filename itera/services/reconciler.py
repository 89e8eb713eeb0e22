# itera/services/reconciler.py

"""
Turn raw model text into validated domain objects.

Parsing and shape validation are shared; what happens on failure is decided
per operation:

- destination validation is advisory and defaults to "valid";
- plan generation surfaces every failure;
- activity swap surfaces parse failures as a user-facing format error.
"""

from logging import getLogger
from re import DOTALL
from re import compile as re_compile
from typing import Any, TypeVar, cast

from orjson import JSONDecodeError
from orjson import loads as orjson_loads
from pydantic import BaseModel, ValidationError

from itera.configs.settings import INVALID_FORMAT_MESSAGE, file_logger
from itera.errors import (
    ActivitySwapError,
    MalformedResponseError,
    SchemaViolationError,
)
from itera.schemas.contracts import (
    ACTIVITY_CONTRACT,
    PLAN_CONTRACT,
    VALIDATION_CONTRACT,
    Contract,
)
from itera.schemas.itinerary import Activity, DestinationValidation, ItineraryPlan

logger = file_logger(getLogger(__name__))

M = TypeVar("M", bound=BaseModel)

_FENCE = re_compile(r"^```(?:json)?\s*(.*?)\s*```$", DOTALL)


def _strip_fences(text: str) -> str:
    text = text.strip()
    if match := _FENCE.match(text):
        return match.group(1)
    return text


def _preview(text: str, limit: int = 200) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


def parse_payload(text: str | None) -> dict[str, Any]:
    """
    Parse model text as a JSON object.

    Args:
        text: Raw model output, optionally wrapped in a Markdown code fence.

    Returns:
        The decoded JSON object.

    Raises:
        MalformedResponseError: If the text is empty, not JSON, or not an object.
    """
    if not text or not text.strip():
        raise MalformedResponseError("Empty response from the AI model", raw=text or "")

    cleaned = _strip_fences(text)
    try:
        data = orjson_loads(cleaned)
    except JSONDecodeError as e:
        detail = f"AI response is not valid JSON: {e}"
        raise MalformedResponseError(detail, raw=text) from e

    if not isinstance(data, dict):
        detail = f"Expected a JSON object, got {type(data).__name__}"
        raise MalformedResponseError(detail, raw=text)
    return data


def _format_errors(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    ]


def reconcile(text: str | None, contract: Contract, model: type[M] | None = None) -> M:
    """
    Parse and validate model text against a contract.

    Required fields must be present and of the expected primitive type;
    validation runs in strict mode, so "3" is not accepted for an integer.

    Raises:
        MalformedResponseError: If the text cannot be parsed.
        SchemaViolationError: If the parsed object does not match the contract.
    """
    target = cast(type[M], model or contract.model)
    parse_payload(text)
    try:
        return target.model_validate_json(_strip_fences(cast(str, text)), strict=True)
    except ValidationError as e:
        errors = _format_errors(e)
        detail = f"AI response violates the {contract.name} contract: {'; '.join(errors[:5])}"
        raise SchemaViolationError(detail, errors=errors) from e


def reconcile_validation(text: str | None, original: str) -> DestinationValidation:
    """
    Reconcile a destination validation answer.

    Validation is best-effort: any parse or schema failure yields a "valid"
    result carrying the original, uncorrected destination.
    """
    try:
        result = reconcile(text, VALIDATION_CONTRACT, DestinationValidation)
    except (MalformedResponseError, SchemaViolationError) as e:
        logger.warning(f"Invalid validation response for {original!r}, defaulting to valid: {e}")
        return DestinationValidation(is_valid=True, corrected_name=original)

    if result.is_valid and not result.corrected_name.strip():
        return result.model_copy(update={"corrected_name": original})
    return result


def reconcile_plan(text: str | None) -> ItineraryPlan:
    """Reconcile a full plan answer; failures propagate to the caller."""
    try:
        return reconcile(text, PLAN_CONTRACT, ItineraryPlan)
    except (MalformedResponseError, SchemaViolationError) as e:
        logger.error(f"Invalid itinerary structure received: {e}")
        raise


def reconcile_activity(text: str | None) -> Activity:
    """
    Reconcile a replacement activity answer.

    Raises:
        ActivitySwapError: If the answer cannot be parsed at all.
        SchemaViolationError: If it parses but misses required fields.
    """
    try:
        activity = reconcile(text, ACTIVITY_CONTRACT, Activity)
    except MalformedResponseError as e:
        logger.error(f"Failed to parse JSON from swap activity response: {_preview(e.raw)}")
        raise ActivitySwapError(INVALID_FORMAT_MESSAGE) from e

    # The contract has no image field; never trust one the model invents.
    return activity.model_copy(update={"image_url": None})
