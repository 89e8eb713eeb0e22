# itera/services/destination.py

from logging import getLogger
from typing import Protocol

from itera.configs.settings import file_logger
from itera.errors import AiError, CircuitBreakerError
from itera.schemas.itinerary import DestinationValidation
from itera.services.prompts import PromptRequest, validation_prompt
from itera.services.reconciler import reconcile_validation

logger = file_logger(getLogger(__name__))


class JsonGenerator(Protocol):
    async def generate_json(self, request: PromptRequest) -> str: ...


class DestinationValidator:
    """
    Check that a destination is a real place and normalize its name.

    Validation is advisory: when the model call or its answer fails, the
    destination is reported valid and unchanged so the user is never blocked.
    """

    def __init__(self, ai_client: JsonGenerator) -> None:
        self._ai_client = ai_client

    async def validate(self, destination: str) -> DestinationValidation:
        try:
            text = await self._ai_client.generate_json(validation_prompt(destination))
        except (AiError, CircuitBreakerError) as e:
            logger.warning(f"Error validating destination {destination!r}: {e}")
            return DestinationValidation(is_valid=True, corrected_name=destination)
        return reconcile_validation(text, destination)
