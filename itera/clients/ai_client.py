# itera/clients/ai_client.py

from base64 import b64encode
from logging import getLogger
from typing import NoReturn

from google.genai import Client
from google.genai.client import AsyncClient
from google.genai.types import GenerateContentConfig, GenerateContentResponse, HttpOptions, Modality
from httpx import RemoteProtocolError, TimeoutException

from itera.configs.settings import GEMINI_IMAGE_MODEL, GEMINI_MODEL, file_logger, settings
from itera.decorators import with_retry
from itera.errors import (
    AiAuthenticationError,
    AiError,
    AIGenerationError,
    AiNetworkError,
    AiQuotaExceededError,
    CircuitBreakerError,
)
from itera.managers.circuit_breaker import (
    CircuitBreaker,
    ai_circuit_breaker,
    image_circuit_breaker,
)
from itera.services.prompts import PromptRequest

logger = file_logger(getLogger(__name__))

# Network-related exceptions that should be caught and converted
NETWORK_EXCEPTIONS = (
    RemoteProtocolError,
    TimeoutException,
    ConnectionError,
    TimeoutError,
)


class AiClient:
    """
    Async client for Google's Gemini API.

    Text calls return the raw JSON text so the reconciler decides how to
    treat malformed answers; image calls return a ``data:`` URL.

    Attributes:
        client: The Google GenAI AsyncClient instance.
    """

    def __init__(
        self,
        api_key: str | None = None,
        client: AsyncClient | None = None,
        circuit_breaker: CircuitBreaker | None = ai_circuit_breaker,
        image_breaker: CircuitBreaker | None = image_circuit_breaker,
    ) -> None:
        """
        Initialize the AI client with API credentials.

        Args:
            api_key: Gemini API key; defaults to ``settings.GEMINI_API_KEY``.
            client: Pre-built async client, mainly for tests.
            circuit_breaker: Breaker guarding text generation, or None.
            image_breaker: Breaker guarding image generation, or None.
        """
        self._model = GEMINI_MODEL
        self._image_model = GEMINI_IMAGE_MODEL
        self._circuit_breaker = circuit_breaker
        self._image_breaker = image_breaker

        if client is not None:
            self._client = client
        else:
            key = api_key or (
                settings.GEMINI_API_KEY.get_secret_value() if settings.GEMINI_API_KEY else None
            )
            if not key:
                detail = "GEMINI_API_KEY is required but not set"
                raise AiAuthenticationError(detail=detail)
            try:
                self._client = Client(
                    api_key=key,
                    http_options=HttpOptions(timeout=settings.AI_REQUEST_TIMEOUT * 1000),
                ).aio
            except Exception as e:
                logger.exception(
                    "Failed to initialize Gemini client, missing or invalid API key?",
                )
                self._handle_exception(e)

        logger.info(f"AiClient initialized with model: {self._model}")

    @property
    def client(self) -> AsyncClient:
        """Get the AI client instance."""
        return self._client

    @with_retry(
        max_retries=settings.AI_MAX_RETRIES,
        base_delay=settings.AI_RETRY_DELAY,
        max_delay=settings.AI_REQUEST_TIMEOUT,
    )
    async def _generate_content(
        self,
        model: str,
        contents: str,
        config: GenerateContentConfig,
    ) -> GenerateContentResponse:
        """
        Call Gemini once, converting transport failures to AiNetworkError.

        Network errors are retried with exponential backoff; every other
        failure propagates on the first attempt.
        """
        try:
            return await self._client.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        except NETWORK_EXCEPTIONS as e:
            logger.warning(f"AI network error: {e}")
            detail = f"AI service temporarily unavailable: {e}"
            raise AiNetworkError(detail=detail) from e

    async def _guarded(
        self,
        breaker: CircuitBreaker | None,
        model: str,
        contents: str,
        config: GenerateContentConfig,
    ) -> GenerateContentResponse:
        try:
            if breaker:
                return await breaker.call(self._generate_content, model, contents, config)
            return await self._generate_content(model, contents, config)
        except (AiError, CircuitBreakerError):
            raise
        except Exception as e:
            self._handle_exception(e)

    async def generate_json(self, request: PromptRequest) -> str:
        """
        Generate a JSON answer constrained by the request's contract.

        Args:
            request: Prompt text, contract and sampling settings.

        Returns:
            The raw response text, unparsed.

        Raises:
            AiError: Or one of its subclasses if the call itself fails.
            CircuitBreakerError: If the circuit breaker is open.
        """
        config = GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=request.contract.schema,
            system_instruction=request.system_instruction,
            temperature=request.temperature,
        )
        logger.info(f"Requesting {request.kind.value} from {self._model}")
        response = await self._guarded(self._circuit_breaker, self._model, request.text, config)
        return (response.text or "").strip()

    async def generate_image(self, prompt: str) -> str:
        """
        Generate one image and return it as a base64 ``data:`` URL.

        Raises:
            AIGenerationError: If the response carries no inline image data.
        """
        config = GenerateContentConfig(response_modalities=[Modality.IMAGE])
        response = await self._guarded(self._image_breaker, self._image_model, prompt, config)

        for candidate in response.candidates or []:
            parts = candidate.content.parts if candidate.content else None
            for part in parts or []:
                inline = part.inline_data
                if inline and inline.data:
                    mime_type = inline.mime_type or "image/png"
                    return f"data:{mime_type};base64,{b64encode(inline.data).decode('ascii')}"

        msg = "No image data returned from API."
        raise AIGenerationError(detail=msg)

    def _handle_exception(self, e: Exception) -> NoReturn:
        """Map generic exceptions to specific AiError."""
        error_msg = str(e)
        lowered = error_msg.lower()
        logger.error(f"AI Error: {error_msg}")

        if "api key" in lowered or "401" in error_msg or "unauthenticated" in lowered:
            detail = f"Authentication failed: {error_msg}"
            raise AiAuthenticationError(detail=detail) from e
        if "429" in error_msg or "quota" in lowered:
            detail = f"Quota exceeded: {error_msg}"
            raise AiQuotaExceededError(detail=detail) from e
        if "connection" in lowered:
            detail = f"Network error: {error_msg}"
            raise AiNetworkError(detail=detail) from e
        detail = f"An unexpected error occurred: {error_msg}"
        raise AiError(detail=detail) from e

    async def close(self) -> None:
        try:
            logger.info("Closing AI client")
            await self._client.aclose()
        except Exception:
            logger.exception("Failed to close AI client")
        else:
            logger.info("AI client closed successfully")
