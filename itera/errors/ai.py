from itera.errors.base import BaseAppError


class AiError(BaseAppError):
    """Base exception for AI client errors."""

    def __init__(self, detail: str = "AI client error") -> None:
        super().__init__(detail)


class AiAuthenticationError(AiError):
    """Authentication failed."""

    def __init__(self, detail: str = "AI authentication failed") -> None:
        super().__init__(detail)


class AiQuotaExceededError(AiError):
    """Quota exceeded."""

    def __init__(self, detail: str = "AI quota exceeded") -> None:
        super().__init__(detail)


class AiNetworkError(AiError):
    """Network connectivity issues."""

    def __init__(self, detail: str = "AI network error") -> None:
        super().__init__(detail)


class AIGenerationError(AiError):
    """Raised when AI content generation fails."""

    def __init__(self, detail: str = "AI content generation failed") -> None:
        super().__init__(detail)


class AiResponseError(AiError):
    """Invalid response format."""

    def __init__(self, detail: str = "Invalid AI response") -> None:
        super().__init__(detail)


class MalformedResponseError(AiResponseError):
    """Raised when model output cannot be parsed as a JSON object."""

    def __init__(self, detail: str = "AI response is not valid JSON", raw: str = "") -> None:
        super().__init__(detail)
        self.raw = raw


class SchemaViolationError(AiResponseError):
    """Raised when parsed model output does not match its contract."""

    def __init__(
        self,
        detail: str = "AI response does not match the expected schema",
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(detail)
        self.errors = errors or []


class ImageGenerationError(AiError):
    """Raised when a single activity image could not be produced."""

    def __init__(self, detail: str = "Image generation failed") -> None:
        super().__init__(detail)


class ItineraryGenerationError(AiError):
    """Raised when itinerary generation fails, carrying a user-facing message."""

    def __init__(self, detail: str = "AI itinerary generation failed") -> None:
        super().__init__(detail)


class ActivitySwapError(AiError):
    """Raised when an activity could not be swapped, carrying a user-facing message."""

    def __init__(self, detail: str = "AI activity swap failed") -> None:
        super().__init__(detail)


class InvalidDestinationError(BaseAppError):
    """Raised when the destination was explicitly rejected by validation."""

    def __init__(self, detail: str = "Invalid destination", destination: str = "") -> None:
        super().__init__(detail)
        self.destination = destination
