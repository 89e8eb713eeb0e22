"""Application settings and configuration constants.

This module contains settings, constants, and configuration values for the
Itera trip planner.
"""

from logging import INFO, Formatter, Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings.main import BaseSettings, SettingsConfigDict

ENV_FILE = Path(__file__).parent.parent.parent / ".env"

# --- Constants ---
MIN_TRIP_DURATION = 1
MAX_TRIP_DURATION = 30
MIN_DESTINATION_LENGTH = 3
MAX_DESTINATION_LENGTH = 100

# Quiet period before a destination edit triggers validation (milliseconds)
VALIDATION_DEBOUNCE_MS = 500

SNAPSHOT_KEY = "savedItinerary"

# AI Model Configuration
GEMINI_MODEL = "gemini-2.5-flash"
GEMINI_IMAGE_MODEL = "gemini-2.5-flash-image"

# Activities per day for each travel pace: (minimum, maximum or None)
DENSITY_BY_PACE: dict[str, tuple[int, int | None]] = {
    "Relaxed": (2, 3),
    "Balanced": (3, 5),
    "Action-Packed": (5, None),
}

# Response constants
INVALID_DESTINATION_MESSAGE = (
    "Please enter a valid travel destination. The location you entered could not be found."
)
INVALID_FORMAT_MESSAGE = "The AI returned an invalid format. Please try again."
INVALID_RESPONSE_MESSAGE = (
    "The AI returned an invalid response. Please try generating the itinerary again."
)
AUTH_ERROR_MESSAGE = "The API Key is invalid or missing. Please ensure it is configured correctly."
QUOTA_ERROR_MESSAGE = (
    "API quota exceeded. Please check your usage limits and billing, then try again later."
)
ITINERARY_GENERATION_ERROR = (
    "Failed to generate itinerary. The AI may be busy or the request was invalid. "
    "Please try again."
)
ACTIVITY_SWAP_ERROR = (
    "Failed to get a new activity from the AI. It might be busy. Please try again."
)


class Settings(BaseSettings):
    """Application settings with validation and default values."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Itera Trip Planner"
    DEBUG: bool = False

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_FILE: str = "logs/itera.log"

    # AI Configuration
    GEMINI_API_KEY: SecretStr | None = None
    AI_REQUEST_TIMEOUT: int = 60  # seconds
    AI_MAX_RETRIES: int = 2
    AI_RETRY_DELAY: float = 1.0  # seconds
    MAX_CONCURRENT_IMAGE_REQUESTS: int = 0  # 0 means unbounded

    # Snapshot persistence
    SNAPSHOT_DIR: Path = Path(".itera")
    SNAPSHOT_MAX_BYTES: int = 5 * 1024 * 1024


settings = Settings()


def file_logger(logger: Logger) -> Logger:
    """
    Attach the shared rotating file handler to a logger.

    Args:
        logger: The logger to decorate.

    Returns:
        The same logger, writing to ``settings.LOG_FILE`` when file logging is on.
    """
    if not settings.LOG_TO_FILE:
        return logger
    if any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        return logger

    log_file = Path(settings.LOG_FILE)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5)
    handler.setLevel(INFO)
    handler.setFormatter(Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    return logger
