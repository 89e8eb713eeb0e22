from itera.configs.settings import (
    DENSITY_BY_PACE,
    GEMINI_IMAGE_MODEL,
    GEMINI_MODEL,
    MAX_DESTINATION_LENGTH,
    MAX_TRIP_DURATION,
    MIN_DESTINATION_LENGTH,
    MIN_TRIP_DURATION,
    SNAPSHOT_KEY,
    VALIDATION_DEBOUNCE_MS,
    file_logger,
    settings,
)

__all__ = [
    "DENSITY_BY_PACE",
    "GEMINI_IMAGE_MODEL",
    "GEMINI_MODEL",
    "MAX_DESTINATION_LENGTH",
    "MAX_TRIP_DURATION",
    "MIN_DESTINATION_LENGTH",
    "MIN_TRIP_DURATION",
    "SNAPSHOT_KEY",
    "VALIDATION_DEBOUNCE_MS",
    "file_logger",
    "settings",
]
