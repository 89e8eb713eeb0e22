"""Logging setup for the Itera trip planner."""

from itera.monitoring.logging import (
    configure_logging,
    get_logger,
    redact_secrets,
    sanitize_event_dict,
    sanitize_log_message,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "redact_secrets",
    "sanitize_event_dict",
    "sanitize_log_message",
]
