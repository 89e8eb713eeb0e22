"""
Structured logging with secret sanitization.

This module configures structlog on top of the standard library logger so
that every module's ``getLogger(__name__)`` output goes through the same
processors:
- Pretty console output for development
- JSON output everywhere else
- API keys and email addresses redacted
- Inline image data URLs shortened, since a single one can be megabytes

Examples
--------
>>> from itera.monitoring import configure_logging, get_logger
>>> configure_logging()
>>> get_logger("itera.services").info("Plan generated", days=3)
"""

from logging import StreamHandler, root
from re import Pattern
from re import compile as re_compile

from structlog import configure
from structlog import get_logger as struct_logger
from structlog.contextvars import merge_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import (
    JSONRenderer,
    StackInfoRenderer,
    TimeStamper,
    UnicodeDecoder,
    add_log_level,
    format_exc_info,
)
from structlog.stdlib import (
    BoundLogger,
    ExtraAdder,
    LoggerFactory,
    PositionalArgumentsFormatter,
    ProcessorFormatter,
    add_logger_name,
    filter_by_level,
)
from structlog.types import EventDict, Processor, WrappedLogger

from itera.configs.settings import settings

# Order matters: data URLs are shortened before anything scans their payload
SECRET_PATTERNS: list[tuple[Pattern, str]] = [
    (re_compile(r"data:image/[a-z+]+;base64,[A-Za-z0-9+/=]{32,}"), "data:image/...;base64,[TRUNCATED]"),
    # Google API keys
    (re_compile(r"AIza[0-9A-Za-z_-]{35}"), "[REDACTED_API_KEY]"),
    (re_compile(r"(?i)(key=)[^&\s]+"), r"\1[REDACTED]"),
    (re_compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"), "[REDACTED_EMAIL]"),
]

# Characters to sanitize to prevent log injection
CONTROL_CHARS = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": ""})

_add_timestamp = TimeStamper(fmt="iso")


def sanitize_log_message(message: str) -> str:
    r"""
    Remove control characters and sanitize log messages.

    Examples:
    --------
    >>> sanitize_log_message("Hello\nWorld")
    'Hello\\nWorld'
    """
    return message.translate(CONTROL_CHARS)


def redact_secrets(message: str) -> str:
    """
    Redact API keys, emails and inline image payloads from a log message.

    Examples:
    --------
    >>> redact_secrets("calling ?key=abc123&alt=json")
    'calling ?key=[REDACTED]&alt=json'
    """
    for pattern, replacement in SECRET_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


def sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """
    Sanitize every string value of the event dictionary.

    Args:
        logger: The wrapped logger instance.
        method_name: The name of the logging method being called.
        event_dict: The event dictionary being built.

    Returns:
        Sanitized event dictionary.
    """
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = redact_secrets(sanitize_log_message(value))
    return event_dict


def get_renderer(*, colors: bool = True) -> Processor:
    """Console renderer for development, JSON otherwise."""
    if settings.ENVIRONMENT == "development":
        return ConsoleRenderer(colors=colors, pad_level=False)
    return JSONRenderer()


def _formatter(*, colors: bool) -> ProcessorFormatter:
    return ProcessorFormatter(
        processors=[
            ProcessorFormatter.remove_processors_meta,
            sanitize_event_dict,
            get_renderer(colors=colors),
        ],
        foreign_pre_chain=[
            add_log_level,
            _add_timestamp,
            ExtraAdder(),
        ],
    )


def configure_logging() -> None:
    """Configure structured logging for the application."""
    # Clear existing root handlers to prevent duplicates on repeated setup
    root.handlers.clear()
    root.setLevel(settings.LOG_LEVEL.upper())

    configure(
        processors=[
            filter_by_level,
            merge_contextvars,
            add_logger_name,
            add_log_level,
            _add_timestamp,
            PositionalArgumentsFormatter(),
            StackInfoRenderer(),
            format_exc_info,
            UnicodeDecoder(),
            ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=True,
    )

    console_handler = StreamHandler()
    console_handler.setFormatter(_formatter(colors=True))
    root.addHandler(console_handler)


def get_logger(name: str) -> BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: The name of the logger (typically __name__).

    Returns:
        Configured structlog BoundLogger instance.
    """
    return struct_logger(name)
