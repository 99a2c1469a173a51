"""Structured logging configuration using structlog.

JSON output in production, coloured console output in development. Every
event passes through a PII scrubber before rendering: customers paste card
numbers, emails and phone numbers into the chat, and none of it may reach
the log sink.
"""

import re
import sys
from collections.abc import MutableMapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password",
    "secret",
    "token",
    "api_key",
    "authorization",
    "credentials",
    "email",
    "user_email",
    "phone",
    "card_number",
    "credit_card",
    "national_id",
    "ssn",
    "webhook_secret",
})

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
CARD_PATTERN = re.compile(r"\b\d{4}[- ]?\d{4}[- ]?\d{4}[- ]?\d{4}\b")
NATIONAL_ID_PATTERN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b|\b\d{2}\.\d{2}\.\d{2}-\d{3}\.\d{2}\b")
PHONE_PATTERN = re.compile(r"\+\d[\d\s.\-]{8,}\d")


class PIIRedactor:
    """structlog processor that scrubs PII from event dictionaries.

    Known sensitive keys are replaced wholesale; string values anywhere in
    the event (including nested dicts and lists) are pattern-scrubbed.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact_mapping(event_dict))

    def _redact_mapping(self, data: MutableMapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in data.items():
            if key.lower() in SENSITIVE_KEYS and value is not None:
                result[key] = "[REDACTED]"
            else:
                result[key] = self._redact_value(value)
        return result

    def _redact_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return redact_text(value)
        if isinstance(value, dict):
            return self._redact_mapping(value)
        if isinstance(value, (list, tuple)):
            return [self._redact_value(item) for item in value]
        return value


def redact_text(value: str) -> str:
    """Replace PII-looking spans in a free-text string."""
    # Card numbers first so the phone pattern does not eat them
    value = CARD_PATTERN.sub("[CARD]", value)
    value = NATIONAL_ID_PATTERN.sub("[NATIONAL_ID]", value)
    value = EMAIL_PATTERN.sub("[EMAIL]", value)
    value = PHONE_PATTERN.sub("[PHONE]", value)
    return value


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        format: "json" for production, "console" for development
        redact_pii: Whether to scrub PII from log events
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if redact_pii:
        processors.append(PIIRedactor())

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    level_map = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_map.get(level.upper(), 20)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound to the given module name."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
