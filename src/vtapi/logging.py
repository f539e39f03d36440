"""Structured logging setup - masks the API key automatically."""

import logging
import re

import structlog

from vtapi.config import Settings

# Patterns that indicate sensitive values in log entries
_SENSITIVE_KEYS = re.compile(
    r"(api_?key|api[-_]?secret|token|password|secret|credential|auth)",
    re.IGNORECASE,
)


def _mask(value: object) -> object:
    if isinstance(value, str):
        return value[:4] + "***" + value[-4:] if len(value) > 8 else "***"
    return value


def _mask_sensitive_values(
    logger: object, method_name: str, event_dict: dict,
) -> dict:
    """Structlog processor that masks sensitive-looking keys, one level deep.

    Request parameters are logged as a dict, so nested keys are masked too.
    """
    for key, val in list(event_dict.items()):
        if _SENSITIVE_KEYS.search(key):
            event_dict[key] = _mask(val)
        elif isinstance(val, dict):
            event_dict[key] = {
                k: _mask(v) if _SENSITIVE_KEYS.search(str(k)) else v for k, v in val.items()
            }
    return event_dict


def setup_logging(level: str | None = None) -> None:
    """Configure structured logging with automatic secret masking.

    Without an explicit ``level`` the ``VT_LOG_LEVEL`` setting is used.
    """
    if level is None:
        level = Settings().log_level
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _mask_sensitive_values,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )
