"""Structured logging configuration using structlog."""

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

# ANSI escape code pattern for stripping colors
ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")

# header.payload.signature, each part base64url
JWT_PATTERN = re.compile(r"\beyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*")
BEARER_PATTERN = re.compile(r"(Bearer\s+)[^\s'\"]+", re.IGNORECASE)

SENSITIVE_KEYS = frozenset(
    {
        "access_token",
        "accesstoken",
        "refresh_token",
        "refreshtoken",
        "password",
        "authorization",
        "token",
    }
)


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from text."""
    return ANSI_ESCAPE.sub("", text)


def mask_token(token: str | None) -> str | None:
    """Shorten a credential to something safe to log.

    Keeps the last four characters so two tokens can still be told apart.
    """
    if not token:
        return token
    if len(token) <= 8:
        return "***"
    return f"***{token[-4:]}"


def _mask_value(value: Any) -> Any:
    if isinstance(value, str):
        masked = BEARER_PATTERN.sub(r"\1***", value)
        return JWT_PATTERN.sub("***", masked)
    if isinstance(value, dict):
        return {
            k: "***" if str(k).lower() in SENSITIVE_KEYS else _mask_value(v)
            for k, v in value.items()
        }
    return value


def mask_credentials(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor that redacts tokens and passwords from log events."""
    for key, value in list(event_dict.items()):
        if key.lower() in SENSITIVE_KEYS and value is not None:
            event_dict[key] = "***"
        else:
            event_dict[key] = _mask_value(value)
    return event_dict


class PlainFormatter(logging.Formatter):
    """Formatter for file output: same layout, no color codes."""

    def format(self, record: logging.LogRecord) -> str:
        return strip_ansi(super().format(record))


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    log_file: Path | None = None,
    log_to_console: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON format; otherwise, console-friendly format
        log_file: If set, also write plain-text logs to this file (rotated at 10 MB)
        log_to_console: If True, write logs to stdout
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(
            PlainFormatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)

    # httpx logs every request line at INFO, including URLs
    logging.getLogger("httpx").setLevel(logging.WARNING)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
        mask_credentials,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors_list = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors_list = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=log_file is None),
        ]

    structlog.configure(
        processors=processors_list,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a configured logger instance."""
    return structlog.get_logger(name)
