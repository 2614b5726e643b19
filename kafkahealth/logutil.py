"""
Logging setup for kafka-health.

Records carry their structured fields as `extra=` attributes. The JSON
formatter writes one object per line to stdout; the console handler renders
the same records through the rich console manager.
"""

import datetime
import json
import logging
import sys
from typing import Any, TextIO

from .console import console_manager

logger = logging.getLogger("kafkahealth")

LOG_LEVELS: dict[str, int] = {
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}

# Level names as they appear in emitted JSON records
LEVEL_NAMES: dict[int, str] = {
    logging.CRITICAL: "fatal",
    logging.ERROR: "error",
    logging.WARNING: "warning",
    logging.INFO: "info",
    logging.DEBUG: "debug",
}

# Attributes every LogRecord has; anything else came from `extra=`
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


def parse_log_level(name: str | None) -> int:
    """Translate a level name to a logging level, defaulting to WARNING."""
    if not name:
        return logging.WARNING
    return LOG_LEVELS.get(name.strip().lower(), logging.WARNING)


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the structured fields attached to a record via `extra=`."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


class JsonFormatter(logging.Formatter):
    """Formats records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = record_fields(record)
        payload["level"] = LEVEL_NAMES.get(record.levelno, record.levelname.lower())
        payload["msg"] = record.getMessage()
        payload["time"] = (
            datetime.datetime.fromtimestamp(record.created, tz=datetime.timezone.utc)
            .astimezone()
            .isoformat(timespec="seconds")
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default)


class KeyValueFormatter(logging.Formatter):
    """Formats records as the message followed by key=value fields."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        fields = record_fields(record)
        if fields:
            rendered = " ".join(f"{key}={value}" for key, value in fields.items())
            message = f"{message} {rendered}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


class ConsoleManagerHandler(logging.Handler):
    """Logging handler that forwards records to the console manager."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            if record.levelno >= logging.ERROR:
                console_manager.print_error(msg)
            elif record.levelno >= logging.WARNING:
                console_manager.print_warning(msg)
            elif record.levelno >= logging.INFO:
                console_manager.print(msg)
            else:
                console_manager.print(msg, style="dim")
        except Exception:
            self.handleError(record)


def init_logging(
    level: str | None = None,
    log_format: str = "json",
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the kafkahealth logger and return it.

    Any handler installed by an earlier call is replaced, so calling this
    more than once never duplicates output.

    Args:
        level: Level name (fatal, error, warn, info, debug)
        log_format: 'json' for JSON lines on stdout, 'console' for rich output
        stream: Stream for JSON output, defaults to the current sys.stdout
    """
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler: logging.Handler
    if log_format == "console":
        handler = ConsoleManagerHandler()
        handler.setFormatter(KeyValueFormatter())
    else:
        handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
        handler.setFormatter(JsonFormatter())

    logger.addHandler(handler)
    logger.setLevel(parse_log_level(level))
    logger.propagate = False
    return logger
