"""
Logging setup shared by the CLI, the command boundary and the pool arms.

The core only ever calls ``get_logger(__name__)`` and attaches context through
``extra=``. How records are rendered is decided once, by the host, through
``configure_logging``: plain console lines for a terminal, one JSON object per
line for shells that collect structured logs.

Usage:
    from querydesk.utils.logging import configure_logging, get_logger

    configure_logging(level="DEBUG", json_logs=True)
    log = get_logger(__name__)
    log.info("Connected", extra={"handle": handle, "backend": "sqlite"})
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "extra"}

# Driver loggers that are chatty at INFO.
_DRIVER_LOGGERS = ("psycopg", "psycopg.pool", "aiomysql", "aiosqlite")

CONSOLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"


def _json_formatter(record: logging.LogRecord) -> str:
    """Serialize ``record`` to one JSON line, promoting ``extra=`` fields."""
    payload: Dict[str, Any] = {
        "ts": record.created,
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    payload.update(
        (key, value) for key, value in vars(record).items() if key not in _RESERVED_ATTRS
    )
    # Callers that pass extra={"extra": {...}} get the inner dict flattened.
    nested = getattr(record, "extra", None)
    if isinstance(nested, dict):
        payload.update(nested)
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def _logging_config(level: str, json_logs: bool) -> Dict[str, Any]:
    driver_level = "DEBUG" if level == "DEBUG" else "WARNING"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": CONSOLE_FORMAT, "datefmt": CONSOLE_DATEFMT},
            "json": {"()": JsonFormatter},
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "json" if json_logs else "console",
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {name: {"level": driver_level} for name in _DRIVER_LOGGERS},
        "root": {"handlers": ["stderr"], "level": level},
    }


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Install the stderr handler on the root logger.

    Parameters
    ----------
    level : str
        Level name, case-insensitive ("debug", "INFO", ...).
    json_logs : bool
        Emit JSON lines instead of console text.
    """
    logging.config.dictConfig(_logging_config(level.upper(), json_logs))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter"]
