"""
Named loggers for the events tracker backend.

Loggers:
    api       HTTP requests, responses, middleware
    services  Business operations and the event audit trail
    auth      Registration, login and the session lifecycle
    db        Database errors and maintenance

Development prints one human-readable line per record to stdout.
Production (EVENTS_ENV=production) writes JSON lines to
{EVENTS_LOG_DIR}/{logger}.log, rotated at 10MB with 5 backups. Fields
passed through ``extra={...}`` become top-level JSON keys.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from backend.src.config.settings import get_settings


LOGGER_NAMES = ("api", "services", "auth", "db")
LOGGER_NAMESPACE = "events"

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

# Attributes every LogRecord has; anything else came in via extra={...}
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with call site and extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and key not in payload
        )
        return json.dumps(payload, default=str)


class ConsoleFormatter(logging.Formatter):
    """[2030-02-01 10:30:45] INFO - events.api - GET /api/v1/events 200"""

    def __init__(self):
        super().__init__(
            fmt="[%(asctime)s] %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def _build_handler(logger_name: str, production: bool, log_dir: Path) -> logging.Handler:
    if production:
        handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{logger_name}.log",
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(JSONFormatter())
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ConsoleFormatter())
    return handler


def configure_logging() -> Dict[str, logging.Logger]:
    """
    (Re)build every named logger from the current settings.

    Existing handlers are replaced, so calling this twice does not
    duplicate output.

    Returns:
        Mapping of short name (api, services, auth, db) to Logger
    """
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    log_dir = Path(settings.log_dir)
    if settings.is_production:
        log_dir.mkdir(parents=True, exist_ok=True)

    loggers = {}
    for name in LOGGER_NAMES:
        logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
        logger.setLevel(level)
        logger.propagate = False
        logger.handlers.clear()
        logger.addHandler(_build_handler(name, settings.is_production, log_dir))
        loggers[name] = logger
    return loggers


_loggers: Optional[Dict[str, logging.Logger]] = None


def get_logger(name: str) -> logging.Logger:
    """
    Return one of the named loggers, configuring logging on first use.

    Raises:
        ValueError: If name is not one of api, services, auth, db
    """
    global _loggers
    if _loggers is None:
        _loggers = configure_logging()

    try:
        return _loggers[name]
    except KeyError:
        raise ValueError(
            f"Unknown logger name: {name}. Valid names: {', '.join(LOGGER_NAMES)}"
        ) from None


def init_logging() -> Dict[str, logging.Logger]:
    """Configure logging at application startup."""
    global _loggers
    _loggers = configure_logging()
    return _loggers
