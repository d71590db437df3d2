"""
Per-database log context.

Records logged on behalf of one test database carry its name as
``record.database``. ``DatabaseFilter`` fills in ``"-"`` for every other
record so a format string can always reference ``%(database)s``.

The package never configures logging on import. ``setup_logging`` is an
opt-in helper that attaches one handler to the ``ephemeral_db`` logger and
leaves the root logger to the application.
"""

from __future__ import annotations

import json
import logging
from typing import Any, MutableMapping, Optional

from .settings import EphemeralDBSettings, get_ephemeral_db_settings

PACKAGE_LOGGER = "ephemeral_db"
HANDLER_NAME = "ephemeral_db"
NO_DATABASE = "-"
PLAIN_FORMAT = "%(asctime)s %(levelname)-5s %(name)s [%(database)s] %(message)s"


class DatabaseLoggerAdapter(logging.LoggerAdapter):
    """Stamps every record with the database it concerns.

    A per-call ``extra`` is merged over the adapter's own, instead of being
    replaced by it as with a plain LoggerAdapter.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


def database_logger(logger: logging.Logger, database: str) -> DatabaseLoggerAdapter:
    return DatabaseLoggerAdapter(logger, {"database": database})


class DatabaseFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "database"):
            record.database = NO_DATABASE
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``database`` is omitted when unknown."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        database = getattr(record, "database", NO_DATABASE)
        if database != NO_DATABASE:
            payload["database"] = database
        if record.exc_info and record.exc_info[0] is not None:
            payload["error"] = {
                "type": record.exc_info[0].__name__,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(payload, default=str)


def setup_logging(
    settings: Optional[EphemeralDBSettings] = None,
    *,
    level: Optional[str] = None,
    fmt: Optional[str] = None,
) -> logging.Handler:
    """Attach a stream handler to the ``ephemeral_db`` logger.

    Level and format default to ``EPHEMERAL_DB_LOG_LEVEL`` and
    ``EPHEMERAL_DB_LOG_FORMAT`` ("plain" or "json"). Calling it again replaces
    the handler it installed before.
    """
    settings = settings or get_ephemeral_db_settings()
    level = (level or settings.log_level).upper()
    fmt = (fmt or settings.log_format).lower()

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.addFilter(DatabaseFilter())
    handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(PLAIN_FORMAT))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in package_logger.handlers[:]:
        if existing.get_name() == HANDLER_NAME:
            package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler


__all__ = [
    "DatabaseFilter",
    "DatabaseLoggerAdapter",
    "JsonFormatter",
    "database_logger",
    "setup_logging",
]
