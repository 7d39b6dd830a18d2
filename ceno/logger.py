"""
ceno.logger: Structured JSON logging.

Every line is one JSON object on stderr. Records about an error code carry
the code, its name and its origin (cc, lcs or other) as top-level fields, so
log queries can filter on them. The step that logged (``stage``) and the
handler that ran (``handler``) are top-level too; anything else goes under
``data``.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from ceno.codes import describe, origin
from ceno.config import LogLevel

LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}

# Attributes copied from the record to the top level of the JSON line.
RECORD_FIELDS = ("code", "code_name", "origin", "stage", "handler")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "logger": record.name,
        }
        for name in RECORD_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value

        data = getattr(record, "data", None)
        if data:
            entry["data"] = data

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


def code_fields(code: int | None) -> dict[str, Any]:
    """The top-level fields describing an error code."""
    if code is None:
        return {}
    return {"code": int(code), "code_name": describe(code), "origin": origin(code)}


class CenoLogger:
    """Logs events of the error-handling chain."""

    def __init__(
        self,
        name: str = "ceno",
        level: LogLevel = LogLevel.INFO,
        stream: TextIO | None = None,
    ):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(LEVELS.get(level, logging.INFO))
        self._logger.handlers.clear()

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(JSONFormatter())
        self._logger.addHandler(handler)

    def event(
        self,
        level: LogLevel,
        message: str,
        code: int | None = None,
        stage: str | None = None,
        handler: str | None = None,
        **data: Any,
    ) -> None:
        fields = code_fields(code)
        fields.update(stage=stage, handler=handler, data=data or None)
        self._logger.log(LEVELS[level], message, extra=fields)

    def debug(self, message: str, **fields: Any) -> None:
        self.event(LogLevel.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self.event(LogLevel.INFO, message, **fields)

    def warn(self, message: str, **fields: Any) -> None:
        self.event(LogLevel.WARN, message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self.event(LogLevel.ERROR, message, **fields)


_logger: CenoLogger | None = None


def get_logger() -> CenoLogger:
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        _logger = CenoLogger()
    return _logger


def configure_logger(level: LogLevel) -> CenoLogger:
    """Configure and return the global logger."""
    global _logger
    _logger = CenoLogger(level=level)
    return _logger
