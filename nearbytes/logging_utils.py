"""
Structured JSON logging utilities.

Volume operations run against shared, synced folders where several
machines may write; JSON log lines make it easy to correlate what each
process did to which namespace.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Characters of the hex public key stamped onto log records.
NAMESPACE_PREFIX_LENGTH = 16

# Attributes every LogRecord carries; anything else arrived via `extra`.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class StructuredJsonFormatter(logging.Formatter):
    """Render each record as one line of JSON.

    Emits the record's own creation time (UTC, ISO 8601), level, logger
    name and message, then every `extra` field such as the volume
    prefix. Values json cannot encode are rendered with str().
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_structured_logging(
    level: int = logging.INFO,
    logger_name: str | None = "nearbytes",
) -> logging.Logger:
    """Send a logger's records to stdout as JSON lines.

    Replaces any handlers already attached, so calling it twice does not
    duplicate output.

    Args:
        level: Logging level (default: INFO)
        logger_name: Logger to configure (default: the nearbytes package logger)

    Returns:
        The configured logger
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())

    logger = logging.getLogger(logger_name)
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    return logger


class VolumeLoggerAdapter(logging.LoggerAdapter):
    """Stamp the volume namespace prefix onto every record.

    Only a prefix of the public key is attached; secrets and private
    material never reach a log record.
    """

    def __init__(self, logger: logging.Logger, namespace: str):
        super().__init__(logger, {"volume": namespace[:NAMESPACE_PREFIX_LENGTH]})

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs
