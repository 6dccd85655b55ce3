"""JSON-lines logging for the spin wheel.

Every module logs through ``logging.getLogger("spinwheel.<area>")`` and passes
structured context via ``extra=``; :class:`JsonFormatter` lifts those fields
into the emitted JSON object. Identities must already be masked by the caller.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple

LOG_FILE_NAME = "spinwheel_current.jsonl"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> Iterator[Tuple[str, Any]]:
    for key, value in vars(record).items():
        if key.startswith("_") or key in _STANDARD_ATTRS:
            continue
        try:
            json.dumps(value)
        except (TypeError, ValueError):
            continue
        yield key, value


class JsonFormatter(logging.Formatter):
    """One JSON object per record: UTC timestamp, level, logger, message, extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        for key, value in _extra_fields(record):
            payload.setdefault(key, value)
        return json.dumps(payload, ensure_ascii=False)


def _build_handlers(log_file: Path, backup_days: int, console: bool) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [
        TimedRotatingFileHandler(log_file, when="midnight", backupCount=backup_days, encoding="utf-8")
    ]
    if console:
        handlers.append(logging.StreamHandler())
    formatter = JsonFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(
    *,
    log_dir: Path,
    level: str = "INFO",
    logger_name: str = "spinwheel",
    backup_days: int = 14,
    console: bool = True,
) -> Logger:
    """(Re)configure ``logger_name`` to write JSON lines to ``log_dir``.

    The file rotates at midnight and keeps ``backup_days`` old files. Calling
    this again replaces (and closes) the handlers installed previously.
    """

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    logger = logging.getLogger(logger_name)
    logger.setLevel(level.upper())
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    for handler in _build_handlers(log_file, backup_days, console):
        logger.addHandler(handler)
    logger.propagate = False

    logger.debug("JSON logging configured", extra={"log_file": str(log_file)})
    return logger


__all__ = ["JsonFormatter", "LOG_FILE_NAME", "configure_logging"]
