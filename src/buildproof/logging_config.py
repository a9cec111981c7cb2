"""
Logging configuration for buildproof.

Library modules log through ``logging.getLogger(__name__)`` and never install
handlers. The CLI calls configure_logging() once. Handlers write to stderr;
stdout carries proof lines and must stay machine-readable.
"""
from __future__ import annotations

import json
import logging
import sys
import time
from typing import Optional


class StructuredFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def configure_logging(
    level: str = "WARNING",
    json_format: bool = False,
    stream: Optional[object] = None,
) -> None:
    """
    Configure the ``buildproof`` logger hierarchy.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Emit structured JSON lines instead of plain text
        stream: Output stream (default: stderr)
    """
    logger = logging.getLogger("buildproof")
    try:
        logger.setLevel(getattr(logging, level.upper()))
    except AttributeError:
        raise ValueError(f"Unknown log level: {level!r}") from None

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if json_format:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter("[%(name)s] %(levelname)s: %(message)s")

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False


__all__ = ["StructuredFormatter", "configure_logging"]
