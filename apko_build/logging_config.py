"""Logging configuration for apko-build.

Log records from the SBOM pipeline carry a ``stage`` extra (``layer``,
``digest``, ``tag``, ``package-index``, ``generate``), and writer records an
``sbom_format`` extra. The JSON formatter emits them as top-level fields;
the text formatter prefixes the stage.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict

LOG_LEVEL_ENV = "APKO_LOG_LEVEL"
LOG_FORMAT_ENV = "APKO_LOG_FORMAT"

# Extras copied from log records into structured output
CONTEXT_FIELDS = ("stage", "sbom_format")


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: str = "INFO", structured: bool = False) -> logging.Logger:
    """
    Set up the apko_build logger.

    Args:
        level: Logging level name; unknown names fall back to INFO
        structured: Whether to emit one JSON object per record

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("apko_build")

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    log_level = _resolve_level(level)
    logger.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(StructuredFormatter() if structured else StageFormatter())
    logger.addHandler(handler)

    return logger


class StageFormatter(logging.Formatter):
    """Human-readable formatter that prefixes pipeline records with their stage."""

    def __init__(self) -> None:
        super().__init__(
            "[%(asctime)s] %(levelname)s - %(name)s - %(stage_prefix)s%(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

    def format(self, record: logging.LogRecord) -> str:
        stage = getattr(record, "stage", None)
        record.stage_prefix = f"[{stage}] " if stage else ""
        return super().format(record)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


# Global logger instance
logger = setup_logging(
    level=os.getenv(LOG_LEVEL_ENV, "INFO"),
    structured=os.getenv(LOG_FORMAT_ENV, "text").lower() == "json",
)
