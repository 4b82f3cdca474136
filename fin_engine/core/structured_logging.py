"""
FIN Engine - Structured Logging

This module renders log records as JSON lines and configures the root logger
for the command line. Library modules only ever call
``logging.getLogger(__name__)``; nothing here is imported by the codec.
"""

import json
import logging
import logging.config
import traceback
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class LogCategory(Enum):
    """Log categories for filtering and routing."""

    SYSTEM = "system"
    PARSING = "parsing"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"


@dataclass
class LogContext:
    """Context information attached to a log record via ``extra``."""

    message_type: Optional[str] = None
    source: Optional[str] = None
    operation: Optional[str] = None
    additional_fields: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = asdict(self)
        return {k: v for k, v in result.items() if v}


class StructuredFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record."""

    def __init__(
        self,
        include_context: bool = True,
        service_fields: Optional[Dict[str, Any]] = None,
    ):
        super().__init__()
        self.include_context = include_context
        # Stamped on every event, e.g. service name and environment
        self.service_fields = dict(service_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        category = getattr(record, "category", LogCategory.SYSTEM)
        event = {
            "timestamp": record.created,
            "iso_timestamp": datetime.fromtimestamp(
                record.created, timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "category": category.value if isinstance(category, LogCategory) else str(category),
            "logger": record.name,
            "message": record.getMessage(),
        }
        event.update(self.service_fields)

        context = getattr(record, "context", None)
        if self.include_context and context is not None:
            event["context"] = (
                context.to_dict() if isinstance(context, LogContext) else context
            )

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            event["exception"] = {
                "type": type(exc).__name__,
                "message": str(exc),
                "traceback": traceback.format_exception(
                    type(exc), exc, exc.__traceback__
                ),
            }

        return json.dumps(event, ensure_ascii=False, default=str)


def build_logging_config(
    level: str = "INFO",
    json_format: bool = False,
    service_fields: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build a ``dictConfig`` mapping for console logging."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": StructuredFormatter,
                "include_context": True,
                "service_fields": service_fields or {},
            },
            "simple": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "structured" if json_format else "simple",
                "stream": "ext://sys.stderr",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    service_fields: Optional[Dict[str, Any]] = None,
) -> None:
    """Configure the logging system."""
    logging.config.dictConfig(
        build_logging_config(level.upper(), json_format, service_fields)
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name."""
    return logging.getLogger(name)
