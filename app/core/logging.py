"""Structured logging configuration for the BRAINTOK backend."""

import logging
import sys
from typing import Any

# Context fields promoted to top-level record attributes
PROMOTED_FIELDS = ("request_id", "user_id")


class StructuredFormatter(logging.Formatter):
    """JSON-like structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured output."""
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "module": record.module,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        for field in PROMOTED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        # Add any other extra fields
        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["error"] = self.formatException(record.exc_info).splitlines()[-1]

        # Format as key=value pairs for readability
        parts = [f"{k}={v}" for k, v in log_data.items()]
        return " ".join(parts)


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False

        # Set level based on environment
        try:
            from app.core.config import get_settings

            settings = get_settings()
            if settings.BRAINTOK_ENV == "dev":
                logger.setLevel(logging.DEBUG)
            else:
                logger.setLevel(logging.INFO)
        except Exception:
            # Default to INFO if settings not available
            logger.setLevel(logging.INFO)

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Additional context fields (e.g., request_id, s3_key)
    """
    exc_info = kwargs.pop("exc_info", None)
    extra: dict[str, Any] = {}
    for field in PROMOTED_FIELDS:
        if field in kwargs:
            extra[field] = kwargs.pop(field)
    extra["extra_data"] = kwargs

    logger.log(level, msg, extra=extra, exc_info=exc_info, stacklevel=2)
