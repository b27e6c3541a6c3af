"""Structured logging configuration for the Activation Engine."""

import logging
import sys
from typing import Any

# Fields lifted to the front of every line when a caller supplies them
PROMOTED_FIELDS = ("request_id", "user_id")


class StructuredFormatter(logging.Formatter):
    """key=value structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured output."""
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "module": record.module,
            "function": record.funcName,
        }

        for field in PROMOTED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        log_data["message"] = record.getMessage()

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        return " ".join(f"{k}={v}" for k, v in log_data.items())


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

        # Verbose in dev, INFO everywhere else
        try:
            from activation_engine.core.config import get_settings

            env = get_settings().ACTIVATION_ENGINE_ENV
            logger.setLevel(logging.DEBUG if env == "dev" else logging.INFO)
        except Exception:
            # Settings not loadable (missing env); keep logging usable
            logger.setLevel(logging.INFO)

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Context fields; request_id and user_id are promoted,
            everything else is appended as key=value pairs
    """
    extra: dict[str, Any] = {
        field: kwargs.pop(field) for field in PROMOTED_FIELDS if field in kwargs
    }
    extra["extra_data"] = kwargs
    logger.log(level, msg, extra=extra, stacklevel=2)
