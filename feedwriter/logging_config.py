"""Structured logging configuration for feedwriter."""

import json
import logging
import sys
from datetime import UTC, datetime

from .config import Config

_CONTEXT_FIELDS = ("build_id", "component", "dialect", "element", "parameter")


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field_name in _CONTEXT_FIELDS:
            if hasattr(record, field_name):
                log_entry[field_name] = getattr(record, field_name)

        if hasattr(record, "metrics"):
            log_entry["metrics"] = record.metrics

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class BuildLogger:
    """Logger that tags every record with the feed build it belongs to."""

    def __init__(self, build_id: str, component: str = "feed"):
        """Initialize build logger.

        Args:
            build_id: Identifier shared by a feed, its items and its serializer
            component: Component name (e.g., 'feed', 'item', 'serializer')
        """
        self.build_id = build_id
        self.component = component
        self.logger = logging.getLogger(f"feedwriter.{component}")
        self.start_time: datetime | None = None
        self.end_time: datetime | None = None

    def _log_with_context(self, level: int, message: str, **kwargs) -> None:
        """Log message with build context."""
        extra = {
            "build_id": self.build_id,
            "component": self.component,
            **kwargs,
        }
        self.logger.log(level, message, extra=extra)

    def info(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.WARNING, message, **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.DEBUG, message, **kwargs)

    def log_build_start(self, **kwargs) -> None:
        """Log the start of a build step with timestamp."""
        self.start_time = datetime.now(UTC)
        self.info(
            f"Starting {self.component} build",
            build_start=self.start_time.isoformat(),
            **kwargs,
        )

    def log_build_end(self, success: bool = True, **kwargs) -> None:
        """Log the end of a build step with timestamp and duration."""
        self.end_time = datetime.now(UTC)

        duration_seconds = None
        if self.start_time:
            duration_seconds = (self.end_time - self.start_time).total_seconds()

        self.info(
            f"Completed {self.component} build",
            build_end=self.end_time.isoformat(),
            build_duration_seconds=duration_seconds,
            build_success=success,
            **kwargs,
        )

    def log_rejection(self, error: Exception, **kwargs) -> None:
        """Log a rejected setter call before the error reaches the caller."""
        self.warning(f"Rejected input: {error}", error=str(error), **kwargs)


def setup_structured_logging(log_level: str | None = None) -> None:
    """Setup structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to
            FEEDWRITER_LOG_LEVEL from the environment.
    """
    if log_level is None:
        log_level = Config().log_level

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(console_handler)

    loggers = [
        "feedwriter",
        "feedwriter.feed",
        "feedwriter.item",
        "feedwriter.serializer",
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(getattr(logging, log_level.upper()))
        logger.propagate = True


def create_build_logger(component: str, build_id: str | None = None) -> BuildLogger:
    """Create a build logger for a component.

    Args:
        component: Component name
        build_id: Optional build ID (will generate one if not provided)

    Returns:
        BuildLogger instance
    """
    if not build_id:
        build_id = f"build_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"

    return BuildLogger(build_id, component)
