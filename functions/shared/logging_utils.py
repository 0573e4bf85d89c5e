"""Structured logging utilities.

Every log line is a single JSON object so Application Insights can query
message ids, blob names and durations as fields.

Context fields live in a ContextVar. The Functions worker runs synchronous
invocations on a thread pool, and each invocation sees only its own fields.
"""

import json
import logging
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

LOGGER_NAME = "file_processor"

# Never mutated in place; set_context installs a new dict
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


class StructuredLogger:
    """Logger that outputs structured JSON for observability."""

    def __init__(self, logger: logging.Logger | None = None):
        """Initialize structured logger.

        Args:
            logger: Python logger to use (defaults to the file_processor logger)
        """
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    def set_context(self, **kwargs: Any) -> None:
        """Set context fields for subsequent logs in the current invocation.

        Args:
            **kwargs: Context fields (e.g., message_id, blob)
        """
        _log_context.set({**_log_context.get(), **kwargs})

    def clear_context(self) -> None:
        """Clear the current invocation's context fields."""
        _log_context.set({})

    @property
    def context(self) -> dict[str, Any]:
        return dict(_log_context.get())

    def _format_log(
        self,
        level: str,
        step: str,
        message: str,
        duration_ms: int | None = None,
        **kwargs: Any,
    ) -> str:
        """Format a structured log entry.

        Args:
            level: Log level (INFO, WARNING, ERROR)
            step: Handling step (receive, parse, admit, route, read, write, publish)
            message: Human-readable message
            duration_ms: Operation duration in milliseconds
            **kwargs: Additional fields

        Returns:
            JSON-formatted log string
        """
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "step": step,
            "message": message,
            **_log_context.get(),
            **kwargs,
        }

        if duration_ms is not None:
            entry["duration_ms"] = duration_ms

        # SDK objects (datetimes, enums) fall back to str()
        return json.dumps(entry, default=str)

    def info(
        self,
        step: str,
        message: str,
        duration_ms: int | None = None,
        **kwargs: Any,
    ) -> None:
        """Log info-level structured message."""
        self.logger.info(self._format_log("INFO", step, message, duration_ms, **kwargs))

    def warning(
        self,
        step: str,
        message: str,
        duration_ms: int | None = None,
        **kwargs: Any,
    ) -> None:
        """Log warning-level structured message."""
        self.logger.warning(
            self._format_log("WARNING", step, message, duration_ms, **kwargs)
        )

    def error(
        self,
        step: str,
        message: str,
        duration_ms: int | None = None,
        exc_info: bool = False,
        **kwargs: Any,
    ) -> None:
        """Log error-level structured message.

        Args:
            step: Handling step
            message: Human-readable message
            duration_ms: Operation duration in milliseconds
            exc_info: Attach the active exception traceback
            **kwargs: Additional fields
        """
        self.logger.error(
            self._format_log("ERROR", step, message, duration_ms, **kwargs),
            exc_info=exc_info,
        )

    @contextmanager
    def timed_operation(self, step: str, message: str, **kwargs: Any):
        """Context manager for timing operations.

        Args:
            step: Handling step
            message: Message to log on completion
            **kwargs: Additional fields

        Yields:
            dict that can be updated with additional fields during operation
        """
        start_time = time.monotonic()
        extra_fields: dict[str, Any] = {}

        try:
            yield extra_fields
        except Exception as e:
            duration_ms = int((time.monotonic() - start_time) * 1000)
            self.error(
                step,
                f"{message} - FAILED: {e!s}",
                duration_ms=duration_ms,
                error=str(e),
                error_type=type(e).__name__,
                **kwargs,
                **extra_fields,
            )
            raise

        duration_ms = int((time.monotonic() - start_time) * 1000)
        self.info(step, message, duration_ms=duration_ms, **kwargs, **extra_fields)


# Global logger instance
structured_logger = StructuredLogger()
