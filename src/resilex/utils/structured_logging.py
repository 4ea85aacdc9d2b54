r"""Structured logging utilities for machine-readable log output.

This module provides a JSON formatter and an execution id stored in a
context variable. Retry sessions set the execution id for the duration
of each execution, so every log line emitted while retrying one
operation (attempt failures, sleeps, cancellations) can be correlated.

Structured logging is opt-in: configure a handler with
``StructuredFormatter`` on the ``resilex`` logger.

Example:
    ```python
    import logging
    from resilex.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("resilex")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_execution_id",
    "get_execution_id",
    "log_structured",
    "set_execution_id",
]

import contextvars
import json
import logging
import time
from typing import Any

# Attributes every LogRecord carries; anything else came from ``extra``
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}

_execution_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "execution_id", default=None
)


def get_execution_id() -> str | None:
    """Get the id of the execution running in the current context.

    Returns:
        The current execution id, or None if not set.

    Example:
        ```pycon
        >>> from resilex.utils.structured_logging import get_execution_id, set_execution_id
        >>> token = set_execution_id("exec-1")
        >>> get_execution_id()
        'exec-1'

        ```
    """
    return _execution_id.get()


def set_execution_id(execution_id: str) -> contextvars.Token[str | None]:
    """Set the execution id for the current context.

    The value lives in a context variable, so it is isolated per thread
    and per asyncio task.

    Args:
        execution_id: The execution id to set.

    Returns:
        A token that ``clear_execution_id`` can use to restore the
        previous value.
    """
    return _execution_id.set(execution_id)


def clear_execution_id(token: contextvars.Token[str | None] | None = None) -> None:
    """Clear the execution id of the current context.

    Args:
        token: Optional token returned by ``set_execution_id``. When
            given, the previous value is restored instead of clearing.
    """
    if token is None:
        _execution_id.set(None)
    else:
        _execution_id.reset(token)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Each record becomes one JSON object with the fields ``timestamp``,
    ``level``, ``logger``, ``message``, ``module``, ``function``, ``line``
    and ``thread``, plus ``execution_id`` when set, ``exception`` when the
    record carries exception info, and every field passed through
    ``extra``.

    Example:
        ```pycon
        >>> import json
        >>> import logging
        >>> from io import StringIO
        >>> from resilex.utils.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("doctest_structured")
        >>> logger.addHandler(handler)
        >>> logger.warning("attempt failed", extra={"attempt": 2})
        >>> json.loads(stream.getvalue())["attempt"]
        2

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread": record.threadName,
        }

        execution_id = get_execution_id()
        if execution_id is not None:
            log_data["execution_id"] = execution_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        """Format timestamp as ISO 8601 in UTC with millisecond precision.

        Args:
            record: The log record.
            datefmt: Ignored, the output is always ISO 8601.

        Returns:
            ISO 8601 formatted timestamp.
        """
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(logger: logging.Logger, level: int, message: str, **extra: Any) -> None:
    """Log a message with structured data.

    Args:
        logger: Logger to use.
        level: Log level (e.g., logging.INFO).
        message: Log message.
        **extra: Additional structured fields to include in the log.
    """
    logger.log(level, message, extra=extra)
