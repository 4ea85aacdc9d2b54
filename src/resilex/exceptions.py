r"""Exceptions raised by the retry executor and retry sessions."""

from __future__ import annotations

__all__ = ["OperationCanceledError", "SessionClosedError"]


class OperationCanceledError(RuntimeError):
    """Exception raised when an execution is aborted by cancellation.

    This is the cancellation signal surfaced to the caller. It is never
    retried and never counts as the "last error" of an exhausted
    execution.

    Args:
        reason: Optional human readable reason given when the
            cancellation source was canceled.

    Example:
        ```pycon
        >>> from resilex.exceptions import OperationCanceledError
        >>> raise OperationCanceledError("session closed")
        Traceback (most recent call last):
            ...
        resilex.exceptions.OperationCanceledError: Operation canceled: session closed

        ```
    """

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason
        message = "Operation canceled" if reason is None else f"Operation canceled: {reason}"
        super().__init__(message)


class SessionClosedError(RuntimeError):
    """Exception raised when executing on a retry session that was
    closed."""
