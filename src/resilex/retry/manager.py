r"""Callback manager for orchestrating retry lifecycle events.

This module provides the CallbackManager class that handles invocation
of user-defined callbacks at various points in the retry lifecycle.
"""

from __future__ import annotations

__all__ = ["CallbackManager"]

from typing import TYPE_CHECKING

from resilex.callbacks import (
    invoke_on_attempt,
    invoke_on_give_up,
    invoke_on_success,
    invoke_telemetry,
)

if TYPE_CHECKING:
    from resilex.callbacks import AttemptRecord
    from resilex.classifier import NormalizedError
    from resilex.retry.config import CallbackConfig


class CallbackManager:
    """Manages callback invocations during the retry lifecycle.

    Attributes:
        callbacks: Configuration containing callback functions for lifecycle events.
        operation_name: Name reported in success and telemetry records.
    """

    def __init__(self, callbacks: CallbackConfig, operation_name: str) -> None:
        self.callbacks = callbacks
        self.operation_name = operation_name

    def on_attempt(self, record: AttemptRecord) -> None:
        """Invoke on_attempt callback and the telemetry sink for a failed
        attempt.

        Args:
            record: The record of the failed attempt.
        """
        invoke_on_attempt(self.callbacks.on_attempt, record)
        invoke_telemetry(
            self.callbacks.telemetry,
            operation_name=self.operation_name,
            attempt=record.attempt_number,
            error=record.error,
            retryable=record.retryable,
        )

    def on_give_up(self, error: NormalizedError) -> None:
        """Invoke on_give_up callback.

        Args:
            error: The normalized error of the last attempt.
        """
        invoke_on_give_up(self.callbacks.on_give_up, error)

    def on_success(self, attempt: int, start_time: float) -> None:
        """Invoke on_success callback and the telemetry sink for the
        successful attempt.

        Args:
            attempt: The attempt number that succeeded (1-indexed).
            start_time: The ``time.monotonic()`` timestamp when the
                execution started.
        """
        invoke_on_success(
            self.callbacks.on_success,
            operation_name=self.operation_name,
            attempt=attempt,
            start_time=start_time,
        )
        invoke_telemetry(
            self.callbacks.telemetry,
            operation_name=self.operation_name,
            attempt=attempt,
            error=None,
            retryable=False,
        )
