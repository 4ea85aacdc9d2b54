r"""Callback types and data structures for observability.

This module provides the records passed to the optional callbacks of a
retry execution:

- on_attempt: Called once per failed attempt with an ``AttemptRecord``
- on_give_up: Called once when the execution is exhausted, with the last
  ``NormalizedError``
- on_success: Called once when an attempt succeeds, with a ``SuccessInfo``
- telemetry: Called once per attempt outcome with a ``TelemetryEvent``

Callbacks run synchronously in the executing thread or task. They must
not block, and exceptions they raise are not swallowed.

Example:
    ```pycon
    >>> from resilex import RetryPolicy, execute_with_retry
    >>> from resilex.callbacks import AttemptRecord
    >>> def log_attempt(record: AttemptRecord) -> None:
    ...     print(f"attempt {record.attempt_number} failed: {record.error.message}")
    ...
    >>> execute_with_retry(lambda token: 42, RetryPolicy(), on_attempt=log_attempt)
    42

    ```
"""

from __future__ import annotations

__all__ = [
    "AttemptRecord",
    "SuccessInfo",
    "TelemetryEvent",
    "invoke_on_attempt",
    "invoke_on_give_up",
    "invoke_on_success",
    "invoke_telemetry",
]

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from resilex.classifier import NormalizedError


@dataclass(frozen=True)
class AttemptRecord:
    """Information passed to on_attempt callback.

    Attributes:
        attempt_number: The number of the failed attempt (1-indexed).
        error: The normalized error of the attempt.
        retryable: Whether the retry predicate accepted the error.
        is_last_attempt: Whether the attempt budget is spent.
    """

    attempt_number: int
    error: NormalizedError | None
    retryable: bool
    is_last_attempt: bool


@dataclass(frozen=True)
class SuccessInfo:
    """Information passed to on_success callback.

    Attributes:
        operation_name: The name of the operation.
        attempt: The attempt number that succeeded (1-indexed).
        total_time: Time spent on all attempts including backoff (seconds).
    """

    operation_name: str
    attempt: int
    total_time: float


@dataclass(frozen=True)
class TelemetryEvent:
    """Information passed to the telemetry sink once per attempt.

    Attributes:
        operation_name: The name of the operation.
        attempt: The attempt number (1-indexed).
        status_code: The HTTP status code of the failure, if any.
        retryable: Whether the retry predicate accepted the failure
            (``False`` for a successful attempt).
        message: The error message, or ``"succeeded"``.
    """

    operation_name: str
    attempt: int
    status_code: int | None
    retryable: bool
    message: str


def invoke_on_attempt(
    on_attempt: Callable[[AttemptRecord], None] | None,
    record: AttemptRecord,
) -> None:
    """Invoke on_attempt callback if provided.

    Args:
        on_attempt: Optional callback invoked after each failed attempt.
        record: The record of the failed attempt.
    """
    if on_attempt is not None:
        on_attempt(record)


def invoke_on_give_up(
    on_give_up: Callable[[NormalizedError], None] | None,
    error: NormalizedError,
) -> None:
    """Invoke on_give_up callback if provided.

    Args:
        on_give_up: Optional callback invoked when the execution is
            exhausted.
        error: The normalized error of the last attempt.
    """
    if on_give_up is not None:
        on_give_up(error)


def invoke_on_success(
    on_success: Callable[[SuccessInfo], None] | None,
    *,
    operation_name: str,
    attempt: int,
    start_time: float,
) -> None:
    """Invoke on_success callback if provided.

    Args:
        on_success: Optional callback invoked when an attempt succeeds.
        operation_name: The name of the operation.
        attempt: The attempt number that succeeded (1-indexed).
        start_time: The ``time.monotonic()`` timestamp when the
            execution started.
    """
    if on_success is not None:
        on_success(
            SuccessInfo(
                operation_name=operation_name,
                attempt=attempt,
                total_time=time.monotonic() - start_time,
            )
        )


def invoke_telemetry(
    telemetry: Callable[[TelemetryEvent], None] | None,
    *,
    operation_name: str,
    attempt: int,
    error: NormalizedError | None,
    retryable: bool,
) -> None:
    """Invoke the telemetry sink if provided.

    Args:
        telemetry: Optional sink invoked once per attempt outcome.
        operation_name: The name of the operation.
        attempt: The attempt number (1-indexed).
        error: The normalized error, or ``None`` for a successful attempt.
        retryable: Whether the retry predicate accepted the failure.
    """
    if telemetry is None:
        return
    telemetry(
        TelemetryEvent(
            operation_name=operation_name,
            attempt=attempt,
            status_code=error.status_code if error is not None else None,
            retryable=retryable,
            message=error.message if error is not None else "succeeded",
        )
    )
