r"""Run a callable with automatic retry logic.

This module provides ``execute_with_retry``, the one-shot entry point
for synchronous operations. It builds a ``RetryExecutor`` for a single
execution; use a ``RetrySession`` when executions must be tied to the
lifetime of an owning component.
"""

from __future__ import annotations

__all__ = ["execute_with_retry"]

from typing import TYPE_CHECKING, TypeVar

from resilex.core.config import RetryPolicy
from resilex.retry import CallbackConfig, RetryExecutor

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from resilex.callbacks import AttemptRecord, SuccessInfo, TelemetryEvent
    from resilex.cancellation import CancellationToken
    from resilex.classifier import NormalizedError

T = TypeVar("T")


def execute_with_retry(
    operation: Callable[[CancellationToken], T],
    policy: RetryPolicy | None = None,
    cancellation: CancellationToken | Iterable[CancellationToken] | None = None,
    *,
    on_attempt: Callable[[AttemptRecord], None] | None = None,
    on_give_up: Callable[[NormalizedError], None] | None = None,
    on_success: Callable[[SuccessInfo], None] | None = None,
    telemetry: Callable[[TelemetryEvent], None] | None = None,
    classifier: Callable[[BaseException], NormalizedError] | None = None,
    random_func: Callable[[float, float], float] | None = None,
    operation_name: str = "operation",
) -> T:
    r"""Execute a callable with automatic retry logic.

    Args:
        operation: Callable receiving the execution's cancellation token.
        policy: The retry policy. If ``None``, a default ``RetryPolicy``
            is used.
        cancellation: Optional token, or tokens to compose, that can stop
            the execution.
        on_attempt: Optional callback invoked after each failed attempt.
        on_give_up: Optional callback invoked when the execution is
            exhausted.
        on_success: Optional callback invoked when an attempt succeeds.
        telemetry: Optional sink invoked once per attempt outcome.
        classifier: Optional function normalizing exceptions.
        random_func: Optional function drawing a float uniformly between
            its two arguments, used for jitter.
        operation_name: Name of the operation, used in logs and
            telemetry.

    Returns:
        The result of the first successful attempt.

    Raises:
        OperationCanceledError: If the execution is canceled.
        Exception: The last error of an exhausted execution.

    Example:
        ```pycon
        >>> from resilex import RetryPolicy, execute_with_retry
        >>> from resilex.cancellation import CancellationSource
        >>> timeout = CancellationSource()
        >>> _ = timeout.cancel_after(30.0)
        >>> execute_with_retry(lambda token: "done", RetryPolicy(attempts=2), timeout)
        'done'
        >>> timeout.cancel()
        True

        ```
    """
    executor = RetryExecutor(
        policy if policy is not None else RetryPolicy(),
        CallbackConfig(
            on_attempt=on_attempt,
            on_give_up=on_give_up,
            on_success=on_success,
            telemetry=telemetry,
        ),
        classifier=classifier,
        random_func=random_func,
        operation_name=operation_name,
    )
    return executor.execute(operation, cancellation)
