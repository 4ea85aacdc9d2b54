r"""Synchronous retry executor.

This module provides the RetryExecutor class that runs a fallible
callable under a retry policy, sleeping interruptibly between attempts.
"""

from __future__ import annotations

__all__ = ["RetryExecutor"]

import logging
import time
from typing import TYPE_CHECKING, TypeVar

from resilex.retry.config import CallbackConfig
from resilex.retry.decider import RetryDecider
from resilex.retry.executor_core import ensure_not_canceled, execution_token, process_failure
from resilex.retry.manager import CallbackManager
from resilex.retry.strategy import RetryStrategy
from resilex.utils.sleep import interruptible_sleep

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from resilex.cancellation import CancellationToken
    from resilex.classifier import NormalizedError
    from resilex.core.config import RetryPolicy

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


class RetryExecutor:
    """Executes a callable with automatic retry logic.

    The executor orchestrates the following components:
    - RetryStrategy: Calculates the jittered backoff delays
    - RetryDecider: Classifies failures and applies the retry predicate
    - CallbackManager: Invokes user-defined callbacks at lifecycle events

    It is lifecycle-agnostic: anything able to stop an execution is
    expressed as a cancellation token passed to ``execute``.

    Args:
        policy: The retry policy.
        callback_config: Optional callback configuration.
        classifier: Optional function normalizing exceptions. Defaults to
            ``classify_error``.
        random_func: Optional function drawing a float uniformly between
            its two arguments, used for jitter.
        operation_name: Name of the operation, used in logs and
            telemetry.

    Example:
        ```pycon
        >>> from resilex.core.config import RetryPolicy
        >>> from resilex.retry import RetryExecutor
        >>> calls = []
        >>> def flaky(token):
        ...     calls.append(1)
        ...     if len(calls) < 3:
        ...         raise ConnectionError("connection reset")
        ...     return "ok"
        ...
        >>> executor = RetryExecutor(RetryPolicy(attempts=3, base_delay=0.01, max_delay=0.02))
        >>> executor.execute(flaky)
        'ok'
        >>> len(calls)
        3

        ```
    """

    def __init__(
        self,
        policy: RetryPolicy,
        callback_config: CallbackConfig | None = None,
        *,
        classifier: Callable[[BaseException], NormalizedError] | None = None,
        random_func: Callable[[float, float], float] | None = None,
        operation_name: str = "operation",
    ) -> None:
        self.policy = policy
        self.operation_name = operation_name
        self.strategy: RetryStrategy = RetryStrategy(policy, random_func)
        self.decider: RetryDecider = RetryDecider(policy.is_retryable, classifier)
        self.callbacks: CallbackManager = CallbackManager(
            callback_config if callback_config is not None else CallbackConfig(),
            operation_name,
        )

    def execute(
        self,
        operation: Callable[[CancellationToken], T],
        cancellation: CancellationToken | Iterable[CancellationToken] | None = None,
    ) -> T:
        """Execute ``operation`` until it succeeds, the attempt budget is
        spent, or the execution is canceled.

        Attempts are strictly sequential. Cancellation is checked before
        the first attempt, after each failure, and during each sleep; an
        attempt already running is never interrupted.

        Args:
            operation: Callable receiving the execution's cancellation
                token and returning the result.
            cancellation: Optional token, or tokens to compose, that can
                stop the execution.

        Returns:
            The result of the first successful attempt.

        Raises:
            OperationCanceledError: If the execution is canceled before
                an attempt or during a sleep.
            Exception: The exception of the last attempt when the budget
                is spent or the error is not retryable, or the
                operation's own cancellation exception.
        """
        start_time = time.monotonic()
        attempts = self.policy.attempts
        with execution_token(cancellation) as token:
            ensure_not_canceled(token, self.operation_name, attempt=1)
            attempt = 1
            while True:
                try:
                    result = operation(token)
                except Exception as exc:
                    decision = process_failure(
                        self.decider, self.callbacks, exc, attempt, attempts
                    )
                    if not decision.should_retry:
                        raise
                    ensure_not_canceled(token, self.operation_name, attempt, cause=exc)
                    delay = self.strategy.calculate_delay(attempt)
                    if not interruptible_sleep(delay, token):
                        ensure_not_canceled(token, self.operation_name, attempt, cause=exc)
                    attempt += 1
                    continue
                logger.debug(f"{self.operation_name}: succeeded on attempt {attempt}/{attempts}")
                self.callbacks.on_success(attempt, start_time)
                return result
