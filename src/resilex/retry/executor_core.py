r"""Shared core logic for retry executors.

This module provides helper functions used by both the synchronous and
the asynchronous retry executors: resolving the cancellation token of an
execution, checking cancellation at suspension points, and processing a
failed attempt.
"""

from __future__ import annotations

__all__ = ["ensure_not_canceled", "execution_token", "process_failure"]

import logging
from collections.abc import Iterable
from contextlib import contextmanager
from typing import TYPE_CHECKING

from resilex.cancellation import CancellationSource, CancellationToken, compose
from resilex.exceptions import OperationCanceledError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from resilex.retry.decider import RetryDecider, RetryDecision
    from resilex.retry.manager import CallbackManager

logger: logging.Logger = logging.getLogger(__name__)


@contextmanager
def execution_token(
    cancellation: CancellationToken | Iterable[CancellationToken] | None,
) -> Iterator[CancellationToken]:
    """Resolve the cancellation token of one execution.

    A single token is used as is. Several tokens are composed, and the
    composite is disposed when the context exits so that no listener
    outlives the execution. Without cancellation, a private source that
    nobody cancels is used.

    Args:
        cancellation: A token, an iterable of tokens, or ``None``.

    Yields:
        The token passed to the operation and to the sleeps.
    """
    if cancellation is None:
        yield CancellationSource()
    elif isinstance(cancellation, CancellationToken):
        yield cancellation
    else:
        with compose(cancellation) as token:
            yield token


def ensure_not_canceled(
    token: CancellationToken,
    operation_name: str,
    attempt: int,
    cause: BaseException | None = None,
) -> None:
    """Raise the cancellation signal if ``token`` is canceled.

    Args:
        token: The execution token.
        operation_name: The name of the operation, used in logs.
        attempt: The current attempt number (1-indexed), used in logs.
        cause: Optional exception of the failed attempt, chained to the
            cancellation signal.

    Raises:
        OperationCanceledError: If the token is canceled.
    """
    if not token.is_canceled():
        return
    logger.debug(f"{operation_name}: canceled at attempt {attempt} ({token.reason})")
    raise OperationCanceledError(token.reason) from cause


def process_failure(
    decider: RetryDecider,
    callbacks: CallbackManager,
    exception: Exception,
    attempt: int,
    attempts: int,
) -> RetryDecision:
    """Classify a failed attempt and fire the matching callbacks.

    ``on_attempt`` (and telemetry) fire for every non-aborted failure;
    ``on_give_up`` fires before the caller raises the terminal error.

    Args:
        decider: The retry decider.
        callbacks: The callback manager.
        exception: The exception raised by the operation.
        attempt: The number of the failed attempt (1-indexed).
        attempts: The attempt budget of the policy.

    Returns:
        The retry decision.
    """
    decision = decider.evaluate(exception, attempt, attempts)
    if decision.record is None:
        return decision
    callbacks.on_attempt(decision.record)
    if not decision.should_retry:
        logger.debug(
            f"{callbacks.operation_name}: giving up after attempt {attempt}/{attempts}"
        )
        callbacks.on_give_up(decision.error)
    return decision
