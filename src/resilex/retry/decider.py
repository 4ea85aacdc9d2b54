r"""Retry decision logic for failed attempts.

This module provides the RetryDecider class that classifies the
exception of a failed attempt and decides whether the executor should
abort, give up, or retry.
"""

from __future__ import annotations

__all__ = ["RetryDecider", "RetryDecision"]

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from resilex.callbacks import AttemptRecord
from resilex.classifier import ErrorKind, classify_error

if TYPE_CHECKING:
    from collections.abc import Callable

    from resilex.classifier import NormalizedError

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryDecision:
    """Outcome of the evaluation of a failed attempt.

    Attributes:
        error: The normalized error.
        record: The attempt record, or ``None`` for an aborted attempt.
        should_retry: Whether another attempt should be made.
    """

    error: NormalizedError
    record: AttemptRecord | None
    should_retry: bool

    @property
    def aborted(self) -> bool:
        """Whether the attempt failed because of cancellation."""
        return self.error.kind is ErrorKind.ABORT


class RetryDecider:
    """Decides whether a failed attempt should be retried.

    Args:
        is_retryable: The retry predicate of the policy.
        classifier: Function normalizing exceptions. Defaults to
            ``classify_error``.
    """

    def __init__(
        self,
        is_retryable: Callable[[NormalizedError], bool],
        classifier: Callable[[BaseException], NormalizedError] | None = None,
    ) -> None:
        self.is_retryable = is_retryable
        self.classifier = classifier if classifier is not None else classify_error

    def evaluate(self, exception: BaseException, attempt: int, attempts: int) -> RetryDecision:
        """Evaluate the exception raised by an attempt.

        Args:
            exception: The exception raised by the operation.
            attempt: The number of the failed attempt (1-indexed).
            attempts: The attempt budget of the policy.

        Returns:
            The decision. Aborted attempts never consult the retry
            predicate.
        """
        error = self.classifier(exception)
        if error.kind is ErrorKind.ABORT:
            logger.debug(f"Attempt {attempt}/{attempts} aborted: {error.message}")
            return RetryDecision(error=error, record=None, should_retry=False)

        retryable = bool(self.is_retryable(error))
        is_last_attempt = attempt >= attempts
        logger.debug(
            f"Attempt {attempt}/{attempts} failed with {error.kind.value} error "
            f"(retryable={retryable}): {error.message}"
        )
        return RetryDecision(
            error=error,
            record=AttemptRecord(
                attempt_number=attempt,
                error=error,
                retryable=retryable,
                is_last_attempt=is_last_attempt,
            ),
            should_retry=retryable and not is_last_attempt,
        )
