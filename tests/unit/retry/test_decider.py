from __future__ import annotations

from unittest.mock import Mock

import pytest

from resilex.callbacks import AttemptRecord
from resilex.classifier import ErrorKind, NormalizedError, classify_error, default_is_retryable
from resilex.exceptions import OperationCanceledError
from resilex.retry import RetryDecider
from tests.helpers import StatusError

##################################
#     Tests for RetryDecider     #
##################################


def test_retry_decider_default_classifier() -> None:
    assert RetryDecider(default_is_retryable).classifier is classify_error


def test_retry_decider_retryable_error() -> None:
    decision = RetryDecider(default_is_retryable).evaluate(StatusError(503), attempt=1, attempts=3)
    assert decision.should_retry
    assert not decision.aborted
    assert decision.record == AttemptRecord(
        attempt_number=1, error=decision.error, retryable=True, is_last_attempt=False
    )


def test_retry_decider_last_attempt() -> None:
    decision = RetryDecider(default_is_retryable).evaluate(StatusError(503), attempt=3, attempts=3)
    assert not decision.should_retry
    assert decision.record is not None
    assert decision.record.retryable
    assert decision.record.is_last_attempt


def test_retry_decider_non_retryable_error() -> None:
    decision = RetryDecider(default_is_retryable).evaluate(StatusError(404), attempt=1, attempts=3)
    assert not decision.should_retry
    assert decision.record is not None
    assert not decision.record.retryable
    assert not decision.record.is_last_attempt


def test_retry_decider_abort_skips_predicate() -> None:
    predicate = Mock(return_value=True)
    decision = RetryDecider(predicate).evaluate(OperationCanceledError(), attempt=1, attempts=3)
    assert decision.aborted
    assert decision.record is None
    assert not decision.should_retry
    predicate.assert_not_called()


def test_retry_decider_custom_predicate() -> None:
    predicate = Mock(return_value=False)
    decision = RetryDecider(predicate).evaluate(ConnectionError("reset"), attempt=1, attempts=3)
    assert not decision.should_retry
    predicate.assert_called_once_with(decision.error)


def test_retry_decider_custom_classifier() -> None:
    error = NormalizedError(ErrorKind.CLIENT, "custom", retryable_hint=True)
    decider = RetryDecider(default_is_retryable, classifier=Mock(return_value=error))
    decision = decider.evaluate(ValueError("x"), attempt=1, attempts=2)
    assert decision.error is error
    assert decision.should_retry


@pytest.mark.parametrize("attempts", [1, 2, 5])
def test_retry_decider_never_retries_past_budget(attempts: int) -> None:
    decision = RetryDecider(default_is_retryable).evaluate(
        ConnectionError(), attempt=attempts, attempts=attempts
    )
    assert not decision.should_retry
