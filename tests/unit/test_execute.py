r"""Unit tests for the one-shot retry entry points."""

from __future__ import annotations

import time
from unittest.mock import Mock, patch

import pytest

from resilex import (
    CancellationSource,
    OperationCanceledError,
    RetryPolicy,
    execute_with_retry,
    execute_with_retry_async,
)
from tests.helpers import AsyncFlakyOperation, FlakyOperation, StatusError

########################################
#     Tests for execute_with_retry     #
########################################


def test_execute_with_retry_success(fast_policy: RetryPolicy) -> None:
    assert execute_with_retry(FlakyOperation([ConnectionError(), "ok"]), fast_policy) == "ok"


def test_execute_with_retry_default_policy(no_jitter: Mock) -> None:
    operation = FlakyOperation([StatusError(500)])
    with (
        patch("resilex.retry.executor.interruptible_sleep", return_value=True) as sleep,
        pytest.raises(StatusError),
    ):
        execute_with_retry(operation, random_func=no_jitter)
    assert operation.call_count == 3
    assert sleep.call_count == 2


def test_execute_with_retry_callbacks(fast_policy: RetryPolicy) -> None:
    on_attempt, on_give_up, on_success, telemetry = Mock(), Mock(), Mock(), Mock()
    with pytest.raises(StatusError):
        execute_with_retry(
            FlakyOperation([StatusError(503)]),
            fast_policy,
            on_attempt=on_attempt,
            on_give_up=on_give_up,
            on_success=on_success,
            telemetry=telemetry,
            operation_name="load",
        )
    assert on_attempt.call_count == 3
    on_give_up.assert_called_once()
    on_success.assert_not_called()
    assert telemetry.call_count == 3
    assert telemetry.call_args.args[0].operation_name == "load"


def test_execute_with_retry_cancellation(fast_policy: RetryPolicy) -> None:
    source = CancellationSource()
    source.cancel("stop")
    with pytest.raises(OperationCanceledError, match=r"stop"):
        execute_with_retry(Mock(), fast_policy, source)


def test_execute_with_retry_timeout() -> None:
    timeout = CancellationSource()
    timeout.cancel_after(0.05)
    start = time.monotonic()
    with pytest.raises(OperationCanceledError, match=r"timed out"):
        execute_with_retry(
            FlakyOperation([ConnectionError()]),
            RetryPolicy(attempts=10, base_delay=5.0, max_delay=5.0),
            timeout,
            random_func=lambda low, high: high,
        )
    assert time.monotonic() - start < 1.0


##############################################
#     Tests for execute_with_retry_async     #
##############################################


@pytest.mark.asyncio
async def test_execute_with_retry_async_success(fast_policy: RetryPolicy) -> None:
    operation = AsyncFlakyOperation([StatusError(502), "ok"])
    assert await execute_with_retry_async(operation, fast_policy) == "ok"
    assert operation.call_count == 2


@pytest.mark.asyncio
async def test_execute_with_retry_async_exhausted(fast_policy: RetryPolicy) -> None:
    on_give_up = Mock()
    with pytest.raises(ConnectionError):
        await execute_with_retry_async(
            AsyncFlakyOperation([ConnectionError()]), fast_policy, on_give_up=on_give_up
        )
    on_give_up.assert_called_once()


@pytest.mark.asyncio
async def test_execute_with_retry_async_cancellation(fast_policy: RetryPolicy) -> None:
    first, second = CancellationSource(), CancellationSource()
    second.cancel()
    with pytest.raises(OperationCanceledError):
        await execute_with_retry_async(
            AsyncFlakyOperation(["never"]), fast_policy, [first, second]
        )
    assert first.listener_count == 0
