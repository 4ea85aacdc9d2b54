from __future__ import annotations

from unittest.mock import Mock

from resilex.core.config import RetryPolicy
from resilex.retry import RetryStrategy

###################################
#     Tests for RetryStrategy     #
###################################


def test_retry_strategy_backoff_from_policy() -> None:
    strategy = RetryStrategy(RetryPolicy(base_delay=0.5, max_delay=4.0))
    assert strategy.backoff.exponential.base_delay == 0.5
    assert strategy.backoff.exponential.max_delay == 4.0


def test_retry_strategy_calculate_delay(full_jitter: Mock) -> None:
    strategy = RetryStrategy(RetryPolicy(base_delay=0.5, max_delay=4.0), full_jitter)
    assert [strategy.calculate_delay(attempt) for attempt in range(1, 6)] == [
        0.5,
        1.0,
        2.0,
        4.0,
        4.0,
    ]


def test_retry_strategy_uses_random_func(no_jitter: Mock) -> None:
    strategy = RetryStrategy(RetryPolicy(), no_jitter)
    assert strategy.calculate_delay(2) == 0.0
    no_jitter.assert_called_once_with(0.0, 2.0)
