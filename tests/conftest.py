from __future__ import annotations

from unittest.mock import Mock

import pytest

from resilex.core.config import RetryPolicy


@pytest.fixture
def no_jitter() -> Mock:
    """Random function always drawing the lower bound, so every backoff
    delay is 0."""
    return Mock(side_effect=lambda low, high: low)


@pytest.fixture
def full_jitter() -> Mock:
    """Random function always drawing the upper bound, so every backoff
    delay equals its cap."""
    return Mock(side_effect=lambda low, high: high)


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Create a retry policy with tiny delays for testing."""
    return RetryPolicy(attempts=3, base_delay=0.001, max_delay=0.002)


@pytest.fixture
def mock_callback() -> Mock:
    """Create a mock callback function for testing callbacks."""
    return Mock()
