r"""Core configuration and validation of retry parameters."""

from __future__ import annotations

__all__ = [
    "DEFAULT_ATTEMPTS",
    "DEFAULT_BASE_DELAY",
    "DEFAULT_MAX_DELAY",
    "RetryPolicy",
    "validate_attempt",
    "validate_delay",
    "validate_policy_params",
]

from resilex.core.config import (
    DEFAULT_ATTEMPTS,
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_DELAY,
    RetryPolicy,
)
from resilex.core.validation import validate_attempt, validate_delay, validate_policy_params
