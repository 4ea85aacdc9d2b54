r"""Retry policy dataclass and defaults.

This module provides the default retry constants and the immutable
``RetryPolicy`` consumed by the retry executors and retry sessions.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_ATTEMPTS",
    "DEFAULT_BASE_DELAY",
    "DEFAULT_MAX_DELAY",
    "RetryPolicy",
]

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from resilex.classifier import default_is_retryable
from resilex.core.validation import validate_policy_params

if TYPE_CHECKING:
    from collections.abc import Callable

    from resilex.classifier import NormalizedError


# Default maximum number of attempts, the first attempt included
DEFAULT_ATTEMPTS = 3

# Default base delay in seconds
# Delay cap before jitter = base_delay * (2 ** (attempt - 1))
# With 1.0: 1st retry waits up to 1s, 2nd up to 2s, 3rd up to 4s
DEFAULT_BASE_DELAY = 1.0

# Default cap in seconds of a single backoff delay
DEFAULT_MAX_DELAY = 8.0


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry policy for one logical operation.

    Args:
        attempts: Maximum number of attempts including the first one.
            Must be >= 1.
        base_delay: Base delay in seconds of the exponential backoff.
            Must be > 0.
        max_delay: Cap in seconds of any single backoff delay. Must be
            >= ``base_delay``.
        is_retryable: Predicate deciding whether a normalized error is
            worth another attempt. Defaults to following the classifier's
            ``retryable_hint``.

    Raises:
        ValueError: If a parameter violates its constraint.

    Example:
        ```pycon
        >>> from resilex.core.config import RetryPolicy
        >>> policy = RetryPolicy(attempts=5, base_delay=0.1, max_delay=2.0)
        >>> policy.attempts
        5
        >>> policy.merge(attempts=2).attempts
        2
        >>> policy.attempts
        5

        ```
    """

    attempts: int = DEFAULT_ATTEMPTS
    base_delay: float = DEFAULT_BASE_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    is_retryable: Callable[[NormalizedError], bool] = default_is_retryable

    def __post_init__(self) -> None:
        validate_policy_params(
            attempts=self.attempts,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
        )

    def merge(self, **overrides: Any) -> RetryPolicy:
        """Create a new policy with the given parameters overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for the fields to override.

        Returns:
            A new validated ``RetryPolicy``.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)
