r"""Parameter validation utilities for retry policies and backoff.

This module provides validation functions that reject invalid retry
parameters before they reach the retry loop. Validation failures are
programmer errors: they raise ``ValueError`` and are never caught by the
executor.
"""

from __future__ import annotations

__all__ = ["validate_attempt", "validate_delay", "validate_policy_params"]


def validate_attempt(attempt: int) -> None:
    """Validate a 1-indexed attempt number.

    Args:
        attempt: The attempt number. Must be >= 1.

    Raises:
        ValueError: If ``attempt`` is lower than 1.

    Example:
        ```pycon
        >>> from resilex.core.validation import validate_attempt
        >>> validate_attempt(1)
        >>> validate_attempt(0)
        Traceback (most recent call last):
        ...
        ValueError: attempt must be >= 1, got 0

        ```
    """
    if attempt < 1:
        msg = f"attempt must be >= 1, got {attempt}"
        raise ValueError(msg)


def validate_delay(delay: float) -> None:
    """Validate a sleep delay in seconds.

    Args:
        delay: The delay to validate. Must be >= 0.

    Raises:
        ValueError: If ``delay`` is negative.
    """
    if delay < 0:
        msg = f"delay must be >= 0, got {delay}"
        raise ValueError(msg)


def validate_policy_params(attempts: int, base_delay: float, max_delay: float) -> None:
    """Validate retry policy parameters.

    Args:
        attempts: Maximum number of attempts, including the first one.
            Must be >= 1.
        base_delay: Base delay in seconds of the exponential backoff.
            Must be > 0.
        max_delay: Cap in seconds of any single backoff delay.
            Must be >= ``base_delay``.

    Raises:
        ValueError: If any parameter violates its constraint.

    Example:
        ```pycon
        >>> from resilex.core.validation import validate_policy_params
        >>> validate_policy_params(attempts=3, base_delay=0.1, max_delay=1.0)
        >>> validate_policy_params(attempts=0, base_delay=0.1, max_delay=1.0)
        Traceback (most recent call last):
        ...
        ValueError: attempts must be >= 1, got 0

        ```
    """
    if attempts < 1:
        msg = f"attempts must be >= 1, got {attempts}"
        raise ValueError(msg)
    if base_delay <= 0:
        msg = f"base_delay must be > 0, got {base_delay}"
        raise ValueError(msg)
    if max_delay < base_delay:
        msg = f"max_delay must be >= base_delay ({base_delay}), got {max_delay}"
        raise ValueError(msg)
