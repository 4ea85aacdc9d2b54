r"""Exponential backoff strategy."""

from __future__ import annotations

__all__ = ["ExponentialBackoff"]

from resilex.backoff.base import BaseBackoffStrategy
from resilex.core.validation import validate_attempt

# 2.0 ** 1024 overflows, any exponent above this saturates every cap
_MAX_EXPONENT = 1000


class ExponentialBackoff(BaseBackoffStrategy):
    """Exponential backoff strategy.

    Calculates delay as: base_delay * (2 ** (attempt - 1)), with optional
    max_delay cap.

    Args:
        base_delay: The delay after the first failed attempt (default:
            1.0).
        max_delay: Optional maximum delay cap in seconds.

    Example:
        ```pycon
        >>> from resilex.backoff import ExponentialBackoff
        >>> backoff = ExponentialBackoff(base_delay=0.5)
        >>> backoff.calculate(1)
        0.5
        >>> backoff.calculate(2)
        1.0
        >>> backoff.calculate(3)
        2.0
        >>> backoff = ExponentialBackoff(base_delay=1.0, max_delay=5.0)
        >>> backoff.calculate(100000)
        5.0

        ```
    """

    def __init__(self, base_delay: float = 1.0, max_delay: float | None = None) -> None:
        if base_delay < 0:
            msg = f"base_delay must be non-negative, got {base_delay}"
            raise ValueError(msg)
        if max_delay is not None and max_delay <= 0:
            msg = f"max_delay must be positive if specified, got {max_delay}"
            raise ValueError(msg)

        self.base_delay = base_delay
        self.max_delay = max_delay

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(base_delay={self.base_delay}, "
            f"max_delay={self.max_delay})"
        )

    def calculate(self, attempt: int) -> float:
        """Calculate exponential backoff delay.

        Args:
            attempt: The number of the attempt that just failed
                (1-indexed).

        Returns:
            The calculated delay: base_delay * (2 ** (attempt - 1)),
            capped at max_delay if set.
        """
        validate_attempt(attempt)
        delay = self.base_delay * 2.0 ** min(attempt - 1, _MAX_EXPONENT)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay
