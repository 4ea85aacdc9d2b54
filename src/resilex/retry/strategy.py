r"""Retry strategy for calculating backoff delays.

This module provides the RetryStrategy class that binds a retry policy
to the full jitter backoff.
"""

from __future__ import annotations

__all__ = ["RetryStrategy"]

import logging
from typing import TYPE_CHECKING

from resilex.backoff import FullJitterBackoff

if TYPE_CHECKING:
    from collections.abc import Callable

    from resilex.core.config import RetryPolicy

logger: logging.Logger = logging.getLogger(__name__)


class RetryStrategy:
    """Strategy for calculating retry delays with full jitter.

    Args:
        policy: The retry policy providing ``base_delay`` and
            ``max_delay``.
        random_func: Optional function drawing a float uniformly between
            its two arguments. Defaults to ``random.uniform``.

    Attributes:
        backoff: The full jitter backoff built from the policy.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        random_func: Callable[[float, float], float] | None = None,
    ) -> None:
        self.backoff = FullJitterBackoff(
            base_delay=policy.base_delay,
            max_delay=policy.max_delay,
            random_func=random_func,
        )

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay after a failed attempt.

        Args:
            attempt: The number of the attempt that just failed
                (1-indexed).

        Returns:
            Sleep time in seconds.
        """
        delay = self.backoff.calculate(attempt)
        logger.debug(
            f"Waiting {delay:.3f}s before attempt {attempt + 1} "
            f"(cap={self.backoff.exponential.calculate(attempt):.3f}s)"
        )
        return delay
