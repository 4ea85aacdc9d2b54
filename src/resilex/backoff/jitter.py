r"""Full jitter backoff.

Full jitter draws each delay uniformly from ``[0, cap]`` where ``cap`` is
the capped exponential delay. Spreading the delays over the whole range
avoids synchronized retries when many callers fail at the same time.
The random function is injectable so that tests can be deterministic.
"""

from __future__ import annotations

__all__ = ["FullJitterBackoff", "backoff_delay"]

import random
from typing import TYPE_CHECKING

from resilex.backoff.base import BaseBackoffStrategy
from resilex.backoff.exponential import ExponentialBackoff

if TYPE_CHECKING:
    from collections.abc import Callable


def backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    random_func: Callable[[float, float], float] | None = None,
) -> float:
    """Compute the full jitter delay after a failed attempt.

    Args:
        attempt: The number of the attempt that just failed (1-indexed).
        base_delay: The base delay in seconds.
        max_delay: The cap in seconds of the exponential delay.
        random_func: Function drawing a float uniformly between its two
            arguments. Defaults to ``random.uniform``.

    Returns:
        A delay in ``[0, min(max_delay, base_delay * 2 ** (attempt - 1))]``.

    Raises:
        ValueError: If ``attempt`` is lower than 1.

    Example:
        ```pycon
        >>> import random
        >>> from resilex.backoff import backoff_delay
        >>> backoff_delay(3, base_delay=0.1, max_delay=1.0, random_func=lambda a, b: b)
        0.4
        >>> 0.0 <= backoff_delay(50, base_delay=0.1, max_delay=1.0) <= 1.0
        True
        >>> rng = random.Random(42)
        >>> backoff_delay(1, 1.0, 8.0, rng.uniform) == random.Random(42).uniform(0.0, 1.0)
        True

        ```
    """
    return FullJitterBackoff(base_delay, max_delay, random_func).calculate(attempt)


class FullJitterBackoff(BaseBackoffStrategy):
    """Exponential backoff with full jitter.

    Args:
        base_delay: The base delay in seconds.
        max_delay: The cap in seconds of the exponential delay.
        random_func: Function drawing a float uniformly between its two
            arguments. Defaults to ``random.uniform``.
    """

    def __init__(
        self,
        base_delay: float,
        max_delay: float,
        random_func: Callable[[float, float], float] | None = None,
    ) -> None:
        self.exponential = ExponentialBackoff(base_delay=base_delay, max_delay=max_delay)
        self.random_func = random_func if random_func is not None else random.uniform

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(base_delay={self.exponential.base_delay}, "
            f"max_delay={self.exponential.max_delay})"
        )

    def calculate(self, attempt: int) -> float:
        cap = self.exponential.calculate(attempt)
        # clamp: a custom random_func must not escape [0, cap]
        return min(max(self.random_func(0.0, cap), 0.0), cap)
