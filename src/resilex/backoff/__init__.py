r"""Backoff strategies for retry delays.

This package provides the exponential backoff used to cap retry delays
and the full jitter scheduler that draws the actual delay uniformly
between zero and that cap.
"""

from __future__ import annotations

__all__ = [
    "BaseBackoffStrategy",
    "ExponentialBackoff",
    "FullJitterBackoff",
    "backoff_delay",
]

from resilex.backoff.base import BaseBackoffStrategy
from resilex.backoff.exponential import ExponentialBackoff
from resilex.backoff.jitter import FullJitterBackoff, backoff_delay
