r"""Utility functions for sleeping and logging."""

from __future__ import annotations

__all__ = ["interruptible_sleep", "interruptible_sleep_async"]

from resilex.utils.sleep import interruptible_sleep, interruptible_sleep_async
