r"""Configuration dataclass for retry callbacks."""

from __future__ import annotations

__all__ = ["CallbackConfig"]

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from resilex.callbacks import AttemptRecord, SuccessInfo, TelemetryEvent
    from resilex.classifier import NormalizedError


@dataclass
class CallbackConfig:
    """Configuration for callbacks.

    Attributes:
        on_attempt: Optional callback invoked after each failed attempt.
        on_give_up: Optional callback invoked when the execution is
            exhausted, before the last error is raised.
        on_success: Optional callback invoked when an attempt succeeds.
        telemetry: Optional sink invoked once per attempt outcome.
    """

    on_attempt: Callable[[AttemptRecord], None] | None = None
    on_give_up: Callable[[NormalizedError], None] | None = None
    on_success: Callable[[SuccessInfo], None] | None = None
    telemetry: Callable[[TelemetryEvent], None] | None = None
