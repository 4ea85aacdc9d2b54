r"""Shared test helpers for retry executor and session tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class StatusError(Exception):
    """Exception carrying an HTTP-like status code."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message or f"request failed with status {status_code}")
        self.status_code = status_code


class FlakyOperation:
    """Synchronous operation raising the given outcomes in order.

    Exceptions in ``outcomes`` are raised, other values are returned.
    The last outcome is repeated once the list is exhausted.
    """

    def __init__(self, outcomes: Iterable[object]) -> None:
        self.outcomes = list(outcomes)
        self.tokens: list[object] = []

    @property
    def call_count(self) -> int:
        return len(self.tokens)

    def __call__(self, token: object) -> object:
        self.tokens.append(token)
        outcome = self.outcomes[min(len(self.tokens), len(self.outcomes)) - 1]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class AsyncFlakyOperation(FlakyOperation):
    """Coroutine function counterpart of ``FlakyOperation``."""

    async def __call__(self, token: object) -> object:  # type: ignore[override]
        return super().__call__(token)
