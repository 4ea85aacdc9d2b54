r"""Cancellation tokens and sources.

A ``CancellationToken`` is the read side of a cancellation signal: it can
be polled with ``is_canceled()`` and observed with ``on_cancel()``. A
``CancellationSource`` is the concrete, thread-safe token whose owner can
``cancel()`` it. Cancellation is cooperative, one-way and idempotent.
"""

from __future__ import annotations

__all__ = ["CancellationSource", "CancellationToken"]

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from resilex.core.validation import validate_delay
from resilex.exceptions import OperationCanceledError

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)


def _noop() -> None:
    return None


class CancellationToken(ABC):
    """Abstract read-only view of a cancellation signal."""

    @abstractmethod
    def is_canceled(self) -> bool:
        """Indicate whether the token is canceled.

        Returns:
            ``True`` once the token is canceled. Never goes back to
            ``False``.
        """

    @abstractmethod
    def on_cancel(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a listener invoked when the token is canceled.

        If the token is already canceled, the listener is invoked
        immediately and nothing is registered.

        Args:
            listener: Function called once, without argument, from the
                thread that cancels the token.

        Returns:
            A function that deregisters the listener. Calling it more than
            once, or after the listener fired, is a no-op.
        """

    @property
    @abstractmethod
    def reason(self) -> str | None:
        """The reason given at cancellation, if any."""

    def raise_if_canceled(self) -> None:
        """Raise ``OperationCanceledError`` if the token is canceled.

        Raises:
            OperationCanceledError: If the token is canceled.
        """
        if self.is_canceled():
            raise OperationCanceledError(self.reason)


class CancellationSource(CancellationToken):
    r"""Thread-safe cancellation source.

    The source transitions exactly once from not-canceled to canceled.
    Listeners are invoked outside the internal lock, in registration
    order, from the thread calling ``cancel()``.

    Example:
        ```pycon
        >>> from resilex.cancellation import CancellationSource
        >>> source = CancellationSource()
        >>> unregister = source.on_cancel(lambda: print("canceled!"))
        >>> source.cancel("user request")
        canceled!
        True
        >>> source.is_canceled(), source.reason
        (True, 'user request')
        >>> source.cancel()  # idempotent
        False

        ```
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._canceled = False
        self._reason: str | None = None
        self._listeners: dict[int, Callable[[], None]] = {}
        self._ids = itertools.count()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(canceled={self._canceled}, "
            f"listeners={len(self._listeners)})"
        )

    @property
    def reason(self) -> str | None:
        return self._reason

    @property
    def listener_count(self) -> int:
        """The number of listeners currently registered."""
        with self._lock:
            return len(self._listeners)

    def is_canceled(self) -> bool:
        return self._canceled

    def on_cancel(self, listener: Callable[[], None]) -> Callable[[], None]:
        with self._lock:
            if not self._canceled:
                key = next(self._ids)
                self._listeners[key] = listener
                return lambda: self._remove(key)
        listener()
        return _noop

    def cancel(self, reason: str | None = None) -> bool:
        """Cancel the source and notify the registered listeners.

        Every listener is invoked even if an earlier one raises; the first
        exception raised by a listener is re-raised afterwards.

        Args:
            reason: Optional reason exposed by ``reason`` and carried by
                ``OperationCanceledError``.

        Returns:
            ``True`` if this call canceled the source, ``False`` if it was
            already canceled.
        """
        with self._lock:
            if self._canceled:
                return False
            self._canceled = True
            self._reason = reason
            listeners = list(self._listeners.values())
            self._listeners.clear()
        logger.debug(f"Cancellation requested ({reason}), notifying {len(listeners)} listener(s)")
        error: Exception | None = None
        for listener in listeners:
            try:
                listener()
            except Exception as exc:  # noqa: PERF203
                logger.debug(f"Cancellation listener raised {type(exc).__name__}: {exc}")
                if error is None:
                    error = exc
        if error is not None:
            raise error
        return True

    def cancel_after(self, delay: float, reason: str | None = None) -> threading.Timer:
        """Cancel the source once ``delay`` seconds have elapsed.

        This is how a timeout is composed into an execution. The timer is
        released as soon as the source is canceled for any reason.

        Args:
            delay: The delay in seconds. Must be >= 0.
            reason: Optional reason. Defaults to a timeout message.

        Returns:
            The started daemon timer.

        Raises:
            ValueError: If ``delay`` is negative.
        """
        validate_delay(delay)
        reason = reason if reason is not None else f"timed out after {delay}s"
        timer = threading.Timer(delay, self.cancel, kwargs={"reason": reason})
        timer.daemon = True
        timer.start()
        self.on_cancel(timer.cancel)
        return timer

    def _remove(self, key: int) -> None:
        with self._lock:
            self._listeners.pop(key, None)
