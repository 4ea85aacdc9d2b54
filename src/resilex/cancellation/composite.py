r"""Composite cancellation derived from several cancellation tokens.

A ``CompositeCancellation`` is canceled as soon as any of its inputs is
canceled. Propagation is strictly inward: the composite never cancels
its inputs and exposes no ``cancel()`` of its own. Once the composite
settles, or once its owning execution calls ``dispose()``, no listener
remains registered on any input.
"""

from __future__ import annotations

__all__ = ["CompositeCancellation", "compose"]

import itertools
import logging
import threading
from typing import TYPE_CHECKING

from resilex.cancellation.token import CancellationToken

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from types import TracebackType
    from typing import Self

logger: logging.Logger = logging.getLogger(__name__)


def _noop() -> None:
    return None


class CompositeCancellation(CancellationToken):
    r"""Read-only cancellation token derived from a fixed set of inputs.

    Args:
        sources: The input tokens, captured at construction time.

    Example:
        ```pycon
        >>> from resilex.cancellation import CancellationSource, compose
        >>> session, lifecycle = CancellationSource(), CancellationSource()
        >>> with compose([session, lifecycle]) as token:
        ...     lifecycle.cancel("teardown")
        ...     token.is_canceled(), session.is_canceled()
        ...
        True
        (True, False)
        >>> session.listener_count, lifecycle.listener_count
        (0, 0)

        ```
    """

    def __init__(self, sources: Iterable[CancellationToken]) -> None:
        self._sources: tuple[CancellationToken, ...] = tuple(sources)
        self._lock = threading.Lock()
        self._canceled = False
        self._disposed = False
        self._reason: str | None = None
        self._unregisters: list[Callable[[], None]] = []
        self._listeners: dict[int, Callable[[], None]] = {}
        self._ids = itertools.count()

        for source in self._sources:
            if source.is_canceled():
                # settled at composition time: register nothing
                self._canceled = True
                self._reason = source.reason
                return

        for source in self._sources:
            unregister = source.on_cancel(lambda source=source: self._on_source_canceled(source))
            with self._lock:
                settled = self._canceled
                if not settled:
                    self._unregisters.append(unregister)
            if settled:
                # an input canceled while registration was in progress
                unregister()
                break

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(sources={len(self._sources)}, "
            f"canceled={self._canceled}, disposed={self._disposed})"
        )

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()

    @property
    def sources(self) -> tuple[CancellationToken, ...]:
        """The input tokens."""
        return self._sources

    @property
    def reason(self) -> str | None:
        return self._reason

    @property
    def registered_count(self) -> int:
        """The number of listeners this composite holds on its inputs."""
        with self._lock:
            return len(self._unregisters)

    def is_canceled(self) -> bool:
        return self._canceled

    def on_cancel(self, listener: Callable[[], None]) -> Callable[[], None]:
        with self._lock:
            if not self._canceled:
                if self._disposed:
                    # the owning execution is over, this composite will never fire
                    return _noop
                key = next(self._ids)
                self._listeners[key] = listener
                return lambda: self._remove(key)
        listener()
        return _noop

    def dispose(self) -> None:
        """Deregister every listener held on the inputs.

        Called when the owning execution finishes. The composite keeps its
        current ``is_canceled()`` value but will not observe its inputs
        anymore. Idempotent.
        """
        with self._lock:
            self._disposed = True
            unregisters = self._unregisters
            self._unregisters = []
            self._listeners.clear()
        for unregister in unregisters:
            unregister()

    def _on_source_canceled(self, source: CancellationToken) -> None:
        with self._lock:
            if self._canceled or self._disposed:
                return
            self._canceled = True
            self._reason = source.reason
            unregisters = self._unregisters
            self._unregisters = []
            listeners = list(self._listeners.values())
            self._listeners.clear()
        logger.debug(f"Composite cancellation settled ({self._reason})")
        for unregister in unregisters:
            unregister()
        error: Exception | None = None
        for listener in listeners:
            try:
                listener()
            except Exception as exc:  # noqa: PERF203
                logger.debug(f"Composite listener raised {type(exc).__name__}: {exc}")
                if error is None:
                    error = exc
        if error is not None:
            raise error

    def _remove(self, key: int) -> None:
        with self._lock:
            self._listeners.pop(key, None)


def compose(sources: Iterable[CancellationToken]) -> CompositeCancellation:
    """Combine cancellation tokens into one derived token.

    Args:
        sources: The tokens to combine.

    Returns:
        A composite canceled as soon as any input is canceled.
    """
    return CompositeCancellation(sources)
