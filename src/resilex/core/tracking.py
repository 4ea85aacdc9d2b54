r"""Tracking of in-flight executions for retry sessions.

``ExecutionTracker`` owns the only shared mutable collection of the
package: the set of executions currently running in a session. The set
is protected by a lock, and ``cancel_all`` iterates over a snapshot, so
teardown can run on one thread while ``execute`` calls add and remove
entries on others.
"""

from __future__ import annotations

__all__ = ["ExecutionTracker", "TrackedExecution"]

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field

from resilex.cancellation import CancellationSource
from resilex.exceptions import SessionClosedError

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(eq=False)
class TrackedExecution:
    """One in-flight execution and the source that can stop it.

    Attributes:
        operation_name: The name of the operation.
        source: The cancellation source private to the execution.
        execution_id: A short random id, used to correlate logs.
        started_at: The ``time.monotonic()`` timestamp of the start.
    """

    operation_name: str
    source: CancellationSource = field(default_factory=CancellationSource)
    execution_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    started_at: float = field(default_factory=time.monotonic)


class ExecutionTracker:
    """Thread-safe set of in-flight executions.

    Example:
        ```pycon
        >>> from resilex.core.tracking import ExecutionTracker
        >>> tracker = ExecutionTracker()
        >>> entry = tracker.start("load")
        >>> len(tracker)
        1
        >>> tracker.cancel_all("teardown")
        1
        >>> entry.source.is_canceled()
        True
        >>> tracker.finish(entry)
        >>> len(tracker)
        0

        ```
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: set[TrackedExecution] = set()
        self._closed = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._active)

    @property
    def closed(self) -> bool:
        """Whether ``close`` was called."""
        return self._closed

    def snapshot(self) -> tuple[TrackedExecution, ...]:
        """Return a copy of the in-flight executions."""
        with self._lock:
            return tuple(self._active)

    def start(self, operation_name: str) -> TrackedExecution:
        """Register a new execution with a fresh cancellation source.

        Args:
            operation_name: The name of the operation.

        Returns:
            The tracked execution.

        Raises:
            SessionClosedError: If the tracker is closed.
        """
        entry = TrackedExecution(operation_name=operation_name)
        with self._lock:
            if self._closed:
                msg = f"cannot execute {operation_name!r}: the retry session is closed"
                raise SessionClosedError(msg)
            self._active.add(entry)
        logger.debug(f"Tracking execution {entry.execution_id} ({operation_name})")
        return entry

    def finish(self, entry: TrackedExecution) -> None:
        """Stop tracking an execution and cancel its source.

        Canceling is idempotent and guarantees nothing started by the
        execution can still be woken up by its source afterwards.

        Args:
            entry: The tracked execution.
        """
        with self._lock:
            self._active.discard(entry)
        entry.source.cancel("execution finished")

    def cancel_all(self, reason: str | None = None) -> int:
        """Cancel every in-flight execution.

        Args:
            reason: Optional cancellation reason.

        Every entry is canceled even if a cancellation listener raises;
        the first exception raised is re-raised afterwards.

        Returns:
            The number of sources this call canceled.
        """
        canceled = 0
        error: Exception | None = None
        for entry in self.snapshot():
            try:
                if entry.source.cancel(reason):
                    canceled += 1
            except Exception as exc:  # noqa: PERF203
                # the source is canceled even when one of its listeners raised
                canceled += 1
                if error is None:
                    error = exc
        if canceled:
            logger.debug(f"Canceled {canceled} in-flight execution(s) ({reason})")
        if error is not None:
            raise error
        return canceled

    def close(self, reason: str | None = None) -> int:
        """Refuse new executions and cancel the in-flight ones.

        Args:
            reason: Optional cancellation reason.

        Returns:
            The number of sources canceled.
        """
        with self._lock:
            self._closed = True
        return self.cancel_all(reason)
