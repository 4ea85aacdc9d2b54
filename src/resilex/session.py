r"""Retry sessions bound to the lifetime of an owning component.

A retry session is the consumer-facing wrapper around the retry
executors. Each ``execute`` call gets its own cancellation source,
composed with the session's lifecycle source and any caller supplied
token, and is tracked until it completes. Closing the session (the
owner's teardown) cancels every in-flight execution and refuses new
ones, so no sleep scheduled by the session can outlive it.
"""

from __future__ import annotations

__all__ = ["BaseRetrySession", "RetrySession"]

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING, Any, TypeVar

from resilex.cancellation import CancellationSource, CancellationToken, compose
from resilex.core.config import RetryPolicy
from resilex.core.tracking import ExecutionTracker
from resilex.retry import CallbackConfig, RetryExecutor
from resilex.utils.structured_logging import clear_execution_id, set_execution_id

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType
    from typing import Self

    from resilex.classifier import NormalizedError

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


def as_tokens(
    cancellation: CancellationToken | Iterable[CancellationToken] | None,
) -> list[CancellationToken]:
    if cancellation is None:
        return []
    if isinstance(cancellation, CancellationToken):
        return [cancellation]
    return list(cancellation)


class BaseRetrySession:
    """State shared by the synchronous and asynchronous retry sessions.

    Args:
        policy: Default retry policy of the session. If ``None``, a
            default ``RetryPolicy`` is used.
        callback_config: Default callbacks of the session.
        classifier: Optional function normalizing exceptions.
        random_func: Optional function drawing a float uniformly between
            its two arguments, used for jitter.
        operation_name: Default operation name, used in logs and
            telemetry.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        callback_config: CallbackConfig | None = None,
        classifier: Callable[[BaseException], NormalizedError] | None = None,
        random_func: Callable[[float, float], float] | None = None,
        operation_name: str = "operation",
    ) -> None:
        self._policy = policy if policy is not None else RetryPolicy()
        self._callback_config = callback_config if callback_config is not None else CallbackConfig()
        self._classifier = classifier
        self._random_func = random_func
        self._operation_name = operation_name
        self._lifecycle = CancellationSource()
        self._tracker = ExecutionTracker()
        self._last_call: tuple[Callable[..., Any], dict[str, Any]] | None = None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(policy={self._policy}, "
            f"active={self.active_count}, closed={self.closed})"
        )

    @property
    def policy(self) -> RetryPolicy:
        """The default retry policy of the session."""
        return self._policy

    @property
    def lifecycle(self) -> CancellationToken:
        """The token canceled when the session is closed."""
        return self._lifecycle

    @property
    def active_count(self) -> int:
        """The number of in-flight executions."""
        return len(self._tracker)

    @property
    def closed(self) -> bool:
        """Whether the session was closed."""
        return self._tracker.closed

    def cancel_all(self, reason: str | None = None) -> int:
        """Cancel every in-flight execution of the session.

        The session stays usable. Safe to call from any thread while
        other threads call ``execute``.

        Args:
            reason: Optional cancellation reason.

        Returns:
            The number of executions this call canceled.
        """
        return self._tracker.cancel_all(reason if reason is not None else "canceled by session")

    def close(self) -> None:
        """Tear the session down.

        Cancels the lifecycle token and every in-flight execution, and
        makes later ``execute`` calls raise ``SessionClosedError``.
        Idempotent. If a cancellation listener raises, teardown still
        completes and the first exception is re-raised.
        """
        if self._tracker.closed:
            return
        try:
            canceled = self._tracker.close("session closed")
        finally:
            self._lifecycle.cancel("session closed")
        logger.debug(f"Retry session closed ({canceled} in-flight execution(s) canceled)")

    def _build_callbacks(self, **overrides: Any) -> CallbackConfig:
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self._callback_config, **filtered_overrides)

    def _remember(self, operation: Callable[..., Any], kwargs: dict[str, Any]) -> None:
        self._last_call = (operation, kwargs)

    def _last_operation(self) -> tuple[Callable[..., Any], dict[str, Any]]:
        if self._last_call is None:
            msg = "No operation to retry: execute() was never called on this session"
            raise RuntimeError(msg)
        return self._last_call


class RetrySession(BaseRetrySession):
    r"""Synchronous retry session bound to an owner's lifetime.

    Executions may run concurrently on several threads (for instance in a
    thread pool); ``cancel_all`` and ``close`` may be called from yet
    another thread.

    Example:
        ```pycon
        >>> from resilex import RetryPolicy, RetrySession
        >>> with RetrySession(RetryPolicy(attempts=2, base_delay=0.01, max_delay=0.01)) as session:
        ...     session.execute(lambda token: "loaded", operation_name="load")
        ...
        'loaded'
        >>> session.closed
        True

        ```
    """

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def execute(
        self,
        operation: Callable[[CancellationToken], T],
        *,
        policy: RetryPolicy | None = None,
        cancellation: CancellationToken | Iterable[CancellationToken] | None = None,
        on_attempt: Callable[..., None] | None = None,
        on_give_up: Callable[..., None] | None = None,
        on_success: Callable[..., None] | None = None,
        telemetry: Callable[..., None] | None = None,
        operation_name: str | None = None,
    ) -> T:
        """Execute ``operation`` with retries, tracked by the session.

        Args:
            operation: Callable receiving the execution's cancellation
                token.
            policy: Override the session's policy for this execution.
            cancellation: Optional token, or tokens, that can also stop
                this execution (e.g. a timeout source).
            on_attempt: Override the session's on_attempt callback.
            on_give_up: Override the session's on_give_up callback.
            on_success: Override the session's on_success callback.
            telemetry: Override the session's telemetry sink.
            operation_name: Override the session's operation name.

        Returns:
            The result of the first successful attempt.

        Raises:
            SessionClosedError: If the session is closed.
            OperationCanceledError: If the execution is canceled.
            Exception: The last error of an exhausted execution.
        """
        tokens = as_tokens(cancellation)
        name = operation_name if operation_name is not None else self._operation_name
        executor = RetryExecutor(
            policy if policy is not None else self._policy,
            self._build_callbacks(
                on_attempt=on_attempt,
                on_give_up=on_give_up,
                on_success=on_success,
                telemetry=telemetry,
            ),
            classifier=self._classifier,
            random_func=self._random_func,
            operation_name=name,
        )
        entry = self._tracker.start(name)
        self._remember(
            operation,
            {
                "policy": policy,
                "cancellation": tokens,
                "on_attempt": on_attempt,
                "on_give_up": on_give_up,
                "on_success": on_success,
                "telemetry": telemetry,
                "operation_name": operation_name,
            },
        )
        context_token = set_execution_id(entry.execution_id)
        try:
            with compose([entry.source, self._lifecycle, *tokens]) as token:
                return executor.execute(operation, token)
        finally:
            clear_execution_id(context_token)
            self._tracker.finish(entry)

    def retry(self) -> Any:
        """Execute the last operation again with the same arguments.

        Returns:
            The result of the new execution.

        Raises:
            RuntimeError: If ``execute`` was never called.
        """
        operation, kwargs = self._last_operation()
        return self.execute(operation, **kwargs)
