r"""Asynchronous retry session bound to an owner's lifetime."""

from __future__ import annotations

__all__ = ["AsyncRetrySession"]

from typing import TYPE_CHECKING, Any, TypeVar

from resilex.cancellation import compose
from resilex.retry import AsyncRetryExecutor
from resilex.session import BaseRetrySession, as_tokens
from resilex.utils.structured_logging import clear_execution_id, set_execution_id

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable
    from types import TracebackType
    from typing import Self

    from resilex.cancellation import CancellationToken
    from resilex.core.config import RetryPolicy

T = TypeVar("T")


class AsyncRetrySession(BaseRetrySession):
    r"""Asynchronous retry session bound to an owner's lifetime.

    Executions are coroutines running on an event loop. ``cancel_all``
    and ``close`` are plain methods that may be called from the loop or
    from another thread; sleeping executions are woken up immediately.

    Example:
        ```pycon
        >>> import asyncio
        >>> from resilex import AsyncRetrySession, RetryPolicy
        >>> async def main():
        ...     async with AsyncRetrySession(RetryPolicy(attempts=3)) as session:
        ...
        ...         async def load(token):
        ...             return "loaded"
        ...
        ...         return await session.execute(load)
        ...
        >>> asyncio.run(main())
        'loaded'

        ```
    """

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    async def execute(
        self,
        operation: Callable[[CancellationToken], Awaitable[T]],
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
            operation: Coroutine function receiving the execution's
                cancellation token.
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
        executor = AsyncRetryExecutor(
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
                return await executor.execute(operation, token)
        finally:
            clear_execution_id(context_token)
            self._tracker.finish(entry)

    async def retry(self) -> Any:
        """Execute the last operation again with the same arguments.

        Returns:
            The result of the new execution.

        Raises:
            RuntimeError: If ``execute`` was never called.
        """
        operation, kwargs = self._last_operation()
        return await self.execute(operation, **kwargs)
