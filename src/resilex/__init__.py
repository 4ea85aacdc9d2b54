r"""resilex - Resilient operation executor with cooperative cancellation.

This package runs fallible operations (plain callables or coroutine
functions) under a bounded retry policy with exponential backoff and
full jitter. Executions can be stopped cooperatively by any number of
cancellation sources composed together, and retry sessions bind
executions to the lifetime of an owning component.

Key Features:
    - Bounded attempt budget with exponential backoff and full jitter
    - Injectable retry predicate, error classifier and random source
    - Cancellation tokens composable from independent sources
    - Sleeps between attempts interrupted immediately on cancellation
    - No timer or listener outlives an execution
    - Lifecycle-bound sessions that cancel everything on teardown
    - Synchronous and asyncio flavours of every entry point
    - Callbacks and a telemetry sink for observability

Example:
    ```pycon
    >>> from resilex import RetryPolicy, RetrySession, execute_with_retry
    >>> execute_with_retry(lambda token: "ok", RetryPolicy(attempts=3))
    'ok'
    >>> with RetrySession(RetryPolicy(attempts=5, base_delay=0.1, max_delay=2.0)) as session:
    ...     session.execute(lambda token: "loaded")
    ...
    'loaded'

    ```
"""

from __future__ import annotations

__all__ = [
    "AsyncRetrySession",
    "CancellationSource",
    "CancellationToken",
    "ErrorKind",
    "NormalizedError",
    "OperationCanceledError",
    "RetryPolicy",
    "RetrySession",
    "SessionClosedError",
    "__version__",
    "backoff_delay",
    "classify_error",
    "compose",
    "execute_with_retry",
    "execute_with_retry_async",
]

from importlib.metadata import PackageNotFoundError, version

from resilex.backoff import backoff_delay
from resilex.cancellation import CancellationSource, CancellationToken, compose
from resilex.classifier import ErrorKind, NormalizedError, classify_error
from resilex.core.config import RetryPolicy
from resilex.exceptions import OperationCanceledError, SessionClosedError
from resilex.execute import execute_with_retry
from resilex.execute_async import execute_with_retry_async
from resilex.session import RetrySession
from resilex.session_async import AsyncRetrySession

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
