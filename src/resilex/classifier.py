r"""Error classification for retry decisions.

This module turns arbitrary exceptions raised by a retried operation into
``NormalizedError`` values. The retry executor only looks at the
normalized ``kind`` (to short-circuit on cancellation) and hands the
normalized error to the policy's ``is_retryable`` predicate, so it never
inspects transport specifics itself.

The default classifier understands ``httpx`` exceptions, the builtin
timeout and connection errors, and any exception carrying an integer
``status_code`` or ``status`` attribute. A custom classifier with the same
signature can be injected wherever ``classify_error`` is accepted.

Example:
    ```pycon
    >>> import httpx
    >>> from resilex.classifier import classify_error
    >>> classify_error(httpx.ConnectError("connection refused")).kind
    <ErrorKind.NETWORK: 'network'>
    >>> classify_error(ValueError("bad input")).retryable_hint
    True

    ```
"""

from __future__ import annotations

__all__ = ["ErrorKind", "NormalizedError", "classify_error", "default_is_retryable"]

import asyncio
from dataclasses import dataclass, field
from enum import Enum

import httpx

from resilex.exceptions import OperationCanceledError


class ErrorKind(Enum):
    """Categories of normalized errors.

    Attributes:
        NETWORK: Connectivity failure (connection refused/reset, DNS...).
        TIMEOUT: The operation or the server timed out.
        SERVER: Server-side failure (5xx class).
        CLIENT: Client-side failure (4xx class, validation).
        ABORT: The operation was canceled. Never retried.
        UNKNOWN: Anything else.
    """

    NETWORK = "network"
    TIMEOUT = "timeout"
    SERVER = "server"
    CLIENT = "client"
    ABORT = "abort"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class NormalizedError:
    """Normalized view of an exception raised by a retried operation.

    Attributes:
        kind: The category of the error.
        message: A short description of the error.
        retryable_hint: Whether the classifier considers the error
            transient. The default retry predicate follows this hint.
        status_code: The HTTP status code, if the error carried one.
        cause: The original exception (excluded from equality).
    """

    kind: ErrorKind
    message: str
    retryable_hint: bool
    status_code: int | None = None
    cause: BaseException | None = field(default=None, compare=False, repr=False)


def default_is_retryable(error: NormalizedError) -> bool:
    """Retry predicate that follows the classifier's hint.

    Args:
        error: The normalized error.

    Returns:
        ``True`` if the error should be retried.
    """
    return error.retryable_hint


def classify_error(error: BaseException) -> NormalizedError:
    """Classify an exception into a ``NormalizedError``.

    Args:
        error: The exception raised by the operation.

    Returns:
        The normalized error. Unrecognized exceptions are classified as
        ``UNKNOWN`` and retryable.

    Example:
        ```pycon
        >>> from resilex.classifier import classify_error
        >>> classify_error(TimeoutError("read timed out")).kind
        <ErrorKind.TIMEOUT: 'timeout'>

        ```
    """
    message = str(error) or type(error).__name__
    if isinstance(error, (OperationCanceledError, asyncio.CancelledError)):
        return NormalizedError(ErrorKind.ABORT, message, retryable_hint=False, cause=error)

    status_code = _extract_status_code(error)
    if status_code is not None:
        return _classify_status_code(status_code, message, error)

    # httpx.TimeoutException is a TransportError, so test it first
    if isinstance(error, (httpx.TimeoutException, TimeoutError)):
        return NormalizedError(ErrorKind.TIMEOUT, message, retryable_hint=True, cause=error)
    if isinstance(error, (httpx.TransportError, ConnectionError)):
        return NormalizedError(ErrorKind.NETWORK, message, retryable_hint=True, cause=error)

    lowered = message.lower()
    if "timeout" in lowered or "timed out" in lowered:
        return NormalizedError(ErrorKind.TIMEOUT, message, retryable_hint=True, cause=error)
    if any(token in lowered for token in ("dns", "name resolution", "network", "connection")):
        return NormalizedError(ErrorKind.NETWORK, message, retryable_hint=True, cause=error)
    return NormalizedError(ErrorKind.UNKNOWN, message, retryable_hint=True, cause=error)


def _extract_status_code(error: BaseException) -> int | None:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    for name in ("status_code", "status"):
        value = getattr(error, name, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _classify_status_code(status_code: int, message: str, error: BaseException) -> NormalizedError:
    if status_code >= 500:
        kind, retryable = ErrorKind.SERVER, True
    elif status_code == 408:
        kind, retryable = ErrorKind.TIMEOUT, True
    elif status_code == 429:
        # rate limited: client class but worth retrying
        kind, retryable = ErrorKind.CLIENT, True
    elif 400 <= status_code < 500:
        kind, retryable = ErrorKind.CLIENT, False
    else:
        kind, retryable = ErrorKind.UNKNOWN, False
    return NormalizedError(
        kind, message, retryable_hint=retryable, status_code=status_code, cause=error
    )
