r"""Interruptible sleep utilities.

The retry executors sleep between failed attempts with these helpers so
that a cancellation wakes them up immediately instead of after the full
backoff delay. Both flavours release their timer and their cancellation
listener before returning, whatever the outcome.
"""

from __future__ import annotations

__all__ = ["interruptible_sleep", "interruptible_sleep_async"]

import asyncio
import logging
import threading
from typing import TYPE_CHECKING

from resilex.core.validation import validate_delay

if TYPE_CHECKING:
    from resilex.cancellation import CancellationToken

logger: logging.Logger = logging.getLogger(__name__)


def interruptible_sleep(delay: float, token: CancellationToken) -> bool:
    """Block the current thread for ``delay`` seconds or until ``token``
    is canceled.

    Args:
        delay: The delay in seconds. Must be >= 0.
        token: The cancellation token that interrupts the sleep.

    Returns:
        ``True`` if the full delay elapsed, ``False`` if the sleep was
        interrupted (or never started) because the token is canceled.

    Raises:
        ValueError: If ``delay`` is negative.

    Example:
        ```pycon
        >>> from resilex.cancellation import CancellationSource
        >>> from resilex.utils.sleep import interruptible_sleep
        >>> source = CancellationSource()
        >>> interruptible_sleep(0.01, source)
        True
        >>> source.cancel()
        True
        >>> interruptible_sleep(60.0, source)
        False

        ```
    """
    validate_delay(delay)
    if token.is_canceled():
        return False
    wakeup = threading.Event()
    unregister = token.on_cancel(wakeup.set)
    try:
        interrupted = wakeup.wait(delay)
    finally:
        unregister()
    if interrupted:
        logger.debug(f"Sleep of {delay:.3f}s interrupted by cancellation")
    return not interrupted


async def interruptible_sleep_async(delay: float, token: CancellationToken) -> bool:
    """Suspend the current task for ``delay`` seconds or until ``token``
    is canceled.

    The token may be canceled from any thread: the wake-up is scheduled
    on the running event loop with ``call_soon_threadsafe``.

    Args:
        delay: The delay in seconds. Must be >= 0.
        token: The cancellation token that interrupts the sleep.

    Returns:
        ``True`` if the full delay elapsed, ``False`` if the sleep was
        interrupted (or never started) because the token is canceled.

    Raises:
        ValueError: If ``delay`` is negative.
    """
    validate_delay(delay)
    if token.is_canceled():
        return False
    loop = asyncio.get_running_loop()
    waiter: asyncio.Future[bool] = loop.create_future()

    def _resolve(completed: bool) -> None:
        if not waiter.done():
            waiter.set_result(completed)

    timer = loop.call_later(delay, _resolve, True)
    unregister = token.on_cancel(lambda: loop.call_soon_threadsafe(_resolve, False))
    try:
        completed = await waiter
    finally:
        timer.cancel()
        unregister()
    if not completed:
        logger.debug(f"Sleep of {delay:.3f}s interrupted by cancellation")
    return completed
