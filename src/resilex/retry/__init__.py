r"""Retry package implementing class-based composition pattern.

Public API:
    - CallbackConfig: Configuration for callbacks
    - RetryStrategy: Strategy for calculating jittered retry delays
    - RetryDecider: Logic for deciding whether to retry
    - CallbackManager: Manager for callback invocations
    - RetryExecutor: Synchronous retry executor
    - AsyncRetryExecutor: Asynchronous retry executor
"""

from __future__ import annotations

__all__ = [
    "AsyncRetryExecutor",
    "CallbackConfig",
    "CallbackManager",
    "RetryDecider",
    "RetryDecision",
    "RetryExecutor",
    "RetryStrategy",
]

from resilex.retry.config import CallbackConfig
from resilex.retry.decider import RetryDecider, RetryDecision
from resilex.retry.executor import RetryExecutor
from resilex.retry.executor_async import AsyncRetryExecutor
from resilex.retry.manager import CallbackManager
from resilex.retry.strategy import RetryStrategy
