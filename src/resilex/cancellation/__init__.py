r"""Cooperative cancellation primitives.

Public API:
    - CancellationToken: Read-only view of a cancellation signal
    - CancellationSource: Thread-safe token that its owner can cancel
    - CompositeCancellation: Token derived from several tokens
    - compose: Combine several tokens into a CompositeCancellation
"""

from __future__ import annotations

__all__ = ["CancellationSource", "CancellationToken", "CompositeCancellation", "compose"]

from resilex.cancellation.composite import CompositeCancellation, compose
from resilex.cancellation.token import CancellationSource, CancellationToken
