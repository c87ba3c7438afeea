"""Cancellation scopes shared by every network and model call.

A scope combines an explicit cancel flag with an optional deadline. Child
scopes observe their parent's cancellation but cancelling a child leaves the
parent untouched, which lets a batch abort its siblings without cancelling
the caller.

Example:
    scope = CancelScope(timeout=30)
    engine.search("book a flight", scope=scope)

    # elsewhere
    scope.cancel("user aborted")
"""

import threading
import time
from typing import Optional

from api_search.core.exceptions import SearchCancelledError


class CancelScope:
    """Cancellation token with an optional deadline."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        parent: Optional["CancelScope"] = None,
    ):
        """Initialize a scope.

        Args:
            timeout: Seconds until the scope expires (None = no deadline).
            parent: Scope whose cancellation this scope inherits.
        """
        self._event = threading.Event()
        self._parent = parent
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        """Cancel this scope and every child scope."""
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def reason(self) -> Optional[str]:
        if self._event.is_set():
            return self._reason
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return "deadline exceeded"
        if self._parent is not None:
            return self._parent.reason
        return None

    def remaining(self) -> Optional[float]:
        """Seconds left before the nearest deadline, or None if unbounded."""
        remaining = None
        if self._deadline is not None:
            remaining = max(0.0, self._deadline - time.monotonic())
        if self._parent is not None:
            parent_remaining = self._parent.remaining()
            if parent_remaining is not None:
                remaining = parent_remaining if remaining is None else min(remaining, parent_remaining)
        return remaining

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise SearchCancelledError(f"Operation cancelled: {self.reason}")

    def child(self) -> "CancelScope":
        return CancelScope(parent=self)


def ensure_scope(scope: Optional[CancelScope], timeout: Optional[float] = None) -> CancelScope:
    """Return ``scope`` narrowed by ``timeout``, creating one if needed."""
    if scope is None:
        return CancelScope(timeout=timeout)
    if timeout is None:
        return scope
    return CancelScope(timeout=timeout, parent=scope)
