# file: src/forecast/cancellation.py
"""
Cooperative cancellation for long recursions.

Loops call raise_if_cancelled() once per step so fitting and multi-step
prediction stay interruptible from another thread.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from src.forecast.errors import CancelledError


class CancellationToken:
    """Thread-safe cancel flag with an optional deadline"""

    def __init__(self, timeout: Optional[float] = None):
        self._event = threading.Event()
        self._deadline = None if timeout is None else time.monotonic() + timeout
        self._reason = "cancelled"

    def cancel(self, reason: str = "cancelled") -> None:
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._reason = "deadline exceeded"
            self._event.set()
            return True
        return False

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise CancelledError(self._reason)


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """No-op for a missing token"""
    if token is not None:
        token.raise_if_cancelled()
