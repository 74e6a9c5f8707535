"""Capability budget gate shared by every call to an external provider."""

import threading
import time
from collections.abc import Callable
from typing import Any

from memory_cloud.core.logging import get_logger

logger = get_logger(__name__)


class CapabilityBudget:
    """
    Fixed-window rate gate for provider calls.

    A fixed quota of calls is allowed per window. The window restarts the first
    time a call arrives after it has elapsed. Checking and counting happen
    under one lock, so two callers can never both pass a gate with a single
    slot left.
    """

    def __init__(
        self,
        name: str,
        quota: int = 14,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the gate.

        Args:
            name: Name of the gate (for logging)
            quota: Calls allowed per window
            window_seconds: Length of one window in seconds
            clock: Monotonic time source, injectable for tests
        """
        if quota < 0:
            raise ValueError("quota must be non-negative")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.name = name
        self.quota = quota
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()

        self.used = 0
        self.window_resets_at = clock() + window_seconds
        self.denied_total = 0

    def _roll_window(self, now: float) -> None:
        if now >= self.window_resets_at:
            self.used = 0
            self.window_resets_at = now + self.window_seconds

    def try_acquire(self) -> bool:
        """Consume one call from the budget if any is left."""
        with self._lock:
            self._roll_window(self._clock())
            if self.used >= self.quota:
                self.denied_total += 1
                logger.warning(f"Capability budget '{self.name}' exhausted", used=self.used, quota=self.quota)
                return False
            self.used += 1
            return True

    def remaining(self) -> int:
        """Calls still available in the current window."""
        with self._lock:
            self._roll_window(self._clock())
            return max(0, self.quota - self.used)

    def get_state(self) -> dict[str, Any]:
        """Get current gate state for monitoring."""
        with self._lock:
            now = self._clock()
            self._roll_window(now)
            return {
                "name": self.name,
                "quota": self.quota,
                "used": self.used,
                "remaining": max(0, self.quota - self.used),
                "resets_in_seconds": max(0.0, self.window_resets_at - now),
                "denied_total": self.denied_total,
            }
