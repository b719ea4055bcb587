"""
Central Clock System
Provides the millisecond time base shared by the control loop and sensors
"""

import threading
import logging
import time

logger = logging.getLogger(__name__)


class CentralClock:
    """
    Thread-safe monotonic millisecond clock

    Every component of the control loop reads time from the same clock so
    debounce windows, countdown ticks and focus delays agree with each other:
    - Thread-safe access (sensor threads and the control loop may call it)
    - Monotonic timestamps (never move backwards)
    - Millisecond resolution as float
    """

    def __init__(self):
        """Initialize central clock"""
        self._lock = threading.Lock()
        self._origin = time.monotonic()
        self._last_ms = 0.0
        self._call_count = 0

        logger.info("Central clock initialized")

    def now_ms(self) -> float:
        """
        Get milliseconds elapsed since the clock was created

        Returns:
            float: Monotonic time in milliseconds
        """
        with self._lock:
            current = (time.monotonic() - self._origin) * 1000.0
            if current < self._last_ms:
                current = self._last_ms
            self._last_ms = current
            self._call_count += 1
            return current

    def wait(self, condition: threading.Condition, timeout_ms: float):
        """Block on ``condition`` for at most ``timeout_ms`` (lock must be held)."""
        condition.wait(timeout=max(timeout_ms, 0.0) / 1000.0)

    def get_stats(self) -> dict:
        """
        Get clock statistics

        Returns:
            dict: Clock usage statistics
        """
        with self._lock:
            return {
                'total_calls': self._call_count,
                'last_ms': self._last_ms,
            }

    def __repr__(self):
        return f"<CentralClock(calls={self._call_count})>"


class ManualClock(CentralClock):
    """
    Clock that only moves when told to.

    Used to drive the control loop deterministically from tests and from
    trace replay, where the recorded timestamps are the time base.
    """

    def __init__(self, start_ms: float = 0.0):
        super().__init__()
        self._last_ms = float(start_ms)

    def now_ms(self) -> float:
        with self._lock:
            self._call_count += 1
            return self._last_ms

    def set(self, value_ms: float):
        """Move the clock to ``value_ms``; moving backwards is rejected."""
        with self._lock:
            if value_ms < self._last_ms:
                raise ValueError(
                    f"Manual clock cannot go backwards ({value_ms} < {self._last_ms})"
                )
            self._last_ms = float(value_ms)

    def advance(self, delta_ms: float):
        self.set(self._last_ms + delta_ms)

    def wait(self, condition: threading.Condition, timeout_ms: float):
        # Time does not pass on its own; just yield to posters.
        condition.wait(timeout=0.001)

    def __repr__(self):
        return f"<ManualClock(now={self._last_ms}ms)>"
