"""
Task Scheduler
Single control loop that serializes sensor readings, timers and device callbacks
"""

import heapq
import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional

from .clock import CentralClock, ManualClock

logger = logging.getLogger(__name__)


@dataclass(order=True)
class _ScheduledTask:
    due_ms: float
    seq: int
    fn: Callable[[], Any] = field(compare=False)
    tag: Optional[Hashable] = field(default=None, compare=False)


class TaskScheduler:
    """
    Control loop for the SkiPhone core

    Responsibilities:
    - Run posted callables one at a time, in due-time order
    - Delay work (countdown ticks, focus settling) without blocking
    - Cancel every pending task of one owner atomically via its tag
    - Keep running when a task raises

    Tasks posted from other threads (sensor callbacks, device callbacks) are
    queued and executed on the loop thread. With a ManualClock the loop is
    driven explicitly through run_pending()/advance().
    """

    def __init__(self, clock: Optional[CentralClock] = None):
        """
        Initialize scheduler

        Args:
            clock: Time base; defaults to a new CentralClock
        """
        self.clock = clock if clock else CentralClock()

        self._lock = threading.Lock()
        self._wakeup = threading.Condition(self._lock)
        self._queue: List[_ScheduledTask] = []
        self._seq = itertools.count()

        self.is_running = False
        self.loop_thread = None
        self.stop_event = threading.Event()

        self.executed_count = 0
        self.failed_count = 0

    # ------------------------------------------------------------------
    # Posting / cancelling
    # ------------------------------------------------------------------

    def post(self, fn: Callable[[], Any], delay_ms: float = 0, tag: Optional[Hashable] = None) -> int:
        """
        Queue ``fn`` to run on the control loop after ``delay_ms``.

        Args:
            fn: Zero-argument callable
            delay_ms: Delay before the task becomes due
            tag: Owner key used by cancel()

        Returns:
            Sequence number of the queued task
        """
        with self._lock:
            seq = next(self._seq)
            due = self.clock.now_ms() + max(delay_ms, 0)
            heapq.heappush(self._queue, _ScheduledTask(due, seq, fn, tag))
            self._wakeup.notify()
        return seq

    def cancel(self, tag: Hashable) -> int:
        """
        Remove every pending task carrying ``tag``.

        Returns:
            Number of tasks removed
        """
        with self._lock:
            before = len(self._queue)
            self._queue = [task for task in self._queue if task.tag != tag]
            heapq.heapify(self._queue)
            removed = before - len(self._queue)

        if removed:
            logger.debug(f"Cancelled {removed} task(s) tagged {tag!r}")
        return removed

    def pending(self, tag: Optional[Hashable] = None) -> int:
        """Number of queued tasks, optionally restricted to one tag."""
        with self._lock:
            if tag is None:
                return len(self._queue)
            return sum(1 for task in self._queue if task.tag == tag)

    def next_due_ms(self) -> Optional[float]:
        with self._lock:
            return self._queue[0].due_ms if self._queue else None

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def run_pending(self) -> int:
        """
        Run every task that is due now, including tasks they post with no delay.

        Returns:
            Number of tasks executed
        """
        executed = 0
        while True:
            with self._lock:
                if not self._queue or self._queue[0].due_ms > self.clock.now_ms():
                    break
                task = heapq.heappop(self._queue)
            self._execute(task)
            executed += 1
        return executed

    def advance(self, delta_ms: float) -> int:
        """
        Step a ManualClock forward, running tasks at their own due times.

        Args:
            delta_ms: How far to move the clock

        Returns:
            Number of tasks executed
        """
        if not isinstance(self.clock, ManualClock):
            raise TypeError("advance() requires a ManualClock")

        target = self.clock.now_ms() + delta_ms
        executed = self.run_pending()
        while True:
            due = self.next_due_ms()
            if due is None or due > target:
                break
            self.clock.set(max(due, self.clock.now_ms()))
            executed += self.run_pending()
        self.clock.set(target)
        executed += self.run_pending()
        return executed

    def advance_to(self, value_ms: float) -> int:
        return self.advance(value_ms - self.clock.now_ms())

    def _execute(self, task: _ScheduledTask):
        try:
            task.fn()
            self.executed_count += 1
        except Exception as e:
            self.failed_count += 1
            logger.error(f"Task {task.seq} (tag={task.tag!r}) failed: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # Threaded loop
    # ------------------------------------------------------------------

    def start(self):
        """
        Start the control loop on a background thread.

        Returns:
            None.
        """
        if self.is_running:
            logger.warning("Control loop already running")
            return

        self.stop_event.clear()
        self.is_running = True
        self.loop_thread = threading.Thread(
            target=self._loop,
            name="SkiPhone-Control-Loop",
            daemon=True
        )
        self.loop_thread.start()
        logger.info("✓ Control loop started")

    def stop(self, timeout: float = 5.0):
        """
        Stop the background loop. Pending tasks stay queued.

        Returns:
            None.
        """
        if not self.is_running:
            logger.warning("Control loop not running")
            return

        self.stop_event.set()
        with self._lock:
            self._wakeup.notify_all()
        if self.loop_thread and self.loop_thread.is_alive():
            self.loop_thread.join(timeout=timeout)

        self.is_running = False
        logger.info("✓ Control loop stopped")

    def _loop(self):
        logger.info("Control loop thread started")

        while not self.stop_event.is_set():
            self.run_pending()
            with self._lock:
                if self.stop_event.is_set():
                    break
                if self._queue:
                    timeout_ms = self._queue[0].due_ms - self.clock.now_ms()
                else:
                    timeout_ms = 100.0
                if timeout_ms > 0:
                    self.clock.wait(self._wakeup, timeout_ms)

        logger.info("Control loop thread stopped")

    def get_status(self) -> Dict[str, Any]:
        """
        Return the current loop state.

        Returns:
            Dict with running flag, queue depth and execution counters.
        """
        return {
            'is_running': self.is_running,
            'pending_tasks': self.pending(),
            'executed_tasks': self.executed_count,
            'failed_tasks': self.failed_count,
            'clock': self.clock.get_stats(),
        }

    def __repr__(self):
        status = "running" if self.is_running else "stopped"
        return f"<TaskScheduler(status={status}, pending={self.pending()})>"
