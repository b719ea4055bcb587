"""
Trace Replay Source
Replays a recorded accelerometer / orientation trace through the control loop

Trace format (CSV, header line optional, '#' comments allowed):
    t_ms, x, y, z[, angle]

t_ms is relative to the start of the recording; angle is the raw orientation
in degrees, with -1 or an empty field meaning unknown.
"""

import logging
from pathlib import Path
from typing import Any, Callable, List, Optional, TYPE_CHECKING, Union

import numpy as np

from .models import SensorSample

if TYPE_CHECKING:
    from skiphone.coordinator import TaskScheduler

logger = logging.getLogger(__name__)


class PushSource:
    """Minimal in-process sensor source: fan a reading out to subscribers."""

    def __init__(self, name: str):
        self.name = name
        self._subscribers: List[Callable[[Any], None]] = []

    def subscribe(self, callback: Callable[[Any], None]):
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[Any], None]):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def push(self, reading):
        for callback in list(self._subscribers):
            callback(reading)

    def __repr__(self):
        return f"<PushSource(name={self.name}, subscribers={len(self._subscribers)})>"


class TraceReplaySource:
    """
    Loads a trace file and schedules every row on the control loop

    Two push sources are exposed: ``accelerometer`` delivers SensorSample
    readings stamped with the control-loop clock, ``orientation`` delivers the
    raw angle column (or nothing when the trace has no angle column).
    """

    def __init__(self, trace: np.ndarray):
        """
        Args:
            trace: Array of shape (rows, 4) or (rows, 5)
        """
        trace = np.atleast_2d(np.asarray(trace, dtype=float))
        if not trace.size:
            trace = np.empty((0, 4))
        elif trace.shape[1] not in (4, 5):
            raise ValueError(f"Trace must have 4 or 5 columns, got {trace.shape[1]}")

        self.trace = trace
        self.accelerometer = PushSource('accelerometer')
        self.orientation = PushSource('orientation')

        logger.info(f"Trace loaded: {len(self.trace)} rows")

    @classmethod
    def from_csv(cls, path: Union[str, Path]) -> 'TraceReplaySource':
        """
        Read a trace CSV.

        Args:
            path: CSV file path

        Returns:
            TraceReplaySource for the file contents
        """
        path = Path(path)
        with path.open() as handle:
            first = handle.readline()
        skip = 1 if first and not _is_numeric_row(first) else 0
        trace = np.genfromtxt(path, delimiter=',', skip_header=skip, comments='#')
        logger.info(f"Reading trace {path}")
        return cls(trace)

    @property
    def duration_ms(self) -> float:
        if not len(self.trace):
            return 0.0
        return float(self.trace[-1, 0] - self.trace[0, 0])

    @property
    def has_orientation(self) -> bool:
        return bool(len(self.trace)) and self.trace.shape[1] == 5

    def schedule(self, scheduler: 'TaskScheduler'):
        """
        Post every row at its recorded offset from now.

        Args:
            scheduler: Control loop the readings are delivered on
        """
        if not len(self.trace):
            logger.warning("Empty trace, nothing to replay")
            return

        t0 = self.trace[0, 0]
        for row in self.trace:
            scheduler.post(lambda row=row: self._deliver(scheduler, row), delay_ms=row[0] - t0)

    def _deliver(self, scheduler: 'TaskScheduler', row: np.ndarray):
        self.accelerometer.push(SensorSample(
            timestamp_ms=scheduler.clock.now_ms(),
            x=float(row[1]),
            y=float(row[2]),
            z=float(row[3]),
        ))
        if self.has_orientation:
            self.orientation.push(_angle(row[4]))

    def __repr__(self):
        return f"<TraceReplaySource(rows={len(self.trace)}, duration={self.duration_ms:.0f}ms)>"


def _is_numeric_row(line: str) -> bool:
    try:
        [float(field) for field in line.strip().split(',') if field.strip()]
    except ValueError:
        return False
    return True


def _angle(value: float) -> Optional[int]:
    if np.isnan(value) or value < 0:
        return None
    return int(value)
