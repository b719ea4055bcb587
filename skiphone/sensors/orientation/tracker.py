"""
Orientation Tracker
Snaps raw device orientation angles to the camera rotation used for captures
"""

import logging
from typing import Optional, TYPE_CHECKING

from ..collector import SensorCollector, SensorSource
from .config import OrientationConfig

if TYPE_CHECKING:
    from skiphone.coordinator import TaskScheduler

logger = logging.getLogger(__name__)


class OrientationTracker:
    """Holds the last known rotation, snapped to 0/90/180/270."""

    def __init__(self, config: Optional[OrientationConfig] = None):
        self.config = config if config else OrientationConfig()
        self._orientation: Optional[int] = None

    def feed(self, angle: Optional[int]):
        """
        Record a raw angle in degrees. Unknown readings leave the stored value alone.

        Args:
            angle: Raw orientation (0-359), None or the platform unknown value
        """
        if angle is None or angle == self.config.unknown_value:
            return
        self._orientation = self.snap(int(angle), self.config.snap_offset)

    @staticmethod
    def snap(angle: int, offset: int = 115) -> int:
        return ((angle + offset) // 90) * 90 % 360

    def snapshot(self) -> Optional[int]:
        return self._orientation

    def has_orientation(self) -> bool:
        return self._orientation is not None

    def reset(self):
        self._orientation = None

    def __repr__(self):
        return f"<OrientationTracker(orientation={self._orientation})>"


class OrientationCollector(SensorCollector):
    """
    Orientation collector - feeds the tracker while a capture is pending

    Enabled when a capture session starts counting down and disabled once
    the rotation has been locked in.
    """

    sensor_type = 'orientation'

    def __init__(
            self,
            source: Optional[SensorSource],
            scheduler: 'TaskScheduler',
            tracker: Optional[OrientationTracker] = None
    ):
        super().__init__(source, scheduler)
        self.tracker = tracker if tracker else OrientationTracker()

    def handle_reading(self, reading: Optional[int]):
        self.tracker.feed(reading)

    def get_status(self) -> dict:
        status = super().get_status()
        status['orientation'] = self.tracker.snapshot()
        return status
