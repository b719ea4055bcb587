"""
Shake Classifier
Sliding-window classification of accelerometer readings into shake gestures
"""

import logging
from collections import deque
from typing import Deque, Optional

import numpy as np

from ..models import Gesture, GestureEvent, SensorSample
from .config import ShakeConfig

logger = logging.getLogger(__name__)


class ShakeClassifier:
    """
    Turns a continuous accelerometer stream into debounced shake gestures

    Each reading is projected onto the XY plane (parallel to the face of the
    device) and the XZ plane (horizontal when held in hand) as squared
    magnitudes. The mean of the most recent readings in each plane is compared
    with the thresholds:

    - XY mean dominant: VERTICAL if it is above the vertical threshold while the
      XZ mean stays below the horizontal one.
    - Otherwise: HORIZONTAL if the XZ mean is above its threshold while the XY
      mean stays below the vertical one.

    When both planes are above threshold the motion is ambiguous and nothing is
    emitted; readings keep accumulating until one plane settles. After an
    emission both windows are cleared and readings are ignored for the
    debounce window.
    """

    def __init__(self, config: Optional[ShakeConfig] = None):
        """
        Initialize shake classifier

        Args:
            config: Shake detection configuration
        """
        self.config = config if config else ShakeConfig()

        self.xy_window: Deque[float] = deque()
        self.xz_window: Deque[float] = deque()
        self.last_event_ms: Optional[float] = None
        self.event_count = 0

    def feed(self, sample: SensorSample) -> Optional[GestureEvent]:
        """
        Classify one reading

        Args:
            sample: Accelerometer reading

        Returns:
            GestureEvent if this reading completed a shake, else None
        """
        now = sample.timestamp_ms
        if self.last_event_ms is not None and now - self.last_event_ms < self.config.wait_time_ms:
            return None

        if len(self.xy_window) == self.config.sensor_history:
            self.xy_window.popleft()
            self.xz_window.popleft()

        sx = sample.x * sample.x
        self.xy_window.append(sample.y * sample.y + sx)
        self.xz_window.append(sample.z * sample.z + sx)

        xy_mean = float(np.mean(self.xy_window))
        xz_mean = float(np.mean(self.xz_window))
        logger.debug(f"Sensor means: XY={xy_mean:.2f} XZ={xz_mean:.2f}")

        gesture = self._classify(xy_mean, xz_mean)
        if gesture is None:
            return None

        self.last_event_ms = now
        self.event_count += 1
        self.clear_history()
        logger.info(f"{gesture.value.capitalize()} shake: v={xy_mean:.1f}, h={xz_mean:.1f}")
        return GestureEvent(gesture=gesture, timestamp_ms=now)

    def _classify(self, xy_mean: float, xz_mean: float) -> Optional[Gesture]:
        vertical = self.config.vertical_threshold
        horizontal = self.config.horizontal_threshold

        if xy_mean > xz_mean:
            if xy_mean > vertical and xz_mean < horizontal:
                return Gesture.VERTICAL
        elif xz_mean > horizontal and xy_mean < vertical:
            return Gesture.HORIZONTAL
        return None

    def clear_history(self):
        self.xy_window.clear()
        self.xz_window.clear()

    def reset(self):
        """Forget the window and the debounce stamp."""
        self.clear_history()
        self.last_event_ms = None

    def __repr__(self):
        return f"<ShakeClassifier(window={len(self.xy_window)}, events={self.event_count})>"
