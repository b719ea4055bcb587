"""
Accelerometer Collector
Feeds accelerometer readings through the shake classifier on the control loop
"""

import logging
from typing import Callable, Optional, TYPE_CHECKING

from ..collector import SensorCollector, SensorSource
from ..models import GestureEvent, SensorSample
from .classifier import ShakeClassifier
from .config import ShakeConfig

if TYPE_CHECKING:
    from skiphone.coordinator import TaskScheduler

logger = logging.getLogger(__name__)


class AccelerometerCollector(SensorCollector):
    """
    Accelerometer collector - shake detection while sampling is on

    Sampling is expensive on battery, so the service only starts this
    collector while the screen is on. Each (re)start begins with an empty
    classifier window.
    """

    sensor_type = 'accelerometer'

    def __init__(
            self,
            source: Optional[SensorSource],
            scheduler: 'TaskScheduler',
            on_gesture: Callable[[GestureEvent], None],
            config: Optional[ShakeConfig] = None
    ):
        """
        Args:
            source: Accelerometer push source
            scheduler: Control loop
            on_gesture: Called on the control loop for every detected shake
            config: Shake detection configuration
        """
        super().__init__(source, scheduler)
        self.config = config if config else ShakeConfig.for_session()
        self.classifier = ShakeClassifier(self.config)
        self.on_gesture = on_gesture

    def start(self):
        if not self.is_running:
            self.classifier.clear_history()
        super().start()

    def handle_reading(self, reading: SensorSample):
        event = self.classifier.feed(reading)
        if event is not None:
            self.on_gesture(event)

    def get_status(self) -> dict:
        status = super().get_status()
        status['gestures_detected'] = self.classifier.event_count
        return status
