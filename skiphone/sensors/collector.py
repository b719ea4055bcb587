"""
Sensor Collector Base
Subscribes to a push-style sensor source and marshals readings onto the control loop
"""

import logging
from typing import Any, Callable, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from skiphone.coordinator import TaskScheduler

logger = logging.getLogger(__name__)


class SensorSource(Protocol):
    """Anything that pushes readings to subscribed callbacks."""

    def subscribe(self, callback: Callable[[Any], None]) -> None: ...

    def unsubscribe(self, callback: Callable[[Any], None]) -> None: ...


class SensorCollector:
    """
    Base collector - owns one subscription to a sensor source

    Readings may arrive on any thread; each one is posted to the scheduler
    under the collector's tag and handled there by handle_reading(), so all
    processing happens on the control loop. Stopping unsubscribes and drops
    readings that were queued but not yet handled.
    """

    sensor_type = 'sensor'

    def __init__(self, source: Optional[SensorSource], scheduler: 'TaskScheduler'):
        """
        Args:
            source: Push source for this sensor (None disables collection)
            scheduler: Control loop the readings are handled on
        """
        self.source = source
        self.scheduler = scheduler

        self.is_running = False
        self.sample_count = 0
        self._tag = (self.sensor_type, id(self))

    def start(self):
        """
        Subscribe to the source.

        Returns:
            None.
        """
        if self.is_running:
            logger.debug(f"{self.sensor_type} collector already running")
            return
        if self.source is None:
            logger.warning(f"No {self.sensor_type} source configured; collection disabled")
            return

        self.source.subscribe(self._on_reading)
        self.is_running = True
        logger.info(f"✓ {self.sensor_type} collection started")

    def stop(self):
        """
        Unsubscribe and discard readings still queued on the loop.

        Returns:
            None.
        """
        if not self.is_running:
            return

        self.source.unsubscribe(self._on_reading)
        self.scheduler.cancel(self._tag)
        self.is_running = False
        logger.info(f"✓ {self.sensor_type} collection stopped ({self.sample_count} readings)")

    def _on_reading(self, reading):
        self.scheduler.post(lambda: self._dispatch(reading), tag=self._tag)

    def _dispatch(self, reading):
        if not self.is_running:
            return
        self.sample_count += 1
        self.handle_reading(reading)

    def handle_reading(self, reading):
        """Process one reading on the control loop."""
        raise NotImplementedError

    def get_status(self) -> dict:
        """
        Return the current collector state.

        Returns:
            Dict containing sensor type, running state and reading count.
        """
        return {
            'sensor_type': self.sensor_type,
            'is_running': self.is_running,
            'samples_collected': self.sample_count,
        }

    def __repr__(self):
        status = "running" if self.is_running else "stopped"
        return f"<{type(self).__name__}(status={status})>"
