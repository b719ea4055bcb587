"""
SkiPhone - Dispatcher Pipeline
==============================
Central module that wires the control loop, sensors, capture pipeline and
service together and owns their lifecycle.

Usage in run.py:
    pipeline = SkiPhonePipeline(device, accel_source, orientation_source, sink)
    pipeline.start()
    pipeline.service.enable(True)
    pipeline.service.screen_changed(True)
    # ... shakes arrive from the sensor source ...
    pipeline.stop()

Components managed:
    - TaskScheduler          : single control loop (threaded or manual clock)
    - AccelerometerCollector : shake detection while the screen is on
    - OrientationCollector   : rotation tracking during a capture countdown
    - CapturePipeline        : countdown / focus / exposure on the device
    - SkiPhoneService        : orchestrator state + action dispatch
"""

import logging
import threading
from typing import Optional

from .actions import ActionSink, LoggingActionSink
from .camera.config import CaptureConfig
from .camera.device import CaptureDevice
from .camera.pipeline import CapturePipeline, PhotoSink
from .coordinator import CentralClock, ManualClock, TaskScheduler
from .sensors.accelerometer import AccelerometerCollector, ShakeConfig
from .sensors.collector import SensorSource
from .sensors.orientation import OrientationCollector, OrientationConfig, OrientationTracker
from .service import SkiPhoneService

logger = logging.getLogger(__name__)


class SkiPhonePipeline:
    """
    Owns every SkiPhone component for one running instance.

    Responsibilities:
      - Build the control loop, collectors, capture pipeline and service
      - Route shakes to the service and capture completion back to it
      - Provide a clean start() / stop() interface for run.py
      - Report component state via get_status()
    """

    def __init__(
        self,
        device: CaptureDevice,
        accelerometer_source: Optional[SensorSource] = None,
        orientation_source: Optional[SensorSource] = None,
        sink: Optional[ActionSink] = None,
        photo_store: Optional[PhotoSink] = None,
        clock: Optional[CentralClock] = None,
        shake_config: Optional[ShakeConfig] = None,
        orientation_config: Optional[OrientationConfig] = None,
        capture_config: Optional[CaptureConfig] = None,
    ):
        """
        Args:
            device             : Capture device
            accelerometer_source : Push source of SensorSample readings
            orientation_source : Push source of raw orientation angles
            sink               : Host action sink (defaults to logging only)
            photo_store        : Where captured images go
            clock              : Time base; a ManualClock keeps the loop manual
            shake_config       : Shake classifier parameters
            orientation_config : Orientation snapping parameters
            capture_config     : Capture pipeline parameters
        """
        self.clock = clock if clock else CentralClock()
        self.scheduler = TaskScheduler(self.clock)
        self.sink = sink if sink else LoggingActionSink()

        self.orientation = OrientationCollector(
            source=orientation_source,
            scheduler=self.scheduler,
            tracker=OrientationTracker(orientation_config),
        )

        self.service = SkiPhoneService(scheduler=self.scheduler, sink=self.sink)

        self.capture = CapturePipeline(
            device=device,
            scheduler=self.scheduler,
            sink=self.sink,
            photo_store=photo_store,
            orientation=self.orientation,
            config=capture_config,
            on_finished=self.service.on_capture_finished,
        )
        self.accelerometer = AccelerometerCollector(
            source=accelerometer_source,
            scheduler=self.scheduler,
            on_gesture=self.service.on_gesture,
            config=shake_config,
        )

        self.service.accelerometer = self.accelerometer
        self.service.capture = self.capture

        logger.info("SkiPhonePipeline created")

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    @property
    def is_manual(self) -> bool:
        return isinstance(self.clock, ManualClock)

    def start(self):
        """
        Start the control loop. With a ManualClock the caller drives it.
        """
        logger.info("=" * 55)
        logger.info("  SkiPhone pipeline starting")
        logger.info("=" * 55)

        if not self.is_manual:
            self.scheduler.start()

        logger.info(f"Pipeline ready, control loop: {'manual' if self.is_manual else 'threaded'}")

    def stop(self):
        """
        Disable the service, cancel any capture and stop the control loop.
        """
        logger.info("Stopping SkiPhone pipeline...")
        if self.is_manual:
            self.service.shutdown()
            self.scheduler.run_pending()
        else:
            done = threading.Event()

            def shutdown():
                try:
                    self.service.shutdown()
                finally:
                    done.set()

            self.scheduler.post(shutdown)
            if not done.wait(timeout=5):
                logger.warning("Service shutdown did not complete on the control loop")
            self.scheduler.stop()
        logger.info("✓ SkiPhone pipeline stopped")

    def get_status(self) -> dict:
        """
        Return a summary of component states for logging.
        """
        return {
            'service': self.service.get_status(),
            'orientation': self.orientation.get_status(),
            'scheduler': self.scheduler.get_status(),
        }

    # -----------------------------------------------------------------------
    # Dunder helpers
    # -----------------------------------------------------------------------

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def __repr__(self):
        return f"<SkiPhonePipeline(service={self.service!r}, capture={self.capture!r})>"
