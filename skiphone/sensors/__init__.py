"""
SkiPhone Sensors
Motion input for the shake dispatcher

Available Sensors:
- Accelerometer: shake classification (vertical / horizontal)
- Orientation: device rotation snapped to right angles

All collectors:
- Subscribe to a push source only while needed
- Handle every reading on the shared control loop
- Drop queued readings when stopped
"""

from .accelerometer import AccelerometerCollector, ShakeClassifier, ShakeConfig
from .collector import SensorCollector, SensorSource
from .models import Gesture, GestureEvent, SensorSample
from .orientation import OrientationCollector, OrientationConfig, OrientationTracker
from .replay import PushSource, TraceReplaySource

__all__ = [
    # Data models
    'SensorSample',
    'Gesture',
    'GestureEvent',

    # Collection
    'SensorCollector',
    'SensorSource',
    'PushSource',
    'TraceReplaySource',

    # Accelerometer
    'AccelerometerCollector',
    'ShakeClassifier',
    'ShakeConfig',

    # Orientation
    'OrientationCollector',
    'OrientationTracker',
    'OrientationConfig',
]

__version__ = '1.0.0'
