"""
Accelerometer Sensor Module for SkiPhone
3-axis accelerometer shake detection

Architecture:
- Classifier: sliding-window mean of XY / XZ plane projections with
  ambiguity rejection and a debounce window
- Collector: subscription to the sensor source, readings handled on the
  control loop

Usage:
    collector = AccelerometerCollector(source, scheduler, on_gesture)
    collector.start()   # screen on
    collector.stop()    # screen off
"""

from .classifier import ShakeClassifier
from .collector import AccelerometerCollector
from .config import ShakeConfig

__all__ = [
    'ShakeClassifier',
    'AccelerometerCollector',
    'ShakeConfig',
]

__version__ = '1.0.0'
