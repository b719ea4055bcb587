"""
Orientation Sensor Module for SkiPhone
Device rotation snapped to right angles for capture metadata
"""

from .config import OrientationConfig
from .tracker import OrientationCollector, OrientationTracker

__all__ = [
    'OrientationTracker',
    'OrientationCollector',
    'OrientationConfig',
]

__version__ = '1.0.0'
