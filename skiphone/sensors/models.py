"""Sensor data models."""
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class SensorSample:
    """Single accelerometer reading."""
    timestamp_ms: float  # control-loop clock, milliseconds
    x: float             # acceleration x (m/s²)
    y: float             # acceleration y (m/s²)
    z: float             # acceleration z (m/s²)


class Gesture(Enum):
    VERTICAL = 'vertical'
    HORIZONTAL = 'horizontal'


@dataclass(frozen=True)
class GestureEvent:
    """A classified, debounced shake."""
    gesture: Gesture
    timestamp_ms: float
