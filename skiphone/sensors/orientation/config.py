"""
Orientation Sensor Configuration
"""

from dataclasses import dataclass


@dataclass
class OrientationConfig:
    """Orientation snapping parameters"""

    # Added to the raw angle before truncating to a quadrant. Includes the
    # 90° offset between the landscape camera and the natural orientation.
    snap_offset: int = 115

    # Value the platform reports when the device is flat / unknown
    unknown_value: int = -1
