"""
Accelerometer Shake Detection Configuration
Thresholds and timing for the sliding-window shake classifier
"""

from dataclasses import dataclass


@dataclass
class ShakeConfig:
    """Shake classifier parameters"""

    # Minimum mean squared projection (m²/s⁴) to count as a shake
    vertical_threshold: float = 200.0    # XY plane, parallel to the screen
    horizontal_threshold: float = 200.0  # XZ plane, horizontal in hand

    # Number of readings averaged per plane
    sensor_history: int = 5

    # Minimum time between two emitted gestures
    wait_time_ms: float = 2000.0

    @classmethod
    def for_session(cls) -> 'ShakeConfig':
        """
        Create the configuration used while the feature is enabled.

        Returns:
            ShakeConfig with the default thresholds and debounce window.
        """
        return cls()

    @classmethod
    def for_sensitive(cls, scale: float = 0.5) -> 'ShakeConfig':
        """
        Create a configuration with both thresholds scaled down.

        Useful for replaying traces recorded with gentler motion.

        Args:
            scale: Factor applied to both plane thresholds.

        Returns:
            ShakeConfig with scaled thresholds.
        """
        base = cls()
        return cls(
            vertical_threshold=base.vertical_threshold * scale,
            horizontal_threshold=base.horizontal_threshold * scale,
        )
