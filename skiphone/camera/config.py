"""
Capture Configuration
Timing, quality and negotiation parameters for the capture pipeline
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class CaptureConfig:
    """Capture pipeline configuration parameters"""

    # Countdown
    countdown_from: int = 5
    tick_interval_ms: float = 1000.0

    # Give the user time to aim before focusing
    focus_delay_ms: float = 2000.0

    # None retries focus until it succeeds or the session is cancelled
    max_focus_attempts: Optional[int] = None

    # Output
    jpeg_quality: int = 90

    # Size negotiation
    aspect_tolerance: float = 0.1

    # Default viewport when the host has not reported one (landscape)
    viewport_width: int = 800
    viewport_height: int = 480

    @classmethod
    def for_session(cls) -> 'CaptureConfig':
        """
        Create the default capture configuration.

        Returns:
            CaptureConfig with the standard countdown and unbounded focus retries.
        """
        return cls()

    @classmethod
    def for_bounded_focus(cls, max_attempts: int = 10) -> 'CaptureConfig':
        """
        Create a configuration that stops retrying focus after ``max_attempts``.

        The picture is still taken once the cap is hit.

        Args:
            max_attempts: Focus requests allowed per session.

        Returns:
            CaptureConfig with max_focus_attempts set.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        return cls(max_focus_attempts=max_attempts)
