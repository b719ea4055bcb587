"""
Camera Module for SkiPhone
Shake-triggered, timed photo capture

Architecture:
- Sizes: pure capture / preview resolution negotiation
- Device: capture device interface (plus a simulated implementation)
- Pipeline: countdown -> orientation lock -> autofocus retries -> exposure

Usage:
    pipeline = CapturePipeline(device, scheduler, sink, photo_store, orientation)
    pipeline.start((800, 480))
    # ... control loop runs the countdown, focus and exposure ...
    pipeline.cancel()   # any time before the picture is taken
"""

from .config import CaptureConfig
from .device import CaptureDevice, FocusResult
from .pipeline import CapturePipeline, CaptureSession, CaptureState
from .simulated import SimulatedCaptureDevice
from .sizes import FrameSize, NegotiatedSizes, negotiate, pick_capture_size, pick_preview_size

__all__ = [
    'CaptureConfig',
    'CaptureDevice',
    'FocusResult',
    'CapturePipeline',
    'CaptureSession',
    'CaptureState',
    'SimulatedCaptureDevice',
    'FrameSize',
    'NegotiatedSizes',
    'negotiate',
    'pick_capture_size',
    'pick_preview_size',
]

__version__ = '1.0.0'
