"""
Simulated Capture Device
In-process stand-in for the camera, used for trace replay and tests
"""

import logging
from collections import deque
from typing import Callable, Deque, Iterable, List, Optional, Tuple, TYPE_CHECKING

from ..errors import CaptureDeviceError, NotFocusingError
from .device import FocusResult
from .sizes import FrameSize

if TYPE_CHECKING:
    from skiphone.coordinator import TaskScheduler

logger = logging.getLogger(__name__)

DEFAULT_CAPTURE_SIZES = [
    FrameSize(2592, 1944),
    FrameSize(2048, 1536),
    FrameSize(1600, 1200),
    FrameSize(1280, 720),
    FrameSize(640, 480),
]

DEFAULT_PREVIEW_SIZES = [
    FrameSize(1280, 720),
    FrameSize(800, 480),
    FrameSize(640, 480),
    FrameSize(320, 240),
]


class SimulatedCaptureDevice:
    """
    Scriptable capture device

    Focus results are consumed from ``focus_results`` in order (SUCCESS once
    the script runs out) and delivered through the scheduler after
    ``focus_duration_ms``, or synchronously when no scheduler is given.
    Failure flags make individual calls raise CaptureDeviceError. Every call
    is appended to ``calls`` for inspection.
    """

    def __init__(
            self,
            capture_sizes: Optional[List[FrameSize]] = None,
            preview_sizes: Optional[List[FrameSize]] = None,
            focus_results: Iterable[FocusResult] = (),
            scheduler: Optional['TaskScheduler'] = None,
            focus_duration_ms: float = 300.0
    ):
        self.capture_sizes = list(DEFAULT_CAPTURE_SIZES if capture_sizes is None else capture_sizes)
        self.preview_sizes = list(DEFAULT_PREVIEW_SIZES if preview_sizes is None else preview_sizes)
        self.focus_results: Deque[FocusResult] = deque(focus_results)
        self.scheduler = scheduler
        self.focus_duration_ms = focus_duration_ms

        # Failure injection
        self.fail_open = False
        self.fail_release = False
        self.fail_capture = False
        self.reject_rotation = False
        self.reject_configure = False
        self.raise_on_focus = False

        self.is_open = False
        self.is_previewing = False
        self.is_focusing = False
        self.preview_size: Optional[FrameSize] = None
        self.rotation: Optional[int] = None
        self.calls: List[Tuple] = []
        self.open_count = 0
        self.release_count = 0

    def _record(self, *call):
        self.calls.append(call)

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def _require_open(self, what: str):
        if not self.is_open:
            raise CaptureDeviceError(f"{what}: device not open")

    def open(self):
        self._record('open')
        if self.fail_open:
            raise CaptureDeviceError("Camera unavailable")
        if self.is_open:
            raise CaptureDeviceError("Camera already in use")
        self.is_open = True
        self.open_count += 1

    def release(self):
        self._record('release')
        if self.fail_release:
            raise CaptureDeviceError("Release failed")
        self.is_open = False
        self.is_previewing = False
        self.is_focusing = False
        self.release_count += 1

    def get_supported_sizes(self) -> Tuple[List[FrameSize], List[FrameSize]]:
        self._record('get_supported_sizes')
        self._require_open('get_supported_sizes')
        return list(self.capture_sizes), list(self.preview_sizes)

    def configure(self, preview_size: FrameSize, capture_size: FrameSize, quality: int):
        self._record('configure', preview_size, capture_size, quality)
        self._require_open('configure')
        if self.reject_configure:
            raise CaptureDeviceError("Autofocus still running, parameters rejected")

    def set_rotation(self, degrees: int):
        self._record('set_rotation', degrees)
        self._require_open('set_rotation')
        if self.reject_rotation:
            raise CaptureDeviceError(f"Rotation {degrees} rejected")
        self.rotation = degrees

    def start_preview(self, size: FrameSize):
        self._record('start_preview', size)
        self._require_open('start_preview')
        self.is_previewing = True
        self.preview_size = size

    def stop_preview(self):
        self._record('stop_preview')
        self.is_previewing = False

    def request_auto_focus(self, callback: Callable[[FocusResult], None]):
        self._record('request_auto_focus')
        self._require_open('request_auto_focus')
        if self.raise_on_focus:
            raise CaptureDeviceError("Autofocus unavailable")
        self.is_focusing = True
        result = self.focus_results.popleft() if self.focus_results else FocusResult.SUCCESS

        def deliver():
            self.is_focusing = False
            callback(result)

        if self.scheduler is None:
            deliver()
        else:
            self.scheduler.post(deliver, delay_ms=self.focus_duration_ms)

    def cancel_auto_focus(self):
        self._record('cancel_auto_focus')
        if not self.is_focusing:
            raise NotFocusingError("Not focusing")
        self.is_focusing = False

    def capture(self, rotation: Optional[int], size: FrameSize, quality: int) -> bytes:
        self._record('capture', rotation, size, quality)
        self._require_open('capture')
        if self.fail_capture:
            raise CaptureDeviceError("Capture failed")
        header = f"SIM {size} q={quality} r={rotation}".encode('ascii')
        return b'\xff\xd8' + header + b'\xff\xd9'

    def __repr__(self):
        status = "open" if self.is_open else "closed"
        return f"<SimulatedCaptureDevice(status={status}, calls={len(self.calls)})>"
