"""
Capture Device Interface
What the capture pipeline needs from the camera hardware
"""

from enum import Enum
from typing import Callable, List, Optional, Protocol, Tuple

from .sizes import FrameSize


class FocusResult(Enum):
    SUCCESS = 'success'
    FAILURE = 'failure'  # lens could not lock; worth retrying
    ERROR = 'error'      # device busy or gone; give up on focus


class CaptureDevice(Protocol):
    """
    Single, exclusively owned capture device

    Every method may raise CaptureDeviceError. cancel_auto_focus() raises
    NotFocusingError when no focus was running. request_auto_focus() may
    invoke its callback on any thread.
    """

    def open(self) -> None: ...

    def release(self) -> None: ...

    def get_supported_sizes(self) -> Tuple[List[FrameSize], List[FrameSize]]:
        """Return (capture_sizes, preview_sizes)."""
        ...

    def configure(self, preview_size: FrameSize, capture_size: FrameSize, quality: int) -> None: ...

    def set_rotation(self, degrees: int) -> None: ...

    def start_preview(self, size: FrameSize) -> None: ...

    def stop_preview(self) -> None: ...

    def request_auto_focus(self, callback: Callable[[FocusResult], None]) -> None: ...

    def cancel_auto_focus(self) -> None: ...

    def capture(self, rotation: Optional[int], size: FrameSize, quality: int) -> bytes: ...
