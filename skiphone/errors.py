"""Exceptions raised by the SkiPhone core."""


class SkiPhoneError(Exception):
    """Base class for SkiPhone errors"""


class CaptureDeviceError(SkiPhoneError):
    """The capture device rejected a request or is unavailable."""


class NotFocusingError(CaptureDeviceError):
    """
    Raised by cancel_auto_focus() when no autofocus was in progress.

    Expected during teardown and always ignored by the capture pipeline.
    """


class PhotoStoreError(SkiPhoneError):
    """Captured image bytes could not be persisted."""
