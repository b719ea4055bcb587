"""
SkiPhone
Shake-gesture dispatcher: answer / hang up calls, voice search, timed photos

Packages:
- coordinator: clock and the single-threaded control loop
- sensors: accelerometer shake classification, orientation tracking
- camera: size negotiation and the capture pipeline
- orchestrator / service: state machine and action dispatch
"""

from .errors import CaptureDeviceError, NotFocusingError, PhotoStoreError, SkiPhoneError
from .orchestrator import Action, CallState, Mode, OrchestratorState, transition
from .pipeline import SkiPhonePipeline
from .service import SkiPhoneService

__all__ = [
    'SkiPhonePipeline',
    'SkiPhoneService',
    'Action',
    'CallState',
    'Mode',
    'OrchestratorState',
    'transition',
    'SkiPhoneError',
    'CaptureDeviceError',
    'NotFocusingError',
    'PhotoStoreError',
]

__version__ = '1.0.0'
