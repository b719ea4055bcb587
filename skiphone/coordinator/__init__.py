"""
SkiPhone Control Loop
Shared time base and the single-threaded task scheduler
"""

from .clock import CentralClock, ManualClock
from .scheduler import TaskScheduler

__all__ = [
    'CentralClock',
    'ManualClock',
    'TaskScheduler',
]

__version__ = '1.0.0'
