"""
Action Sinks
Fire-and-forget outputs of the dispatcher (host services live behind these)
"""

import logging
from enum import Enum
from typing import List, Protocol, Tuple

logger = logging.getLogger(__name__)

VIBRATE_MS = 500

# Message tokens understood by the host's message presenter
MESSAGE_SCREEN_CANCEL = 'screen_cancel'  # how to dismiss voice search
MESSAGE_SHAKE_CANCEL = 'shake_cancel'    # shake again to cancel the photo
MESSAGE_SHAKE_EXIT = 'shake_exit'        # photo saved, shake to leave


class MessageDuration(Enum):
    SHORT = 'short'
    LONG = 'long'


class ActionSink(Protocol):
    def simulate_answer(self) -> None: ...

    def simulate_hang_up(self) -> None: ...

    def launch_voice_search(self) -> None: ...

    def show_home(self) -> None: ...

    def show_message(self, token: str, duration: MessageDuration) -> None: ...

    def show_countdown(self, count: int) -> None: ...

    def vibrate(self, duration_ms: int) -> None: ...

    def show_indicator(self) -> None: ...

    def cancel_indicator(self) -> None: ...


class LoggingActionSink:
    """Logs every action; stands in for the host when replaying traces."""

    def __init__(self):
        self.history: List[Tuple] = []

    def _emit(self, *action):
        self.history.append(action)
        logger.info("Action: " + " ".join(str(part) for part in action))

    def simulate_answer(self):
        self._emit('answer_call')

    def simulate_hang_up(self):
        self._emit('hang_up')

    def launch_voice_search(self):
        self._emit('voice_search')

    def show_home(self):
        self._emit('show_home')

    def show_message(self, token: str, duration: MessageDuration):
        self._emit('message', token, duration.value)

    def show_countdown(self, count: int):
        self._emit('countdown', count)

    def vibrate(self, duration_ms: int):
        self._emit('vibrate', duration_ms)

    def show_indicator(self):
        self._emit('show_indicator')

    def cancel_indicator(self):
        self._emit('cancel_indicator')
