"""
SkiPhone Service
Owns the orchestrator state and carries out the actions it decides on
"""

import logging
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from .actions import MESSAGE_SCREEN_CANCEL, VIBRATE_MS, ActionSink, MessageDuration
from .orchestrator import (
    Action,
    CallState,
    CallStateChanged,
    CaptureFinished,
    Enable,
    Event,
    GestureDetected,
    Mode,
    OrchestratorState,
    ScreenChanged,
    transition,
)
from .sensors.models import GestureEvent

if TYPE_CHECKING:
    from .camera.pipeline import CapturePipeline, CaptureSession
    from .coordinator import TaskScheduler
    from .sensors.accelerometer import AccelerometerCollector

logger = logging.getLogger(__name__)


class SkiPhoneService:
    """
    Shake dispatcher service

    Responsibilities:
    - Accept external signals (toggle, screen, telephony) from any thread and
      serialize them onto the control loop
    - Feed each signal and each detected shake through transition()
    - Execute the resulting actions: sampling on/off, capture start/cancel,
      and the host-facing action sink

    A failing action is logged and skipped; it never reaches the control loop.
    """

    def __init__(
            self,
            scheduler: 'TaskScheduler',
            sink: ActionSink,
            accelerometer: Optional['AccelerometerCollector'] = None,
            capture: Optional['CapturePipeline'] = None
    ):
        """
        Args:
            scheduler: Control loop
            sink: Host action sink
            accelerometer: Collector started while the screen is on
            capture: Capture pipeline started by horizontal shakes
        """
        self.scheduler = scheduler
        self.sink = sink
        self.accelerometer = accelerometer
        self.capture = capture

        self.state = OrchestratorState()
        self.action_log: List[Action] = []

        self._handlers: Dict[Action, Callable[[], None]] = {
            Action.START_SAMPLING: self._start_sampling,
            Action.STOP_SAMPLING: self._stop_sampling,
            Action.SHOW_HOME: self.sink.show_home,
            Action.SHOW_INDICATOR: self.sink.show_indicator,
            Action.CANCEL_INDICATOR: self.sink.cancel_indicator,
            Action.VIBRATE: lambda: self.sink.vibrate(VIBRATE_MS),
            Action.ANSWER_CALL: self.sink.simulate_answer,
            Action.HANG_UP: self.sink.simulate_hang_up,
            Action.VOICE_SEARCH: self._voice_search,
            Action.START_CAPTURE: self._start_capture,
            Action.CANCEL_CAPTURE: self._cancel_capture,
        }

        logger.info("SkiPhone service created")

    # -----------------------------------------------------------------------
    # External inputs (thread-safe: queued onto the control loop)
    # -----------------------------------------------------------------------

    def enable(self, enabled: bool):
        self.submit(Enable(enabled))

    def screen_changed(self, screen_on: bool):
        self.submit(ScreenChanged(screen_on))

    def call_state_changed(self, call_state: CallState):
        self.submit(CallStateChanged(call_state))

    def viewport_changed(self, width: int, height: int):
        """Report new viewport dimensions to the capture pipeline."""
        self.scheduler.post(lambda: self._resize(width, height))

    def submit(self, event: Event):
        self.scheduler.post(lambda: self.handle(event))

    def shutdown(self):
        """Disable everything before the service goes away."""
        if self.state.mode is Mode.ACTIVE:
            self.handle(Enable(False))

    # -----------------------------------------------------------------------
    # Control loop entry points
    # -----------------------------------------------------------------------

    def on_gesture(self, event: GestureEvent):
        """Called by the accelerometer collector on the control loop."""
        logger.info(f"{event.gesture.value.capitalize()} shake")
        self.handle(GestureDetected(event))

    def on_capture_finished(self, session: 'CaptureSession'):
        self.handle(CaptureFinished(session.session_id))

    def handle(self, event: Event) -> List[Action]:
        """
        Run one event through the orchestrator and perform its actions.

        Returns:
            The actions that were dispatched
        """
        previous = self.state
        self.state, actions = transition(previous, event)
        if self.state != previous:
            logger.debug(f"State {previous} -> {self.state}")

        for action in actions:
            self._perform(action)
        return actions

    def _perform(self, action: Action):
        self.action_log.append(action)
        logger.debug(f"Dispatching {action.value}")
        try:
            self._handlers[action]()
        except Exception as e:
            logger.error(f"✗ Action {action.value} failed: {e}", exc_info=True)

    # -----------------------------------------------------------------------
    # Action handlers
    # -----------------------------------------------------------------------

    def _start_sampling(self):
        if self.accelerometer is not None:
            self.accelerometer.start()

    def _stop_sampling(self):
        if self.accelerometer is not None:
            self.accelerometer.stop()

    def _voice_search(self):
        self.sink.launch_voice_search()
        self.sink.show_message(MESSAGE_SCREEN_CANCEL, MessageDuration.LONG)

    def _start_capture(self):
        if self.capture is None:
            logger.warning("No capture pipeline configured")
            self.handle(CaptureFinished(0))
            return
        self.capture.start()

    def _cancel_capture(self):
        if self.capture is not None:
            self.capture.cancel()

    def _resize(self, width: int, height: int):
        if self.capture is not None:
            self.capture.resize(width, height)

    def get_status(self) -> dict:
        """
        Return the orchestrator state for logging / UI display.
        """
        return {
            'mode': self.state.mode.value,
            'screen_on': self.state.screen_on,
            'call_state': self.state.call_state.value,
            'capturing': self.state.capturing,
            'actions_dispatched': len(self.action_log),
            'accelerometer': self.accelerometer.get_status() if self.accelerometer else None,
            'capture': self.capture.get_status() if self.capture else None,
        }

    def __repr__(self):
        return f"<SkiPhoneService(mode={self.state.mode.value}, screen_on={self.state.screen_on})>"
