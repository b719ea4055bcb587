"""
Orchestrator
Pure state machine deciding what each external signal or shake should do

transition(state, event) -> (new_state, actions) never touches the outside
world; SkiPhoneService applies the returned actions.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Tuple, Union

from .sensors.models import Gesture, GestureEvent


class Mode(Enum):
    IDLE = 'idle'          # service created, never enabled
    DISABLED = 'disabled'
    ACTIVE = 'active'


class CallState(Enum):
    IDLE = 'idle'
    RINGING = 'ringing'
    OFFHOOK = 'offhook'


class Action(Enum):
    START_SAMPLING = 'start_sampling'
    STOP_SAMPLING = 'stop_sampling'
    SHOW_HOME = 'show_home'
    SHOW_INDICATOR = 'show_indicator'
    CANCEL_INDICATOR = 'cancel_indicator'
    VIBRATE = 'vibrate'
    ANSWER_CALL = 'answer_call'
    HANG_UP = 'hang_up'
    VOICE_SEARCH = 'voice_search'
    START_CAPTURE = 'start_capture'
    CANCEL_CAPTURE = 'cancel_capture'


@dataclass(frozen=True)
class OrchestratorState:
    mode: Mode = Mode.IDLE
    screen_on: bool = False
    call_state: CallState = CallState.IDLE
    capturing: bool = False

    @property
    def listening(self) -> bool:
        """Active with the screen on: the only state in which shakes count."""
        return self.mode is Mode.ACTIVE and self.screen_on


# --------------------------------------------------------------------------
# Input events
# --------------------------------------------------------------------------

@dataclass(frozen=True)
class Enable:
    enabled: bool


@dataclass(frozen=True)
class ScreenChanged:
    screen_on: bool


@dataclass(frozen=True)
class CallStateChanged:
    call_state: CallState


@dataclass(frozen=True)
class GestureDetected:
    event: GestureEvent


@dataclass(frozen=True)
class CaptureFinished:
    session_id: int


Event = Union[Enable, ScreenChanged, CallStateChanged, GestureDetected, CaptureFinished]


def transition(state: OrchestratorState, event: Event) -> Tuple[OrchestratorState, List[Action]]:
    """
    Apply one input event.

    Args:
        state: Current orchestrator state
        event: One external signal, shake or capture completion

    Returns:
        (new state, actions to perform in order)
    """
    if isinstance(event, Enable):
        return _on_enable(state, event.enabled)
    if isinstance(event, ScreenChanged):
        return _on_screen(state, event.screen_on)
    if isinstance(event, CallStateChanged):
        return replace(state, call_state=event.call_state), []
    if isinstance(event, GestureDetected):
        return _on_gesture(state, event.event.gesture)
    if isinstance(event, CaptureFinished):
        return replace(state, capturing=False), []
    raise TypeError(f"Unknown orchestrator event: {event!r}")


def _on_enable(state: OrchestratorState, enabled: bool):
    if enabled:
        if state.mode is Mode.ACTIVE:
            return state, []
        return replace(state, mode=Mode.ACTIVE, screen_on=False), [Action.SHOW_INDICATOR]

    actions = [Action.STOP_SAMPLING]
    if state.capturing:
        actions.append(Action.CANCEL_CAPTURE)
    actions.append(Action.CANCEL_INDICATOR)
    return replace(state, mode=Mode.DISABLED, screen_on=False, capturing=False), actions


def _on_screen(state: OrchestratorState, screen_on: bool):
    if state.mode is not Mode.ACTIVE:
        return state, []

    if screen_on:
        actions = [Action.START_SAMPLING]
        # The home screen would cover the in-call UI.
        if state.call_state is CallState.IDLE:
            actions.append(Action.SHOW_HOME)
        return replace(state, screen_on=True), actions

    # Shake-to-cancel is gone once sampling stops, so a pending capture goes too.
    actions = [Action.STOP_SAMPLING]
    if state.capturing:
        actions.append(Action.CANCEL_CAPTURE)
    return replace(state, screen_on=False, capturing=False), actions


def _on_gesture(state: OrchestratorState, gesture: Gesture):
    if not state.listening:
        return state, []

    if gesture is Gesture.VERTICAL:
        if state.call_state is CallState.RINGING:
            return state, [Action.VIBRATE, Action.ANSWER_CALL]
        if state.call_state is CallState.OFFHOOK:
            return state, [Action.VIBRATE, Action.HANG_UP]
        return state, [Action.VIBRATE, Action.VOICE_SEARCH]

    # Horizontal: never interrupt a call
    if state.call_state is not CallState.IDLE:
        return state, []
    if state.capturing:
        return replace(state, capturing=False), [Action.VIBRATE, Action.CANCEL_CAPTURE]
    return replace(state, capturing=True), [Action.VIBRATE, Action.START_CAPTURE]
