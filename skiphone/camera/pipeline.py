"""
Capture Pipeline
Timed, orientation-aware photo capture: countdown, lock, focus, expose
"""

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Tuple, TYPE_CHECKING

from ..actions import MESSAGE_SHAKE_CANCEL, MESSAGE_SHAKE_EXIT, ActionSink, MessageDuration
from ..errors import CaptureDeviceError, NotFocusingError
from .config import CaptureConfig
from .device import CaptureDevice, FocusResult
from .sizes import NegotiatedSizes, negotiate

if TYPE_CHECKING:
    from skiphone.coordinator import TaskScheduler
    from skiphone.sensors.orientation import OrientationCollector

logger = logging.getLogger(__name__)


class PhotoSink(Protocol):
    def save(self, data: bytes) -> Any: ...


class CaptureState(Enum):
    COUNTDOWN = 'countdown'
    LOCKING = 'locking'
    FOCUSING = 'focusing'
    EXPOSING = 'exposing'
    DONE = 'done'
    CANCELLED = 'cancelled'


FINAL_STATES = (CaptureState.DONE, CaptureState.CANCELLED)


@dataclass
class CaptureSession:
    """One countdown -> focus -> exposure run; produces at most one image."""

    session_id: int
    viewport: Tuple[int, int]
    count: int
    state: CaptureState = CaptureState.COUNTDOWN
    focus_attempts: int = 0
    focus_epoch: int = 0
    sizes: Optional[NegotiatedSizes] = None
    preview_viewport: Optional[Tuple[int, int]] = None
    rotation: Optional[int] = None
    device_acquired: bool = False
    cancel_requested: bool = False
    image_size: int = 0
    photo: Any = field(default=None, repr=False)

    @property
    def tag(self) -> Tuple[str, int]:
        return ('capture', self.session_id)

    @property
    def finished(self) -> bool:
        return self.state in FINAL_STATES


class CapturePipeline:
    """
    Drives the capture device through one session at a time

    Flow:
    - COUNTDOWN: publish 5..0 once per tick while the orientation collector runs
    - LOCKING: acquire the device, negotiate sizes, apply the snapped rotation,
      start the preview, schedule focus after the settle delay
    - FOCUSING: request autofocus; retry on failure, move on after success or
      a device error (focus is best effort)
    - EXPOSING: take the picture with the negotiated capture size
    - DONE / CANCELLED: cancel the session's pending tasks, release the device

    Every step runs on the control loop. Scheduled work is tagged with the
    session so ending a session removes all of it at once, and every callback
    re-checks that its session is still the live one.
    """

    def __init__(
            self,
            device: CaptureDevice,
            scheduler: 'TaskScheduler',
            sink: ActionSink,
            photo_store: Optional[PhotoSink] = None,
            orientation: Optional['OrientationCollector'] = None,
            config: Optional[CaptureConfig] = None,
            on_finished: Optional[Callable[[CaptureSession], None]] = None
    ):
        """
        Initialize capture pipeline

        Args:
            device: Capture device (exclusively owned while a session holds it)
            scheduler: Control loop
            sink: Receives countdown and user messages
            photo_store: Persists captured bytes (None discards them)
            orientation: Orientation collector enabled during the countdown
            config: Capture configuration
            on_finished: Called once per session when it is done or cancelled
        """
        self.device = device
        self.scheduler = scheduler
        self.sink = sink
        self.photo_store = photo_store
        self.orientation = orientation
        self.config = config if config else CaptureConfig.for_session()
        self.on_finished = on_finished

        self.viewport: Tuple[int, int] = (self.config.viewport_width, self.config.viewport_height)
        self._session: Optional[CaptureSession] = None
        self._ids = itertools.count(1)

        self.last_session: Optional[CaptureSession] = None
        self.completed_count = 0
        self.cancelled_count = 0

        logger.info("Capture pipeline initialized")

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> Optional[CaptureSession]:
        return self._session

    def start(self, viewport: Optional[Tuple[int, int]] = None) -> CaptureSession:
        """
        Begin a new capture session with a countdown.

        Args:
            viewport: Viewport (width, height); defaults to the last reported one

        Returns:
            The live session (the existing one if a capture is already running)
        """
        if self._session is not None:
            logger.warning(f"Capture session {self._session.session_id} already running")
            return self._session

        if viewport is not None:
            self.viewport = tuple(viewport)

        session = CaptureSession(
            session_id=next(self._ids),
            viewport=self.viewport,
            count=self.config.countdown_from,
        )
        self._session = session
        logger.info(f"Capture session {session.session_id} started (viewport {session.viewport[0]}x{session.viewport[1]})")

        self._notify(self.sink.show_message, MESSAGE_SHAKE_CANCEL, MessageDuration.LONG)
        if self.orientation is not None:
            self.orientation.tracker.reset()
            self.orientation.start()

        self._guard(session, self._tick)
        return session

    def cancel(self) -> bool:
        """
        Cancel the live session, if any.

        Returns:
            True if a session was cancelled
        """
        session = self._session
        if session is None:
            return False
        session.cancel_requested = True
        logger.info(f"Capture session {session.session_id} cancel requested during {session.state.value}")
        self._finish(session, CaptureState.CANCELLED)
        return True

    def resize(self, width: int, height: int):
        """
        Report new viewport dimensions.

        Call on the control loop; other threads go through
        SkiPhoneService.viewport_changed(). A session holding the device
        renegotiates in a queued step and restarts its preview when either
        size changed.
        """
        if width <= 0 or height <= 0:
            logger.warning(f"Ignoring invalid viewport {width}x{height}")
            return
        self.viewport = (width, height)

        session = self._session
        if session is None or not session.device_acquired or session.finished:
            return
        self._post(session, self._on_resize)

    # -----------------------------------------------------------------------
    # State machine steps
    # -----------------------------------------------------------------------

    def _tick(self, session: CaptureSession):
        if not self._is_live(session, CaptureState.COUNTDOWN):
            return

        self._notify(self.sink.show_countdown, session.count)
        session.count -= 1
        if session.count >= 0:
            self._post(session, self._tick, self.config.tick_interval_ms)
        else:
            self._lock(session)

    def _lock(self, session: CaptureSession):
        session.state = CaptureState.LOCKING

        try:
            self.device.open()
        except CaptureDeviceError as e:
            logger.warning(f"✗ Capture device unavailable: {e}")
            self._finish(session, CaptureState.CANCELLED)
            return
        session.device_acquired = True

        session.sizes = self._negotiate()
        if session.sizes is None:
            logger.error("✗ No usable capture size, cancelling session")
            self._finish(session, CaptureState.CANCELLED)
            return

        if self.orientation is not None:
            session.rotation = self.orientation.tracker.snapshot()
            self.orientation.stop()
        if session.rotation is not None:
            try:
                self.device.set_rotation(session.rotation)
            except CaptureDeviceError as e:
                logger.warning(f"Could not set rotation {session.rotation}, capturing unrotated: {e}")
                session.rotation = None

        if self._start_preview(session):
            session.state = CaptureState.FOCUSING
            self._schedule_focus(session)

    def _schedule_focus(self, session: CaptureSession):
        session.focus_epoch += 1
        self._post(session, self._focus, self.config.focus_delay_ms)

    def _focus(self, session: CaptureSession):
        if not self._is_live(session, CaptureState.FOCUSING):
            return

        session.focus_attempts += 1
        epoch = session.focus_epoch
        logger.debug(f"Autofocus attempt {session.focus_attempts}")
        try:
            self.device.request_auto_focus(
                lambda result: self._post(session, self._on_focus_result, 0, epoch, result)
            )
        except CaptureDeviceError as e:
            logger.warning(f"Autofocus request failed, exposing anyway: {e}")
            self._expose(session)

    def _on_focus_result(self, session: CaptureSession, epoch: int, result: FocusResult):
        if not self._is_live(session, CaptureState.FOCUSING) or epoch != session.focus_epoch:
            logger.debug(f"Ignoring stale focus result {result.value}")
            return

        if result is FocusResult.FAILURE:
            limit = self.config.max_focus_attempts
            if limit is not None and session.focus_attempts >= limit:
                logger.warning(f"Focus failed {session.focus_attempts} times, exposing anyway")
                self._expose(session)
            else:
                logger.debug("Focus failed, retrying")
                self._post(session, self._focus)
            return

        if result is FocusResult.ERROR:
            logger.warning("Autofocus error, exposing anyway")
        self._expose(session)

    def _expose(self, session: CaptureSession):
        session.state = CaptureState.EXPOSING

        if session.preview_viewport != self.viewport and not self._refresh_preview(session, False):
            return

        try:
            data = self.device.capture(session.rotation, session.sizes.capture, self.config.jpeg_quality)
        except CaptureDeviceError as e:
            logger.error(f"✗ Capture failed: {e}")
            self._finish(session, CaptureState.CANCELLED)
            return

        session.image_size = len(data)
        logger.info(f"✓ Captured {len(data)} bytes at {session.sizes.capture} (rotation={session.rotation})")
        self._persist(session, data)
        self._finish(session, CaptureState.DONE)

    def _persist(self, session: CaptureSession, data: bytes):
        if self.photo_store is None:
            return
        try:
            session.photo = self.photo_store.save(data)
        except Exception as e:
            logger.error(f"✗ Could not save photo: {e}", exc_info=True)
            return
        self._notify(self.sink.show_message, MESSAGE_SHAKE_EXIT, MessageDuration.LONG)

    def _finish(self, session: CaptureSession, state: CaptureState):
        if session.finished:
            return
        session.state = state
        self.scheduler.cancel(session.tag)

        if self.orientation is not None:
            self.orientation.stop()

        if session.device_acquired:
            self._cancel_auto_focus()
            try:
                self.device.stop_preview()
            except CaptureDeviceError as e:
                logger.warning(f"Error stopping preview: {e}")
            try:
                self.device.release()
            except CaptureDeviceError as e:
                logger.warning(f"Error releasing capture device: {e}")
            session.device_acquired = False

        if self._session is session:
            self._session = None
        self.last_session = session
        if state is CaptureState.DONE:
            self.completed_count += 1
        else:
            self.cancelled_count += 1
        logger.info(f"Capture session {session.session_id} {state.value}")

        if self.on_finished is not None:
            try:
                self.on_finished(session)
            except Exception as e:
                logger.error(f"Error in capture completion listener: {e}", exc_info=True)

    # -----------------------------------------------------------------------
    # Device helpers
    # -----------------------------------------------------------------------

    def _negotiate(self) -> Optional[NegotiatedSizes]:
        try:
            capture_sizes, preview_sizes = self.device.get_supported_sizes()
            return negotiate(capture_sizes, preview_sizes, *self.viewport,
                             tolerance=self.config.aspect_tolerance)
        except (CaptureDeviceError, ValueError) as e:
            logger.warning(f"Size negotiation failed: {e}")
            return None

    def _start_preview(self, session: CaptureSession) -> bool:
        sizes = session.sizes
        self._cancel_auto_focus()
        try:
            self.device.configure(sizes.preview, sizes.capture, self.config.jpeg_quality)
        except CaptureDeviceError as e:
            logger.warning(f"Device rejected parameters: {e}")

        try:
            self.device.start_preview(sizes.preview)
        except CaptureDeviceError as e:
            logger.error(f"✗ Could not start preview: {e}")
            self._finish(session, CaptureState.CANCELLED)
            return False

        session.preview_viewport = self.viewport
        logger.debug(f"Preview: {sizes.preview} Picture: {sizes.capture}")
        return True

    def _on_resize(self, session: CaptureSession):
        if self._session is not session or session.cancel_requested or not session.device_acquired:
            return
        if session.preview_viewport == self.viewport:
            return
        self._refresh_preview(session, True)

    def _refresh_preview(self, session: CaptureSession, refocus: bool) -> bool:
        sizes = self._negotiate()
        if sizes is None:
            logger.error("✗ No usable size for new viewport, cancelling session")
            self._finish(session, CaptureState.CANCELLED)
            return False

        session.preview_viewport = self.viewport
        if sizes == session.sizes:
            return True

        logger.info(f"Viewport changed, restarting preview at {sizes.preview} / {sizes.capture}")
        session.sizes = sizes
        try:
            self.device.stop_preview()
        except CaptureDeviceError as e:
            logger.warning(f"Error stopping preview: {e}")
        if not self._start_preview(session):
            return False

        if refocus and session.state is CaptureState.FOCUSING:
            self.scheduler.cancel(session.tag)
            self._schedule_focus(session)
        return True

    def _cancel_auto_focus(self):
        try:
            self.device.cancel_auto_focus()
        except NotFocusingError:
            logger.debug("Autofocus was not running")
        except CaptureDeviceError as e:
            logger.warning(f"Error cancelling autofocus: {e}")

    # -----------------------------------------------------------------------
    # Plumbing
    # -----------------------------------------------------------------------

    def _is_live(self, session: CaptureSession, state: CaptureState) -> bool:
        return (self._session is session
                and not session.cancel_requested
                and session.state is state)

    def _post(self, session: CaptureSession, step: Callable, delay_ms: float = 0, *args):
        self.scheduler.post(lambda: self._guard(session, step, *args), delay_ms=delay_ms, tag=session.tag)

    def _guard(self, session: CaptureSession, step: Callable, *args):
        """Run one step; an unexpected failure cancels only this session."""
        try:
            return step(session, *args)
        except Exception as e:
            logger.error(f"✗ Capture session {session.session_id} failed in {session.state.value}: {e}",
                         exc_info=True)
            self._finish(session, CaptureState.CANCELLED)
            return False

    def _notify(self, fn: Callable, *args):
        try:
            fn(*args)
        except Exception as e:
            logger.error(f"Action sink error: {e}", exc_info=True)

    def get_status(self) -> dict:
        """
        Return the pipeline state for logging.

        Returns:
            Dict with the live session (if any) and session counters.
        """
        session = self._session
        return {
            'active': session is not None,
            'session_id': session.session_id if session else None,
            'state': session.state.value if session else None,
            'count': session.count if session else None,
            'focus_attempts': session.focus_attempts if session else None,
            'viewport': self.viewport,
            'completed_sessions': self.completed_count,
            'cancelled_sessions': self.cancelled_count,
        }

    def __repr__(self):
        state = self._session.state.value if self._session else 'idle'
        return f"<CapturePipeline(state={state})>"
