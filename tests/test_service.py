"""End-to-end dispatch through SkiPhonePipeline on a manual clock."""

import threading

import pytest

from skiphone import Action, CallState, Mode, SkiPhonePipeline
from skiphone.actions import LoggingActionSink
from skiphone.camera import CaptureConfig, CaptureState, FrameSize, SimulatedCaptureDevice
from skiphone.coordinator import CentralClock, ManualClock
from skiphone.sensors import PushSource
from tests.conftest import MockPhotoStore, sample

STRONG = 20.0


@pytest.fixture
def accel():
    return PushSource('accelerometer')


@pytest.fixture
def angles():
    return PushSource('orientation')


@pytest.fixture
def store():
    return MockPhotoStore()


@pytest.fixture
def app(accel, angles, store):
    device = SimulatedCaptureDevice(focus_duration_ms=300)
    pipeline = SkiPhonePipeline(
        device=device,
        accelerometer_source=accel,
        orientation_source=angles,
        sink=LoggingActionSink(),
        photo_store=store,
        clock=ManualClock(),
    )
    device.scheduler = pipeline.scheduler
    pipeline.start()
    return pipeline


def switch_on(app, call_state=CallState.IDLE):
    app.service.call_state_changed(call_state)
    app.service.enable(True)
    app.service.screen_changed(True)
    app.scheduler.run_pending()


def shake(app, accel, gesture_axis):
    """Push one strong reading stamped with the loop clock and run it."""
    now = app.clock.now_ms()
    accel.push(sample(now, **{gesture_axis: STRONG}))
    app.scheduler.run_pending()


def test_enable_and_screen_on(app, accel):
    switch_on(app)

    assert app.service.state.listening
    assert app.accelerometer.is_running
    assert accel.subscriber_count == 1
    assert app.sink.history == [('show_indicator',), ('show_home',)]


def test_idle_horizontal_shake_starts_exactly_one_capture(app, accel, store):
    switch_on(app)

    shake(app, accel, 'z')
    app.scheduler.advance(10000)

    assert app.service.action_log.count(Action.START_CAPTURE) == 1
    assert app.capture.last_session.state is CaptureState.DONE
    assert len(store.saved) == 1
    assert not app.service.state.capturing


def test_offhook_horizontal_shake_never_captures(app, accel):
    switch_on(app, CallState.OFFHOOK)

    shake(app, accel, 'z')
    app.scheduler.advance(10000)

    assert Action.START_CAPTURE not in app.service.action_log
    assert app.capture.last_session is None
    assert ('vibrate', 500) not in app.sink.history


def test_vertical_shake_answers_ringing_call(app, accel):
    switch_on(app, CallState.RINGING)

    shake(app, accel, 'y')

    assert app.sink.history[-2:] == [('vibrate', 500), ('answer_call',)]


def test_vertical_shake_hangs_up(app, accel):
    switch_on(app, CallState.OFFHOOK)

    shake(app, accel, 'y')

    assert app.sink.history[-2:] == [('vibrate', 500), ('hang_up',)]


def test_vertical_shake_when_idle_launches_voice_search(app, accel):
    switch_on(app)

    shake(app, accel, 'y')

    assert app.sink.history[-3:] == [
        ('vibrate', 500),
        ('voice_search',),
        ('message', 'screen_cancel', 'long'),
    ]


def test_second_horizontal_shake_cancels_capture(app, accel, store):
    switch_on(app)
    shake(app, accel, 'z')
    app.scheduler.advance(2500)

    shake(app, accel, 'z')
    app.scheduler.advance(10000)

    assert app.capture.last_session.state is CaptureState.CANCELLED
    assert store.saved == []
    assert app.capture.device.open_count == 0
    assert not app.service.state.capturing


def test_shakes_within_debounce_are_ignored(app, accel):
    switch_on(app)
    shake(app, accel, 'z')
    app.scheduler.advance(1000)

    shake(app, accel, 'z')

    assert app.service.action_log.count(Action.START_CAPTURE) == 1
    assert Action.CANCEL_CAPTURE not in app.service.action_log
    assert app.capture.is_active


def test_screen_off_stops_sampling(app, accel):
    switch_on(app)

    app.service.screen_changed(False)
    app.scheduler.run_pending()
    shake(app, accel, 'y')

    assert not app.accelerometer.is_running
    assert accel.subscriber_count == 0
    assert Action.VOICE_SEARCH not in app.service.action_log


def test_capture_orientation_from_source(app, accel, angles):
    switch_on(app)
    shake(app, accel, 'z')

    angles.push(100)
    app.scheduler.advance(10000)

    assert app.capture.last_session.rotation == 180


def test_disable_during_capture_releases_device(app, accel):
    switch_on(app)
    shake(app, accel, 'z')
    app.scheduler.advance(6000)
    assert app.capture.device.is_open

    app.service.enable(False)
    app.scheduler.run_pending()

    assert app.service.state.mode is Mode.DISABLED
    assert app.capture.last_session.state is CaptureState.CANCELLED
    assert not app.capture.device.is_open
    assert app.sink.history[-1] == ('cancel_indicator',)


def test_stop_disables_service(app):
    switch_on(app)

    app.stop()

    assert app.service.state.mode is Mode.DISABLED
    assert not app.accelerometer.is_running


def test_failing_action_does_not_block_the_rest(app, accel, monkeypatch):
    def broken(duration_ms):
        raise RuntimeError("no vibrator")

    monkeypatch.setattr(app.sink, 'vibrate', broken)
    switch_on(app)

    shake(app, accel, 'z')

    assert app.capture.is_active
    assert app.service.state.capturing


def test_missing_capture_pipeline_resets_flag(app, accel):
    app.service.capture = None
    switch_on(app)

    shake(app, accel, 'z')

    assert not app.service.state.capturing


def test_status(app):
    switch_on(app)

    status = app.get_status()

    assert status['service']['mode'] == 'active'
    assert status['service']['screen_on'] is True
    assert status['service']['capture']['active'] is False
    assert status['scheduler']['is_running'] is False


def test_threaded_control_loop_shutdown():
    pipeline = SkiPhonePipeline(device=SimulatedCaptureDevice(), clock=CentralClock())

    with pipeline:
        pipeline.service.enable(True)

    assert pipeline.service.state.mode is Mode.DISABLED
    assert pipeline.sink.history == [('show_indicator',), ('cancel_indicator',)]
    assert not pipeline.scheduler.is_running


def test_screen_off_cancels_capture_in_countdown(app, accel, store):
    switch_on(app)
    shake(app, accel, 'z')
    app.scheduler.advance(2000)

    app.service.screen_changed(False)
    app.scheduler.run_pending()
    app.scheduler.advance(10000)

    assert app.capture.last_session.state is CaptureState.CANCELLED
    assert 'capture' not in app.capture.device.call_names()
    assert store.saved == []
    assert not app.service.state.capturing


def test_viewport_change_is_queued_onto_loop(app, accel):
    switch_on(app)
    shake(app, accel, 'z')
    app.scheduler.advance(7100)
    device = app.capture.device

    app.service.viewport_changed(1280, 720)
    assert device.preview_size == FrameSize(640, 480)

    app.scheduler.run_pending()
    assert device.preview_size == FrameSize(1280, 720)


class ThreadRecordingDevice(SimulatedCaptureDevice):
    """Notes which thread starts each preview."""

    def __init__(self):
        super().__init__()
        self.preview_threads = []
        self.previews = threading.Semaphore(0)

    def start_preview(self, size):
        super().start_preview(size)
        self.preview_threads.append(threading.current_thread().name)
        self.previews.release()


def test_viewport_changes_from_other_threads_run_on_control_loop():
    device = ThreadRecordingDevice()
    config = CaptureConfig(countdown_from=0, focus_delay_ms=60000)
    pipeline = SkiPhonePipeline(device=device, clock=CentralClock(), capture_config=config)
    device.scheduler = pipeline.scheduler

    with pipeline:
        pipeline.scheduler.post(pipeline.capture.start)
        assert device.previews.acquire(timeout=2)

        pipeline.service.viewport_changed(1280, 720)
        assert device.previews.acquire(timeout=2)

        pipeline.capture.resize(320, 240)
        assert device.previews.acquire(timeout=2)

        pipeline.scheduler.post(pipeline.capture.cancel)

    assert device.preview_threads == ['SkiPhone-Control-Loop'] * 3
