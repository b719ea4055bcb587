"""
Shared fixtures for the SkiPhone tests

Everything runs on a ManualClock so timing is deterministic: tests move time
with scheduler.advance() instead of sleeping.
"""

import pytest

from skiphone.actions import LoggingActionSink
from skiphone.camera import CaptureConfig, CapturePipeline, SimulatedCaptureDevice
from skiphone.coordinator import ManualClock, TaskScheduler
from skiphone.errors import PhotoStoreError
from skiphone.sensors import OrientationCollector, PushSource, SensorSample


def sample(t_ms, x=0.0, y=0.0, z=0.0):
    return SensorSample(timestamp_ms=t_ms, x=x, y=y, z=z)


class MockPhotoStore:
    """Keeps saved images in memory"""

    def __init__(self):
        self.saved = []

    def save(self, data):
        self.saved.append(data)
        return f"memory://{len(self.saved)}"


class FailingPhotoStore:
    def save(self, data):
        raise PhotoStoreError("disk full")


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return TaskScheduler(clock)


@pytest.fixture
def sink():
    return LoggingActionSink()


@pytest.fixture
def device(scheduler):
    return SimulatedCaptureDevice(scheduler=scheduler, focus_duration_ms=300)


@pytest.fixture
def orientation_source():
    return PushSource('orientation')


@pytest.fixture
def orientation(orientation_source, scheduler):
    return OrientationCollector(orientation_source, scheduler)


@pytest.fixture
def photo_store():
    return MockPhotoStore()


@pytest.fixture
def finished():
    return []


@pytest.fixture
def make_pipeline(device, scheduler, sink, photo_store, orientation, finished):
    def build(config=None, store=photo_store):
        return CapturePipeline(
            device=device,
            scheduler=scheduler,
            sink=sink,
            photo_store=store,
            orientation=orientation,
            config=config if config else CaptureConfig(),
            on_finished=finished.append,
        )
    return build
