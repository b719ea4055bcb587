"""Photo persistence, trace replay and the replay runner."""

import numpy as np
import pytest

import run
from skiphone.errors import PhotoStoreError
from skiphone.sensors import TraceReplaySource
from skiphone.storage import PHOTO_DIR_NAME, PhotoStore, photo_filename


def test_photo_filename():
    assert photo_filename(1700000000123) == 'skiphone-1700000000123.jpg'


def test_photo_store_writes_into_app_folder(tmp_path):
    store = PhotoStore(tmp_path, time_ms=lambda: 42)

    path = store.save(b'\xff\xd8data\xff\xd9')

    assert path == tmp_path / PHOTO_DIR_NAME / 'skiphone-42.jpg'
    assert path.read_bytes() == b'\xff\xd8data\xff\xd9'
    assert store.saved_count == 1


def test_photo_store_error_when_unwritable(tmp_path):
    blocker = tmp_path / 'pictures'
    blocker.write_text('not a directory')
    store = PhotoStore(blocker)

    with pytest.raises(PhotoStoreError):
        store.save(b'data')
    assert store.saved_count == 0


def test_replay_delivers_rows_at_recorded_offsets(scheduler):
    source = TraceReplaySource(np.array([
        [100, 1.0, 2.0, 3.0],
        [150, 0.0, 0.0, 0.0],
        [400, 0.0, 9.0, 0.0],
    ]))
    received = []
    source.accelerometer.subscribe(received.append)

    source.schedule(scheduler)
    scheduler.advance(1000)

    assert [reading.timestamp_ms for reading in received] == [0, 50, 300]
    assert (received[0].x, received[0].y, received[0].z) == (1.0, 2.0, 3.0)
    assert source.duration_ms == 300
    assert not source.has_orientation


def test_replay_from_csv_with_angles(tmp_path, scheduler):
    trace = tmp_path / 'trace.csv'
    trace.write_text(
        "t_ms,x,y,z,angle\n"
        "0,1,2,3,90\n"
        "20,0,0,20,\n"
        "40,0,0,0,-1\n"
    )
    source = TraceReplaySource.from_csv(trace)
    angles = []
    source.orientation.subscribe(angles.append)

    source.schedule(scheduler)
    scheduler.advance(100)

    assert len(source.trace) == 3
    assert source.has_orientation
    assert angles == [90, None, None]


def test_replay_rejects_wrong_shape():
    with pytest.raises(ValueError):
        TraceReplaySource(np.zeros((3, 2)))


def test_empty_replay(scheduler):
    source = TraceReplaySource(np.array([]))

    source.schedule(scheduler)

    assert source.duration_ms == 0.0
    assert scheduler.pending() == 0


def write_shake_trace(path):
    path.write_text(
        "# t_ms,x,y,z\n"
        "0,0,0,20\n"
        "100,0,0,0\n"
    )


def test_runner_replays_trace_and_saves_photo(tmp_path, capsys):
    trace = tmp_path / 'shake.csv'
    write_shake_trace(trace)
    pictures = tmp_path / 'pictures'

    assert run.main([str(trace), '--photos-dir', str(pictures)]) == 0

    photos = list((pictures / PHOTO_DIR_NAME).glob('skiphone-*.jpg'))
    assert len(photos) == 1
    out = capsys.readouterr().out
    assert 'Photos completed    : 1' in out
    assert 'start_capture' in out


def test_runner_offhook_takes_no_photo(tmp_path, capsys):
    trace = tmp_path / 'shake.csv'
    write_shake_trace(trace)

    assert run.main([str(trace), '--call-state', 'offhook']) == 0

    assert 'Photos completed    : 0' in capsys.readouterr().out


def test_runner_missing_trace(tmp_path):
    assert run.main([str(tmp_path / 'missing.csv')]) == 1
