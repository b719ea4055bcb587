"""Control loop: ordering, tagged cancellation, failure isolation."""

import threading

import pytest

from skiphone.coordinator import CentralClock, ManualClock, TaskScheduler


def test_tasks_run_in_due_order(scheduler):
    ran = []
    scheduler.post(lambda: ran.append('late'), delay_ms=300)
    scheduler.post(lambda: ran.append('early'), delay_ms=100)
    scheduler.post(lambda: ran.append('now'))

    scheduler.advance(1000)

    assert ran == ['now', 'early', 'late']


def test_same_due_time_keeps_posting_order(scheduler):
    ran = []
    for i in range(5):
        scheduler.post(lambda i=i: ran.append(i), delay_ms=50)

    scheduler.advance(50)

    assert ran == [0, 1, 2, 3, 4]


def test_future_tasks_wait(scheduler):
    ran = []
    scheduler.post(lambda: ran.append(1), delay_ms=100)

    assert scheduler.run_pending() == 0
    scheduler.advance(99)
    assert ran == []
    scheduler.advance(1)
    assert ran == [1]


def test_clock_reads_due_time_inside_task(scheduler, clock):
    seen = []
    scheduler.post(lambda: seen.append(clock.now_ms()), delay_ms=250)

    scheduler.advance(1000)

    assert seen == [250]
    assert clock.now_ms() == 1000


def test_zero_delay_tasks_posted_while_running_run_in_same_pass(scheduler):
    ran = []

    def first():
        ran.append('first')
        scheduler.post(lambda: ran.append('second'))

    scheduler.post(first)

    assert scheduler.run_pending() == 2
    assert ran == ['first', 'second']


def test_cancel_removes_only_tagged_tasks(scheduler):
    ran = []
    scheduler.post(lambda: ran.append('a1'), delay_ms=10, tag='a')
    scheduler.post(lambda: ran.append('a2'), delay_ms=20, tag='a')
    scheduler.post(lambda: ran.append('b'), delay_ms=15, tag='b')

    assert scheduler.cancel('a') == 2
    assert scheduler.pending('a') == 0
    scheduler.advance(100)

    assert ran == ['b']


def test_failing_task_does_not_stop_loop(scheduler):
    ran = []

    def boom():
        raise RuntimeError("boom")

    scheduler.post(boom)
    scheduler.post(lambda: ran.append('after'))

    scheduler.run_pending()

    assert ran == ['after']
    assert scheduler.failed_count == 1


def test_advance_requires_manual_clock():
    scheduler = TaskScheduler(CentralClock())
    with pytest.raises(TypeError):
        scheduler.advance(10)


def test_manual_clock_cannot_go_backwards():
    clock = ManualClock(100)
    with pytest.raises(ValueError):
        clock.set(50)


def test_threaded_loop_runs_posted_tasks():
    scheduler = TaskScheduler(CentralClock())
    done = threading.Event()
    scheduler.start()
    try:
        scheduler.post(done.set, delay_ms=20)
        assert done.wait(timeout=2)
    finally:
        scheduler.stop()

    assert not scheduler.is_running


def test_status(scheduler):
    scheduler.post(lambda: None, delay_ms=10)
    status = scheduler.get_status()
    assert status['pending_tasks'] == 1
    assert status['is_running'] is False
