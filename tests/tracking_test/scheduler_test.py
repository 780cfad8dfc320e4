import threading
import time

from delivery.tracking.scheduler import PollScheduler


def test_ticks_until_cancelled():
    ticks = []
    third = threading.Event()

    def tick():
        ticks.append(time.monotonic())
        if len(ticks) >= 3:
            third.set()

    scheduler = PollScheduler(0.01, name="test")
    scheduler.start(tick)
    assert third.wait(2)

    scheduler.cancel()
    scheduler.join(2)
    count = len(ticks)
    time.sleep(0.05)

    assert not scheduler.is_running
    assert len(ticks) == count


def test_cancel_before_first_tick():
    ticks = []
    scheduler = PollScheduler(0.05)
    scheduler.start(lambda: ticks.append(1))
    scheduler.cancel()
    scheduler.cancel()
    scheduler.join(2)
    assert ticks == []


def test_failing_tick_does_not_kill_the_loop(caplog):
    calls = []
    second = threading.Event()

    def tick():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")
        second.set()

    scheduler = PollScheduler(0.01)
    scheduler.start(tick)
    try:
        assert second.wait(2)
    finally:
        scheduler.cancel()
        scheduler.join(2)
    assert "tick failed" in caplog.text


def test_cancel_from_inside_tick():
    done = threading.Event()
    scheduler = PollScheduler(0.01)

    def tick():
        scheduler.cancel()
        scheduler.join(1)
        done.set()

    scheduler.start(tick)
    assert done.wait(2)
    scheduler.join(2)
    assert not scheduler.is_running


def test_start_is_idempotent():
    scheduler = PollScheduler(10.0)
    scheduler.start(lambda: None)
    thread = scheduler._thread
    scheduler.start(lambda: None)
    assert scheduler._thread is thread
    scheduler.cancel()
    scheduler.join(2)
