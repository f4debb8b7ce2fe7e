import threading

import pytest

from services.scheduler import RefreshScheduler


def test_tick_fires_on_zero_and_resets():
    calls = []
    sched = RefreshScheduler(3, lambda: calls.append(1), run_async=False)

    assert sched.tick() is False
    assert sched.tick() is False
    assert sched.countdown == 1
    assert sched.tick() is True
    assert calls == [1]
    assert sched.countdown == 3


def test_failing_refresh_does_not_stop_ticks():
    calls = []

    def boom():
        calls.append(1)
        raise RuntimeError("network down")

    sched = RefreshScheduler(1, boom, run_async=False)
    sched.tick()
    sched.tick()
    assert len(calls) == 2


def test_reset():
    sched = RefreshScheduler(5, lambda: None, run_async=False)
    sched.tick()
    sched.reset()
    assert sched.countdown == 5


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        RefreshScheduler(0, lambda: None)


def test_start_and_stop_background_thread():
    fired = threading.Event()
    sched = RefreshScheduler(1, fired.set, tick_seconds=0.01)
    sched.start()
    try:
        assert sched.running
        assert fired.wait(2)
    finally:
        sched.stop()
    assert not sched.running
