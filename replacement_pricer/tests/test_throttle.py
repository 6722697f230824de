import threading

import pytest

from replacement_pricer.throttle import Throttle


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.slept = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.slept.append(seconds)
        self.now += seconds


def test_first_call_does_not_wait():
    clock = FakeClock()
    t = Throttle(1.0, clock=clock, sleep=clock.sleep)
    assert t.wait() == 0.0
    assert clock.slept == []


def test_enforces_minimum_gap():
    clock = FakeClock()
    t = Throttle(1.0, clock=clock, sleep=clock.sleep)
    t.wait()
    clock.now = 0.3
    assert t.wait() == pytest.approx(0.7)
    assert clock.slept == [pytest.approx(0.7)]

    clock.now += 5.0
    assert t.wait() == 0.0


def test_concurrent_callers_are_spaced():
    clock = FakeClock()
    t = Throttle(0.5, clock=clock, sleep=clock.sleep)
    threads = [threading.Thread(target=t.wait) for _ in range(4)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()
    assert clock.slept == [pytest.approx(0.5)] * 3
