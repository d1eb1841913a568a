"""Tests for the generation rate limiter."""

from __future__ import annotations

import pytest

from codedoc.errors import ConfigurationError
from codedoc.llm.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_first_call_does_not_wait() -> None:
    clock = FakeClock()
    limiter = RateLimiter(2.0, clock=clock, sleep=clock.sleep)

    assert limiter.wait() == 0.0
    assert clock.sleeps == []


def test_back_to_back_calls_are_spaced_by_min_interval() -> None:
    clock = FakeClock()
    limiter = RateLimiter(2.0, clock=clock, sleep=clock.sleep)

    limiter.wait()
    clock.now += 0.1
    slept = limiter.wait()

    assert limiter.min_interval == pytest.approx(0.5)
    assert slept == pytest.approx(0.4)
    assert clock.sleeps == [pytest.approx(0.4)]


def test_no_wait_once_interval_has_elapsed() -> None:
    clock = FakeClock()
    limiter = RateLimiter(4.0, clock=clock, sleep=clock.sleep)

    limiter.wait()
    clock.now += 1.0

    assert limiter.wait() == 0.0


@pytest.mark.parametrize("qps", [0, -1.5])
def test_non_positive_rate_is_rejected(qps: float) -> None:
    with pytest.raises(ConfigurationError):
        RateLimiter(qps)
