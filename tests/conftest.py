"""
Common pytest fixtures for smoothing tests.

This module provides a controllable clock and a scheduler driven by it, so
revert timers can be tested without waiting.
"""

import logging

import pytest

from smoothing.core.scheduler import FrameScheduler

# Keep debug noise out of the captured logs
logging.getLogger("smoothing").setLevel(logging.INFO)


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds
        return self.now

    def advance_ms(self, milliseconds):
        return self.advance(milliseconds / 1000.0)


@pytest.fixture
def clock():
    """Fake clock starting at t = 0."""
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    """FrameScheduler reading the fake clock."""
    sched = FrameScheduler(clock=clock)
    yield sched
    sched.shutdown()


