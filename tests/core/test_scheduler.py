import pytest

from smoothing.core.errors import SchedulingUnavailable
from smoothing.core.scheduler import FrameScheduler


class TestFrameScheduler:
    def test_fires_when_due(self, clock, scheduler):
        fired = []
        scheduler.call_later(2.0, lambda: fired.append('a'))

        clock.now = 1.0
        assert scheduler.run_pending() == 0
        clock.now = 2.0
        assert scheduler.run_pending() == 1
        assert fired == ['a']
        # One-shot
        clock.now = 10.0
        assert scheduler.run_pending() == 0

    def test_deadline_order(self, clock, scheduler):
        fired = []
        scheduler.call_later(3.0, lambda: fired.append('late'))
        scheduler.call_later(1.0, lambda: fired.append('early'))
        scheduler.call_later(1.0, lambda: fired.append('early-second'))

        clock.now = 5.0
        scheduler.run_pending()
        assert fired == ['early', 'early-second', 'late']

    def test_cancelled_task_never_fires(self, clock, scheduler):
        fired = []
        task = scheduler.call_later(1.0, lambda: fired.append('x'))
        task.cancel()
        assert not task.active
        assert scheduler.pending() == 0

        clock.now = 2.0
        assert scheduler.run_pending() == 0
        assert fired == []

    def test_task_state(self, clock, scheduler):
        task = scheduler.call_later(1.0, lambda: None)
        assert task.active
        assert task.deadline == 1.0
        clock.now = 1.0
        scheduler.run_pending()
        assert task.done
        # Cancelling a finished task is harmless
        task.cancel()

    def test_negative_delay_is_immediate(self, scheduler):
        fired = []
        scheduler.call_later(-5.0, lambda: fired.append(1))
        assert scheduler.run_pending() == 1

    def test_shutdown_refuses_new_work(self, clock):
        sched = FrameScheduler(clock=clock)
        fired = []
        sched.call_later(1.0, lambda: fired.append(1))
        sched.shutdown()

        clock.now = 2.0
        assert sched.run_pending() == 0
        assert fired == []
        with pytest.raises(SchedulingUnavailable):
            sched.call_later(1.0, lambda: None)
