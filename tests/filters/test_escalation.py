from smoothing.core.config import ChannelGroup, FilterType, SmoothingConfig
from smoothing.core.errors import SchedulingUnavailable
from smoothing.filters.escalation import FilterEscalationController

RATE = ChannelGroup.ROTATION_RATE


class BrokenScheduler:
    """Scheduler whose host loop has gone away."""

    def __init__(self, error):
        self.error = error

    def call_later(self, delay, callback):
        raise self.error


class TestFilterEscalationController:
    def test_starts_at_defaults(self, scheduler):
        controller = FilterEscalationController(SmoothingConfig(), scheduler)
        assert controller.active_filters() == {
            'orientation': 'kalman',
            'acceleration': 'exponential',
            'rotationRate': 'lowPass',
        }
        assert controller.pending_reverts() == []

    def test_steps_up_one_rank(self, scheduler):
        controller = FilterEscalationController(SmoothingConfig(), scheduler)
        assert controller.escalate(RATE) == FilterType.MOVING_AVERAGE
        assert controller.escalate(RATE) == FilterType.KALMAN
        assert controller.escalation_count == 2

    def test_ceiling_at_kalman(self, scheduler):
        controller = FilterEscalationController(SmoothingConfig(), scheduler)
        for _ in range(10):
            controller.escalate(ChannelGroup.ORIENTATION)
        assert controller.active_filter(ChannelGroup.ORIENTATION) == FilterType.KALMAN
        # Still one pending revert, not ten
        assert scheduler.pending() == 1

    def test_reverts_to_exponential_after_delay(self, clock, scheduler):
        controller = FilterEscalationController(SmoothingConfig(), scheduler)
        controller.escalate(RATE)

        clock.now = 4.999
        scheduler.run_pending()
        assert controller.active_filter(RATE) == FilterType.MOVING_AVERAGE

        clock.now = 5.0
        scheduler.run_pending()
        # Target is exponential even though the default was low-pass
        assert controller.active_filter(RATE) == FilterType.EXPONENTIAL
        assert controller.pending_reverts() == []
        assert controller.revert_count == 1

        clock.now = 60.0
        scheduler.run_pending()
        assert controller.active_filter(RATE) == FilterType.EXPONENTIAL

    def test_new_escalation_replaces_pending_revert(self, clock, scheduler):
        controller = FilterEscalationController(SmoothingConfig(), scheduler)
        controller.escalate(RATE)
        clock.now = 3.0
        controller.escalate(RATE)

        clock.now = 5.0
        assert scheduler.run_pending() == 0
        assert controller.active_filter(RATE) == FilterType.KALMAN

        clock.now = 8.0
        assert scheduler.run_pending() == 1
        assert controller.active_filter(RATE) == FilterType.EXPONENTIAL

    def test_groups_revert_independently(self, clock, scheduler):
        controller = FilterEscalationController(SmoothingConfig(), scheduler)
        controller.escalate(RATE)
        clock.now = 2.0
        controller.escalate(ChannelGroup.ACCELERATION)

        clock.now = 5.0
        scheduler.run_pending()
        assert controller.active_filter(RATE) == FilterType.EXPONENTIAL
        assert controller.active_filter(ChannelGroup.ACCELERATION) == FilterType.LOW_PASS
        assert controller.pending_reverts() == ['acceleration']

    def test_complementary_is_not_escalated(self, scheduler):
        controller = FilterEscalationController(SmoothingConfig(), scheduler)
        controller.set_filter(ChannelGroup.ORIENTATION, FilterType.COMPLEMENTARY)
        assert controller.escalate(ChannelGroup.ORIENTATION) == FilterType.COMPLEMENTARY
        assert controller.pending_reverts() == []
        assert controller.escalation_count == 0

    def test_set_filter_cancels_pending_revert(self, clock, scheduler):
        controller = FilterEscalationController(SmoothingConfig(), scheduler)
        controller.escalate(RATE)
        controller.set_filter(RATE, FilterType.KALMAN)
        clock.now = 10.0
        scheduler.run_pending()
        assert controller.active_filter(RATE) == FilterType.KALMAN

    def test_scheduling_failure_stays_escalated(self):
        for error in (SchedulingUnavailable("closed"), RuntimeError("Event loop is closed")):
            controller = FilterEscalationController(SmoothingConfig(), BrokenScheduler(error))
            assert controller.escalate(RATE) == FilterType.MOVING_AVERAGE
            assert controller.scheduling_failures == 1
            assert controller.pending_reverts() == []

    def test_reset_restores_defaults(self, scheduler):
        controller = FilterEscalationController(SmoothingConfig(), scheduler)
        controller.escalate(RATE)
        controller.reset()
        assert controller.active_filter(RATE) == FilterType.LOW_PASS
        assert scheduler.pending() == 0

    def test_uses_current_revert_delay(self, clock, scheduler):
        config = SmoothingConfig()
        config.revert_delay_ms = 1000
        controller = FilterEscalationController(config, scheduler)
        controller.escalate(RATE)
        clock.now = 1.0
        scheduler.run_pending()
        assert controller.active_filter(RATE) == FilterType.EXPONENTIAL
