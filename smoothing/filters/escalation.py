"""
Adaptive escalation of filter strength under sustained noise.
"""

import logging

from ..core.config import ChannelGroup, FilterType, FILTER_RANKING
from ..core.errors import SchedulingUnavailable

LOGGER = logging.getLogger(__name__)

# Fixed de-escalation target, independent of each group's default
REVERT_TARGET = FilterType.EXPONENTIAL


class FilterEscalationController:
    """
    Moves a channel group one step up the filter ranking on each escalation
    event and schedules a single cancellable revert per group.
    """

    def __init__(self, config, scheduler):
        """
        Initialize the escalation controller.

        Args:
            config: SmoothingConfig with default_filters and revert_delay_ms
            scheduler: Object providing call_later(delay_seconds, callback)
        """
        self.config = config
        self.scheduler = scheduler

        self.active = dict(config.default_filters)
        self.revert_handles = {group: None for group in ChannelGroup}

        # Statistics
        self.escalation_count = 0
        self.revert_count = 0
        self.scheduling_failures = 0

    def escalate(self, group):
        """
        Handle an escalation event for a group.

        Args:
            group: ChannelGroup with sustained noise

        Returns:
            filter_type: The group's active filter afterwards
        """
        current = self.active[group]
        if current not in FILTER_RANKING:
            # Explicitly selected filters are left alone
            LOGGER.debug(f"Escalation ignored for {group.value}: {current.value} is not ranked")
            return current

        rank = FILTER_RANKING.index(current)
        if rank < len(FILTER_RANKING) - 1:
            self.active[group] = FILTER_RANKING[rank + 1]
            LOGGER.info(f"Escalated {group.value} filter: {current.value} -> {self.active[group].value}")
        self.escalation_count += 1

        self._schedule_revert(group)
        return self.active[group]

    def _schedule_revert(self, group):
        """Cancel any pending revert for the group and schedule a fresh one"""
        self._cancel_revert(group)
        try:
            self.revert_handles[group] = self.scheduler.call_later(
                self.config.revert_delay_ms / 1000.0, lambda: self._revert(group))
        except (SchedulingUnavailable, RuntimeError) as e:
            # Group stays escalated until reset by hand
            self.scheduling_failures += 1
            LOGGER.warning(f"Cannot schedule revert for {group.value}, staying at "
                           f"{self.active[group].value}: {e}")

    def _cancel_revert(self, group):
        handle = self.revert_handles[group]
        if handle is not None:
            handle.cancel()
            self.revert_handles[group] = None

    def _revert(self, group):
        """Revert timer callback"""
        self.revert_handles[group] = None
        previous = self.active[group]
        self.active[group] = REVERT_TARGET
        self.revert_count += 1
        LOGGER.info(f"Reverted {group.value} filter: {previous.value} -> {REVERT_TARGET.value}")

    def set_filter(self, group, filter_type):
        """Override a group's active filter, dropping any pending revert"""
        self._cancel_revert(group)
        self.active[group] = filter_type

    def active_filter(self, group):
        return self.active[group]

    def active_filters(self):
        """Active filter per group keyed by wire name"""
        return {group.value: filter_type.value for group, filter_type in self.active.items()}

    def pending_reverts(self):
        """Groups with a revert still outstanding"""
        return [group.value for group, handle in self.revert_handles.items() if handle is not None]

    def cancel_all(self):
        """Cancel every pending revert"""
        for group in ChannelGroup:
            self._cancel_revert(group)

    def reset(self):
        """Cancel reverts and return every group to its configured default"""
        self.cancel_all()
        self.active = dict(self.config.default_filters)

    def reset_stats(self):
        self.escalation_count = 0
        self.revert_count = 0
        self.scheduling_failures = 0

    def get_stats(self):
        """Get escalation statistics"""
        return {
            'active_filters': self.active_filters(),
            'pending_reverts': self.pending_reverts(),
            'escalations': self.escalation_count,
            'reverts': self.revert_count,
            'scheduling_failures': self.scheduling_failures
        }
