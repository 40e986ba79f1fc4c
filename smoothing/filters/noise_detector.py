"""
Noise detection on raw sensor samples.
"""

import logging

import numpy as np

from ..core.config import ChannelGroup
from ..core.errors import ConfigurationError
from ..core.sample import finite_float

LOGGER = logging.getLogger(__name__)


class NoiseDetector:
    """
    Tracks per-group sample-to-sample deltas and counts consecutive
    threshold violations.
    """

    def __init__(self, config):
        """
        Initialize the noise detector.

        Args:
            config: SmoothingConfig with noise_thresholds and
                consecutive_violation_limit
        """
        self.thresholds = dict(config.noise_thresholds)
        self.consecutive_limit = config.consecutive_violation_limit

        self.counters = {group: 0 for group in ChannelGroup}
        self.noise_levels = {group: 0.0 for group in ChannelGroup}
        self.previous_raw = {group: {} for group in ChannelGroup}
        self.violations = {group: 0 for group in ChannelGroup}

    def detect_noise(self, raw_sample):
        """
        Process one raw sample.

        Args:
            raw_sample: SensorSample as received (not smoothed)

        Returns:
            groups: ChannelGroups whose counter reached the limit on this sample
        """
        escalations = []
        for group in ChannelGroup:
            current = raw_sample.get(group)
            previous = self.previous_raw[group]

            deltas = []
            for axis in group.axes:
                value = finite_float(current.get(axis))
                if value is not None and axis in previous:
                    deltas.append(abs(value - previous[axis]))

            if deltas:
                noise_level = float(np.mean(deltas))
                self.noise_levels[group] = noise_level

                if noise_level > self.thresholds[group]:
                    self.counters[group] += 1
                    self.violations[group] += 1
                else:
                    self.counters[group] = 0

                if self.counters[group] >= self.consecutive_limit:
                    LOGGER.debug(f"Sustained noise on {group.value}: level {noise_level:.2f} "
                                 f"over {self.consecutive_limit} samples")
                    escalations.append(group)
                    self.counters[group] = 0

            # Remember the last finite reading of every axis
            for axis in group.axes:
                value = finite_float(current.get(axis))
                if value is not None:
                    previous[axis] = value

        return escalations

    def set_threshold(self, group, threshold):
        """
        Set the noise threshold for a group.

        Raises:
            ConfigurationError: if the threshold is not a positive number
        """
        value = finite_float(threshold)
        if value is None or value <= 0:
            raise ConfigurationError(f"Noise threshold must be > 0, got {threshold!r}")
        self.thresholds[ChannelGroup.parse(group)] = value

    def set_limit(self, limit):
        """
        Set the consecutive-violation limit.

        Raises:
            ConfigurationError: if the limit is not an integer >= 1
        """
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            raise ConfigurationError(f"Consecutive violation limit must be an integer >= 1, got {limit!r}")
        self.consecutive_limit = limit
        for group in ChannelGroup:
            self.counters[group] = min(self.counters[group], limit - 1)

    def get_counters(self):
        """Current consecutive-violation counters keyed by wire name"""
        return {group.value: count for group, count in self.counters.items()}

    def get_noise_levels(self):
        """Most recent noise level per group keyed by wire name"""
        return {group.value: level for group, level in self.noise_levels.items()}

    def reset(self):
        """Reset counters and the remembered raw sample."""
        for group in ChannelGroup:
            self.counters[group] = 0
            self.noise_levels[group] = 0.0
            self.previous_raw[group] = {}
            self.violations[group] = 0

    def get_stats(self):
        """Get detector statistics"""
        return {
            'thresholds': {group.value: t for group, t in self.thresholds.items()},
            'consecutive_limit': self.consecutive_limit,
            'counters': self.get_counters(),
            'noise_levels': self.get_noise_levels(),
            'violations': {group.value: v for group, v in self.violations.items()}
        }
