"""
Configuration classes for sensor smoothing.
"""

import math
from enum import Enum

from .errors import ConfigurationError


class ChannelGroup(Enum):
    """Independent sensor signal categories, valued by their wire name"""
    ORIENTATION = 'orientation'
    ACCELERATION = 'acceleration'
    ROTATION_RATE = 'rotationRate'

    @property
    def axes(self):
        """Axis names carried by this group"""
        if self is ChannelGroup.ACCELERATION:
            return ('x', 'y', 'z')
        return ('alpha', 'beta', 'gamma')

    @classmethod
    def parse(cls, value):
        """
        Resolve a channel group from the enum itself, its wire name
        ('rotationRate') or its Python name ('rotation_rate').

        Raises:
            ConfigurationError: if the value names no group
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.replace('_', '').lower()
            for group in cls:
                if key in (group.value.lower(), group.name.replace('_', '').lower()):
                    return group
        raise ConfigurationError(f"Unknown channel group: {value!r}")


class FilterType(Enum):
    """Smoothing algorithms, valued by their wire name"""
    EXPONENTIAL = 'exponential'
    LOW_PASS = 'lowPass'
    MOVING_AVERAGE = 'movingAverage'
    KALMAN = 'kalman'
    COMPLEMENTARY = 'complementary'

    @classmethod
    def parse(cls, value):
        """
        Resolve a filter type from the enum, its wire name or its Python name.

        Raises:
            ConfigurationError: if the value names no filter
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.replace('_', '').lower()
            for filter_type in cls:
                if key in (filter_type.value.lower(), filter_type.name.replace('_', '').lower()):
                    return filter_type
        raise ConfigurationError(f"Unknown filter type: {value!r}")


# Weak to strong. COMPLEMENTARY is deliberately absent.
FILTER_RANKING = (
    FilterType.EXPONENTIAL,
    FilterType.LOW_PASS,
    FilterType.MOVING_AVERAGE,
    FilterType.KALMAN,
)

# camelCase option names accepted by SmoothingConfig.from_dict
WIRE_KEYS = {
    'defaultFilters': 'default_filters',
    'noiseThresholds': 'noise_thresholds',
    'consecutiveViolationLimit': 'consecutive_violation_limit',
    'revertDelayMs': 'revert_delay_ms',
    'movingAverageWindowSize': 'moving_average_window_size',
    'lowPassCutoffHz': 'low_pass_cutoff_hz',
    'sampleRateHz': 'sample_rate_hz',
    'complementaryAlpha': 'complementary_alpha',
    'exponentialAlpha': 'exponential_alpha',
    'kalmanNoise': 'kalman_noise',
    'debugMode': 'debug_mode',
}

_GROUP_KEYED = ('default_filters', 'noise_thresholds', 'exponential_alpha', 'kalman_noise')


def _finite(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class SmoothingConfig:
    """
    Configuration parameters for the smoothing pipeline.
    Centralizes all parameter management in one place.
    """

    def __init__(self):
        # Active filter per group at construction
        self.default_filters = {
            ChannelGroup.ORIENTATION: FilterType.KALMAN,
            ChannelGroup.ACCELERATION: FilterType.EXPONENTIAL,
            ChannelGroup.ROTATION_RATE: FilterType.LOW_PASS,
        }

        # Noise detection parameters
        self.noise_thresholds = {
            ChannelGroup.ORIENTATION: 5.0,      # degrees
            ChannelGroup.ACCELERATION: 2.0,     # m/s^2
            ChannelGroup.ROTATION_RATE: 10.0,   # deg/s
        }
        self.consecutive_violation_limit = 3

        # Escalation parameters
        self.revert_delay_ms = 5000

        # Filter parameters
        self.moving_average_window_size = 5
        self.low_pass_cutoff_hz = 5.0
        self.sample_rate_hz = 60.0
        self.complementary_alpha = 0.98
        self.exponential_alpha = {group: 0.3 for group in ChannelGroup}

        # (process noise Q, measurement noise R)
        self.kalman_noise = {
            ChannelGroup.ORIENTATION: (0.01, 0.1),
            ChannelGroup.ACCELERATION: (0.05, 0.2),
            ChannelGroup.ROTATION_RATE: (0.02, 0.15),
        }

        # Debug parameters
        self.debug_mode = False

    @property
    def dt(self):
        """Sample period in seconds"""
        return 1.0 / self.sample_rate_hz

    def validate(self):
        """
        Check every parameter.

        Raises:
            ConfigurationError: for the first invalid value found
        """
        for group, filter_type in self.default_filters.items():
            if filter_type is FilterType.COMPLEMENTARY and group is not ChannelGroup.ORIENTATION:
                raise ConfigurationError(
                    f"Complementary filtering is orientation-only, not {group.value}")
        for group, threshold in self.noise_thresholds.items():
            if not _finite(threshold) or threshold <= 0:
                raise ConfigurationError(f"Noise threshold for {group.value} must be > 0, got {threshold!r}")
        if not isinstance(self.consecutive_violation_limit, int) or self.consecutive_violation_limit < 1:
            raise ConfigurationError(
                f"consecutive_violation_limit must be an integer >= 1, got {self.consecutive_violation_limit!r}")
        if not _finite(self.revert_delay_ms) or self.revert_delay_ms < 0:
            raise ConfigurationError(f"revert_delay_ms must be >= 0, got {self.revert_delay_ms!r}")
        if not isinstance(self.moving_average_window_size, int) or self.moving_average_window_size < 1:
            raise ConfigurationError(
                f"moving_average_window_size must be an integer >= 1, got {self.moving_average_window_size!r}")
        if not _finite(self.low_pass_cutoff_hz) or self.low_pass_cutoff_hz <= 0:
            raise ConfigurationError(f"low_pass_cutoff_hz must be > 0, got {self.low_pass_cutoff_hz!r}")
        if not _finite(self.sample_rate_hz) or self.sample_rate_hz <= 0:
            raise ConfigurationError(f"sample_rate_hz must be > 0, got {self.sample_rate_hz!r}")
        if not _finite(self.complementary_alpha) or not 0.0 <= self.complementary_alpha <= 1.0:
            raise ConfigurationError(f"complementary_alpha must be in [0, 1], got {self.complementary_alpha!r}")
        for group, alpha in self.exponential_alpha.items():
            if not _finite(alpha) or not 0.0 < alpha <= 1.0:
                raise ConfigurationError(f"Exponential alpha for {group.value} must be in (0, 1], got {alpha!r}")
        for group, noise in self.kalman_noise.items():
            if len(noise) != 2:
                raise ConfigurationError(f"Kalman noise for {group.value} must be a (Q, R) pair, got {noise!r}")
            validate_kalman_noise(*noise)
        return self

    @classmethod
    def from_dict(cls, config_dict):
        """
        Create a config from a dictionary.

        Accepts snake_case attribute names or their camelCase wire names.
        Per-group options may be partial mappings keyed by group name.
        Unknown keys are ignored.

        Raises:
            ConfigurationError: if a value is invalid
        """
        config = cls()
        for key, value in config_dict.items():
            key = WIRE_KEYS.get(key, key)
            if not hasattr(config, key) or key.startswith('_'):
                continue
            if key in _GROUP_KEYED:
                if not isinstance(value, dict):
                    raise ConfigurationError(f"{key} must be a mapping of channel group to value, got {value!r}")
                merged = dict(getattr(config, key))
                for group_name, group_value in value.items():
                    group = ChannelGroup.parse(group_name)
                    if key == 'default_filters':
                        group_value = FilterType.parse(group_value)
                    elif key == 'kalman_noise':
                        if not isinstance(group_value, (list, tuple)):
                            raise ConfigurationError(f"Kalman noise must be a (Q, R) pair, got {group_value!r}")
                        group_value = tuple(group_value)
                    merged[group] = group_value
                value = merged
            setattr(config, key, value)
        return config.validate()

    def to_dict(self):
        """Convert config to a dictionary keyed by wire names"""
        result = {}
        for key, value in vars(self).items():
            if key.startswith('_'):
                continue
            if key == 'default_filters':
                value = {group.value: filter_type.value for group, filter_type in value.items()}
            elif key in _GROUP_KEYED:
                value = {group.value: group_value for group, group_value in value.items()}
            result[key] = value
        return result

    def copy(self):
        """Return an independent copy of this config"""
        return SmoothingConfig.from_dict(self.to_dict())


def validate_kalman_noise(process_noise, measurement_noise):
    """
    Check a (Q, R) pair: Q >= 0 and R > 0, both finite.

    Raises:
        ConfigurationError: if either value is out of range
    """
    if not _finite(process_noise) or process_noise < 0:
        raise ConfigurationError(f"Kalman process noise must be >= 0, got {process_noise!r}")
    if not _finite(measurement_noise) or measurement_noise <= 0:
        raise ConfigurationError(f"Kalman measurement noise must be > 0, got {measurement_noise!r}")
