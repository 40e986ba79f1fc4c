"""
Interchangeable smoothing filters for one channel group.
"""

import math
from abc import ABC, abstractmethod
from collections import deque

import numpy as np

from ..core.config import ChannelGroup, FilterType
from ..core.errors import ConfigurationError
from ..core.sample import finite_float
from .kalman import ScalarKalmanFilter


class SmoothingFilter(ABC):
    """
    Abstract base class for per-axis smoothing filters.

    Every filter maps one group's axis values to smoothed values covering
    all of the group's axes. Axes missing from the input keep their last
    output unmodified (0.0 before anything was seen).
    """

    filter_type = None

    def __init__(self, axes):
        """
        Initialize the filter.

        Args:
            axes: Axis names handled by this filter
        """
        self.axes = tuple(axes)
        self.previous = {}
        self.num_updates = 0

    @abstractmethod
    def apply(self, values, **context):
        """
        Smooth one sample.

        Args:
            values: Mapping of axis name to raw value
            **context: Extra signals some filters need

        Returns:
            smoothed: Mapping of axis name to smoothed value
        """
        pass

    def last(self, axis):
        """Last output for an axis"""
        return self.previous.get(axis, 0.0)

    def seed(self, values):
        """
        Continue from an existing output instead of the filter's own history.

        Args:
            values: Mapping of axis name to the value to continue from
        """
        for axis in self.axes:
            value = finite_float(values.get(axis))
            if value is not None:
                self.previous[axis] = value

    def reset(self):
        """Reset the filter state."""
        self.previous = {}
        self.num_updates = 0

    def get_stats(self):
        """Get filter statistics"""
        return {'type': self.filter_type.value, 'num_updates': self.num_updates}


class ExponentialFilter(SmoothingFilter):
    """
    Exponential smoothing with extra damping of sub-threshold jitter.
    """

    filter_type = FilterType.EXPONENTIAL

    def __init__(self, axes, alpha=0.3, threshold=0.0):
        """
        Args:
            axes: Axis names handled by this filter
            alpha: Weight of the current value (1 = no smoothing)
            threshold: Deltas below this use alpha / 2
        """
        super().__init__(axes)
        self.alpha = alpha
        self.threshold = threshold

    def apply(self, values, **context):
        smoothed = {}
        for axis in self.axes:
            current = finite_float(values.get(axis))
            if current is None:
                smoothed[axis] = self.last(axis)
                continue

            previous = self.previous.get(axis)
            if previous is None:
                output = current
            else:
                alpha = self.alpha
                if abs(current - previous) < self.threshold:
                    alpha = alpha / 2
                output = alpha * current + (1 - alpha) * previous

            self.previous[axis] = output
            smoothed[axis] = output
        self.num_updates += 1
        return smoothed

    def get_stats(self):
        stats = super().get_stats()
        stats.update({'alpha': self.alpha, 'threshold': self.threshold})
        return stats


class MovingAverageFilter(SmoothingFilter):
    """
    Mean of the most recent window of raw values.
    """

    filter_type = FilterType.MOVING_AVERAGE

    def __init__(self, axes, window_size=5):
        super().__init__(axes)
        self.window_size = window_size
        self.buffers = {axis: deque(maxlen=window_size) for axis in self.axes}

    def apply(self, values, **context):
        smoothed = {}
        for axis in self.axes:
            current = finite_float(values.get(axis))
            if current is None:
                smoothed[axis] = self.last(axis)
                continue

            buffer = self.buffers[axis]
            buffer.append(current)
            output = float(np.mean(buffer))

            self.previous[axis] = output
            smoothed[axis] = output
        self.num_updates += 1
        return smoothed

    def seed(self, values):
        super().seed(values)
        # Window restarts on the incoming raw values
        for buffer in self.buffers.values():
            buffer.clear()

    def reset(self):
        super().reset()
        for buffer in self.buffers.values():
            buffer.clear()

    def get_stats(self):
        stats = super().get_stats()
        stats.update({
            'window_size': self.window_size,
            'buffer_fill': {axis: len(buffer) for axis, buffer in self.buffers.items()}
        })
        return stats


class LowPassFilter(SmoothingFilter):
    """
    Single-pole IIR low-pass filter.
    """

    filter_type = FilterType.LOW_PASS

    def __init__(self, axes, alpha):
        """
        Args:
            axes: Axis names handled by this filter
            alpha: Smoothing coefficient in [0, 1]; 1 passes input through,
                0 holds the initial value forever

        Raises:
            ConfigurationError: if alpha is outside [0, 1]
        """
        value = finite_float(alpha)
        if value is None or not 0.0 <= value <= 1.0:
            raise ConfigurationError(f"Low-pass alpha must be in [0, 1], got {alpha!r}")
        super().__init__(axes)
        self.alpha = value

    @classmethod
    def from_cutoff(cls, axes, cutoff_hz, sample_rate_hz):
        """
        Create a filter from a cutoff frequency.

        Args:
            axes: Axis names handled by this filter
            cutoff_hz: Cutoff frequency fc
            sample_rate_hz: Sample rate of the incoming stream

        Returns:
            LowPassFilter with alpha = dt / (RC + dt), RC = 1 / (2 pi fc)
        """
        if cutoff_hz <= 0 or sample_rate_hz <= 0:
            raise ConfigurationError("Cutoff frequency and sample rate must be > 0")
        dt = 1.0 / sample_rate_hz
        rc = 1.0 / (2 * math.pi * cutoff_hz)
        return cls(axes, dt / (rc + dt))

    def apply(self, values, **context):
        smoothed = {}
        for axis in self.axes:
            current = finite_float(values.get(axis))
            if current is None:
                smoothed[axis] = self.last(axis)
                continue

            previous = self.previous.get(axis)
            if previous is None:
                output = current
            else:
                output = self.alpha * current + (1 - self.alpha) * previous

            self.previous[axis] = output
            smoothed[axis] = output
        self.num_updates += 1
        return smoothed

    def get_stats(self):
        stats = super().get_stats()
        stats['alpha'] = self.alpha
        return stats


class KalmanFilter(SmoothingFilter):
    """
    Independent scalar Kalman filter per axis.
    """

    filter_type = FilterType.KALMAN

    def __init__(self, axes, process_noise=0.01, measurement_noise=0.1):
        super().__init__(axes)
        self.estimators = {
            axis: ScalarKalmanFilter(process_noise, measurement_noise)
            for axis in self.axes
        }

    def apply(self, values, **context):
        smoothed = {}
        for axis in self.axes:
            output = self.estimators[axis].filter(finite_float(values.get(axis)))
            self.previous[axis] = output
            smoothed[axis] = output
        self.num_updates += 1
        return smoothed

    def seed(self, values):
        super().seed(values)
        for axis, estimator in self.estimators.items():
            if axis in self.previous:
                estimator.seed(self.previous[axis])

    def set_noise(self, process_noise, measurement_noise):
        """Retune every axis estimator"""
        for estimator in self.estimators.values():
            estimator.set_noise(process_noise, measurement_noise)

    def reset(self):
        super().reset()
        for estimator in self.estimators.values():
            estimator.reset()

    def get_stats(self):
        stats = super().get_stats()
        stats['estimators'] = {axis: kf.get_stats() for axis, kf in self.estimators.items()}
        return stats


class ComplementaryFilter(SmoothingFilter):
    """
    Fuses integrated rotation rate with accelerometer tilt for orientation.

    alpha (roll) and beta (pitch) blend the gyro-integrated angle with the
    angle derived from the smoothed acceleration vector. gamma cannot be
    recovered from acceleration and is passed through raw.
    """

    filter_type = FilterType.COMPLEMENTARY

    # Axes with an accelerometer-derived reference angle
    TILT_AXES = ('alpha', 'beta')

    def __init__(self, axes=('alpha', 'beta', 'gamma'), alpha=0.98, dt=1.0 / 60.0):
        """
        Args:
            axes: Orientation axis names
            alpha: Weight of the gyro-integrated angle
            dt: Sample period in seconds
        """
        super().__init__(axes)
        self.alpha = alpha
        self.dt = dt

    @staticmethod
    def accel_angles(acceleration):
        """
        Tilt angles in degrees from an acceleration vector.

        Returns:
            angles: {'alpha': roll, 'beta': pitch}, or {} if no vector
        """
        if not acceleration:
            return {}
        x = finite_float(acceleration.get('x')) or 0.0
        y = finite_float(acceleration.get('y')) or 0.0
        z = finite_float(acceleration.get('z')) or 0.0
        if x == 0.0 and y == 0.0 and z == 0.0:
            # No gravity vector, no tilt reference
            return {}
        return {
            'alpha': math.degrees(math.atan2(y, z)),
            'beta': math.degrees(math.atan2(-x, math.hypot(y, z))),
        }

    def apply(self, values, rotation_rate=None, acceleration=None, **context):
        """
        Smooth one orientation sample.

        Args:
            values: Raw orientation values
            rotation_rate: Smoothed rotation rate values (deg/s)
            acceleration: Smoothed acceleration values (m/s^2)

        Without an acceleration vector the raw orientation value stands in
        as the drift-free reference.
        """
        rotation_rate = rotation_rate or {}
        accel_angles = self.accel_angles(acceleration)

        smoothed = {}
        for axis in self.axes:
            current = finite_float(values.get(axis))
            previous = self.previous.get(axis)

            if current is None and (axis not in self.TILT_AXES or previous is None):
                smoothed[axis] = self.last(axis)
                continue

            if axis not in self.TILT_AXES or previous is None:
                # Yaw passes through; first tilt value seeds the integrator
                output = current
            else:
                rate = finite_float(rotation_rate.get(axis)) or 0.0
                gyro_angle = previous + rate * self.dt
                reference = accel_angles.get(axis, current)
                if reference is None:
                    reference = gyro_angle
                output = self.alpha * gyro_angle + (1 - self.alpha) * reference

            self.previous[axis] = output
            smoothed[axis] = output
        self.num_updates += 1
        return smoothed

    def get_stats(self):
        stats = super().get_stats()
        stats.update({'alpha': self.alpha, 'dt': self.dt})
        return stats


def create_filter(filter_type, group, config):
    """
    Factory function to create a smoothing filter.

    Args:
        filter_type: FilterType enum value
        group: ChannelGroup the filter will serve
        config: SmoothingConfig with filter parameters

    Returns:
        SmoothingFilter: Instance of a smoothing filter

    Raises:
        ConfigurationError: for an unknown type, or complementary
            filtering outside the orientation group
    """
    if filter_type == FilterType.EXPONENTIAL:
        return ExponentialFilter(group.axes, config.exponential_alpha[group], config.noise_thresholds[group])
    elif filter_type == FilterType.LOW_PASS:
        return LowPassFilter.from_cutoff(group.axes, config.low_pass_cutoff_hz, config.sample_rate_hz)
    elif filter_type == FilterType.MOVING_AVERAGE:
        return MovingAverageFilter(group.axes, config.moving_average_window_size)
    elif filter_type == FilterType.KALMAN:
        return KalmanFilter(group.axes, *config.kalman_noise[group])
    elif filter_type == FilterType.COMPLEMENTARY:
        if group is not ChannelGroup.ORIENTATION:
            raise ConfigurationError(f"Complementary filtering is orientation-only, not {group.value}")
        return ComplementaryFilter(group.axes, config.complementary_alpha, config.dt)
    else:
        raise ConfigurationError(f"Unknown filter type: {filter_type!r}")


class FilterBank:
    """
    Holds one filter instance per FilterType for a channel group.

    Filters are created on first use. When the group switches to another
    type, the incoming filter continues from the group's current output so
    the control values do not jump.
    """

    def __init__(self, group, config):
        """
        Initialize the filter bank.

        Args:
            group: ChannelGroup served by this bank
            config: SmoothingConfig shared with the pipeline
        """
        self.group = group
        self.config = config
        self.filters = {}
        self.active_type = None

    def get(self, filter_type):
        """Get (creating if needed) the filter for a type"""
        smoothing_filter = self.filters.get(filter_type)
        if smoothing_filter is None:
            smoothing_filter = create_filter(filter_type, self.group, self.config)
            self.filters[filter_type] = smoothing_filter
        return smoothing_filter

    def apply(self, filter_type, values, seed=None, **context):
        """
        Smooth one sample with the given filter type.

        Args:
            filter_type: FilterType to use
            values: Mapping of axis name to raw value
            seed: Current output of the group, handed to the filter when
                filter_type differs from the type used on the last sample
            **context: Extra signals passed to the filter
        """
        smoothing_filter = self.get(filter_type)
        if seed is not None and self.active_type is not None and filter_type != self.active_type:
            smoothing_filter.seed(seed)
        self.active_type = filter_type
        return smoothing_filter.apply(values, **context)

    def set_exponential_alpha(self, alpha):
        self.config.exponential_alpha[self.group] = alpha
        if FilterType.EXPONENTIAL in self.filters:
            self.filters[FilterType.EXPONENTIAL].alpha = alpha

    def set_noise_threshold(self, threshold):
        self.config.noise_thresholds[self.group] = threshold
        if FilterType.EXPONENTIAL in self.filters:
            self.filters[FilterType.EXPONENTIAL].threshold = threshold

    def set_kalman_noise(self, process_noise, measurement_noise):
        self.config.kalman_noise[self.group] = (process_noise, measurement_noise)
        if FilterType.KALMAN in self.filters:
            self.filters[FilterType.KALMAN].set_noise(process_noise, measurement_noise)

    def reset(self):
        """Drop every filter and its state"""
        self.filters = {}
        self.active_type = None

    def get_stats(self):
        return {filter_type.value: f.get_stats() for filter_type, f in self.filters.items()}
