"""
Main smoothing component turning raw sensor samples into control values.
"""

import logging
import math
import time
from collections import deque

from .config import ChannelGroup, FilterType, SmoothingConfig, validate_kalman_noise
from .errors import ConfigurationError, InvalidSampleError
from .sample import SensorSample, finite_float
from .scheduler import FrameScheduler

from ..filters.escalation import FilterEscalationController
from ..filters.filter_bank import FilterBank
from ..filters.noise_detector import NoiseDetector
from ..filters.quality import (
    apply_calibration_offset,
    calculate_calibration_offset,
    calculate_data_quality,
    detect_drift,
    samples_from_dicts,
)

LOGGER = logging.getLogger(__name__)

# Orientation last: complementary filtering reads the other two groups
PROCESSING_ORDER = (
    ChannelGroup.ACCELERATION,
    ChannelGroup.ROTATION_RATE,
    ChannelGroup.ORIENTATION,
)

# Weight of the newest sample in the running quality score
QUALITY_WEIGHT = 0.1

# Smoothed samples kept for drift detection
DRIFT_WINDOW = 120


class SensorSmoothingPipeline:
    """
    Core component for smoothing one sensor stream.

    Uses a set of specialized classes for handling different aspects
    of signal conditioning:
    - Noise detection on raw samples
    - Escalation and timed revert of filter strength
    - Per-group filter banks
    - Calibration and data quality tracking

    One pipeline serves one stream and is not thread-safe.
    """

    def __init__(self, config=None, scheduler=None):
        """
        Initialize the pipeline.

        Args:
            config: Optional SmoothingConfig or option dict
            scheduler: Optional host scheduler with call_later(delay, callback);
                defaults to a FrameScheduler polled on every smooth() call

        Raises:
            ConfigurationError: if the configuration is invalid
        """
        # Configuration
        if isinstance(config, dict):
            config = SmoothingConfig.from_dict(config)
        self.config = config.copy() if config is not None else SmoothingConfig()
        self.config.validate()

        self.scheduler = scheduler if scheduler is not None else FrameScheduler()

        # Smoothing components
        self.noise_detector = NoiseDetector(self.config)
        self.escalation = FilterEscalationController(self.config, self.scheduler)
        self.filter_banks = {group: FilterBank(group, self.config) for group in ChannelGroup}

        # Current state
        self.smoothed = SensorSample.zeros()
        self.calibration = {}
        self.quality = 1.0
        self.history = deque(maxlen=DRIFT_WINDOW)

        # Statistics
        self.samples_processed = 0
        self.invalid_values = 0
        self.rejected_samples = 0
        self.timing = {'last_ms': 0.0, 'total_ms': 0.0, 'max_ms': 0.0}

        LOGGER.info(f"Smoothing pipeline created with filters {self.escalation.active_filters()}")

    def smooth(self, raw_sample):
        """
        Smooth one raw sample.

        Never raises: malformed input and non-finite values are absorbed and
        the best available value is returned.

        Args:
            raw_sample: SensorSample or wire dict

        Returns:
            smoothed: Complete, finite SensorSample
        """
        start_time = time.perf_counter()

        self._run_due_reverts()

        sample = self._coerce(raw_sample)
        if sample is None:
            self.rejected_samples += 1
            LOGGER.warning(f"Ignoring sample of type {type(raw_sample).__name__}")
            return self.smoothed.copy()

        if self.calibration:
            sample = apply_calibration_offset(sample, self.calibration)

        self._update_quality(sample)

        # -------------------------
        # 1. Noise detection and escalation
        # -------------------------
        for group in self.noise_detector.detect_noise(sample):
            self.escalation.escalate(group)

        # -------------------------
        # 2. Replace invalid values
        # -------------------------
        sanitized = self._sanitize(sample)

        # -------------------------
        # 3. Filter each group with its active filter
        # -------------------------
        smoothed = SensorSample(timestamp=sample.timestamp)
        for group in PROCESSING_ORDER:
            context = {}
            if group is ChannelGroup.ORIENTATION:
                context = {
                    'rotation_rate': smoothed.rotation_rate,
                    'acceleration': smoothed.acceleration,
                }
            filter_type = self.escalation.active_filter(group)
            values = self.filter_banks[group].apply(filter_type, sanitized.get(group),
                                                   seed=self.smoothed.get(group), **context)
            smoothed.set(group, self._finite_or_last(group, values))

        self.smoothed = smoothed
        self.history.append(smoothed)
        self.samples_processed += 1

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self.timing['last_ms'] = elapsed_ms
        self.timing['total_ms'] += elapsed_ms
        self.timing['max_ms'] = max(self.timing['max_ms'], elapsed_ms)

        if self.config.debug_mode:
            LOGGER.debug(f"Sample {self.samples_processed}: {smoothed}")

        return smoothed.copy()

    def _run_due_reverts(self):
        """Fire reverts that came due on a polled scheduler"""
        run_pending = getattr(self.scheduler, 'run_pending', None)
        if run_pending is not None:
            run_pending()

    def _coerce(self, raw_sample):
        if isinstance(raw_sample, SensorSample):
            return raw_sample
        if isinstance(raw_sample, dict):
            return SensorSample.from_dict(raw_sample)
        return None

    def _sanitize(self, sample):
        """Substitute the last smoothed value for missing or non-finite axes"""
        sanitized = SensorSample(timestamp=sample.timestamp)
        for group in ChannelGroup:
            raw_values = sample.get(group)
            last_values = self.smoothed.get(group)
            values = {}
            for axis in group.axes:
                value = finite_float(raw_values.get(axis))
                if value is None:
                    self.invalid_values += 1
                    if self.config.debug_mode:
                        fault = InvalidSampleError(group.value, axis, raw_values.get(axis))
                        LOGGER.debug(f"{fault}; using last smoothed value")
                    value = last_values[axis]
                values[axis] = value
            sanitized.set(group, values)
        return sanitized

    def _finite_or_last(self, group, values):
        last_values = self.smoothed.get(group)
        result = {}
        for axis in group.axes:
            value = values.get(axis)
            if value is None or not math.isfinite(value):
                LOGGER.warning(f"Filter produced {value!r} for {group.value}.{axis}; keeping last value")
                value = last_values[axis]
            result[axis] = float(value)
        return result

    def _update_quality(self, sample):
        quality = calculate_data_quality(sample)
        self.quality = (1 - QUALITY_WEIGHT) * self.quality + QUALITY_WEIGHT * quality

    # -------------------------
    # Configuration
    # -------------------------

    def set_filter(self, group, filter_type):
        """
        Override a group's active filter, bypassing the escalation ranking.

        Args:
            group: ChannelGroup or its name
            filter_type: FilterType or its name

        Raises:
            ConfigurationError: for an unknown group or filter, or
                complementary filtering outside orientation
        """
        group = ChannelGroup.parse(group)
        filter_type = FilterType.parse(filter_type)
        # Builds the filter, raising before anything changes
        self.filter_banks[group].get(filter_type)
        self.escalation.set_filter(group, filter_type)
        LOGGER.info(f"Filter for {group.value} set to {filter_type.value}")

    def set_smoothing_strength(self, group, strength):
        """
        Adjust exponential smoothing for a group.

        Args:
            group: ChannelGroup or its name
            strength: 0 (lightest) to 1 (heaviest); alpha = 1 - 0.8 * strength

        Returns:
            alpha: The resulting exponential alpha

        Raises:
            ConfigurationError: for an unknown group or strength outside [0, 1]
        """
        group = ChannelGroup.parse(group)
        value = finite_float(strength)
        if value is None or not 0.0 <= value <= 1.0:
            raise ConfigurationError(f"Smoothing strength must be in [0, 1], got {strength!r}")
        alpha = 1.0 - 0.8 * value
        self.filter_banks[group].set_exponential_alpha(alpha)
        return alpha

    def set_noise_thresholds(self, thresholds):
        """
        Override noise thresholds for some or all groups.

        Args:
            thresholds: Mapping of group (or name) to threshold > 0

        Raises:
            ConfigurationError: if any entry is invalid; nothing is applied
        """
        if not isinstance(thresholds, dict):
            raise ConfigurationError(f"Noise thresholds must be a mapping, got {thresholds!r}")
        parsed = {}
        for name, threshold in thresholds.items():
            group = ChannelGroup.parse(name)
            value = finite_float(threshold)
            if value is None or value <= 0:
                raise ConfigurationError(f"Noise threshold for {group.value} must be > 0, got {threshold!r}")
            parsed[group] = value

        for group, value in parsed.items():
            self.noise_detector.set_threshold(group, value)
            self.filter_banks[group].set_noise_threshold(value)

    def tune_kalman(self, group, process_noise, measurement_noise):
        """
        Retune the Kalman filter of a group.

        Raises:
            ConfigurationError: for an unknown group, Q < 0 or R <= 0
        """
        group = ChannelGroup.parse(group)
        validate_kalman_noise(process_noise, measurement_noise)
        self.filter_banks[group].set_kalman_noise(process_noise, measurement_noise)

    def calibrate(self, samples, group=None):
        """
        Learn per-axis offsets from samples taken at rest.

        Args:
            samples: Iterable of SensorSample or wire dicts
            group: Optional ChannelGroup (or name) to restrict calibration

        Returns:
            offsets: Learned offsets keyed by ChannelGroup
        """
        if group is not None:
            group = ChannelGroup.parse(group)
        offsets = calculate_calibration_offset(samples_from_dicts(samples), group)
        for calibrated_group, group_offsets in offsets.items():
            self.calibration[calibrated_group] = group_offsets
        LOGGER.info(f"Calibration applied for {[g.value for g in offsets]}")
        return offsets

    def clear_calibration(self):
        self.calibration = {}

    # -------------------------
    # Status
    # -------------------------

    def get_smoothed_values(self):
        """Get the most recent smoothed sample"""
        return self.smoothed.copy()

    def get_drift(self, threshold=0.05):
        """
        Find smoothed axes that creep steadily in one direction.

        Args:
            threshold: Slope magnitude treated as drift, per second when every
                recent sample carries a timestamp, otherwise per sample

        Returns:
            drift: Drifting axis names keyed by group wire name
        """
        samples = list(self.history)
        timestamps = [s.timestamp for s in samples]
        if any(finite_float(t) is None for t in timestamps):
            timestamps = None

        drift = {}
        for group in ChannelGroup:
            drift[group.value] = [
                axis for axis in group.axes
                if detect_drift([s.get(group)[axis] for s in samples], timestamps, threshold)
            ]
        return drift

    def get_filter_status(self):
        """
        Get active filters, noise state, drift and performance counters.

        Reverts that came due since the last sample are applied first.
        """
        self._run_due_reverts()
        escalation_stats = self.escalation.get_stats()
        average_ms = self.timing['total_ms'] / self.samples_processed if self.samples_processed else 0.0
        return {
            'active_filters': escalation_stats['active_filters'],
            'noise_counters': self.noise_detector.get_counters(),
            'noise_levels': self.noise_detector.get_noise_levels(),
            'pending_reverts': escalation_stats['pending_reverts'],
            'calibrated_groups': [group.value for group in self.calibration],
            'drift': self.get_drift(),
            'performance': {
                'samples_processed': self.samples_processed,
                'invalid_values': self.invalid_values,
                'rejected_samples': self.rejected_samples,
                'escalations': escalation_stats['escalations'],
                'reverts': escalation_stats['reverts'],
                'scheduling_failures': escalation_stats['scheduling_failures'],
                'last_process_time_ms': self.timing['last_ms'],
                'average_process_time_ms': average_ms,
                'max_process_time_ms': self.timing['max_ms'],
                'overall_quality': self.quality,
            }
        }

    def reset_stats(self):
        """Reset performance counters, keeping filter state"""
        self.samples_processed = 0
        self.invalid_values = 0
        self.rejected_samples = 0
        self.timing = {'last_ms': 0.0, 'total_ms': 0.0, 'max_ms': 0.0}
        self.escalation.reset_stats()
        self.quality = 1.0

    def dispose(self):
        """Cancel pending reverts, then clear all buffers and estimates"""
        # Cancels pending reverts before restoring default filters
        self.escalation.reset()
        for bank in self.filter_banks.values():
            bank.reset()
        self.noise_detector.reset()
        self.calibration = {}
        self.smoothed = SensorSample.zeros()
        self.history.clear()
        self.reset_stats()
        LOGGER.info("Smoothing pipeline disposed")
