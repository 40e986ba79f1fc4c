"""
Sensor data quality, calibration and drift analysis.
"""

import numpy as np

from ..core.config import ChannelGroup
from ..core.sample import SensorSample, finite_float

# Largest magnitude considered physically plausible per group
PLAUSIBLE_RANGE = {
    ChannelGroup.ORIENTATION: 360.0,     # degrees
    ChannelGroup.ACCELERATION: 100.0,    # m/s^2, about 10 g
    ChannelGroup.ROTATION_RATE: 2000.0,  # deg/s
}


def calculate_data_quality(sample, groups=None):
    """
    Score how usable a raw sample is.

    Args:
        sample: SensorSample to score
        groups: ChannelGroups expected in the sample (all by default)

    Returns:
        quality: Fraction of expected axes that are present, finite and
            within plausible range (0-1)
    """
    groups = list(groups) if groups is not None else list(ChannelGroup)
    total = 0
    good = 0
    for group in groups:
        values = sample.get(group)
        limit = PLAUSIBLE_RANGE[group]
        for axis in group.axes:
            total += 1
            value = finite_float(values.get(axis))
            if value is not None and abs(value) <= limit:
                good += 1
    return good / total if total else 0.0


def calculate_calibration_offset(samples, group=None):
    """
    Estimate per-axis bias from samples taken while the device is at rest.

    Args:
        samples: Iterable of SensorSample
        group: ChannelGroup to calibrate (all groups if None)

    Returns:
        offsets: {ChannelGroup: {axis: mean value}} for axes with data
    """
    groups = [group] if group is not None else list(ChannelGroup)
    collected = {g: {axis: [] for axis in g.axes} for g in groups}
    for sample in samples:
        for g in groups:
            values = sample.get(g)
            for axis in g.axes:
                value = finite_float(values.get(axis))
                if value is not None:
                    collected[g][axis].append(value)

    offsets = {}
    for g, axes in collected.items():
        group_offsets = {axis: float(np.mean(v)) for axis, v in axes.items() if v}
        if group_offsets:
            offsets[g] = group_offsets
    return offsets


def apply_calibration_offset(sample, offsets):
    """
    Subtract calibration offsets from a sample.

    Args:
        sample: SensorSample to correct
        offsets: Offsets from calculate_calibration_offset

    Returns:
        calibrated: New SensorSample; non-finite values are left as they are
    """
    calibrated = sample.copy()
    for group, group_offsets in offsets.items():
        values = dict(calibrated.get(group))
        for axis, offset in group_offsets.items():
            value = finite_float(values.get(axis))
            if value is not None:
                values[axis] = value - offset
        calibrated.set(group, values)
    return calibrated


def calculate_trend(values, timestamps=None):
    """
    Least-squares slope of a series.

    Args:
        values: Sequence of readings
        timestamps: Matching timestamps in milliseconds (optional)

    Returns:
        slope: Units per second with timestamps, otherwise units per sample
    """
    y = np.asarray(values, dtype=float)
    if timestamps is not None:
        x = np.asarray(timestamps, dtype=float) / 1000.0
    else:
        x = np.arange(len(y), dtype=float)

    mask = np.isfinite(x) & np.isfinite(y)
    x, y = x[mask], y[mask]
    if len(y) < 2 or np.ptp(x) == 0:
        return 0.0

    A = np.vstack([x, np.ones(len(x))]).T
    slope, _ = np.linalg.lstsq(A, y, rcond=None)[0]
    return float(slope)


def detect_drift(values, timestamps=None, threshold=0.05):
    """
    Detect slow monotonic drift in a series.

    Args:
        values: Sequence of readings
        timestamps: Matching timestamps in milliseconds (optional)
        threshold: Slope magnitude treated as drift

    Returns:
        drifting: True if the fitted slope exceeds the threshold
    """
    if len(values) < 3:
        return False
    return abs(calculate_trend(values, timestamps)) > threshold


def samples_from_dicts(items):
    """Convert wire dicts to SensorSample objects, passing samples through"""
    return [item if isinstance(item, SensorSample) else SensorSample.from_dict(item) for item in items]
