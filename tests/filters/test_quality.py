import numpy as np

from smoothing.core.config import ChannelGroup
from smoothing.core.sample import SensorSample
from smoothing.filters.quality import (
    apply_calibration_offset,
    calculate_calibration_offset,
    calculate_data_quality,
    calculate_trend,
    detect_drift,
    samples_from_dicts,
)


def full_sample(value):
    sample = SensorSample()
    for group in ChannelGroup:
        sample.set(group, {axis: value for axis in group.axes})
    return sample


class TestDataQuality:
    def test_complete_sample(self):
        assert calculate_data_quality(full_sample(1.0)) == 1.0

    def test_bad_axes_lower_quality(self):
        sample = full_sample(1.0)
        sample.orientation['alpha'] = float('nan')
        sample.acceleration.pop('z')
        assert np.isclose(calculate_data_quality(sample), 7 / 9)

    def test_implausible_values(self):
        sample = full_sample(1.0)
        sample.acceleration['x'] = 500.0
        assert np.isclose(calculate_data_quality(sample), 8 / 9)

    def test_numpy_scalars_are_good_values(self):
        assert calculate_data_quality(full_sample(np.int64(1))) == 1.0
        assert calculate_data_quality(full_sample(np.float32(1.5))) == 1.0

    def test_restricted_groups(self):
        sample = SensorSample(rotation_rate={'alpha': 1.0, 'beta': 2.0, 'gamma': 3.0})
        assert calculate_data_quality(sample, [ChannelGroup.ROTATION_RATE]) == 1.0
        assert np.isclose(calculate_data_quality(sample), 1 / 3)


class TestCalibration:
    def test_offset_is_mean_at_rest(self):
        samples = [
            SensorSample(rotation_rate={'alpha': 1.0, 'beta': 0.5}),
            SensorSample(rotation_rate={'alpha': 3.0, 'beta': float('nan')}),
        ]
        offsets = calculate_calibration_offset(samples, ChannelGroup.ROTATION_RATE)
        assert offsets == {ChannelGroup.ROTATION_RATE: {'alpha': 2.0, 'beta': 0.5}}

    def test_numpy_scalars_calibrate(self):
        samples = [SensorSample(rotation_rate={'alpha': np.float32(v)}) for v in (1.0, 3.0)]
        offsets = calculate_calibration_offset(samples, ChannelGroup.ROTATION_RATE)
        assert offsets == {ChannelGroup.ROTATION_RATE: {'alpha': 2.0}}
        calibrated = apply_calibration_offset(samples[0], offsets)
        assert calibrated.rotation_rate['alpha'] == -1.0

    def test_groups_without_data_are_skipped(self):
        offsets = calculate_calibration_offset([SensorSample(acceleration={'x': 1.0})])
        assert list(offsets) == [ChannelGroup.ACCELERATION]

    def test_apply_offset(self):
        sample = SensorSample(rotation_rate={'alpha': 5.0, 'beta': float('nan')})
        calibrated = apply_calibration_offset(
            sample, {ChannelGroup.ROTATION_RATE: {'alpha': 2.0, 'beta': 1.0}})
        assert calibrated.rotation_rate['alpha'] == 3.0
        assert np.isnan(calibrated.rotation_rate['beta'])
        # Input untouched
        assert sample.rotation_rate['alpha'] == 5.0


class TestDrift:
    def test_trend_per_sample(self):
        assert np.isclose(calculate_trend([0.0, 1.0, 2.0, 3.0]), 1.0)

    def test_trend_per_second(self):
        assert np.isclose(calculate_trend([0.0, 2.0, 4.0], [0.0, 1000.0, 2000.0]), 2.0)

    def test_detect_drift(self):
        assert detect_drift([0.0, 1.0, 2.0, 3.0])
        assert not detect_drift([5.0, 5.0, 5.0, 5.0])
        assert not detect_drift([0.0, 10.0])

    def test_non_finite_values_ignored(self):
        assert np.isclose(calculate_trend([0.0, float('nan'), 2.0, 3.0]), 1.0)


def test_samples_from_dicts():
    sample = SensorSample(orientation={'alpha': 1.0})
    converted = samples_from_dicts([sample, {'rotationRate': {'alpha': 2.0}}])
    assert converted[0] is sample
    assert converted[1].rotation_rate == {'alpha': 2.0}
