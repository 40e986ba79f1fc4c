import pytest

from smoothing.core.config import ChannelGroup, FilterType, SmoothingConfig, FILTER_RANKING
from smoothing.core.errors import ConfigurationError


class TestEnums:
    def test_group_axes(self):
        assert ChannelGroup.ORIENTATION.axes == ('alpha', 'beta', 'gamma')
        assert ChannelGroup.ACCELERATION.axes == ('x', 'y', 'z')
        assert ChannelGroup.ROTATION_RATE.axes == ('alpha', 'beta', 'gamma')

    @pytest.mark.parametrize("name", ['rotationRate', 'rotation_rate', 'ROTATION_RATE', 'rotationrate'])
    def test_parse_group_names(self, name):
        assert ChannelGroup.parse(name) is ChannelGroup.ROTATION_RATE

    @pytest.mark.parametrize("name, expected", [
        ('lowPass', FilterType.LOW_PASS),
        ('low_pass', FilterType.LOW_PASS),
        ('movingAverage', FilterType.MOVING_AVERAGE),
        ('KALMAN', FilterType.KALMAN),
        (FilterType.COMPLEMENTARY, FilterType.COMPLEMENTARY),
    ])
    def test_parse_filter_names(self, name, expected):
        assert FilterType.parse(name) is expected

    @pytest.mark.parametrize("value", ['gyro', '', None, 3])
    def test_parse_unknown_group(self, value):
        with pytest.raises(ConfigurationError):
            ChannelGroup.parse(value)

    def test_parse_unknown_filter(self):
        with pytest.raises(ConfigurationError):
            FilterType.parse('median')

    def test_ranking_excludes_complementary(self):
        assert FILTER_RANKING == (FilterType.EXPONENTIAL, FilterType.LOW_PASS,
                                  FilterType.MOVING_AVERAGE, FilterType.KALMAN)


class TestSmoothingConfig:
    def test_defaults(self):
        config = SmoothingConfig()
        assert config.default_filters[ChannelGroup.ORIENTATION] == FilterType.KALMAN
        assert config.default_filters[ChannelGroup.ACCELERATION] == FilterType.EXPONENTIAL
        assert config.default_filters[ChannelGroup.ROTATION_RATE] == FilterType.LOW_PASS
        assert config.noise_thresholds == {
            ChannelGroup.ORIENTATION: 5.0,
            ChannelGroup.ACCELERATION: 2.0,
            ChannelGroup.ROTATION_RATE: 10.0,
        }
        assert config.consecutive_violation_limit == 3
        assert config.revert_delay_ms == 5000
        assert config.moving_average_window_size == 5
        assert config.complementary_alpha == 0.98
        assert config.validate() is config

    def test_from_dict_wire_names_merge(self):
        config = SmoothingConfig.from_dict({
            'noiseThresholds': {'rotationRate': 8.0},
            'defaultFilters': {'orientation': 'complementary'},
            'revertDelayMs': 2000,
            'kalmanNoise': {'acceleration': [0.1, 0.3]},
            'somethingElse': True,
        })
        assert config.noise_thresholds[ChannelGroup.ROTATION_RATE] == 8.0
        assert config.noise_thresholds[ChannelGroup.ORIENTATION] == 5.0
        assert config.default_filters[ChannelGroup.ORIENTATION] == FilterType.COMPLEMENTARY
        assert config.default_filters[ChannelGroup.ACCELERATION] == FilterType.EXPONENTIAL
        assert config.revert_delay_ms == 2000
        assert config.kalman_noise[ChannelGroup.ACCELERATION] == (0.1, 0.3)

    def test_from_dict_snake_case(self):
        config = SmoothingConfig.from_dict({'moving_average_window_size': 3, 'debug_mode': True})
        assert config.moving_average_window_size == 3
        assert config.debug_mode is True

    @pytest.mark.parametrize("options", [
        {'defaultFilters': {'acceleration': 'complementary'}},
        {'defaultFilters': {'gyro': 'kalman'}},
        {'defaultFilters': {'orientation': 'median'}},
        {'noiseThresholds': {'orientation': 0}},
        {'noiseThresholds': 5.0},
        {'consecutiveViolationLimit': 0},
        {'revertDelayMs': -1},
        {'movingAverageWindowSize': 0},
        {'lowPassCutoffHz': 0},
        {'sampleRateHz': -60},
        {'complementaryAlpha': 1.5},
        {'exponentialAlpha': {'acceleration': 0}},
        {'kalmanNoise': {'orientation': [0.01, 0.0]}},
        {'kalmanNoise': {'orientation': [0.01]}},
        {'kalmanNoise': {'orientation': 0.01}},
    ])
    def test_from_dict_rejects_invalid(self, options):
        with pytest.raises(ConfigurationError):
            SmoothingConfig.from_dict(options)

    def test_to_dict_uses_wire_names(self):
        data = SmoothingConfig().to_dict()
        assert data['default_filters'] == {
            'orientation': 'kalman',
            'acceleration': 'exponential',
            'rotationRate': 'lowPass',
        }
        assert data['noise_thresholds']['rotationRate'] == 10.0

    def test_copy_is_independent(self):
        config = SmoothingConfig()
        clone = config.copy()
        clone.noise_thresholds[ChannelGroup.ORIENTATION] = 1.0
        clone.default_filters[ChannelGroup.ACCELERATION] = FilterType.KALMAN
        assert config.noise_thresholds[ChannelGroup.ORIENTATION] == 5.0
        assert config.default_filters[ChannelGroup.ACCELERATION] == FilterType.EXPONENTIAL
        assert clone.to_dict()['revert_delay_ms'] == 5000

    def test_dt(self):
        config = SmoothingConfig.from_dict({'sampleRateHz': 50})
        assert config.dt == 0.02
