import numpy as np
import pytest

from smoothing.core.errors import ConfigurationError
from smoothing.core.sample import SensorSample
from smoothing.models.prediction_model import (
    PredictionType,
    SensorPredictor,
    exponential_predict,
    linear_predict,
    quadratic_predict,
)


def orientation(alpha, timestamp):
    return SensorSample(orientation={'alpha': alpha}, timestamp=timestamp)


def linear_history(predictor):
    for i, alpha in enumerate((0.0, 10.0, 20.0, 30.0)):
        predictor.update(orientation(alpha, i * 100.0))


class TestSensorPredictor:
    def test_no_history(self):
        assert SensorPredictor().predict() is None

    def test_short_history_returns_latest(self):
        predictor = SensorPredictor(min_history=3)
        predictor.update(orientation(1.0, 0.0))
        predictor.update(orientation(2.0, 100.0))
        prediction = predictor.predict()
        assert prediction == orientation(2.0, 100.0)

    @pytest.mark.parametrize("prediction_type", list(PredictionType))
    def test_linear_motion_is_extrapolated(self, prediction_type):
        predictor = SensorPredictor(prediction_type=prediction_type)
        linear_history(predictor)
        prediction = predictor.predict(look_ahead=0.1)
        assert np.isclose(prediction.orientation['alpha'], 40.0)
        assert np.isclose(prediction.timestamp, 400.0)

    def test_latency_extends_horizon(self):
        predictor = SensorPredictor(prediction_type=PredictionType.LINEAR)
        linear_history(predictor)
        prediction = predictor.predict(look_ahead=0.1, latency=0.1)
        assert np.isclose(prediction.orientation['alpha'], 50.0)

    def test_samples_without_timestamp_ignored(self):
        predictor = SensorPredictor()
        predictor.update(SensorSample(orientation={'alpha': 1.0}))
        assert predictor.predict() is None

    def test_old_samples_dropped(self):
        predictor = SensorPredictor(time_window_ms=150.0)
        linear_history(predictor)
        assert [s.timestamp for s in predictor.history] == [200.0, 300.0]

    def test_set_prediction_type(self):
        predictor = SensorPredictor()
        predictor.set_prediction_type('quadratic')
        assert predictor.prediction_type == PredictionType.QUADRATIC
        with pytest.raises(ConfigurationError):
            predictor.set_prediction_type('cubic')

    def test_set_look_ahead_is_clamped(self):
        predictor = SensorPredictor()
        predictor.set_look_ahead(5.0)
        assert predictor.look_ahead == 1.0
        predictor.set_look_ahead(-1.0)
        assert predictor.look_ahead == 0.0

    def test_adaptive_weights_normalized(self):
        predictor = SensorPredictor()
        predictor.set_adaptive_weights(2.0, 1.0, 1.0)
        assert predictor.get_stats()['weights'] == {'linear': 0.5, 'quadratic': 0.25, 'exponential': 0.25}
        with pytest.raises(ConfigurationError):
            predictor.set_adaptive_weights(0.0, 0.0, 0.0)

    def test_reset(self):
        predictor = SensorPredictor()
        linear_history(predictor)
        predictor.predict()
        predictor.reset()
        assert predictor.predict() is None
        assert predictor.get_stats()['num_predictions'] == 0


class TestExtrapolation:
    def test_linear(self):
        assert np.isclose(linear_predict([(0.0, 0.0), (1.0, 2.0)], 0.5), 3.0)

    def test_linear_zero_dt(self):
        assert linear_predict([(1.0, 0.0), (1.0, 2.0)], 0.5) == 2.0

    def test_quadratic_follows_acceleration(self):
        # v = t^2 sampled at 0, 1, 2: velocity 3, acceleration 2
        prediction = quadratic_predict([(0.0, 0.0), (1.0, 1.0), (2.0, 4.0)], 1.0)
        assert np.isclose(prediction, 4.0 + 3.0 + 1.0)

    def test_exponential_constant_trend(self):
        series = [(0.0, 1.0), (1.0, 3.0), (2.0, 5.0)]
        assert np.isclose(exponential_predict(series, 1.0), 7.0)
