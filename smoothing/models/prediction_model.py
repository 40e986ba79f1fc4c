"""
Look-ahead prediction to compensate sensor latency.
"""

from collections import deque
from enum import Enum

import numpy as np

from ..core.config import ChannelGroup
from ..core.errors import ConfigurationError
from ..core.sample import SensorSample, finite_float


class PredictionType(Enum):
    """Enum for different extrapolation strategies"""
    LINEAR = 'linear'
    QUADRATIC = 'quadratic'
    EXPONENTIAL = 'exponential'
    ADAPTIVE = 'adaptive'


class SensorPredictor:
    """
    Predicts the next sensor sample from recent history.
    Supports multiple prediction strategies.
    """

    def __init__(self, history_size=10, min_history=3, time_window_ms=200.0,
                 look_ahead=0.1, prediction_type=PredictionType.ADAPTIVE):
        """
        Initialize the predictor.

        Args:
            history_size: Maximum number of samples kept
            min_history: Samples needed before extrapolating
            time_window_ms: Samples older than this (relative to the newest) are dropped
            look_ahead: Default prediction horizon in seconds
            prediction_type: PredictionType used by predict()
        """
        self.history = deque(maxlen=history_size)
        self.min_history = min_history
        self.time_window_ms = time_window_ms
        self.look_ahead = look_ahead
        self.prediction_type = prediction_type
        self.weights = {
            PredictionType.LINEAR: 0.6,
            PredictionType.QUADRATIC: 0.3,
            PredictionType.EXPONENTIAL: 0.1,
        }

        # Statistics
        self.num_predictions = 0

    def update(self, sample):
        """
        Add a timestamped sample to the history.

        Samples without a timestamp are ignored.
        """
        if sample.timestamp is None:
            return
        self.history.append(sample.copy())

        cutoff = sample.timestamp - self.time_window_ms
        while self.history and self.history[0].timestamp < cutoff:
            self.history.popleft()

    def predict(self, look_ahead=None, latency=0.0):
        """
        Predict the sample look_ahead + latency seconds after the newest one.

        Args:
            look_ahead: Prediction horizon in seconds (default: self.look_ahead)
            latency: Additional delay to compensate, in seconds

        Returns:
            predicted: SensorSample, or None without any history
        """
        if not self.history:
            return None

        latest = self.history[-1]
        if len(self.history) < self.min_history:
            return latest.copy()

        horizon = (self.look_ahead if look_ahead is None else look_ahead) + latency
        history = list(self.history)

        predicted = SensorSample(timestamp=latest.timestamp + horizon * 1000.0)
        for group in ChannelGroup:
            values = {}
            for axis, value in latest.get(group).items():
                series = _axis_series(history, group, axis)
                if len(series) < 2:
                    values[axis] = value
                else:
                    values[axis] = self._predict_axis(series, horizon)
            predicted.set(group, values)

        self.num_predictions += 1
        return predicted

    def _predict_axis(self, series, horizon):
        if self.prediction_type == PredictionType.LINEAR:
            return linear_predict(series, horizon)
        elif self.prediction_type == PredictionType.QUADRATIC:
            return quadratic_predict(series, horizon)
        elif self.prediction_type == PredictionType.EXPONENTIAL:
            return exponential_predict(series, horizon)

        return (self.weights[PredictionType.LINEAR] * linear_predict(series, horizon)
                + self.weights[PredictionType.QUADRATIC] * quadratic_predict(series, horizon)
                + self.weights[PredictionType.EXPONENTIAL] * exponential_predict(series, horizon))

    def set_prediction_type(self, prediction_type):
        """
        Raises:
            ConfigurationError: for an unknown prediction type
        """
        if isinstance(prediction_type, str):
            try:
                prediction_type = PredictionType(prediction_type.lower())
            except ValueError:
                raise ConfigurationError(f"Unknown prediction type: {prediction_type!r}") from None
        if not isinstance(prediction_type, PredictionType):
            raise ConfigurationError(f"Unknown prediction type: {prediction_type!r}")
        self.prediction_type = prediction_type

    def set_look_ahead(self, look_ahead):
        """Set the default horizon, clamped to [0, 1] seconds"""
        self.look_ahead = max(0.0, min(1.0, look_ahead))

    def set_adaptive_weights(self, linear, quadratic, exponential):
        """
        Set the blend used by adaptive prediction; weights are normalized.

        Raises:
            ConfigurationError: if the weights do not sum to a positive value
        """
        total = linear + quadratic + exponential
        if not total > 0:
            raise ConfigurationError("Adaptive weights must sum to a positive value")
        self.weights = {
            PredictionType.LINEAR: linear / total,
            PredictionType.QUADRATIC: quadratic / total,
            PredictionType.EXPONENTIAL: exponential / total,
        }

    def reset(self):
        """Reset the predictor state."""
        self.history.clear()
        self.num_predictions = 0

    def get_stats(self):
        """Get predictor statistics."""
        return {
            'prediction_type': self.prediction_type.value,
            'history_size': len(self.history),
            'look_ahead': self.look_ahead,
            'weights': {t.value: w for t, w in self.weights.items()},
            'num_predictions': self.num_predictions
        }


def _axis_series(history, group, axis):
    """(seconds, value) pairs of finite readings for one axis"""
    series = []
    for sample in history:
        value = finite_float(sample.get(group).get(axis))
        if value is not None:
            series.append((sample.timestamp / 1000.0, value))
    return series


def linear_predict(series, horizon):
    """Extrapolate with the velocity between the last two points"""
    (t0, v0), (t1, v1) = series[-2], series[-1]
    dt = t1 - t0
    if dt <= 0:
        return v1
    return v1 + (v1 - v0) / dt * horizon


def quadratic_predict(series, horizon):
    """Extrapolate with velocity and acceleration from the last three points"""
    if len(series) < 3:
        return linear_predict(series, horizon)
    (t0, v0), (t1, v1), (t2, v2) = series[-3:]
    dt1 = t2 - t1
    dt2 = t1 - t0
    if dt1 <= 0 or dt2 <= 0:
        return linear_predict(series, horizon)

    velocity = (v2 - v1) / dt1
    previous_velocity = (v1 - v0) / dt2
    acceleration = (velocity - previous_velocity) / ((dt1 + dt2) / 2)
    return v2 + velocity * horizon + 0.5 * acceleration * horizon ** 2


def exponential_predict(series, horizon):
    """Extrapolate with an exponentially weighted mean of past trends"""
    times = np.array([t for t, _ in series])
    values = np.array([v for _, v in series])
    dts = np.diff(times)
    valid = dts > 0
    if not np.any(valid):
        return float(values[-1])

    trends = np.diff(values)[valid] / dts[valid]
    # Newest trend gets weight e^-1, older ones decay further
    ages = np.arange(len(series) - 1, 0, -1)[valid]
    weights = np.exp(-ages.astype(float))
    return float(values[-1] + np.sum(trends * weights) / np.sum(weights) * horizon)
