"""
Scalar Kalman filter used per sensor axis.
"""

import math

from ..core.config import validate_kalman_noise


class ScalarKalmanFilter:
    """
    One-dimensional Kalman estimator with a constant-value process model.
    """

    def __init__(self, process_noise=0.01, measurement_noise=0.1):
        """
        Initialize the filter.

        Args:
            process_noise: How much the true value may move between samples (Q).
                Smaller = smoother, slower to react.
            measurement_noise: How noisy measurements are (R).
                Larger = smoother, trusts the estimate more than new readings.

        Raises:
            ConfigurationError: if Q < 0 or R <= 0
        """
        validate_kalman_noise(process_noise, measurement_noise)
        self.process_noise = float(process_noise)
        self.measurement_noise = float(measurement_noise)

        self.estimate = 0.0
        self.error_covariance = 1.0

    def filter(self, measurement):
        """
        Update with a new measurement and return the new estimate.

        A non-finite measurement leaves the state untouched.
        """
        if measurement is None or not math.isfinite(measurement):
            return self.estimate

        # Prediction
        predicted_covariance = self.error_covariance + self.process_noise

        # Update
        gain = predicted_covariance / (predicted_covariance + self.measurement_noise)
        estimate = self.estimate + gain * (measurement - self.estimate)
        if not math.isfinite(estimate):
            # Overflow on extreme input; keep the last good state
            return self.estimate

        self.estimate = estimate
        self.error_covariance = (1.0 - gain) * predicted_covariance
        return self.estimate

    def set_noise(self, process_noise, measurement_noise):
        """
        Retune the filter without losing its estimate.

        Raises:
            ConfigurationError: if Q < 0 or R <= 0
        """
        validate_kalman_noise(process_noise, measurement_noise)
        self.process_noise = float(process_noise)
        self.measurement_noise = float(measurement_noise)

    def seed(self, estimate):
        """Replace the estimate, keeping the error covariance."""
        self.estimate = float(estimate)

    def reset(self):
        """Reset the filter state."""
        self.estimate = 0.0
        self.error_covariance = 1.0

    def get_stats(self):
        """Get filter statistics."""
        return {
            'estimate': self.estimate,
            'error_covariance': self.error_covariance,
            'process_noise': self.process_noise,
            'measurement_noise': self.measurement_noise
        }
