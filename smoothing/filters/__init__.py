"""
Filtering components for sensor data.

This package provides the signal conditioning stages, including:
- ScalarKalmanFilter: Single-variable Kalman estimator
- FilterBank: Exponential, low-pass, moving-average, Kalman and complementary filters
- NoiseDetector: Counts consecutive noisy samples per channel group
- FilterEscalationController: Steps filter strength up under noise and reverts it later
- quality: Data quality scoring, calibration offsets and drift detection
"""

from .kalman import ScalarKalmanFilter
from .filter_bank import (
    SmoothingFilter,
    ExponentialFilter,
    MovingAverageFilter,
    LowPassFilter,
    KalmanFilter,
    ComplementaryFilter,
    FilterBank,
    create_filter,
)
from .noise_detector import NoiseDetector
from .escalation import FilterEscalationController
from . import quality

__all__ = [
    'ScalarKalmanFilter',
    'SmoothingFilter',
    'ExponentialFilter',
    'MovingAverageFilter',
    'LowPassFilter',
    'KalmanFilter',
    'ComplementaryFilter',
    'FilterBank',
    'create_filter',
    'NoiseDetector',
    'FilterEscalationController',
    'quality',
]
