"""
Sensor Smoothing Package
========================

This package provides adaptive noise filtering for handheld motion sensor
streams. Visualization lives in ``smoothing.viz`` and is imported on demand
so the filtering core does not need a display.
"""

# Import core components to make them available at the root level
from .core.pipeline import SensorSmoothingPipeline
from .core.config import ChannelGroup, FilterType, SmoothingConfig
from .core.sample import SensorSample
from .core.scheduler import FrameScheduler
from .core.errors import (
    SmoothingError,
    ConfigurationError,
    InvalidSampleError,
    SchedulingUnavailable,
)

# Import filtering and prediction components
from .filters.filter_bank import create_filter
from .models.prediction_model import SensorPredictor, PredictionType

__all__ = [
    # Core components
    'SensorSmoothingPipeline',
    'SmoothingConfig',
    'ChannelGroup',
    'FilterType',
    'SensorSample',
    'FrameScheduler',
    'SmoothingError',
    'ConfigurationError',
    'InvalidSampleError',
    'SchedulingUnavailable',

    # Filtering and prediction
    'create_filter',
    'SensorPredictor',
    'PredictionType',
]
