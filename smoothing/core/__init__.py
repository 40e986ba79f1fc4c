"""
Core smoothing components.

This package provides core components for sensor smoothing, including:
- SensorSmoothingPipeline: Main component turning raw samples into control values
- SmoothingConfig: Configuration parameters for smoothing
- ChannelGroup / FilterType: Enums for signal groups and filter algorithms
- SensorSample: Record holding one reading of every channel group
- FrameScheduler: Cooperative scheduler for timed filter reverts
"""

from .config import ChannelGroup, FilterType, SmoothingConfig, FILTER_RANKING
from .errors import SmoothingError, ConfigurationError, InvalidSampleError, SchedulingUnavailable
from .sample import SensorSample
from .scheduler import FrameScheduler, ScheduledTask
from .pipeline import SensorSmoothingPipeline

__all__ = [
    'SensorSmoothingPipeline',
    'SmoothingConfig',
    'ChannelGroup',
    'FilterType',
    'FILTER_RANKING',
    'SensorSample',
    'FrameScheduler',
    'ScheduledTask',
    'SmoothingError',
    'ConfigurationError',
    'InvalidSampleError',
    'SchedulingUnavailable',
]
