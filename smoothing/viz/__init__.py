"""
Visualization components for sensor smoothing.

This package provides OpenCV visualization tools for raw and smoothed signals.
"""

from .base_visualizer import BaseVisualizer
from .signal_visualizer import SignalVisualizer
from . import utils as viz_utils

__all__ = [
    'BaseVisualizer',
    'SignalVisualizer',
    'viz_utils',
]
