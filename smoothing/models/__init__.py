"""
Prediction models for sensor data.
"""

from .prediction_model import SensorPredictor, PredictionType

__all__ = ['SensorPredictor', 'PredictionType']
