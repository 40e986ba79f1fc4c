"""
Exception types for the smoothing pipeline.
"""


class SmoothingError(Exception):
    """Base class for all smoothing errors."""


class ConfigurationError(SmoothingError, ValueError):
    """
    Raised by configuration calls for an unknown channel group or filter,
    or an out-of-range numeric parameter. The previous configuration is
    left untouched when this is raised.
    """


class InvalidSampleError(SmoothingError):
    """
    A sample axis that is missing or non-finite.

    Never raised out of SensorSmoothingPipeline.smooth(); the pipeline
    substitutes the last valid smoothed value and counts the fault.
    """

    def __init__(self, group, axis, value):
        self.group = group
        self.axis = axis
        self.value = value
        super().__init__(f"Invalid value for {group}.{axis}: {value!r}")


class SchedulingUnavailable(SmoothingError):
    """The host scheduler cannot accept a deferred task."""
