"""
Sensor sample record shared by every pipeline stage.
"""

import math

from .config import ChannelGroup


def finite_float(value):
    """
    Coerce a reading to a finite float.

    Accepts Python and numpy numbers and numeric strings; booleans, None
    and anything non-finite give None.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


class SensorSample:
    """
    One reading from a handheld sensor.

    Holds an axis -> value dict for each channel group. Axes may be absent
    and values may be non-finite on raw samples; smoothed samples are
    always complete and finite.
    """

    def __init__(self, orientation=None, acceleration=None, rotation_rate=None, timestamp=None):
        """
        Initialize a sample.

        Args:
            orientation: Mapping of alpha/beta/gamma in degrees
            acceleration: Mapping of x/y/z in m/s^2
            rotation_rate: Mapping of alpha/beta/gamma in deg/s
            timestamp: Capture time in milliseconds (optional)
        """
        self.orientation = dict(orientation or {})
        self.acceleration = dict(acceleration or {})
        self.rotation_rate = dict(rotation_rate or {})
        self.timestamp = timestamp

    @classmethod
    def zeros(cls, timestamp=None):
        """Create a complete sample with every axis at 0.0"""
        sample = cls(timestamp=timestamp)
        for group in ChannelGroup:
            sample.set(group, {axis: 0.0 for axis in group.axes})
        return sample

    @classmethod
    def from_dict(cls, data):
        """
        Build a sample from its wire shape.

        Accepts 'rotationRate' or 'rotation_rate' for the rotation group.
        Group entries that are not mappings are treated as absent.
        """
        def group_values(*keys):
            for key in keys:
                values = data.get(key)
                if isinstance(values, dict):
                    return values
            return None

        return cls(
            orientation=group_values('orientation'),
            acceleration=group_values('acceleration'),
            rotation_rate=group_values('rotationRate', 'rotation_rate'),
            timestamp=data.get('timestamp'),
        )

    def get(self, group):
        """Get the axis mapping for a channel group"""
        if group is ChannelGroup.ORIENTATION:
            return self.orientation
        if group is ChannelGroup.ACCELERATION:
            return self.acceleration
        return self.rotation_rate

    def set(self, group, values):
        """Replace the axis mapping for a channel group"""
        if group is ChannelGroup.ORIENTATION:
            self.orientation = dict(values)
        elif group is ChannelGroup.ACCELERATION:
            self.acceleration = dict(values)
        else:
            self.rotation_rate = dict(values)

    def copy(self):
        return SensorSample(self.orientation, self.acceleration, self.rotation_rate, self.timestamp)

    def to_dict(self):
        """Convert to the wire shape"""
        data = {group.value: dict(self.get(group)) for group in ChannelGroup}
        if self.timestamp is not None:
            data['timestamp'] = self.timestamp
        return data

    def __eq__(self, other):
        if not isinstance(other, SensorSample):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"SensorSample(orientation={self.orientation}, acceleration={self.acceleration}, "
                f"rotation_rate={self.rotation_rate}, timestamp={self.timestamp})")
