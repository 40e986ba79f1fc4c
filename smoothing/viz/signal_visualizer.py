"""
Raw versus smoothed signal visualization.

This module plots the recent history of one channel group, raw readings
next to the pipeline output, together with the active filter state.
"""

from collections import deque

import cv2

from .base_visualizer import BaseVisualizer
from ..core.config import ChannelGroup
from ..core.sample import finite_float


class SignalVisualizer(BaseVisualizer):
    """
    Scrolling plot of one channel group with one lane per axis.
    Raw traces are drawn thin, smoothed traces on top of them.
    """

    def __init__(self, group=ChannelGroup.ORIENTATION, window_name="Signal Visualization",
                 size=(800, 600), history_size=200, background_color=(30, 30, 30),
                 raw_color=(120, 120, 120), smoothed_color=(0, 200, 255),
                 grid_color=(70, 70, 70), text_color=(255, 255, 255), record_dir='output'):
        """
        Initialize the signal visualizer.

        Args:
            group: ChannelGroup (or its name) to plot
            window_name: Name of the visualization window
            size: Size of the visualization window (width, height)
            history_size: Number of samples kept per trace
            background_color: Background color (BGR)
            raw_color: Color for raw traces (BGR)
            smoothed_color: Color for smoothed traces (BGR)
            grid_color: Color for lane separators and zero lines (BGR)
            text_color: Color for text overlay (BGR)
            record_dir: Directory for recorded videos
        """
        super().__init__(window_name, size, record_dir=record_dir)
        self.group = ChannelGroup.parse(group)

        self.colors = {
            'background': background_color,
            'raw': raw_color,
            'smoothed': smoothed_color,
            'grid': grid_color,
            'text': text_color
        }
        self.text_color = text_color

        self.key_handlers.update({
            ord('w'): 'toggle_raw',
            ord('a'): 'toggle_auto_scale'
        })

        # Display settings
        self.show_raw = True
        self.auto_scale = True
        self.fixed_range = 1.0
        self.header_height = 60

        # Signal history
        self.history_size = history_size
        self.raw = {axis: deque(maxlen=history_size) for axis in self.group.axes}
        self.smoothed = {axis: deque(maxlen=history_size) for axis in self.group.axes}
        self.status = None
        self.num_updates = 0

        self.image = self.create_image(size, self.colors['background'])

    def add_sample(self, raw_sample, smoothed_sample, status=None):
        """
        Append one raw/smoothed pair to the history.

        Missing or non-finite raw values are stored as None and leave a gap
        in the raw trace.
        """
        raw_values = raw_sample.get(self.group)
        smoothed_values = smoothed_sample.get(self.group)
        for axis in self.group.axes:
            self.raw[axis].append(finite_float(raw_values.get(axis)))
            self.smoothed[axis].append(finite_float(smoothed_values.get(axis)))
        if status is not None:
            self.status = status
        self.num_updates += 1

    def _lane_range(self, axis):
        """Symmetric value range for an axis lane"""
        if not self.auto_scale:
            return self.fixed_range

        values = [v for v in self.smoothed[axis] if v is not None]
        if self.show_raw:
            values.extend(v for v in self.raw[axis] if v is not None)
        if not values:
            return self.fixed_range
        peak = max(abs(v) for v in values)
        return peak * 1.1 if peak > 0 else self.fixed_range

    def _draw_trace(self, values, lane_top, lane_height, value_range, color, thickness):
        width = self.window_size[0]
        step = width / max(self.history_size - 1, 1)
        center = lane_top + lane_height // 2
        half = lane_height / 2 - 4

        previous = None
        for i, value in enumerate(values):
            if value is None:
                previous = None
                continue
            x = int(i * step)
            y = int(center - value / value_range * half)
            if previous is not None:
                cv2.line(self.image, previous, (x, y), color, thickness)
            previous = (x, y)

    def render(self):
        """
        Draw the current history into self.image.

        Returns:
            image: The rendered BGR image
        """
        width, height = self.window_size
        self.image = self.create_image(self.window_size, self.colors['background'])

        axes = self.group.axes
        lane_height = (height - self.header_height) // len(axes)

        for i, axis in enumerate(axes):
            lane_top = self.header_height + i * lane_height
            center = lane_top + lane_height // 2
            value_range = self._lane_range(axis)

            cv2.line(self.image, (0, lane_top), (width, lane_top), self.colors['grid'], 1)
            cv2.line(self.image, (0, center), (width, center), self.colors['grid'], 1)

            if self.show_raw:
                self._draw_trace(self.raw[axis], lane_top, lane_height, value_range,
                                 self.colors['raw'], 1)
            self._draw_trace(self.smoothed[axis], lane_top, lane_height, value_range,
                             self.colors['smoothed'], 2)

            latest = self.smoothed[axis][-1] if self.smoothed[axis] else None
            label = f"{axis}: {latest:.2f}" if latest is not None else f"{axis}: --"
            self.add_text(self.image, label, (10, lane_top + 20))
            self.add_text(self.image, f"+/-{value_range:.1f}", (width - 90, lane_top + 20),
                          scale=0.4)

        self._add_text_overlay()
        self.record_frame(self.image)
        self.add_recording_indicator(self.image)
        return self.image

    def _add_text_overlay(self):
        """Header with group, active filter and noise counter."""
        self.add_text_lines(self.image, [
            f"Group: {self.group.value}",
            f"Samples: {self.num_updates}",
        ], origin=(10, 20))

        if self.status is None:
            return

        filter_name = self.status['active_filters'].get(self.group.value, '?')
        counter = self.status['noise_counters'].get(self.group.value, 0)
        self.add_text_lines(self.image, [
            f"Filter: {filter_name}",
            f"Noise count: {counter}",
        ], origin=(220, 20))

        if self.group.value in self.status.get('pending_reverts', []):
            self.add_text(self.image, "revert pending", (420, 20), color=(0, 200, 0))
        quality = self.status.get('performance', {}).get('overall_quality')
        if quality is not None:
            self.add_text(self.image, f"Quality: {quality:.2f}", (420, 42))

    def update(self, raw_sample, smoothed_sample, status=None, display=True):
        """
        Add a sample, redraw and optionally show the window.

        Args:
            raw_sample: SensorSample fed to the pipeline
            smoothed_sample: SensorSample returned by the pipeline
            status: Optional pipeline filter status
            display: Show the image in a window and read keys

        Returns:
            Key command if a key was pressed
        """
        self.add_sample(raw_sample, smoothed_sample, status)
        self.render()
        if not display:
            return None
        return self.show()

    def clear(self):
        """Clear signal history"""
        for axis in self.group.axes:
            self.raw[axis].clear()
            self.smoothed[axis].clear()
        self.status = None
        self.num_updates = 0
        self.image = self.create_image(self.window_size, self.colors['background'])

    def handle_key(self, key_command):
        """
        Handle key commands.

        Returns:
            True if visualization should exit, False otherwise
        """
        if key_command == 'toggle_raw':
            self.show_raw = not self.show_raw
        elif key_command == 'toggle_auto_scale':
            self.auto_scale = not self.auto_scale
        elif key_command == 'clear':
            self.clear()
        else:
            return super().handle_key(key_command)
        return False

    def print_help(self):
        super().print_help()
        print("  'w' - Toggle raw traces")
        print("  'a' - Toggle auto scaling")
