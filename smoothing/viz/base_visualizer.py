"""
Base visualizer class for sensor signal visualization.

This module provides the OpenCV canvas, key handling and video recording
shared by the smoothing visualizers.
"""

import logging
import os
from datetime import datetime

import cv2
import numpy as np

LOGGER = logging.getLogger(__name__)

# Key code -> command name
KEY_COMMANDS = {
    ord('q'): 'quit',
    27: 'quit',             # ESC
    ord('r'): 'record',
    ord('c'): 'clear',
    ord('h'): 'help',
}


class BaseVisualizer:
    """
    Base class for smoothing visualization components.

    Subclasses draw into self.image; this class owns the window, turns key
    presses into command names and writes recorded frames to a video file.
    The window only opens on the first show(), so rendering works headless.
    """

    def __init__(self, window_name="Sensor Smoothing", size=(800, 600),
                 record_dir='output', record_fps=30.0):
        """
        Initialize the base visualizer.

        Args:
            window_name: Name of the visualization window
            size: Canvas size (width, height)
            record_dir: Directory for recorded videos
            record_fps: Frame rate written to recorded videos
        """
        self.window_name = window_name
        self.window_size = size
        self.image = None
        self.window_open = False

        # Recording
        self.record_dir = record_dir
        self.record_fps = record_fps
        self.recording = False
        self.record_start_time = None
        self.record_path = None
        self.video_writer = None
        self.frames_recorded = 0

        # Text style
        self.font = cv2.FONT_HERSHEY_SIMPLEX
        self.font_scale = 0.5
        self.text_thickness = 1
        self.text_color = (255, 255, 255)
        self.line_height = 22

        self.key_handlers = dict(KEY_COMMANDS)

    def create_image(self, size=None, color=(0, 0, 0)):
        """
        Blank BGR canvas.

        Args:
            size: (width, height), defaults to the window size
            color: Fill color in BGR
        """
        width, height = size if size is not None else self.window_size
        img = np.empty((height, width, 3), dtype=np.uint8)
        img[:] = tuple(int(c) for c in color)
        return img

    def add_text(self, image, text, position, color=None, scale=None, thickness=None):
        cv2.putText(image, text, position, self.font,
                    self.font_scale if scale is None else scale,
                    self.text_color if color is None else color,
                    self.text_thickness if thickness is None else thickness)

    def add_text_lines(self, image, lines, origin=(10, 20), color=None):
        """
        Write lines of text downwards from origin.

        Returns:
            y: Baseline below the last line
        """
        x, y = origin
        for line in lines:
            self.add_text(image, line, (x, y), color=color)
            y += self.line_height
        return y

    def show(self, image=None):
        """
        Display the current image and poll the keyboard.

        Args:
            image: Image to show instead of self.image

        Returns:
            Command name for the pressed key, or None
        """
        if image is not None:
            self.image = image

        if not self.window_open:
            cv2.namedWindow(self.window_name)
            self.window_open = True
        if self.image is not None:
            cv2.imshow(self.window_name, self.image)

        key = cv2.waitKey(1) & 0xFF
        return self.key_handlers.get(key)

    def get_image(self):
        return self.image

    # -------------------------
    # Recording
    # -------------------------

    def start_recording(self):
        """Start a new recording; the video file is opened with the first frame."""
        self.recording = True
        self.record_start_time = datetime.now()
        self.record_path = None
        self.frames_recorded = 0

    def stop_recording(self):
        """Stop recording and finalize the video file."""
        if self.video_writer is not None:
            self.video_writer.release()
            self.video_writer = None
            LOGGER.info(f"Recorded {self.frames_recorded} frames to {self.record_path}")
        self.recording = False
        self.record_start_time = None

    def toggle_recording(self):
        if self.recording:
            self.stop_recording()
        else:
            self.start_recording()

    def record_frame(self, image=None):
        """
        Append a frame to the active recording.

        Returns:
            bool: True if a frame was written
        """
        image = self.image if image is None else image
        if not self.recording or image is None:
            return False

        if self.video_writer is None:
            os.makedirs(self.record_dir, exist_ok=True)
            timestamp = self.record_start_time.strftime("%Y%m%d_%H%M%S")
            name = self.window_name.lower().replace(' ', '_')
            self.record_path = os.path.join(self.record_dir, f"{name}_{timestamp}.avi")
            height, width = image.shape[:2]
            self.video_writer = cv2.VideoWriter(
                self.record_path, cv2.VideoWriter_fourcc(*'MJPG'), self.record_fps, (width, height))

        self.video_writer.write(image)
        self.frames_recorded += 1
        return True

    def add_recording_indicator(self, image):
        """Draw a red REC timer in the bottom right corner while recording."""
        if not self.recording:
            return
        elapsed = (datetime.now() - self.record_start_time).total_seconds()
        rec_text = f"REC {elapsed:.1f}s"
        (text_width, _), _ = cv2.getTextSize(rec_text, self.font, self.font_scale, self.text_thickness)
        position = (image.shape[1] - text_width - 10, image.shape[0] - 10)
        self.add_text(image, rec_text, position, color=(0, 0, 255))

    def close(self):
        """Stop any recording and close the window."""
        if self.recording:
            self.stop_recording()
        if self.window_open:
            cv2.destroyWindow(self.window_name)
            self.window_open = False

    def handle_key(self, key_command):
        """
        Act on a command returned by show().

        Returns:
            True if visualization should exit, False otherwise
        """
        if key_command == 'quit':
            return True
        if key_command == 'record':
            self.toggle_recording()
        elif key_command == 'help':
            self.print_help()
        return False

    def print_help(self):
        print(f"\n{self.window_name} Controls:")
        print("  'q' or ESC - Quit visualization")
        print("  'r' - Start/stop video recording")
        print("  'c' - Clear signal history")
        print("  'h' - Show this help")
