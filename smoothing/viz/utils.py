"""
Visualization utilities for sensor smoothing.

This module provides helper functions for saving sample streams and plots.
"""

import csv
import json
import math
import os
from datetime import datetime

import cv2

from ..core.config import ChannelGroup


def create_output_dir(dirname='output'):
    """
    Create output directory if it doesn't exist.

    Args:
        dirname: Directory name to create

    Returns:
        Path to the created directory
    """
    os.makedirs(dirname, exist_ok=True)
    return dirname


def _output_path(filename, output_dir, prefix, extension):
    create_output_dir(output_dir)
    if filename is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"{prefix}_{timestamp}.{extension}"
    return os.path.join(output_dir, filename)


def sample_headers(prefix=''):
    """Column names for one sample, e.g. 'orientation.alpha'"""
    return [f"{prefix}{group.value}.{axis}" for group in ChannelGroup for axis in group.axes]


def _sample_row(sample):
    row = []
    for group in ChannelGroup:
        values = sample.get(group)
        for axis in group.axes:
            value = values.get(axis)
            row.append('' if value is None else value)
    return row


def save_samples_to_csv(raw_samples, smoothed_samples=None, filename=None, output_dir='output'):
    """
    Save a sample stream to CSV file.

    Args:
        raw_samples: List of SensorSample fed to the pipeline
        smoothed_samples: Optional list of matching pipeline outputs
        filename: Output filename or None for automatic timestamp-based name
        output_dir: Output directory

    Returns:
        Path to the saved file
    """
    filepath = _output_path(filename, output_dir, 'samples', 'csv')

    headers = ['timestamp'] + sample_headers('raw.')
    if smoothed_samples is not None:
        headers += sample_headers('smoothed.')

    with open(filepath, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(headers)

        for i, raw in enumerate(raw_samples):
            row = ['' if raw.timestamp is None else raw.timestamp]
            row.extend(_sample_row(raw))
            if smoothed_samples is not None and i < len(smoothed_samples):
                row.extend(_sample_row(smoothed_samples[i]))
            writer.writerow(row)

    print(f"Saved samples to {filepath}")
    return filepath


def save_samples_to_json(raw_samples, smoothed_samples=None, filename=None,
                         output_dir='output', metadata=None):
    """
    Save a sample stream to JSON file.

    Non-finite readings are written as null.

    Args:
        raw_samples: List of SensorSample fed to the pipeline
        smoothed_samples: Optional list of matching pipeline outputs
        filename: Output filename or None for automatic timestamp-based name
        output_dir: Output directory
        metadata: Optional dictionary with additional metadata (e.g. filter status)

    Returns:
        Path to the saved file
    """
    filepath = _output_path(filename, output_dir, 'samples', 'json')

    data = {
        'timestamp': datetime.now().isoformat(),
        'samples_count': len(raw_samples),
        'samples': []
    }
    if metadata is not None:
        data['metadata'] = metadata

    for i, raw in enumerate(raw_samples):
        entry = {'raw': _json_safe(raw.to_dict())}
        if smoothed_samples is not None and i < len(smoothed_samples):
            entry['smoothed'] = _json_safe(smoothed_samples[i].to_dict())
        data['samples'].append(entry)

    with open(filepath, 'w') as f:
        json.dump(data, f, indent=2, allow_nan=False)

    print(f"Saved samples to {filepath}")
    return filepath


def _json_safe(value):
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def save_visualization_image(image, filename=None, output_dir='output'):
    """
    Save visualization image to file.

    Args:
        image: Image to save
        filename: Output filename or None for automatic timestamp-based name
        output_dir: Output directory

    Returns:
        Path to the saved file
    """
    filepath = _output_path(filename, output_dir, 'visualization', 'png')
    cv2.imwrite(filepath, image)

    print(f"Saved visualization to {filepath}")
    return filepath
