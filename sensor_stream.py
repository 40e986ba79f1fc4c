import math
import time

import numpy as np

from smoothing.core.config import ChannelGroup
from smoothing.core.sample import SensorSample


class SyntheticSensorStream:
    """
    A simulated handheld motion sensor.
    Produces orientation, acceleration and rotation rate readings with
    gaussian noise, periodic noise bursts and occasional dropped axes.
    """

    def __init__(self, rate_hz=60.0, noise_std=None, burst_every=300, burst_length=30,
                 burst_gain=8.0, dropout_rate=0.01, seed=None, realtime=False):
        """
        Initialize the sensor stream.

        Args:
            rate_hz: Sample rate in Hz
            noise_std: Per-group noise standard deviation, keyed by ChannelGroup
            burst_every: Samples between the starts of noise bursts (0 disables bursts)
            burst_length: Samples per noise burst
            burst_gain: Noise multiplier during a burst
            dropout_rate: Probability of an axis being missing or NaN
            seed: Seed for the random generator
            realtime: Sleep between samples to hold rate_hz
        """
        self.rate_hz = rate_hz
        self.noise_std = {
            ChannelGroup.ORIENTATION: 0.5,
            ChannelGroup.ACCELERATION: 0.2,
            ChannelGroup.ROTATION_RATE: 1.5,
        }
        if noise_std is not None:
            self.noise_std.update(noise_std)
        self.burst_every = burst_every
        self.burst_length = burst_length
        self.burst_gain = burst_gain
        self.dropout_rate = dropout_rate
        self.realtime = realtime

        self.rng = np.random.default_rng(seed)

        # Performance tracking
        self.sample_times = []
        self.max_sample_times = 30  # Keep track of last 30 samples for rate calculation
        self.last_sample_time = None

        # Status
        self.is_running = False
        self.sample_index = 0

    def start(self):
        """
        Start the stream.

        Returns:
            bool: True once the stream is running
        """
        self.sample_index = 0
        self.sample_times = []
        self.last_sample_time = None
        self.is_running = True
        print(f"Synthetic sensor started at {self.rate_hz} Hz")
        return True

    def stop(self):
        """Stop the stream."""
        self.is_running = False
        print("Synthetic sensor stopped")

    def in_burst(self, index=None):
        """Whether the given (or next) sample falls in a noise burst"""
        if not self.burst_every:
            return False
        index = self.sample_index if index is None else index
        return index % self.burst_every >= self.burst_every - self.burst_length

    def _true_motion(self, t):
        """Slow sweeping motion the noise is laid over."""
        alpha = 30.0 * math.sin(0.5 * t)
        beta = 15.0 * math.sin(0.8 * t)
        gamma = 10.0 * math.cos(0.3 * t)
        return {
            ChannelGroup.ORIENTATION: {'alpha': alpha, 'beta': beta, 'gamma': gamma},
            ChannelGroup.ACCELERATION: {
                'x': 9.81 * math.sin(math.radians(-beta)),
                'y': 9.81 * math.sin(math.radians(alpha)) * math.cos(math.radians(beta)),
                'z': 9.81 * math.cos(math.radians(alpha)) * math.cos(math.radians(beta)),
            },
            ChannelGroup.ROTATION_RATE: {
                'alpha': 15.0 * math.cos(0.5 * t),
                'beta': 12.0 * math.cos(0.8 * t),
                'gamma': -3.0 * math.sin(0.3 * t),
            },
        }

    def get_sample(self):
        """
        Produce the next sample.

        Returns:
            sample: SensorSample with a timestamp in milliseconds, or None
                if the stream is not running
        """
        if not self.is_running:
            print("Sensor is not running. Call start() first.")
            return None

        if self.realtime and self.last_sample_time is not None:
            wait = 1.0 / self.rate_hz - (time.time() - self.last_sample_time)
            if wait > 0:
                time.sleep(wait)

        t = self.sample_index / self.rate_hz
        gain = self.burst_gain if self.in_burst() else 1.0

        sample = SensorSample(timestamp=t * 1000.0)
        for group, values in self._true_motion(t).items():
            noisy = {}
            for axis, value in values.items():
                draw = self.rng.random()
                if draw < self.dropout_rate / 2:
                    continue
                if draw < self.dropout_rate:
                    noisy[axis] = float('nan')
                    continue
                noisy[axis] = value + float(self.rng.normal(0.0, self.noise_std[group] * gain))
            sample.set(group, noisy)

        self.sample_index += 1

        # Track sample times for rate calculation
        now = time.time()
        if self.last_sample_time is not None:
            self.sample_times.append(now - self.last_sample_time)
            if len(self.sample_times) > self.max_sample_times:
                self.sample_times.pop(0)
        self.last_sample_time = now

        return sample

    def get_rate(self):
        """
        Calculate the achieved sample rate from recent samples.

        Returns:
            float: Samples per second
        """
        if not self.sample_times:
            return 0.0

        avg_sample_time = sum(self.sample_times) / len(self.sample_times)
        return 1.0 / avg_sample_time if avg_sample_time > 0 else 0.0

    def __iter__(self):
        while self.is_running:
            yield self.get_sample()


# Example usage (only runs if script is executed directly)
if __name__ == "__main__":
    stream = SyntheticSensorStream(rate_hz=60.0, seed=1)
    if stream.start():
        try:
            for _ in range(10):
                print(stream.get_sample())
        finally:
            stream.stop()
