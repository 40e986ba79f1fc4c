import math

from sensor_stream import SyntheticSensorStream
from smoothing.core.config import ChannelGroup
from smoothing.core.pipeline import SensorSmoothingPipeline


class TestSyntheticSensorStream:
    def test_not_running(self):
        stream = SyntheticSensorStream(seed=1)
        assert stream.get_sample() is None

    def test_timestamps_follow_rate(self):
        stream = SyntheticSensorStream(rate_hz=50.0, seed=1)
        stream.start()
        timestamps = [stream.get_sample().timestamp for _ in range(3)]
        stream.stop()
        assert timestamps == [0.0, 20.0, 40.0]

    def test_deterministic_with_seed(self):
        first = SyntheticSensorStream(seed=3, dropout_rate=0.0)
        second = SyntheticSensorStream(seed=3, dropout_rate=0.0)
        first.start()
        second.start()
        for _ in range(20):
            assert first.get_sample() == second.get_sample()

    def test_dropouts(self):
        stream = SyntheticSensorStream(seed=5, dropout_rate=1.0)
        stream.start()
        sample = stream.get_sample()
        for group in ChannelGroup:
            values = sample.get(group)
            assert all(math.isnan(v) for v in values.values())

    def test_bursts(self):
        stream = SyntheticSensorStream(burst_every=10, burst_length=3)
        assert not stream.in_burst(0)
        assert stream.in_burst(7)
        assert stream.in_burst(9)
        assert not stream.in_burst(10)
        assert not SyntheticSensorStream(burst_every=0).in_burst(9)

    def test_drives_pipeline(self):
        stream = SyntheticSensorStream(seed=11, burst_every=60, burst_length=20, burst_gain=20.0)
        pipeline = SensorSmoothingPipeline()
        stream.start()
        for _ in range(240):
            result = pipeline.smooth(stream.get_sample())
            for group in ChannelGroup:
                assert all(math.isfinite(v) for v in result.get(group).values())
        stream.stop()
        status = pipeline.get_filter_status()
        assert status['performance']['samples_processed'] == 240
        assert status['performance']['escalations'] > 0
        pipeline.dispose()
