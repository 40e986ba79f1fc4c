#!/usr/bin/env python3
"""
Demo script running a synthetic sensor stream through the smoothing pipeline.
"""

import argparse
import logging
from datetime import datetime

from sensor_stream import SyntheticSensorStream
from smoothing.core.config import ChannelGroup, FilterType, SmoothingConfig
from smoothing.core.pipeline import SensorSmoothingPipeline
from smoothing.core.scheduler import FrameScheduler
from smoothing.models.prediction_model import SensorPredictor


def parse_args():
    parser = argparse.ArgumentParser(description='Run the sensor smoothing pipeline on synthetic data')
    parser.add_argument('--rate', type=float, default=60.0,
                        help='Sensor sample rate in Hz')
    parser.add_argument('--samples', type=int, default=1200,
                        help='Number of samples to process')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed for the synthetic stream')
    parser.add_argument('--group', choices=[g.value for g in ChannelGroup], default='orientation',
                        help='Channel group to visualize')
    parser.add_argument('--orientation-filter', choices=[f.value for f in FilterType],
                        default='exponential', help='Default filter for orientation')
    parser.add_argument('--calibrate', type=int, default=0,
                        help='Number of initial samples used for calibration')
    parser.add_argument('--show', action='store_true',
                        help='Show the OpenCV signal visualizer')
    parser.add_argument('--realtime', action='store_true',
                        help='Pace the stream at the sample rate')
    parser.add_argument('--save-output', action='store_true',
                        help='Save samples and the final plot')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    return parser.parse_args()


def create_smoothing_config(args):
    """Create a smoothing configuration based on command line arguments"""
    config = SmoothingConfig()
    config.sample_rate_hz = args.rate
    config.default_filters[ChannelGroup.ORIENTATION] = FilterType.parse(args.orientation_filter)
    config.debug_mode = args.debug
    return config.validate()


def main():
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    print("Initializing sensor stream...")
    stream = SyntheticSensorStream(rate_hz=args.rate, seed=args.seed, realtime=args.realtime)

    print("Creating smoothing pipeline...")
    config = create_smoothing_config(args)
    # Reverts follow stream time so the demo behaves the same at any speed
    scheduler = FrameScheduler(clock=lambda: stream.sample_index / stream.rate_hz)
    pipeline = SensorSmoothingPipeline(config, scheduler=scheduler)
    predictor = SensorPredictor()

    visualizer = None
    if args.show or args.save_output:
        from smoothing.viz.signal_visualizer import SignalVisualizer
        visualizer = SignalVisualizer(group=args.group)
        if args.show:
            visualizer.print_help()

    raw_samples = []
    smoothed_samples = []

    stream.start()
    try:
        if args.calibrate > 0:
            print(f"Calibrating on {args.calibrate} samples...")
            rest = [stream.get_sample() for _ in range(args.calibrate)]
            pipeline.calibrate(rest, group=ChannelGroup.ROTATION_RATE)

        print("Processing samples...")
        for i in range(args.samples):
            raw = stream.get_sample()
            smoothed = pipeline.smooth(raw)
            predictor.update(smoothed)

            if args.save_output:
                raw_samples.append(raw)
                smoothed_samples.append(smoothed)

            status = pipeline.get_filter_status()
            if i % 60 == 0:
                filters = ', '.join(f"{g}={f}" for g, f in status['active_filters'].items())
                print(f"Sample {i}: {filters} | "
                      f"quality={status['performance']['overall_quality']:.2f} | "
                      f"{status['performance']['average_process_time_ms']:.3f} ms/sample")

            if visualizer is not None:
                cmd = visualizer.update(raw, smoothed, status, display=args.show)
                if visualizer.handle_key(cmd):
                    break

    except KeyboardInterrupt:
        print("\nInterrupted by user")
    finally:
        print("\nCleaning up...")
        stream.stop()

        status = pipeline.get_filter_status()
        performance = status['performance']
        print(f"Processed {performance['samples_processed']} samples, "
              f"{performance['escalations']} escalations, {performance['reverts']} reverts, "
              f"{performance['invalid_values']} invalid values replaced")

        drifting = {group: axes for group, axes in status['drift'].items() if axes}
        if drifting:
            print(f"Drift detected on {drifting}")

        prediction = predictor.predict()
        if prediction is not None:
            print(f"Predicted next orientation: {prediction.orientation}")

        if args.save_output:
            from smoothing.viz import utils as viz_utils
            timestamp_str = datetime.now().strftime('%Y%m%d_%H%M%S')
            viz_utils.save_samples_to_csv(raw_samples, smoothed_samples,
                                          filename=f"samples_{timestamp_str}.csv")
            viz_utils.save_samples_to_json(raw_samples, smoothed_samples,
                                           filename=f"samples_{timestamp_str}.json",
                                           metadata={'config': config.to_dict(), 'status': status})
            viz_utils.save_visualization_image(visualizer.render(),
                                               f"signal_{timestamp_str}.png")

        if visualizer is not None:
            visualizer.close()
        pipeline.dispose()
        scheduler.shutdown()


if __name__ == "__main__":
    main()
