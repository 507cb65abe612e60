"""
Binaural Virtualizer Command Line

Renders a mono WAV file to binaural stereo using the nearest HRIR
measurement in a SOFA file.

Usage:
    python virtualize.py --sofa data/RIEC_hrir_subject_069.sofa \
        --input data/sample.wav --output data/sample_out.wav \
        --azimuth -90 --elevation 0 --radius 1.5

    python virtualize.py --config render.json
"""

import sys
import argparse
import logging

from virtualizer.render.config import RenderConfig, DEFAULT_SOURCE_POSITION
from virtualizer.render.core import BinauralVirtualizer, render
from virtualizer.render.sofa_support import load_sofa_file, describe_dataset
from virtualizer.render.exceptions import VirtualizerError


def build_parser():
    parser = argparse.ArgumentParser(description="Render a mono WAV file to binaural stereo from a SOFA HRIR dataset")
    parser.add_argument('--config', help="JSON render configuration; other options override it")
    parser.add_argument('--sofa', dest='dataset_path', help="SOFA HRIR dataset")
    parser.add_argument('--input', dest='input_path', help="Mono 16-bit input WAV file")
    parser.add_argument('--output', dest='output_path', help="Stereo output WAV file")
    parser.add_argument('--azimuth', type=float, help="Source azimuth in degrees, positive to the left")
    parser.add_argument('--elevation', type=float, help="Source elevation in degrees")
    parser.add_argument('--radius', type=float, help="Source distance in metres")
    parser.add_argument('--method', dest='convolution_method', choices=['direct', 'fft'])
    parser.add_argument('--sample-rate-policy', dest='sample_rate_policy', choices=['error', 'warn', 'resample'])
    parser.add_argument('--no-threads', action='store_true', help="Convolve both ears on the calling thread")
    parser.add_argument('--plot', help="Save a plot of the selected impulse responses to this PNG")
    parser.add_argument('--info', action='store_true', help="Describe the SOFA dataset and exit")
    parser.add_argument('--save-config', help="Write the effective configuration to this JSON file")
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser


def config_from_args(args) -> RenderConfig:
    config_dict = RenderConfig.load(args.config).to_dict() if args.config else RenderConfig().to_dict()

    for key in ('dataset_path', 'input_path', 'output_path', 'convolution_method', 'sample_rate_policy'):
        value = getattr(args, key)
        if value is not None:
            config_dict[key] = value

    position = config_dict.get('source_position', {
        'azimuth': DEFAULT_SOURCE_POSITION.azimuth,
        'elevation': DEFAULT_SOURCE_POSITION.elevation,
        'radius': DEFAULT_SOURCE_POSITION.radius,
    })
    for key in ('azimuth', 'elevation', 'radius'):
        value = getattr(args, key)
        if value is not None:
            position[key] = value
    config_dict['source_position'] = position

    if args.no_threads:
        config_dict['use_threading'] = False

    return RenderConfig.from_dict(config_dict)


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    try:
        config = config_from_args(args)

        if args.save_config:
            config.save(args.save_config)

        if args.info:
            for key, value in describe_dataset(load_sofa_file(config.dataset_path)).items():
                print(f"{key}: {value}")
            return 0

        virtualizer = BinauralVirtualizer.from_config(config)

        if args.plot:
            from virtualizer.render.visualizer import plot_impulse_responses
            left, right = virtualizer.impulse_responses(config.source_position)
            plot_impulse_responses(left, right, args.plot)

        result = render(config, virtualizer)
    except (VirtualizerError, FileNotFoundError) as e:
        logging.getLogger(__name__).error(str(e))
        return 1

    print(f"Measurement {result.measurement_index} (dataset rate {result.dataset_sample_rate} Hz)")
    print(f"Ran in {result.elapsed_ms:.0f} ms")
    print(f"Wrote {result.n_frames} frames to {config.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
