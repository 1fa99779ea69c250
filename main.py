#!/usr/bin/env python3
"""
Command line entry point: export the frames of a 16-bit volume as TIFF files.
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent
sys.path.insert(0, str(project_root))

from tqdm.contrib.logging import logging_redirect_tqdm

from utils.logger import setup_logger
from utils.config import load_config, save_config
from core.errors import PreconditionError, SliceExportError
from core.export_pipeline import convert
from core.tiff_writer import Endianness


def positive_int(value):
    """argparse type for integers >= 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a number >= 1, got {value}")
    return number


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Export the frames of a 16-bit volume as individual TIFF files'
    )

    parser.add_argument('volume_path', type=str,
                        help='Path to the input volume (.mrc, .tif, .h5, .npy). Must be a 3D stack in 16bit format.')
    parser.add_argument('dest_path', type=str, help='Destination path, should be an existing directory.')
    parser.add_argument('--start-at-frame', '-s', type=positive_int, default=1,
                        help='First frame to include. Starts at 1.')
    parser.add_argument('--stop-at-frame', '-t', type=positive_int, default=None,
                        help='Last frame to include. Starts at 1. Defaults to the last frame.')
    parser.add_argument('--endianness', '-e', choices=[e.value for e in Endianness], default=None,
                        help='Byte order of the written TIFF files (default: big)')
    parser.add_argument('--workers', '-w', type=positive_int, default=None, help='Number of worker threads')
    parser.add_argument('--config', '-c', type=str, help='Path to configuration file')
    parser.add_argument('--save-config', action='store_true',
                        help='Write the effective settings back to the configuration file')
    parser.add_argument('--debug', '-d', action='store_true', help='Enable debug mode')
    parser.add_argument('--no-progress', action='store_true', help='Hide the progress bar')
    parser.add_argument('--no-log-file', action='store_true', help='Only log to the console')

    return parser.parse_args(argv)


def main(argv=None):
    """Application entry point."""
    args = parse_arguments(argv)

    config = load_config(args.config)
    export_config = config['export']
    logging_config = config['logging']

    # Command line flags take precedence over the configuration file
    if args.endianness:
        export_config['endianness'] = args.endianness
    if args.workers:
        export_config['max_workers'] = args.workers
    if args.no_progress:
        export_config['show_progress'] = False
    if args.debug:
        logging_config['debug'] = True
    if args.no_log_file:
        logging_config['log_to_file'] = False

    logger = setup_logger(logging_config['debug'], logging_config['log_to_file'])

    if args.save_config:
        save_config(config, args.config)

    dest_path = Path(args.dest_path)
    if not dest_path.is_dir():
        logger.error(f"Destination is not an existing directory: {dest_path}")
        return 1

    if args.stop_at_frame is not None and args.stop_at_frame < args.start_at_frame:
        logger.error(f"Stop frame {args.stop_at_frame} is before start frame {args.start_at_frame}")
        return 1

    try:
        with logging_redirect_tqdm(loggers=[logger]):
            count = convert(
                args.volume_path,
                dest_path,
                export_config['endianness'],
                args.start_at_frame,
                args.stop_at_frame,
                max_workers=export_config['max_workers'],
                show_progress=export_config['show_progress'],
            )
    except (SliceExportError, PreconditionError, ValueError) as e:
        logger.error(f"Error exporting {args.volume_path}: {e}")
        return 1

    logger.info(f"Wrote {count} files to {dest_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
