#!/usr/bin/env python3
"""
Command-line entry point for Slither.

Runs the worm tracker over a video file without a GUI and prints what it
found.
"""

import argparse
import logging
import os
import sys

from .. import __version__


def setup_logging(log_level: object = logging.INFO) -> object:
    """Set up console logging for the worm tracker."""
    handlers = [logging.StreamHandler(sys.stdout)]

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger(__name__)
    logger.info("Slither starting up...")
    logger.info(f"Python version: {sys.version}")
    logger.info(f"Working directory: {os.getcwd()}")


def parse_arguments(argv=None) -> object:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Slither - track worms in microscope video",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  slither plate.avi                          # Track with default parameters
  slither plate.avi --config rig2.json       # Per-rig size limits
  slither plate.avi --csv worms.csv          # Export per-frame statistics
        """,
    )

    parser.add_argument("video", help="Path to the video to analyze")

    parser.add_argument(
        "--config",
        type=str,
        help="JSON file with tracking parameter overrides",
    )

    parser.add_argument("--csv", type=str, help="Write per-frame worm statistics to this CSV file")

    parser.add_argument("--summary", type=str, help="Write the final per-worm summary to this CSV file")

    parser.add_argument("--threshold", type=int, help="Grayscale threshold for worm silhouettes (0-255)")

    parser.add_argument("--min-area", type=float, help="Smallest plausible worm area in px^2")

    parser.add_argument("--max-area", type=float, help="Largest plausible worm area in px^2")

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Set the logging level (default: INFO)",
    )

    parser.add_argument("--version", action="version", version=f"Slither {__version__}")

    return parser.parse_args(argv)


def build_parameters(args):
    """
    Combine the config file and command line overrides into tracking parameters.

    Raises:
        ValueError: If the combined parameters are invalid
    """
    from ..config import load_parameters, make_parameters

    params = load_parameters(args.config) if args.config else make_parameters()

    overrides = {}
    if args.threshold is not None:
        overrides["THRESHOLD"] = args.threshold
    if args.min_area is not None:
        overrides["MIN_WORM_AREA"] = args.min_area
    if args.max_area is not None:
        overrides["MAX_WORM_AREA"] = args.max_area
    params.update(overrides)
    return make_parameters(params)


def main(argv=None) -> object:
    """
    Application entry point.

    Parses arguments, sets up logging, runs the analysis worker to
    completion and prints the tracker summary.

    Returns:
        int: Process exit code
    """
    args = parse_arguments(argv)

    log_level = getattr(logging, args.log_level.upper())
    setup_logging(log_level=log_level)
    logger = logging.getLogger(__name__)

    from ..core.analysis import CSV_HEADER, AnalysisWorker
    from ..core.tracker import format_tracker
    from ..data.csv_writer import CSVWriterThread
    from ..data.export import save_summary

    try:
        params = build_parameters(args)
    except (OSError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    csv_writer = None
    if args.csv:
        csv_writer = CSVWriterThread(args.csv, header=CSV_HEADER)
        csv_writer.start()

    def _progress(percentage, status):
        if percentage >= 0:
            logger.debug(f"[{percentage:3d}%] {status}")
        else:
            logger.debug(status)

    worker = AnalysisWorker(args.video, params=params, csv_writer_thread=csv_writer,
                            progress_callback=_progress)
    try:
        worker.start()
        worker.join()
    except KeyboardInterrupt:
        logger.warning("Interrupted, stopping after the current frame...")
        worker.stop()
        worker.join()
    finally:
        if csv_writer is not None:
            csv_writer.stop()
            csv_writer.join()

    print(format_tracker(worker.tracker))

    if args.summary:
        save_summary(worker.tracker, args.summary)

    return 0 if worker.success else 1


if __name__ == "__main__":
    sys.exit(main())
