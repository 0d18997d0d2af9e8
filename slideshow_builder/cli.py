"""
Command line entrypoint for the slideshow builder.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional, Sequence

from dotenv import load_dotenv

from .app import SlideshowBuilder
from .cancellation import CancellationToken
from .config import load_config, resolve_durations
from .errors import SlideshowError
from .logging_setup import configure_logging
from .models import SlideshowOutcome

EXIT_OK = 0
EXIT_INVALID_INPUT = 1
EXIT_CANCELED = 2
EXIT_FAILED = 3

DEFAULT_CONFIG_FILE = "slideshow.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slideshow_builder",
        description="Create a crossfading slideshow video from a directory of images.",
    )
    parser.add_argument("directory", nargs="?", help="Directory containing the images")
    parser.add_argument(
        "slide_duration",
        nargs="?",
        help="Duration of each slide in seconds (default: 2.0)",
    )
    parser.add_argument(
        "crossfade_duration",
        nargs="?",
        help="Duration of the crossfade transition in seconds (default: 0.5)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(DEFAULT_CONFIG_FILE),
        help="JSON settings file (falls back to SLIDESHOW_* environment variables)",
    )
    parser.add_argument("--output", type=Path, help="Output video path")
    parser.add_argument("--fps", type=int, help="Frame rate of the output video")
    parser.add_argument("--width", type=int, help="Canvas width in pixels")
    parser.add_argument("--height", type=int, help="Canvas height in pixels")
    parser.add_argument("--workers", type=int, help="Worker threads for frame preparation")
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _prompt_for_missing(args: argparse.Namespace, input_func: Callable[[str], str]) -> None:
    """Ask for the directory and durations when no directory was given."""
    args.directory = input_func("Enter the directory path containing images: ").strip()

    slide = input_func("Enter slide duration in seconds (default: 2.0): ").strip()
    if slide:
        args.slide_duration = slide

    crossfade = input_func("Enter crossfade duration in seconds (default: 0.5): ").strip()
    if crossfade:
        args.crossfade_duration = crossfade


def _install_interrupt_handler(token: CancellationToken, logger: logging.Logger):
    if threading.current_thread() is not threading.main_thread():
        return None

    def _handle(signum, frame) -> None:
        if not token.is_canceled:
            logger.info("Cancellation requested. Attempting to stop gracefully...")
        token.cancel()

    return signal.signal(signal.SIGINT, _handle)


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    input_func: Callable[[str], str] = input,
) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_config(args.config)
    logger = configure_logging(
        verbose=args.verbose,
        log_file=args.log_file or settings.log_file,
    )

    logger.info("Image Slideshow Generator with Crossfade")
    logger.info("Usage: slideshow_builder <directory> [slide_duration] [crossfade_duration]")

    if args.directory is None:
        _prompt_for_missing(args, input_func)

    if not args.directory:
        logger.error("No directory path provided.")
        return EXIT_INVALID_INPUT

    input_dir = Path(args.directory)
    if not input_dir.is_dir():
        logger.error("Directory '%s' does not exist.", input_dir)
        return EXIT_INVALID_INPUT

    slide_seconds, crossfade_seconds = resolve_durations(
        args.slide_duration if args.slide_duration is not None else settings.slide_seconds,
        args.crossfade_duration if args.crossfade_duration is not None else settings.crossfade_seconds,
        logger,
    )
    settings = replace(
        settings,
        slide_seconds=slide_seconds,
        crossfade_seconds=crossfade_seconds,
        fps=args.fps if args.fps is not None else settings.fps,
        canvas_width=args.width if args.width is not None else settings.canvas_width,
        canvas_height=args.height if args.height is not None else settings.canvas_height,
        frame_workers=args.workers if args.workers is not None else settings.frame_workers,
    )
    logger.info(
        "Settings: Slide Duration: %ss, Crossfade Duration: %ss",
        slide_seconds,
        crossfade_seconds,
    )

    builder = SlideshowBuilder(settings, logger=logger)
    token = CancellationToken()
    previous_handler = _install_interrupt_handler(token, logger)
    try:
        result = builder.create_slideshow(input_dir, args.output, token)
    except SlideshowError as exc:
        logger.error("Error creating slideshow: %s", exc)
        return EXIT_FAILED
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    if result.outcome is SlideshowOutcome.CANCELED:
        logger.warning("Operation canceled by user.")
        return EXIT_CANCELED

    if result.outcome is SlideshowOutcome.NO_IMAGES:
        logger.warning("No slideshow was created.")
        return EXIT_OK

    if result.skipped:
        logger.warning("Skipped %s image(s): %s", len(result.skipped), ", ".join(result.skipped))
    logger.info("Completed successfully.")
    return EXIT_OK


__all__ = ["build_parser", "main"]


if __name__ == "__main__":
    sys.exit(main())
