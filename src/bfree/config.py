"""Command line configuration for bfree."""

import argparse
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from bfree.monitor import MEMINFO_PATH

DEFAULT_INTERVAL = 0.25  # seconds
MIN_INTERVAL = 0.05
SOURCE_KINDS = ("auto", "meminfo", "psutil")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(slots=True, frozen=True)
class Settings:
    """Runtime settings."""

    interval: float = DEFAULT_INTERVAL
    source: str = "auto"
    meminfo_path: str = MEMINFO_PATH
    log_file: str | None = None
    log_level: str = "WARNING"


def _interval(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid interval: {value!r}") from None
    if seconds < MIN_INTERVAL:
        raise argparse.ArgumentTypeError(f"interval must be at least {MIN_INTERVAL}s")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfree",
        description="Live terminal view of system memory usage.",
    )
    parser.add_argument(
        "--interval",
        type=_interval,
        default=DEFAULT_INTERVAL,
        help=f"refresh interval in seconds (default: {DEFAULT_INTERVAL})",
    )
    parser.add_argument(
        "--source",
        choices=SOURCE_KINDS,
        default="auto",
        help="where to read memory counters from (default: auto)",
    )
    parser.add_argument(
        "--meminfo-path",
        default=MEMINFO_PATH,
        help=f"meminfo file to read (default: {MEMINFO_PATH})",
    )
    parser.add_argument("--log-file", default=None, help="write logs to this file")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="WARNING",
        help="log level (default: WARNING)",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command line arguments into Settings."""
    args = build_parser().parse_args(argv)
    return Settings(
        interval=args.interval,
        source=args.source,
        meminfo_path=args.meminfo_path,
        log_file=args.log_file,
        log_level=args.log_level,
    )


def configure_logging(settings: Settings) -> None:
    """
    Set up logging for the bfree package.

    The terminal belongs to the UI, so records only go to a file when one is
    configured; otherwise they are dropped.
    """
    package_logger = logging.getLogger("bfree")
    package_logger.setLevel(settings.log_level)
    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
        old.close()

    if settings.log_file:
        handler: logging.Handler = logging.FileHandler(settings.log_file)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = logging.NullHandler()
    package_logger.addHandler(handler)
