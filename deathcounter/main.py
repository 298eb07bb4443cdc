#!/usr/bin/env python3
"""
main.py — CLI entry point for deathcounter.

Watches a directory of level save files and keeps the combined death
count up to date in a file (for stream overlays) or on stdout.

Usage
-----
    # Print the total to stdout whenever it changes
    deathcounter ~/.local/share/GeometryDash/levels

    # Write it to a file, starting from 120 deaths recorded elsewhere
    deathcounter ~/saves deaths.txt --baseline 120

    # Poll every 30 s instead of using native notifications
    deathcounter ~/saves deaths.txt --interval 30000
"""

from __future__ import annotations

import argparse
import logging
import sys

from deathcounter.config import WatchConfig
from deathcounter.errors import ConfigError, SnapshotError, WatchError
from deathcounter.reconciler import RetentionPolicy
from deathcounter.snapshot import DEFAULT_EXTENSION
from deathcounter.watcher import DataWatcher

logger = logging.getLogger("deathcounter")


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value}")
    return number


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="deathcounter",
        description="Keep a running death total across a directory of level save files.",
    )
    parser.add_argument("path", help="Directory of level save files to watch.")
    parser.add_argument(
        "output",
        nargs="?",
        default=None,
        help="File to overwrite with the total (default: print to stdout).",
    )
    parser.add_argument(
        "-b",
        "--baseline",
        type=_non_negative_int,
        default=0,
        help="Deaths to add to every total (default: 0).",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=_positive_int,
        default=None,
        help="Poll the directory every N milliseconds instead of using native events.",
    )
    parser.add_argument(
        "--extension",
        default=DEFAULT_EXTENSION,
        help=f"Extension of save files, case-sensitive (default: {DEFAULT_EXTENSION}).",
    )
    parser.add_argument(
        "--on-parse-error",
        choices=[p.value for p in RetentionPolicy],
        default=RetentionPolicy.RETAIN.value,
        help="Keep or drop a file's last count when it stops parsing (default: retain).",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Emit the current total and exit without watching.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every filesystem event and parse failure.",
    )
    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the watcher and return the process exit code."""
    args = build_parser().parse_args(argv)

    # Logs go to stderr; stdout carries nothing but totals.
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = WatchConfig.from_args(args)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1

    watcher = DataWatcher(config)

    if args.once:
        try:
            watcher.initialize()
        except SnapshotError as exc:
            logger.error("Startup scan failed: %s", exc)
            return 1
        return 0

    logger.info("=== deathcounter ===")
    logger.info("Directory: %s", config.directory)
    logger.info("Output   : %s", config.output or "stdout")
    logger.info("Baseline : %d", config.baseline)

    try:
        watcher.watch()
    except SnapshotError as exc:
        logger.error("Startup scan failed: %s", exc)
        return 1
    except WatchError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Stopped by user.")
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
