"""Command-line entry for showbot.

Resolves the show schedule for a day and prints it. Exit codes:
0 shows found, 1 no shows found, 2 bad argument or configuration,
3 feed download/parse failure.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import NoReturn, Optional

from . import _init_logging

EXIT_OK = 0
EXIT_NO_SHOWS = 1
EXIT_USAGE = 2
EXIT_FEED_FAILED = 3

logger = logging.getLogger(__name__)


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the showbot CLI."""
    parser = argparse.ArgumentParser(
        prog="showbot",
        description="showbot - print the day's show schedule from a calendar feed",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  showbot                 # today's schedule
  showbot Saturday        # next Saturday (today if it is Saturday)
  showbot tomorrow        # tomorrow's schedule
  showbot 2026-02-10      # a specific date
  showbot Friday --json   # machine-readable output
        """,
    )

    parser.add_argument(
        "day",
        nargs="?",
        default=None,
        help="YYYY-MM-DD, a weekday name (e.g. Saturday), 'today' or 'tomorrow'",
    )
    parser.add_argument("--json", action="store_true", help="Print the schedule as JSON")
    parser.add_argument("--config", metavar="PATH", help="Path to a YAML/JSON config file")
    parser.add_argument("--env-file", metavar="PATH", help="Path to a .env file (default: ./.env)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser


def run(argv: Optional[list[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    # Imported here so `--help` stays fast.
    from pathlib import Path

    from .core.config_loader import load_config
    from .core.exceptions import ConfigurationMissing, FeedFetchFailed, InvalidDateArgument
    from .core.logging_config import configure_logging, get_logging_status
    from .core.timezone_utils import now_utc, resolve_timezone
    from .domain.day_resolver import expand_relative_token
    from .domain.schedule_assembler import fetch_schedule
    from .domain.text_formatter import render_json, render_text

    args = _create_parser().parse_args(argv)

    _init_logging(os.environ.get("SHOWBOT_LOG_LEVEL"))

    try:
        config = load_config(args.config, Path(args.env_file) if args.env_file else None)
    except (ValueError, OSError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE

    configure_logging(debug_mode=args.debug)
    _init_logging("DEBUG" if args.debug else config.log_level)
    logger.debug("Logger levels: %s", get_logging_status())

    try:
        zone = resolve_timezone(config.timezone)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    now = now_utc()
    token = expand_relative_token(args.day, now, zone)

    try:
        result = asyncio.run(fetch_schedule(config, token, now))
    except (InvalidDateArgument, ConfigurationMissing) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except FeedFetchFailed as e:
        logger.debug("Feed failure details", exc_info=True)
        print(f"Error: failed to fetch calendar feed: {e}", file=sys.stderr)
        return EXIT_FEED_FAILED

    print(render_json(result) if args.json else render_text(result))
    return EXIT_NO_SHOWS if result.no_shows_found else EXIT_OK


def main(argv: Optional[list[str]] = None) -> NoReturn:
    """Console script entry point."""
    sys.exit(run(argv))


if __name__ == "__main__":
    main()
