"""CLI: run one command batch through ExifTool in stay-open mode."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .core.config import StayOpenConfig
from .core.errors import StayOpenError
from .logging.rich_logger import QuietReporter, RichReporter, configure_logging
from .services.coordinator import BatchCoordinator


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="stayopen",
        description="Send a command batch to a persistent ExifTool process and wait for {ready}.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (CLI flags override its values)",
    )
    parser.add_argument(
        "-e", "--executable",
        type=str,
        default=None,
        help="ExifTool executable (default: exiftool, or $EXIFTOOL_PATH)",
    )
    parser.add_argument(
        "-t", "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for the batch to finish (default: 30)",
    )
    parser.add_argument(
        "--common-arg",
        dest="common_args",
        action="append",
        default=None,
        help="Argument passed via -common_args (repeatable)",
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="ExifTool arguments for the batch, after '--' (default: -ver)",
    )
    return parser


def build_config(args: argparse.Namespace) -> StayOpenConfig:
    """Build the configuration from an optional file plus CLI overrides."""
    command = list(args.command or [])
    if command and command[0] == "--":
        command = command[1:]

    config = StayOpenConfig.from_file(args.config) if args.config else StayOpenConfig()
    return config.with_overrides(
        executable=args.executable,
        timeout=args.timeout,
        common_args=args.common_args,
        command=command or None,
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose)

    if args.quiet:
        reporter = QuietReporter()
    else:
        reporter = RichReporter(verbose=args.verbose)

    try:
        config = build_config(args)
    except (OSError, ValueError, ValidationError) as e:
        reporter.error(f"Invalid configuration: {e}")
        return 1

    if args.verbose:
        reporter.print_header("stayopen")
        reporter.print_config({
            "Executable": config.executable,
            "Command": " ".join(config.command),
            "Common Args": " ".join(config.common_args) or "-",
            "Timeout": config.timeout if config.timeout is not None else "none",
        })

    try:
        result = BatchCoordinator(config, reporter).run()
        reporter.debug(f"Outcome: {result.outcome.value} in {result.elapsed_seconds:.2f}s")
        return 0 if result.is_success else 1

    except KeyboardInterrupt:
        # Clean exit on Ctrl+C - no stack trace
        return 130
    except StayOpenError as e:
        reporter.error(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
