#!/usr/bin/env python3
"""Entry point for s3vu package.

Usage::

    s3vu init-data
    s3vu run upload --vus 8 --duration 5m
    s3vu run data --vus 4 --iterations 100
    s3vu run largefile --vus 2 --iterations 10
"""

from __future__ import annotations

import argparse
import sys

from s3vu import __version__


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments and dispatch to the appropriate command."""
    parser = argparse.ArgumentParser(
        prog="s3vu",
        description="Per-VU S3 load-test helper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Available scenarios:
  upload, data, largefile

Commands:
  init-data   Create the random source files used by scenarios
  run         Run a scenario on local virtual users

Examples:
  s3vu init-data
  s3vu run upload --vus 8 --duration 5m
  s3vu run data --vus 4 --iterations 100
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=["init-data", "run"],
        help="Command to execute",
    )
    parser.add_argument(
        "scenario",
        nargs="?",
        help="Scenario name: upload, data, largefile",
    )
    parser.add_argument(
        "--vus",
        type=int,
        default=1,
        help="Number of virtual users (default: 1)",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Iterations per VU",
    )
    parser.add_argument(
        "--duration",
        type=str,
        default=None,
        help="Run duration (e.g. 30s, 5m, 1h)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level",
    )
    parser.add_argument(
        "--stats-interval",
        type=int,
        default=None,
        help="Stats logging interval in seconds",
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    from s3vu.cli import cmd_init_data, cmd_run

    commands = {
        "init-data": cmd_init_data,
        "run": cmd_run,
    }

    try:
        return commands[args.command](args) or 0
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
