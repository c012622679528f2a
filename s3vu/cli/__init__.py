"""CLI commands for s3vu."""

from __future__ import annotations

from s3vu.cli.init_data import cmd_init_data
from s3vu.cli.run import cmd_run

__all__ = [
    "cmd_init_data",
    "cmd_run",
]
