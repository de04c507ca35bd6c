"""
CLI Commands.

Organized by verb: `list` for read-only listings, `run` for operations that
change state on the coordinator.
"""

from backupctl.cli.commands.listing import app as list_app
from backupctl.cli.commands.run import app as run_app

__all__ = [
    "list_app",
    "run_app",
]
