"""
CLI Commands.

Organized by domain/feature area.
"""

from snack.cli.commands.db import app as db_app
from snack.cli.commands.ops import app as ops_app
from snack.cli.commands.server import app as server_app
from snack.cli.commands.system import app as system_app

__all__ = [
    "db_app",
    "ops_app",
    "server_app",
    "system_app",
]
