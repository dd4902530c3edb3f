"""CLI command modules."""

from .database import db
from .init import init_command, init_db
from .sync import status_command, sync_command

__all__ = [
    "db",
    "init_command",
    "init_db",
    "status_command",
    "sync_command",
]
