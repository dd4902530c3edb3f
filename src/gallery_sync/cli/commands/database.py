"""Database inspection commands."""

import logging

import click
from rich.console import Console

from ..display import display_database_statistics
from .init import InitializationError, init_db

console = Console()
logger = logging.getLogger(__name__)


@click.group("db")
def db() -> None:
    """Data store maintenance commands."""
    pass


@db.command(name="stats")
def db_stats() -> None:
    """Show record counts of the data store.

    Examples:
        gallery-sync db stats
    """
    try:
        db_service = init_db()
        stats = db_service.get_statistics()
    except InitializationError as e:
        raise click.ClickException(str(e)) from e

    console.print("\n[bold cyan]📊 Database Status[/bold cyan]\n")
    display_database_statistics(stats)
