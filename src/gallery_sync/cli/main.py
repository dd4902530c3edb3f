"""Command-line interface for the gallery synchronization application.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any, Optional

import click

from ..utils.logging_config import setup_logging
from .commands import db, init_command, status_command, sync_command


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.pass_context
def cli(ctx: Any, log_level: str, log_file: Optional[str]) -> None:
    """Gallery synchronization tool.

    Keeps albums and media objects in the data store in line with the media
    directory, and maintains their thumbnails and optimized images.
    """
    setup_logging(log_level=log_level, log_file=Path(log_file) if log_file else None)
    ctx.ensure_object(dict)


cli.add_command(init_command)
cli.add_command(sync_command)
cli.add_command(status_command)
cli.add_command(db)


if __name__ == "__main__":
    cli()
