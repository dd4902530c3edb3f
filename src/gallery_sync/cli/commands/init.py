"""Initialization command: database schema and gallery creation."""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ...config import Config
from ...database import DatabaseService

console = Console()
logger = logging.getLogger(__name__)


class InitializationError(Exception):
    """Raised when initialization fails."""

    pass


def init_db(config: Optional[Config] = None) -> DatabaseService:
    """Initialize or get DatabaseService instance.

    Args:
        config: Application configuration (creates new if not provided)

    Returns:
        DatabaseService instance

    Raises:
        InitializationError: If database cannot be initialized
    """
    if config is None:
        config = Config()

    try:
        db_service = DatabaseService(db_path=config.database_path)

        if not db_service.is_initialized():
            logger.info("Initializing database schema...")
            db_service.init_db()

        stats = db_service.get_statistics()
        logger.debug(
            "Database connected: %s galleries, %s media objects",
            stats["galleries"],
            stats["media_objects"],
        )
        return db_service

    except Exception as e:
        logger.exception("Database initialization failed")
        raise InitializationError(f"Database initialization failed: {e}") from e


@click.command("init")
@click.option("--name", required=True, help="Unique gallery name")
@click.option(
    "--media-path",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding the media files (default: GALLERY_SYNC_MEDIA_PATH)",
)
@click.option(
    "--thumbnail-path",
    type=click.Path(file_okay=False, path_type=Path),
    help="Separate root for thumbnails (default: beside the media files)",
)
@click.option(
    "--optimized-path",
    type=click.Path(file_okay=False, path_type=Path),
    help="Separate root for optimized images (default: beside the media files)",
)
def init_command(
    name: str,
    media_path: Optional[Path],
    thumbnail_path: Optional[Path],
    optimized_path: Optional[Path],
) -> None:
    """Create the database schema and a gallery with its root album.

    Examples:
        gallery-sync init --name family --media-path ~/Pictures/Family
    """
    config = Config()

    try:
        settings = config.build_gallery_settings(
            media_path=media_path,
            thumbnail_path=thumbnail_path,
            optimized_path=optimized_path,
        )
        db_service = init_db(config)

        if db_service.get_gallery_id_by_name(name) is not None:
            raise click.ClickException(f"A gallery named '{name}' already exists")

        gallery_id = db_service.create_gallery(name, settings)
    except (ValueError, InitializationError) as e:
        raise click.ClickException(str(e)) from e

    console.print(f"\n[green]✓ Gallery '{name}' created[/green]\n")

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Gallery ID", str(gallery_id))
    table.add_row("Database Path", str(config.database_path))
    table.add_row("Media Path", str(settings.media_object_path))
    table.add_row("Thumbnail Path", str(settings.full_thumbnail_path))
    table.add_row("Optimized Path", str(settings.full_optimized_path))
    console.print(table)
