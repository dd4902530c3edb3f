"""Synchronization commands: run a synchronization and show its status."""

import getpass
import logging
import uuid
from typing import Optional

import click
from rich.console import Console

from ...config import Config
from ...core.sync import SynchronizationManager, SyncOptions
from ...database import ConsoleProgressReporter, TqdmProgressReporter
from ...utils import set_log_level
from ..display import display_skipped_items, display_sync_record, display_sync_result
from .init import InitializationError, init_db

console = Console()
logger = logging.getLogger(__name__)


def _default_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "gallery-sync"


@click.command("sync")
@click.option("--gallery-id", type=int, required=True, help="Gallery to synchronize")
@click.option(
    "--album-id",
    type=int,
    help="Album to start from (default: the gallery's root album)",
)
@click.option(
    "--recursive/--no-recursive",
    default=True,
    help="Also synchronize child albums",
)
@click.option(
    "--overwrite-thumbnails/--keep-thumbnails",
    default=True,
    help="Regenerate thumbnails of existing media objects",
)
@click.option(
    "--overwrite-optimized/--keep-optimized",
    default=True,
    help="Regenerate optimized images of existing media objects",
)
@click.option(
    "--regenerate-metadata",
    is_flag=True,
    help="Extract metadata of existing media objects again",
)
@click.option("--user", help="Name recorded in the audit fields")
@click.option(
    "--progress/--no-progress",
    default=True,
    help="Show progress bars",
)
@click.option(
    "--verbose", "-v", is_flag=True, help="Show detailed progress and debug logs"
)
def sync_command(
    gallery_id: int,
    album_id: Optional[int],
    recursive: bool,
    overwrite_thumbnails: bool,
    overwrite_optimized: bool,
    regenerate_metadata: bool,
    user: Optional[str],
    progress: bool,
    verbose: bool,
) -> None:
    """Synchronize a gallery with its media directory.

    Examples:
        # Full synchronization of gallery 1
        gallery-sync sync --gallery-id 1

        # Only one album, keeping existing thumbnails
        gallery-sync sync --gallery-id 1 --album-id 7 --no-recursive \\
            --keep-thumbnails
    """
    config = Config()
    options = SyncOptions(
        recursive=recursive,
        overwrite_thumbnail=overwrite_thumbnails,
        overwrite_optimized=overwrite_optimized,
        regenerate_metadata=regenerate_metadata,
        checkpoint_interval=config.checkpoint_interval,
    )

    if verbose:
        set_log_level("DEBUG")

    reporter = None
    if progress:
        reporter = TqdmProgressReporter()
    elif verbose:
        reporter = ConsoleProgressReporter(verbose=True)

    try:
        db_service = init_db(config)
        manager = SynchronizationManager(
            db_service, gallery_id, options=options, progress_callback=reporter
        )
    except (ValueError, InitializationError) as e:
        raise click.ClickException(str(e)) from e

    sync_id = uuid.uuid4().hex
    console.print(
        f"\n[bold cyan]🔄 Synchronizing gallery {gallery_id}...[/bold cyan]\n"
    )

    try:
        album = manager.repository.load_album(album_id) if album_id else None
        result = manager.synchronize(sync_id, user or _default_user(), album=album)
    except Exception as e:
        logger.exception("Synchronization failed")
        console.print(f"\n[red]✗ Synchronization failed: {e}[/red]")
        raise click.ClickException(str(e)) from e
    finally:
        if isinstance(reporter, TqdmProgressReporter):
            reporter.close_all()
        manager.close()

    display_sync_result(result.get_summary())
    display_skipped_items(result.skipped, limit=None if verbose else 10)


@click.command("status")
@click.option("--gallery-id", type=int, required=True, help="Gallery to inspect")
def status_command(gallery_id: int) -> None:
    """Show the status of a gallery's last synchronization.

    Examples:
        gallery-sync status --gallery-id 1
    """
    try:
        db_service = init_db()
    except InitializationError as e:
        raise click.ClickException(str(e)) from e

    record = db_service.get_sync_record(gallery_id)
    if record is None:
        console.print(f"[yellow]Gallery {gallery_id} was never synchronized[/yellow]")
        return
    display_sync_record(record)
