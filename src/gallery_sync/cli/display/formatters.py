"""Display formatters and UI helpers for CLI."""

import logging
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from ...core.sync import SkippedItem

console = Console()
logger = logging.getLogger(__name__)

STATE_STYLES = {
    "complete": "green",
    "cancelled": "yellow",
    "error": "red",
}


def _state_label(state: str) -> str:
    style = STATE_STYLES.get(state, "white")
    return f"[{style}]{state}[/{style}]"


def display_sync_result(summary: Dict[str, Any]) -> None:
    """Display the summary of a synchronization run.

    Args:
        summary: Dictionary from SyncResult.get_summary()
    """
    state = summary["state"]
    if state == "complete":
        console.print("\n[bold green]✅ Synchronization complete[/bold green]\n")
    elif state == "cancelled":
        console.print("\n[bold yellow]⚠️  Synchronization cancelled[/]\n")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan", width=30)
    table.add_column("Value", style="green", justify="right")

    table.add_row("State", _state_label(state))
    table.add_row("Duration", f"{summary['duration']}s")
    table.add_row("Albums Created", str(summary["albums_created"]))
    table.add_row("Albums Synchronized", str(summary["albums_synchronized"]))
    table.add_row("Albums Deleted", str(summary["albums_deleted"]))
    table.add_row("Media Objects Created", str(summary["media_objects_created"]))
    table.add_row("Media Objects Updated", str(summary["media_objects_updated"]))
    table.add_row("Media Objects Deleted", str(summary["media_objects_deleted"]))
    table.add_row("Derived Files Deleted", str(summary["derived_files_deleted"]))
    table.add_row("Thumbnails Regenerated", str(summary["thumbnails_flagged"]))
    table.add_row("Optimized Images Regenerated", str(summary["optimized_flagged"]))
    table.add_row("Checkpoints", str(summary["checkpoints"]))

    skipped = summary["skipped"]
    table.add_row("Skipped Items", f"[yellow]{skipped}[/yellow]" if skipped else "0")

    console.print(table)


def display_skipped_items(items: List[SkippedItem], limit: Optional[int] = 10) -> None:
    """Display the files and directories a run skipped.

    Args:
        items: Skipped items with their reasons
        limit: Maximum number of items to show (None shows all)
    """
    if not items:
        return

    shown = items if limit is None else items[:limit]
    console.print(f"\n[yellow]⚠️  {len(items)} item(s) skipped:[/yellow]")
    for item in shown:
        console.print(f"  • {item.path}: {item.reason}")
    if len(items) > len(shown):
        console.print(f"  ... and {len(items) - len(shown)} more")


def display_sync_record(record: Dict[str, Any]) -> None:
    """Display a persisted synchronization record.

    Args:
        record: Dictionary from DatabaseService.get_sync_record()
    """
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    total = record["total_files"] or 0
    current = record["current_file_index"] or 0
    table.add_row("Gallery ID", str(record["gallery_id"]))
    table.add_row("Run ID", str(record["sync_id"]))
    table.add_row("State", _state_label(record["state"]))
    table.add_row("Files Processed", f"{current}/{total}")
    table.add_row("Skipped Items", str(record["skipped_count"] or 0))
    table.add_row("Started", str(record["started_at"] or "-"))
    table.add_row("Completed", str(record["completed_at"] or "-"))

    console.print(table)


def display_database_statistics(stats: Dict[str, Any]) -> None:
    """Display data store record counts.

    Args:
        stats: Dictionary from DatabaseService.get_statistics()
    """
    console.print(f"Database Path: {stats['database_path']}\n")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Entity", style="cyan")
    table.add_column("Count", style="green", justify="right")

    table.add_row("Galleries", str(stats["galleries"]))
    table.add_row("Albums", str(stats["albums"]))
    table.add_row("Media Objects", str(stats["media_objects"]))
    table.add_row("Metadata Items", str(stats["metadata_items"]))

    console.print(table)
