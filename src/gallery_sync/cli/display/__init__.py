"""CLI display and formatting utilities."""

from .formatters import (
    display_database_statistics,
    display_skipped_items,
    display_sync_record,
    display_sync_result,
)

__all__ = [
    "display_database_statistics",
    "display_skipped_items",
    "display_sync_record",
    "display_sync_result",
]
