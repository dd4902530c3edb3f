"""Synchronization module.

Handles the run status, reconciliation of albums and media objects, orphan
cleanup, checkpoint commits and the top-level synchronization manager.
"""

from .album_reconciler import AlbumReconciler
from .context import SyncContext, SyncOptions, SyncResult, SyncStatistics
from .coordinator import TransactionCoordinator
from .manager import SynchronizationManager
from .media_reconciler import MediaObjectReconciler
from .orphan_cleaner import OrphanCleaner
from .reconciliation import ReconciliationStateBuilder
from .status import (
    MAX_SKIPPED_TO_DISPLAY,
    SkippedItem,
    SyncStatus,
    SyncStatusRegistry,
    SyncStatusSnapshot,
    default_registry,
)
from .walker import DirectoryWalker

__all__ = [
    # Status
    "MAX_SKIPPED_TO_DISPLAY",
    "SkippedItem",
    "SyncStatus",
    "SyncStatusRegistry",
    "SyncStatusSnapshot",
    "default_registry",
    # Run
    "SyncContext",
    "SyncOptions",
    "SyncResult",
    "SyncStatistics",
    "SynchronizationManager",
    # Components
    "AlbumReconciler",
    "DirectoryWalker",
    "MediaObjectReconciler",
    "OrphanCleaner",
    "ReconciliationStateBuilder",
    "TransactionCoordinator",
]
