"""Synchronization manager: runs one filesystem-to-store synchronization.

The manager wires the run's components together and owns the top-level error
policy:

- per-file problems are skipped inside the walk and never reach this level
- a cancellation request rolls back the uncommitted batch and returns cleanly
- everything else rolls back the uncommitted batch and propagates
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from gallery_sync.core.exceptions import (
    NotWritableError,
    SynchronizationCancelledError,
)
from gallery_sync.core.media.derivatives import DerivativeGenerator
from gallery_sync.core.media.factory import MediaObjectFactory
from gallery_sync.core.media.hash_keys import HashKeyRegistry
from gallery_sync.core.media.mime_types import MimeTypeRegistry
from gallery_sync.database.models import Album, SyncState
from gallery_sync.database.progress_tracker import (
    ProgressCallback,
    ProgressPhase,
    ProgressTracker,
)
from gallery_sync.database.repository import GalleryRepository
from gallery_sync.database.service import DatabaseService

from .album_reconciler import AlbumReconciler
from .context import SyncContext, SyncOptions, SyncResult
from .coordinator import TransactionCoordinator
from .media_reconciler import MediaObjectReconciler
from .orphan_cleaner import OrphanCleaner
from .reconciliation import ReconciliationStateBuilder
from .status import SyncStatus, SyncStatusRegistry, default_registry
from .walker import DirectoryWalker

logger = logging.getLogger(__name__)


class SynchronizationManager:
    """Synchronizes a gallery's albums and media objects with its media directory.

    One manager serves one gallery. ``synchronize`` may be called several
    times, but only one run per gallery can be active in a registry at once.
    """

    def __init__(
        self,
        db_service: DatabaseService,
        gallery_id: int,
        options: Optional[SyncOptions] = None,
        registry: Optional[SyncStatusRegistry] = None,
        derivative_generator: Optional[DerivativeGenerator] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        """Initialize synchronization manager.

        Args:
            db_service: Database service
            gallery_id: Gallery to synchronize
            options: Run options (defaults: recursive, overwrite derived files)
            registry: Registry of active runs (process-wide default if None)
            derivative_generator: Collaborator producing derived files
            progress_callback: Optional callback receiving progress updates
        """
        self.db_service = db_service
        self.gallery_id = gallery_id
        self.options = options or SyncOptions()
        self.registry = registry or default_registry

        self.settings = db_service.get_gallery_settings(gallery_id)
        self.repository = GalleryRepository(db_service, gallery_id, self.settings)
        self.paths = self.repository.paths
        self.mime_types = MimeTypeRegistry(self.settings)
        self.factory = MediaObjectFactory(
            gallery_id, self.settings, self.mime_types, self.paths
        )
        self.derivatives = derivative_generator or DerivativeGenerator(
            self.settings, self.paths
        )
        self.tracker = ProgressTracker(progress_callback)
        self._status: Optional[SyncStatus] = None

    @property
    def status(self) -> Optional[SyncStatus]:
        """Status of the current (or last) run of this manager."""
        return self._status

    def cancel(self) -> bool:
        """Ask the active run to stop after the current file.

        Returns:
            True if a run was active
        """
        if self._status is None:
            return False
        self._status.request_cancel()
        return True

    def synchronize(
        self, sync_id: str, user_name: str, album: Optional[Album] = None
    ) -> SyncResult:
        """Make the store match the directory tree of an album.

        Args:
            sync_id: Caller-supplied run ID
            user_name: Actor recorded in the audit fields
            album: Album to start from, loaded through ``self.repository``
                (the gallery's root album if None)

        Returns:
            SyncResult with the final state, statistics and skipped items

        Raises:
            ValueError: If the user name is empty
            NotWritableError: If the album was not loaded through this manager
            SynchronizationInProgressError: If the gallery is already syncing
            DirectoryAccessError: If the album's directory cannot be listed
        """
        if not user_name:
            raise ValueError("A user name is required to synchronize")
        if album is not None and not self.repository.is_writable(album):
            raise NotWritableError(
                "The album must be loaded through this manager's repository"
            )

        status = self.registry.start(self.gallery_id, sync_id)
        self._status = status
        started = time.time()

        logger.info(
            "Starting synchronization %s of gallery %s", sync_id, self.gallery_id
        )

        try:
            self.db_service.save_sync_record(self.gallery_id, status.to_record())
            start_album = album or self.repository.load_root_album()
            context = SyncContext(
                gallery_id=self.gallery_id,
                sync_id=sync_id,
                user_name=user_name,
                options=self.options,
                settings=self.settings,
                paths=self.paths,
                status=status,
                hash_keys=HashKeyRegistry(self.repository.load_all_hash_keys()),
                start_album=start_album,
            )
            coordinator = TransactionCoordinator(self.repository, context, self.tracker)
            self._run(context, coordinator, start_album)

            status.update(state=SyncState.COMPLETE)
            self.tracker.complete("Synchronization complete")

        except SynchronizationCancelledError:
            self.repository.rollback()
            status.update(state=SyncState.CANCELLED)
            self.tracker.cancelled("Synchronization cancelled")
            logger.info("Synchronization %s rolled back its last batch", sync_id)

        except Exception as e:
            self.repository.rollback()
            status.update(state=SyncState.ERROR)
            self.tracker.error(str(e))
            logger.error("Synchronization %s failed: %s", sync_id, e)
            raise

        finally:
            status.update(completed_at=datetime.now(timezone.utc))
            self.registry.finish(status)
            self.db_service.save_sync_record(self.gallery_id, status.to_record())

        snapshot = status.snapshot()
        result = SyncResult(
            sync_id=sync_id,
            state=snapshot.state,
            statistics=context.statistics,
            skipped=list(snapshot.skipped_items),
            duration=time.time() - started,
        )
        logger.info(
            "Synchronization %s finished (%s): %d created, %d updated, "
            "%d deleted, %d skipped",
            sync_id,
            snapshot.state.value,
            result.statistics.media_objects_created,
            result.statistics.media_objects_updated,
            result.statistics.media_objects_deleted,
            snapshot.skipped_count,
        )
        return result

    def _run(
        self,
        context: SyncContext,
        coordinator: TransactionCoordinator,
        start_album: Album,
    ) -> None:
        repository = self.repository
        builder = ReconciliationStateBuilder(repository, context)
        album_reconciler = AlbumReconciler(repository, context, coordinator)
        media_reconciler = MediaObjectReconciler(
            repository, context, self.mime_types, self.factory, self.derivatives
        )
        walker = DirectoryWalker(
            repository, context, album_reconciler, media_reconciler, coordinator
        )
        cleaner = OrphanCleaner(repository, context)

        coordinator.begin()
        coordinator.enter_phase(
            SyncState.NOT_STARTED, ProgressPhase.LOADING, message="Loading albums"
        )
        builder.build(start_album)

        start_directory = self.paths.album_directory(start_album)
        coordinator.start_scanning(builder.count_files(start_directory))
        walker.walk(start_directory, start_album.parent)

        coordinator.enter_phase(
            SyncState.PERSISTING_TO_DATA_STORE,
            ProgressPhase.PERSISTING,
            message="Deleting orphaned records",
        )
        cleaner.delete_orphaned_records()

        coordinator.enter_phase(
            SyncState.PERSISTING_TO_DATA_STORE,
            ProgressPhase.CLEANING_UP,
            message="Deleting orphaned derived files",
        )
        cleaner.delete_orphaned_derived_files(start_album)
        album_reconciler.assign_thumbnails(start_album)

        coordinator.commit()

    def close(self) -> None:
        """Close the manager's repository session."""
        self.repository.close()
