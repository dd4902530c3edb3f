"""Transaction batching, progress reporting and cancellation polling."""

import logging
from pathlib import Path
from typing import Optional

from gallery_sync.core.exceptions import SynchronizationCancelledError
from gallery_sync.database.models import SyncState
from gallery_sync.database.progress_tracker import ProgressPhase, ProgressTracker
from gallery_sync.database.repository import GalleryRepository

from .context import SyncContext

logger = logging.getLogger(__name__)


class TransactionCoordinator:
    """Drives the run's state machine and its checkpoint commits.

    One transaction is open for the whole run. Every ``checkpoint_interval``
    album saves it is committed and a new one begins, so a failure or a
    cancellation only loses the work since the last checkpoint.
    """

    def __init__(
        self,
        repository: GalleryRepository,
        context: SyncContext,
        tracker: Optional[ProgressTracker] = None,
    ) -> None:
        """Initialize coordinator.

        Args:
            repository: Repository owning the transaction
            context: Run context with status and statistics
            tracker: Optional progress tracker fed alongside the status
        """
        self.repository = repository
        self.context = context
        self.tracker = tracker or ProgressTracker()
        self._album_saves = 0

    def begin(self) -> None:
        """Open the run's transaction."""
        self.repository.begin_transaction()

    def enter_phase(
        self, state: SyncState, phase: ProgressPhase, total: int = 0, message: str = ""
    ) -> None:
        """Move the status to a new state and start tracking its phase."""
        self.context.status.update(state=state)
        self.tracker.start(phase, total, message)
        logger.debug("Synchronization %s: %s", self.context.sync_id, state.value)

    def start_scanning(self, total_files: int) -> None:
        """Enter the scanning state with the number of files to process."""
        self.context.status.update(
            state=SyncState.SCANNING,
            total_file_count=total_files,
            current_file_index=0,
            current_file_name="",
            current_file_path="",
        )
        self.tracker.start(ProgressPhase.SCANNING, total_files, "Scanning files")

    def record_album_save(self) -> None:
        """Count a persisted album and commit a checkpoint when due."""
        self._album_saves += 1
        interval = self.context.options.checkpoint_interval
        if interval > 0 and self._album_saves % interval == 0:
            self.checkpoint()

    def checkpoint(self) -> None:
        """Commit the current batch and open a new transaction."""
        self.repository.commit()
        self.repository.begin_transaction()
        self.context.statistics.checkpoints += 1
        logger.info(
            "Checkpoint %d committed after %d albums",
            self.context.statistics.checkpoints,
            self._album_saves,
        )

    def file_processed(self, file_path: Path) -> None:
        """Advance progress past a file and honor a pending cancellation.

        Raises:
            SynchronizationCancelledError: If cancellation was requested
        """
        status = self.context.status
        index = status.current_file_index + 1
        status.update(
            current_file_index=index,
            current_file_name=file_path.name,
            current_file_path=str(file_path),
        )
        self.tracker.update(index, message=file_path.name)
        self.check_cancelled()

    def check_cancelled(self) -> None:
        """Raise the cancellation signal if the user asked the run to stop."""
        if self.context.status.cancel_requested:
            logger.info("Synchronization %s cancelled", self.context.sync_id)
            raise SynchronizationCancelledError(
                f"Synchronization {self.context.sync_id} was cancelled"
            )

    def commit(self) -> None:
        """Commit the final batch."""
        self.repository.commit()

    def rollback(self) -> None:
        """Discard the uncommitted batch."""
        self.repository.rollback()
