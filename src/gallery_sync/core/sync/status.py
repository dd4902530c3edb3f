"""Synchronization status and the per-gallery registry of active runs.

A ``SyncStatus`` belongs to one run. The worker mutates it while external
callers poll ``snapshot()`` or call ``request_cancel()`` from other threads, so
every field change happens under a lock and snapshots are never torn.

``SyncStatusRegistry`` only enforces one active run per gallery and remembers
the last finished status for polling.
"""

import logging
import threading
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from gallery_sync.core.exceptions import SynchronizationInProgressError
from gallery_sync.database.models import SyncState

logger = logging.getLogger(__name__)

# Maximum number of skipped items exposed to callers
MAX_SKIPPED_TO_DISPLAY = 500


@dataclass(frozen=True)
class SkippedItem:
    """A file or directory the run did not process, with the reason why."""

    path: str
    reason: str


@dataclass(frozen=True)
class SyncStatusSnapshot:
    """Consistent read-only copy of a SyncStatus."""

    gallery_id: int
    sync_id: str
    state: SyncState
    total_file_count: int
    current_file_index: int
    current_file_name: str
    current_file_path: str
    skipped_items: Tuple[SkippedItem, ...]
    skipped_count: int
    cancel_requested: bool
    started_at: Optional[datetime]
    completed_at: Optional[datetime]

    @property
    def percent_complete(self) -> int:
        """Progress in percent (100 once scanning is over)."""
        if self.state == SyncState.SCANNING:
            if self.total_file_count == 0:
                return 0
            return int(self.current_file_index / self.total_file_count * 100)
        if self.state == SyncState.NOT_STARTED:
            return 0
        return 100


@dataclass
class SyncStatus:
    """Mutable status of one synchronization run."""

    gallery_id: int
    sync_id: str
    state: SyncState = SyncState.NOT_STARTED
    total_file_count: int = 0
    current_file_index: int = 0
    current_file_name: str = ""
    current_file_path: str = ""
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    skipped_items: List[SkippedItem] = dataclass_field(default_factory=list)
    _cancel_requested: bool = dataclass_field(default=False, repr=False)
    _lock: Any = dataclass_field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def update(self, **fields: Any) -> None:
        """Set several fields at once, atomically for readers.

        Args:
            **fields: Field names and their new values
        """
        with self._lock:
            for name, value in fields.items():
                if not hasattr(self, name) or name.startswith("_"):
                    raise AttributeError(f"Unknown status field: {name}")
                setattr(self, name, value)

    def add_skipped(self, path: str, reason: str) -> None:
        """Record an item that was not processed."""
        with self._lock:
            self.skipped_items.append(SkippedItem(path=str(path), reason=reason))

    def request_cancel(self) -> None:
        """Ask the run to stop after the current file."""
        with self._lock:
            self._cancel_requested = True
        logger.info("Cancellation requested for synchronization %s", self.sync_id)

    @property
    def cancel_requested(self) -> bool:
        """Whether cancellation has been requested."""
        with self._lock:
            return self._cancel_requested

    def snapshot(self) -> SyncStatusSnapshot:
        """Take a consistent copy of the status."""
        with self._lock:
            return SyncStatusSnapshot(
                gallery_id=self.gallery_id,
                sync_id=self.sync_id,
                state=self.state,
                total_file_count=self.total_file_count,
                current_file_index=self.current_file_index,
                current_file_name=self.current_file_name,
                current_file_path=self.current_file_path,
                skipped_items=tuple(self.skipped_items[:MAX_SKIPPED_TO_DISPLAY]),
                skipped_count=len(self.skipped_items),
                cancel_requested=self._cancel_requested,
                started_at=self.started_at,
                completed_at=self.completed_at,
            )

    def to_record(self) -> Dict[str, Any]:
        """Column values for the persisted synchronization record."""
        snapshot = self.snapshot()
        return {
            "sync_id": snapshot.sync_id,
            "state": snapshot.state.value,
            "total_files": snapshot.total_file_count,
            "current_file_index": snapshot.current_file_index,
            "skipped_count": snapshot.skipped_count,
            "started_at": snapshot.started_at,
            "completed_at": snapshot.completed_at,
        }


class SyncStatusRegistry:
    """Thread-safe map of gallery ID to its active synchronization."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._lock = threading.Lock()
        self._active: Dict[int, SyncStatus] = {}
        self._last: Dict[int, SyncStatus] = {}

    def start(self, gallery_id: int, sync_id: str) -> SyncStatus:
        """Register a new run for a gallery.

        Args:
            gallery_id: Gallery being synchronized
            sync_id: Caller-supplied run ID

        Returns:
            Fresh status for the run

        Raises:
            SynchronizationInProgressError: If a run is already active
        """
        with self._lock:
            active = self._active.get(gallery_id)
            if active is not None:
                raise SynchronizationInProgressError(gallery_id, active.sync_id)

            status = SyncStatus(
                gallery_id=gallery_id,
                sync_id=sync_id,
                started_at=datetime.now(timezone.utc),
            )
            self._active[gallery_id] = status
            return status

    def finish(self, status: SyncStatus) -> None:
        """Release the gallery held by a run."""
        with self._lock:
            if self._active.get(status.gallery_id) is status:
                del self._active[status.gallery_id]
            self._last[status.gallery_id] = status

    def is_running(self, gallery_id: int) -> bool:
        """Check whether a run is active for a gallery."""
        with self._lock:
            return gallery_id in self._active

    def get_status(self, gallery_id: int) -> Optional[SyncStatusSnapshot]:
        """Get the active (or else the last finished) run's status."""
        with self._lock:
            status = self._active.get(gallery_id) or self._last.get(gallery_id)
        return status.snapshot() if status else None

    def cancel(self, gallery_id: int, sync_id: Optional[str] = None) -> bool:
        """Request cancellation of a gallery's active run.

        Args:
            gallery_id: Gallery whose run should stop
            sync_id: Only cancel if the active run has this ID

        Returns:
            True if a run was asked to stop
        """
        with self._lock:
            status = self._active.get(gallery_id)
        if status is None or (sync_id is not None and status.sync_id != sync_id):
            return False
        status.request_cancel()
        return True


default_registry = SyncStatusRegistry()
