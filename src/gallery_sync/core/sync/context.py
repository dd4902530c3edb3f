"""Run-scoped state shared by the components of one synchronization."""

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from gallery_sync.core.media.hash_keys import HashKeyRegistry
from gallery_sync.core.media.paths import GalleryPaths
from gallery_sync.database.models import Album, MediaObject, SyncState
from gallery_sync.models import GallerySettings

from .status import SkippedItem, SyncStatus


@dataclass
class SyncOptions:
    """Options chosen by the caller before a run."""

    recursive: bool = True
    overwrite_thumbnail: bool = True
    overwrite_optimized: bool = True
    regenerate_metadata: bool = False
    checkpoint_interval: int = 100


@dataclass
class SyncStatistics:
    """Counters collected during a run."""

    albums_created: int = 0
    albums_synchronized: int = 0
    albums_deleted: int = 0
    media_objects_created: int = 0
    media_objects_updated: int = 0
    media_objects_deleted: int = 0
    derived_files_deleted: int = 0
    thumbnails_flagged: int = 0
    optimized_flagged: int = 0
    metadata_flagged: int = 0
    files_skipped: int = 0
    checkpoints: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to dictionary format."""
        return {
            "albums_created": self.albums_created,
            "albums_synchronized": self.albums_synchronized,
            "albums_deleted": self.albums_deleted,
            "media_objects_created": self.media_objects_created,
            "media_objects_updated": self.media_objects_updated,
            "media_objects_deleted": self.media_objects_deleted,
            "derived_files_deleted": self.derived_files_deleted,
            "thumbnails_flagged": self.thumbnails_flagged,
            "optimized_flagged": self.optimized_flagged,
            "metadata_flagged": self.metadata_flagged,
            "files_skipped": self.files_skipped,
            "checkpoints": self.checkpoints,
        }


@dataclass
class SyncResult:
    """Outcome of a synchronization run."""

    sync_id: str
    state: SyncState
    statistics: SyncStatistics
    skipped: List[SkippedItem] = dataclass_field(default_factory=list)
    duration: float = 0.0

    @property
    def cancelled(self) -> bool:
        """Whether the run stopped on a cancellation request."""
        return self.state == SyncState.CANCELLED

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of the run."""
        return {
            "sync_id": self.sync_id,
            "state": self.state.value,
            "duration": round(self.duration, 2),
            "skipped": len(self.skipped),
            **self.statistics.to_dict(),
        }


@dataclass
class SyncContext:
    """Everything one run knows, passed explicitly to each component.

    The reconciliation maps are built once from the store at the start of the
    run and discarded with the context.
    """

    gallery_id: int
    sync_id: str
    user_name: str
    options: SyncOptions
    settings: GallerySettings
    paths: GalleryPaths
    status: SyncStatus
    hash_keys: HashKeyRegistry = dataclass_field(default_factory=HashKeyRegistry)
    albums_by_path: Dict[Path, Album] = dataclass_field(default_factory=dict)
    media_by_hash: Dict[str, MediaObject] = dataclass_field(default_factory=dict)
    loaded_media_objects: List[MediaObject] = dataclass_field(default_factory=list)
    duplicates: List[Union[Album, MediaObject]] = dataclass_field(
        default_factory=list
    )
    statistics: SyncStatistics = dataclass_field(default_factory=SyncStatistics)
    start_album: Optional[Album] = None
    _duplicate_ids: Set[int] = dataclass_field(default_factory=set, repr=False)

    def add_duplicate(self, node: Union[Album, MediaObject]) -> None:
        """Keep a stored node out of the maps so the orphan pass removes it."""
        self.duplicates.append(node)
        self._duplicate_ids.add(id(node))

    def is_duplicate(self, node: Union[Album, MediaObject]) -> bool:
        """Check whether a node was set aside as a duplicate record."""
        return id(node) in self._duplicate_ids

    def skip(self, path: Union[str, Path], reason: str) -> None:
        """Record a skipped item in the status and the statistics."""
        self.status.add_skipped(str(path), reason)
        self.statistics.files_skipped += 1

    @property
    def media_path_is_writable(self) -> bool:
        """Whether files under the media root may be changed."""
        return not self.settings.media_object_path_is_read_only
