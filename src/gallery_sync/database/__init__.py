"""Database package for galleries, albums and media objects.

This package contains the pure database layer (models, service, progress
tracking).
"""

from .models import (
    Album,
    Base,
    Gallery,
    MediaObject,
    MediaObjectMetadata,
    MediaObjectType,
    SynchronizationRecord,
    SyncState,
)
from .progress_tracker import (
    ConsoleProgressReporter,
    ProgressCallback,
    ProgressPhase,
    ProgressTracker,
    ProgressUpdate,
    TqdmProgressReporter,
)
from .service import DatabaseService

# Note: GalleryRepository is not re-exported because it depends on
# gallery_sync.core.media, which itself imports these models.
# Import it directly: from gallery_sync.database.repository import GalleryRepository

__all__ = [
    # Models
    "Base",
    "Gallery",
    "Album",
    "MediaObject",
    "MediaObjectMetadata",
    "SynchronizationRecord",
    # Database service
    "DatabaseService",
    # Progress tracking
    "ProgressTracker",
    "ProgressPhase",
    "ProgressUpdate",
    "ProgressCallback",
    "ConsoleProgressReporter",
    "TqdmProgressReporter",
    # Enums
    "MediaObjectType",
    "SyncState",
]
