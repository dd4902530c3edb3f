"""Exceptions raised by the media collaborators and the synchronization engine."""

from pathlib import Path
from typing import Optional, Union


class GallerySyncError(Exception):
    """Base exception for gallery synchronization errors."""

    pass


class SynchronizationInProgressError(GallerySyncError):
    """Raised when a synchronization is already running for the gallery."""

    def __init__(self, gallery_id: int, sync_id: Optional[str] = None) -> None:
        """Initialize with the gallery and the ID of the active run."""
        self.gallery_id = gallery_id
        self.sync_id = sync_id
        super().__init__(
            f"A synchronization is already in progress for gallery {gallery_id}"
            + (f" (run {sync_id})" if sync_id else "")
        )


class NotWritableError(GallerySyncError):
    """Raised when a node is not owned by the synchronization's session."""

    pass


class SynchronizationCancelledError(GallerySyncError):
    """Raised inside a run when the user requested cancellation."""

    pass


class InvalidAlbumError(GallerySyncError):
    """Raised when an album does not correspond to the expected directory."""

    pass


class DirectoryAccessError(GallerySyncError):
    """Raised when a directory cannot be listed."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        """Initialize with the directory and a readable reason."""
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class MediaFileError(GallerySyncError):
    """Base exception for per-file problems that only skip the file."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        """Initialize with the file and a readable reason."""
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class UnsupportedMediaObjectTypeError(MediaFileError):
    """Raised when a file's extension is unknown or disabled for the gallery."""

    pass


class CorruptMediaFileError(MediaFileError):
    """Raised when a file cannot be read or decoded."""

    pass
