"""Depth-first directory traversal of a synchronization run."""

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from gallery_sync.core.exceptions import DirectoryAccessError, MediaFileError
from gallery_sync.core.media.paths import is_hidden
from gallery_sync.database.models import Album
from gallery_sync.database.repository import GalleryRepository

from .album_reconciler import AlbumReconciler
from .context import SyncContext
from .coordinator import TransactionCoordinator
from .media_reconciler import MediaObjectReconciler

logger = logging.getLogger(__name__)


class DirectoryWalker:
    """Visits album directories depth-first with an explicit stack.

    Each directory is reconciled as an album, then its files in name order,
    then its external media objects, and only then its subdirectories (also in
    name order). A subdirectory that cannot be listed is skipped together with
    its subtree and its album is deleted.
    """

    def __init__(
        self,
        repository: GalleryRepository,
        context: SyncContext,
        album_reconciler: AlbumReconciler,
        media_reconciler: MediaObjectReconciler,
        coordinator: TransactionCoordinator,
    ) -> None:
        """Initialize walker.

        Args:
            repository: Repository used to delete unreadable albums
            context: Run context
            album_reconciler: Reconciler called once per directory
            media_reconciler: Reconciler called once per file
            coordinator: Coordinator reporting progress and polling cancellation
        """
        self.repository = repository
        self.context = context
        self.album_reconciler = album_reconciler
        self.media_reconciler = media_reconciler
        self.coordinator = coordinator
        self.paths = context.paths

    def walk(self, directory: Path, parent: Optional[Album]) -> None:
        """Synchronize a directory tree.

        Args:
            directory: Directory of the album the run starts from
            parent: Parent of that album (None for the root album)

        Raises:
            DirectoryAccessError: If the starting directory cannot be listed
            SynchronizationCancelledError: If cancellation was requested
        """
        stack: List[Tuple[Path, Optional[Album]]] = [(directory, parent)]

        while stack:
            current, current_parent = stack.pop()
            try:
                files, subdirectories = self._list_directory(current)
            except OSError as e:
                if current == directory:
                    raise DirectoryAccessError(current, str(e)) from e
                self._abort_subtree(current, e)
                continue

            album = self.album_reconciler.reconcile(current, current_parent)

            for file_path in files:
                self._process_file(file_path, album)

            self.media_reconciler.reconcile_externals(album)

            if self.context.options.recursive:
                for subdirectory in reversed(subdirectories):
                    stack.append((subdirectory, album))

    def _list_directory(self, directory: Path) -> Tuple[List[Path], List[Path]]:
        files: List[Path] = []
        subdirectories: List[Path] = []

        with os.scandir(directory) as iterator:
            entries = sorted(iterator, key=lambda entry: entry.name)

        for entry in entries:
            try:
                if is_hidden(entry):
                    self.context.skip(entry.path, "Hidden file or directory")
                    logger.debug("Skipping hidden entry %s", entry.path)
                elif entry.is_dir(follow_symlinks=False):
                    subdirectories.append(Path(entry.path))
                elif entry.is_symlink() and entry.is_dir():
                    # Linked directories could lead back into the tree
                    self.context.skip(entry.path, "Symbolic link to a directory")
                    logger.debug("Skipping directory link %s", entry.path)
                else:
                    files.append(Path(entry.path))
            except OSError as e:
                self.context.skip(entry.path, f"File cannot be read: {e}")
                logger.warning("Skipping %s: %s", entry.path, e)
        return files, subdirectories

    def _abort_subtree(self, directory: Path, error: OSError) -> None:
        reason = f"Directory cannot be read: {error}"
        self.context.skip(directory, reason)
        logger.warning("Skipping %s: %s", directory, reason)

        album = self.context.albums_by_path.get(directory)
        if album is not None and not self.repository.is_deleted(album):
            self.repository.delete(album, delete_files=False)
            self.context.statistics.albums_deleted += 1

    def _process_file(self, file_path: Path, album: Album) -> None:
        settings = self.context.settings
        is_thumbnail = self.paths.is_thumbnail_file_name(file_path.name)
        is_optimized = self.paths.is_optimized_file_name(file_path.name)

        # Derived files beside the originals belong to other media objects
        if (is_thumbnail and settings.thumbnails_share_media_directory) or (
            is_optimized and settings.optimized_share_media_directory
        ):
            return

        if is_thumbnail or is_optimized:
            self._delete_stale_derived_file(file_path)
        else:
            try:
                self.media_reconciler.reconcile(file_path, album)
            except MediaFileError as e:
                self.context.skip(file_path, e.reason)
                logger.warning("Skipping %s: %s", file_path, e.reason)
            except OSError as e:
                # Broken links and files removed while the run is going
                reason = f"File cannot be read: {e}"
                self.context.skip(file_path, reason)
                logger.warning("Skipping %s: %s", file_path, reason)

        self.coordinator.file_processed(file_path)

    def _delete_stale_derived_file(self, file_path: Path) -> None:
        # Derived files now live in another root; this one is a leftover
        if not self.context.media_path_is_writable:
            return
        try:
            file_path.unlink()
            self.context.statistics.derived_files_deleted += 1
            logger.debug("Deleted stale derived file %s", file_path)
        except OSError as e:
            logger.warning("Could not delete stale derived file %s: %s", file_path, e)
