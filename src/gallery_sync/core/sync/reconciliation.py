"""Builds the reconciliation maps of a run from the stored records."""

import logging
import os
from pathlib import Path
from typing import List

from gallery_sync.core.exceptions import NotWritableError
from gallery_sync.core.media.paths import is_hidden
from gallery_sync.database.models import Album, MediaObject
from gallery_sync.database.repository import GalleryRepository

from .context import SyncContext

logger = logging.getLogger(__name__)


class ReconciliationStateBuilder:
    """Loads the nodes a run may touch and marks them unsynchronized.

    Albums are keyed by their physical directory, media objects by hash key.
    Every node starts with ``synchronized=False``; whatever is still unmatched
    when the walk ends is an orphan.
    """

    def __init__(self, repository: GalleryRepository, context: SyncContext) -> None:
        """Initialize builder.

        Args:
            repository: Repository owning the run's session
            context: Run context receiving the maps
        """
        self.repository = repository
        self.context = context

    def build(self, album: Album) -> None:
        """Load an album and, if recursive, all its descendants into the maps.

        Args:
            album: Album the run starts from

        Raises:
            NotWritableError: If a loaded node is not owned by the run's session
        """
        context = self.context
        options = context.options
        stack: List[Album] = [album]

        while stack:
            current = stack.pop()
            self._ensure_writable(current)

            path = context.paths.album_directory(current)
            if path in context.albums_by_path:
                logger.warning(
                    "Album %s duplicates the directory %s, it will be removed",
                    current.id,
                    path,
                )
                context.add_duplicate(current)
                continue

            current.synchronized = False
            current.regenerate_thumbnail_on_save = False
            context.albums_by_path[path] = current

            for media_object in self.repository.load_child_media_objects(current):
                self._add_media_object(media_object)

            if options.recursive:
                stack.extend(reversed(self.repository.load_child_albums(current)))

        logger.debug(
            "Loaded %d albums and %d media objects",
            len(context.albums_by_path),
            len(context.loaded_media_objects),
        )

    def _add_media_object(self, media_object: MediaObject) -> None:
        context = self.context
        options = context.options
        self._ensure_writable(media_object)

        media_object.synchronized = False
        media_object.regenerate_thumbnail_on_save = options.overwrite_thumbnail
        media_object.regenerate_optimized_on_save = options.overwrite_optimized
        media_object.extract_metadata_on_save = options.regenerate_metadata
        context.loaded_media_objects.append(media_object)

        if media_object.hash_key is None:
            # Externals are matched per album, not by hash
            return
        if media_object.hash_key in context.media_by_hash:
            logger.warning(
                "Media object %s duplicates hash key %s, it will be removed",
                media_object.id,
                media_object.hash_key,
            )
            context.add_duplicate(media_object)
            return
        context.media_by_hash[media_object.hash_key] = media_object

    def _ensure_writable(self, node) -> None:
        if not self.repository.is_writable(node):
            raise NotWritableError(
                f"{node!r} is not owned by this synchronization and cannot be changed"
            )

    def count_files(self, directory: Path) -> int:
        """Count the files a walk from ``directory`` will process.

        Hidden entries are ignored, as are derived files that live beside the
        originals. Unreadable directories count as empty.

        Args:
            directory: Directory the walk starts from

        Returns:
            Number of files
        """
        settings = self.context.settings
        paths = self.context.paths
        recursive = self.context.options.recursive
        skip_thumbnails = settings.thumbnails_share_media_directory
        skip_optimized = settings.optimized_share_media_directory

        count = 0
        stack = [directory]
        while stack:
            current = stack.pop()
            try:
                with os.scandir(current) as entries:
                    for entry in entries:
                        if self._is_countable_directory(entry):
                            if recursive:
                                stack.append(Path(entry.path))
                            continue
                        if not self._is_countable_file(entry):
                            continue
                        if skip_thumbnails and paths.is_thumbnail_file_name(entry.name):
                            continue
                        if skip_optimized and paths.is_optimized_file_name(entry.name):
                            continue
                        count += 1
            except OSError as e:
                logger.debug("Not counting files in %s: %s", current, e)
        return count

    @staticmethod
    def _is_countable_directory(entry: os.DirEntry) -> bool:
        try:
            return not is_hidden(entry) and entry.is_dir(follow_symlinks=False)
        except OSError:
            return False

    @staticmethod
    def _is_countable_file(entry: os.DirEntry) -> bool:
        # Mirrors the walker: hidden entries and directory links are skipped
        try:
            if is_hidden(entry) or entry.is_dir(follow_symlinks=False):
                return False
            return not (entry.is_symlink() and entry.is_dir())
        except OSError:
            return True
