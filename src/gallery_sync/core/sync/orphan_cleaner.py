"""Removal of records and derived files the walk did not claim."""

import logging
import os
from pathlib import Path
from typing import List, Set

from gallery_sync.database.models import Album
from gallery_sync.database.repository import GalleryRepository

from .context import SyncContext

logger = logging.getLogger(__name__)


class OrphanCleaner:
    """Deletes orphaned albums and media objects, then stale derived files."""

    def __init__(self, repository: GalleryRepository, context: SyncContext) -> None:
        """Initialize orphan cleaner.

        Args:
            repository: Repository used to delete records
            context: Run context holding the reconciliation maps
        """
        self.repository = repository
        self.context = context

    def delete_orphaned_records(self) -> None:
        """Delete every loaded node the walk left unsynchronized.

        Files on disk are left alone; only the records go. Duplicates set aside
        while loading are deleted too.
        """
        context = self.context
        statistics = context.statistics

        for album in list(context.albums_by_path.values()):
            if album.synchronized or self.repository.is_deleted(album):
                continue
            logger.info("Deleting album %s (directory no longer exists)", album.id)
            self.repository.delete(album, delete_files=False)
            statistics.albums_deleted += 1

        for node in context.duplicates:
            if self.repository.is_deleted(node):
                continue
            logger.info("Deleting duplicate record %r", node)
            self.repository.delete(node, delete_files=False)
            if isinstance(node, Album):
                statistics.albums_deleted += 1
            else:
                statistics.media_objects_deleted += 1

        for media_object in context.loaded_media_objects:
            if media_object.synchronized or self.repository.is_deleted(media_object):
                continue
            logger.info(
                "Deleting media object %s (file no longer exists)", media_object.id
            )
            self.repository.delete(media_object, delete_files=False)
            statistics.media_objects_deleted += 1

    def delete_orphaned_derived_files(self, start_album: Album) -> None:
        """Remove prefixed files no media object of their album refers to.

        The album's own directory is left untouched when the media path is
        read-only.

        Args:
            start_album: Album the run started from
        """
        albums: List[Album] = []
        stack = [start_album]
        while stack:
            album = stack.pop()
            if self.repository.is_deleted(album):
                continue
            albums.append(album)
            if self.context.options.recursive:
                stack.extend(album.children)

        for album in albums:
            self._clean_album(album)

    def _clean_album(self, album: Album) -> None:
        paths = self.context.paths
        referenced: Set[str] = set()
        for media_object in album.media_objects:
            if self.repository.is_deleted(media_object):
                continue
            if media_object.thumbnail_filename:
                referenced.add(media_object.thumbnail_filename.lower())
            if media_object.optimized_filename:
                referenced.add(media_object.optimized_filename.lower())

        album_directory = paths.album_directory(album)
        for directory in paths.derived_directories(album):
            if (
                directory == album_directory
                and not self.context.media_path_is_writable
            ):
                continue
            self._clean_directory(directory, referenced)

    def _clean_directory(self, directory: Path, referenced: Set[str]) -> None:
        paths = self.context.paths
        try:
            with os.scandir(directory) as iterator:
                entries = [entry for entry in iterator if entry.is_file()]
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning("Cannot read %s: %s", directory, e)
            self.context.skip(directory, f"Directory cannot be read: {e}")
            return

        for entry in entries:
            if not paths.is_derived_file_name(entry.name):
                continue
            if entry.name.lower() in referenced:
                continue
            try:
                os.remove(entry.path)
                self.context.statistics.derived_files_deleted += 1
                logger.debug("Deleted orphaned derived file %s", entry.path)
            except OSError as e:
                logger.warning("Could not delete %s: %s", entry.path, e)
                self.context.skip(entry.path, f"File cannot be deleted: {e}")
