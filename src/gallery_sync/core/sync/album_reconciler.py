"""Album reconciliation: one album per directory."""

import logging
from pathlib import Path
from typing import List, Optional

from gallery_sync.database.models import Album
from gallery_sync.database.repository import GalleryRepository

from .context import SyncContext
from .coordinator import TransactionCoordinator

logger = logging.getLogger(__name__)


class AlbumReconciler:
    """Finds or creates the album for a directory and persists it immediately."""

    def __init__(
        self,
        repository: GalleryRepository,
        context: SyncContext,
        coordinator: TransactionCoordinator,
    ) -> None:
        """Initialize album reconciler.

        Args:
            repository: Repository used to save albums
            context: Run context with the album map
            coordinator: Coordinator counting album saves for checkpoints
        """
        self.repository = repository
        self.context = context
        self.coordinator = coordinator

    def reconcile(self, directory: Path, parent: Optional[Album]) -> Album:
        """Get the album for a directory, creating it if the store has none.

        An existing album is marked synchronized and becomes private when its
        parent is private (never the other way round). A new album inherits
        the parent's privacy. Either way the album is saved at once so its
        media objects can reference a valid ID.

        Args:
            directory: Directory being visited
            parent: Album of the parent directory (None for the root album)

        Returns:
            The synchronized album
        """
        context = self.context
        album = context.albums_by_path.get(directory)

        if album is not None and not self.repository.is_deleted(album):
            if parent is not None and parent.is_private and not album.is_private:
                album.is_private = True
            album.regenerate_thumbnail_on_save = context.options.overwrite_thumbnail
            context.statistics.albums_synchronized += 1
            logger.debug("Matched album %s to %s", album.id, directory)
        else:
            album = Album(
                gallery_id=context.gallery_id,
                parent=parent,
                directory_name=directory.name,
                title=directory.name,
                is_private=parent.is_private if parent is not None else False,
                seq=len(parent.children) if parent is not None else 0,
            )
            album.regenerate_thumbnail_on_save = True
            context.albums_by_path[directory] = album
            context.statistics.albums_created += 1
            logger.debug("Created album for %s", directory)

        album.synchronized = True
        self.repository.save(album, context.user_name)
        self.coordinator.record_album_save()
        return album

    def assign_thumbnails(self, album: Album) -> None:
        """Give albums without a valid thumbnail one of their media objects.

        Children are handled before their parents so an album with no media
        objects of its own can borrow a child album's thumbnail.

        Args:
            album: Album to start from (descendants too when recursive)
        """
        ordered: List[Album] = []
        stack = [album]
        while stack:
            current = stack.pop()
            if self.repository.is_deleted(current):
                continue
            ordered.append(current)
            if self.context.options.recursive:
                stack.extend(current.children)

        for current in reversed(ordered):
            self._assign_thumbnail(current)

    def _assign_thumbnail(self, album: Album) -> None:
        thumbnail_id = album.thumbnail_media_object_id
        if thumbnail_id is not None and self.repository.media_object_exists(
            thumbnail_id
        ):
            return

        new_id = None
        for media_object in album.media_objects:
            if media_object.id is not None and not self.repository.is_deleted(
                media_object
            ):
                new_id = media_object.id
                break

        if new_id is None:
            for child in album.children:
                if (
                    not self.repository.is_deleted(child)
                    and child.thumbnail_media_object_id is not None
                ):
                    new_id = child.thumbnail_media_object_id
                    break

        if new_id != thumbnail_id:
            album.thumbnail_media_object_id = new_id
            self.repository.save(album, self.context.user_name)
            logger.debug("Album %s thumbnail set to %s", album.id, new_id)
