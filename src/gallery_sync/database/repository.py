"""Transactional repository used by a synchronization run.

A repository owns one long-lived session: every album and media object the run
touches is loaded through it, so ``is_writable`` can tell whether a node may be
mutated. Objects stay usable across checkpoint commits.
"""

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Set, Union

from sqlalchemy import inspect, select

from gallery_sync.core.exceptions import InvalidAlbumError
from gallery_sync.core.media.paths import GalleryPaths
from gallery_sync.models import GallerySettings

from .models import Album, MediaObject, MediaObjectType
from .service import DatabaseService

logger = logging.getLogger(__name__)

Node = Union[Album, MediaObject]


class GalleryRepository:
    """Loads, saves and deletes the albums and media objects of one gallery."""

    def __init__(
        self,
        db_service: DatabaseService,
        gallery_id: int,
        settings: Optional[GallerySettings] = None,
    ) -> None:
        """Initialize repository.

        Args:
            db_service: Database service providing the session
            gallery_id: Gallery whose records are handled
            settings: Gallery settings (loaded from the database if None)
        """
        self.db_service = db_service
        self.gallery_id = gallery_id
        self.settings = settings or db_service.get_gallery_settings(gallery_id)
        self.paths = GalleryPaths(self.settings)
        self.session = db_service.create_run_session()
        self._deleted: Set[Node] = set()

    # =========================================================================
    # Loading
    # =========================================================================

    def load_album(self, album_id: int) -> Album:
        """Load an album of this gallery.

        Args:
            album_id: Album database ID

        Returns:
            Album attached to this repository's session

        Raises:
            InvalidAlbumError: If the album does not exist in this gallery
        """
        album = self.session.get(Album, album_id)
        if album is None or album.gallery_id != self.gallery_id:
            raise InvalidAlbumError(
                f"Album {album_id} not found in gallery {self.gallery_id}"
            )
        return album

    def load_root_album(self) -> Album:
        """Load the gallery's root album."""
        album = self.session.scalar(
            select(Album).where(
                Album.gallery_id == self.gallery_id, Album.parent_id.is_(None)
            )
        )
        if album is None:
            raise InvalidAlbumError(f"No root album for gallery {self.gallery_id}")
        return album

    def load_child_album_ids(self, album_id: int) -> List[int]:
        """Get the IDs of an album's direct child albums.

        Args:
            album_id: Parent album database ID

        Returns:
            Child album IDs in directory name order
        """
        stmt = (
            select(Album.id)
            .where(Album.gallery_id == self.gallery_id, Album.parent_id == album_id)
            .order_by(Album.directory_name)
        )
        return list(self.session.scalars(stmt).all())

    def load_child_albums(self, album: Album) -> List[Album]:
        """Get an album's direct child albums."""
        return list(album.children)

    def load_child_media_objects(self, album: Album) -> List[MediaObject]:
        """Get an album's media objects."""
        return list(album.media_objects)

    def load_all_hash_keys(self) -> Set[str]:
        """Get every hash key stored for the gallery.

        Returns:
            Set of hash keys (media objects without one are ignored)
        """
        stmt = select(MediaObject.hash_key).where(
            MediaObject.gallery_id == self.gallery_id,
            MediaObject.hash_key.is_not(None),
        )
        return set(self.session.scalars(stmt).all())

    def media_object_exists(self, media_object_id: int) -> bool:
        """Check whether a media object exists and was not deleted in this run."""
        media_object = self.session.get(MediaObject, media_object_id)
        return media_object is not None and not self.is_deleted(media_object)

    # =========================================================================
    # Saving and deleting
    # =========================================================================

    def add_external_media_object(
        self, album: Album, external_html: str, title: str, user_name: str
    ) -> MediaObject:
        """Add a URL-embedded media object to an album.

        Args:
            album: Album receiving the object
            external_html: HTML snippet embedding the external content
            title: Display title
            user_name: Actor recorded in the audit fields

        Returns:
            The saved media object
        """
        settings = self.settings
        media_object = MediaObject(
            gallery_id=self.gallery_id,
            album=album,
            media_type=MediaObjectType.EXTERNAL.value,
            title=title,
            external_html=external_html,
            original_filename="",
            original_width=settings.default_generic_object_width,
            original_height=settings.default_generic_object_height,
            original_size_kb=0,
            optimized_filename="",
            optimized_width=0,
            optimized_height=0,
            optimized_size_kb=0,
            thumbnail_filename="",
            thumbnail_width=0,
            thumbnail_height=0,
            thumbnail_size_kb=0,
            seq=len(album.media_objects),
        )
        self.save(media_object, user_name)

        # Externals have no file name of their own, the ID keeps thumbnails apart
        media_object.thumbnail_filename = self.paths.thumbnail_file_name(
            f"external_{media_object.id}"
        )
        self.session.flush()
        return media_object

    def save(self, node: Node, user_name: str) -> None:
        """Persist a new or changed node and flush it so it gets an ID.

        Args:
            node: Album or media object
            user_name: Actor recorded in the audit fields
        """
        state = inspect(node)
        is_new = state.transient or state.pending
        if not is_new and not self.session.is_modified(node):
            return

        now = datetime.now(timezone.utc)
        if is_new:
            node.created_by = user_name
            node.date_added = now
        node.last_modified_by = user_name
        node.date_last_modified = now

        self.session.add(node)
        self.session.flush()

    def delete(self, node: Node, delete_files: bool = False) -> None:
        """Delete a node, its children and optionally its files.

        Args:
            node: Album or media object
            delete_files: Also remove the files/directories from disk (skipped
                when the media path is read-only)
        """
        if self.is_deleted(node):
            return

        if delete_files and not self.settings.media_object_path_is_read_only:
            if isinstance(node, Album):
                self._delete_album_directories(node)
            else:
                self._delete_media_object_files(node)

        self._mark_deleted(node)
        if isinstance(node, Album):
            if node.parent is not None and node in node.parent.children:
                node.parent.children.remove(node)
        elif node.album is not None and node in node.album.media_objects:
            node.album.media_objects.remove(node)

        if inspect(node).persistent:
            self.session.delete(node)
        self.session.flush()

    def _mark_deleted(self, node: Node) -> None:
        self._deleted.add(node)
        if isinstance(node, Album):
            for child in node.children:
                self._mark_deleted(child)
            for media_object in node.media_objects:
                self._deleted.add(media_object)

    def _delete_media_object_files(self, media_object: MediaObject) -> None:
        if media_object.album is None:
            return
        paths = []
        if media_object.original_filename:
            paths.append(self.paths.original_path(media_object))
        if media_object.thumbnail_filename:
            paths.append(self.paths.thumbnail_path(media_object))
        if (
            media_object.optimized_filename
            and media_object.optimized_filename != media_object.original_filename
        ):
            paths.append(self.paths.optimized_path(media_object))

        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not delete %s: %s", path, e)

    def _delete_album_directories(self, album: Album) -> None:
        if album.parent is None:
            logger.warning("Refusing to delete the media root directory")
            return
        directories: List[Path] = [self.paths.album_directory(album)]
        for directory in (
            self.paths.thumbnail_directory(album),
            self.paths.optimized_directory(album),
        ):
            if directory not in directories:
                directories.append(directory)

        for directory in directories:
            if not directory.exists():
                continue
            try:
                shutil.rmtree(directory)
            except OSError as e:
                logger.warning("Could not delete directory %s: %s", directory, e)

    # =========================================================================
    # Transactions and state
    # =========================================================================

    def begin_transaction(self) -> None:
        """Open a transaction unless one is already active."""
        if not self.session.in_transaction():
            self.session.begin()

    def commit(self) -> None:
        """Commit the current transaction."""
        self.session.commit()

    def rollback(self) -> None:
        """Roll back the current transaction."""
        self.session.rollback()

    def is_writable(self, node: Node) -> bool:
        """Check whether a node belongs to this repository's session."""
        return inspect(node).session is self.session

    def is_deleted(self, node: Node) -> bool:
        """Check whether a node was deleted through this repository."""
        state = inspect(node)
        return node in self._deleted or state.deleted or state.was_deleted

    def close(self) -> None:
        """Close the session."""
        self.session.close()

    def __enter__(self) -> "GalleryRepository":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
