"""Media object reconciliation: identity resolution and regeneration decisions."""

import logging
from pathlib import Path
from typing import Optional

from gallery_sync.core.exceptions import (
    MediaFileError,
    UnsupportedMediaObjectTypeError,
)
from gallery_sync.core.media.derivatives import DerivativeGenerator
from gallery_sync.core.media.factory import MediaObjectFactory, default_dimensions
from gallery_sync.core.media.hash_keys import hash_key_for_file
from gallery_sync.core.media.image_info import (
    file_size_kb,
    needs_optimized_image,
    read_image_size,
)
from gallery_sync.core.media.mime_types import MimeTypeRegistry
from gallery_sync.database.models import Album, MediaObject
from gallery_sync.database.repository import GalleryRepository

from .context import SyncContext

logger = logging.getLogger(__name__)


class MediaObjectReconciler:
    """Matches files to stored media objects, creating or updating them."""

    def __init__(
        self,
        repository: GalleryRepository,
        context: SyncContext,
        mime_types: MimeTypeRegistry,
        factory: MediaObjectFactory,
        derivatives: DerivativeGenerator,
    ) -> None:
        """Initialize media object reconciler.

        Args:
            repository: Repository used to save media objects
            context: Run context with the hash map and hash key registry
            mime_types: MIME registry deciding which files are authorized
            factory: Factory for new media objects
            derivatives: Collaborator producing flagged derived files
        """
        self.repository = repository
        self.context = context
        self.mime_types = mime_types
        self.factory = factory
        self.derivatives = derivatives
        self.paths = context.paths
        self.settings = context.settings

    def reconcile(self, file_path: Path, album: Album) -> MediaObject:
        """Bring the store in line with one file.

        Args:
            file_path: File found in the album's directory
            album: Album of that directory

        Returns:
            The created or updated media object

        Raises:
            UnsupportedMediaObjectTypeError: If the file type is not enabled
            CorruptMediaFileError: If the file cannot be read
        """
        if not self.mime_types.is_authorized(file_path):
            raise UnsupportedMediaObjectTypeError(
                file_path, "File type is not enabled for this gallery"
            )

        existing = self.resolve(file_path, album)
        if existing is not None:
            self._update_existing(existing, file_path, album)
            return existing
        return self._create_new(file_path, album)

    def resolve(self, file_path: Path, album: Album) -> Optional[MediaObject]:
        """Find the stored media object for a file.

        First by position (an unclaimed media object of the album with the
        same original file), then by the file's hash key.

        Args:
            file_path: File found on disk
            album: Album of the file's directory

        Returns:
            The matching media object or None if the file is new
        """
        for media_object in album.media_objects:
            if (
                media_object.original_filename == file_path.name
                and not media_object.is_external
                and self._is_claimable(media_object)
            ):
                return media_object

        media_object = self.context.media_by_hash.get(hash_key_for_file(file_path))
        if media_object is not None and self._is_claimable(media_object):
            return media_object
        return None

    def _is_claimable(self, media_object: MediaObject) -> bool:
        return (
            not media_object.synchronized
            and media_object.id is not None
            and not self.context.is_duplicate(media_object)
            and not self.repository.is_deleted(media_object)
        )

    def _update_existing(
        self, media_object: MediaObject, file_path: Path, album: Album
    ) -> None:
        context = self.context

        if media_object.album is not album:
            logger.debug(
                "Media object %s moved to album %s", media_object.id, album.id
            )
            media_object.album = album

        self._update_hash_key(media_object, file_path)

        if not self.paths.thumbnail_path(media_object).exists():
            media_object.regenerate_thumbnail_on_save = True

        options = context.options
        if media_object.is_image:
            if options.overwrite_thumbnail or options.overwrite_optimized:
                self._evaluate_original(media_object, file_path)
            self._evaluate_optimized(media_object)
        else:
            width, height = default_dimensions(
                self.settings, media_object.object_type
            )
            media_object.original_width = width
            media_object.original_height = height

        self._count_flags(media_object)
        self.derivatives.generate(media_object)

        media_object.synchronized = True
        if self.repository.session.is_modified(media_object):
            context.statistics.media_objects_updated += 1
        self.repository.save(media_object, context.user_name)

    def _update_hash_key(self, media_object: MediaObject, file_path: Path) -> None:
        if hash_key_for_file(file_path) == media_object.hash_key:
            return

        old_key = media_object.hash_key
        new_key = self.context.hash_keys.get_unique_key(
            file_path,
            own_key=old_key,
            write_back=self.context.media_path_is_writable,
        )
        if new_key == old_key:
            return

        media_by_hash = self.context.media_by_hash
        if old_key is not None and media_by_hash.get(old_key) is media_object:
            del media_by_hash[old_key]
        media_by_hash[new_key] = media_object
        media_object.hash_key = new_key
        logger.debug("Media object %s rehashed to %s", media_object.id, new_key)

    def _evaluate_original(self, media_object: MediaObject, file_path: Path) -> None:
        width, height = read_image_size(file_path)
        media_object.original_width = width
        media_object.original_height = height
        media_object.original_size_kb = file_size_kb(file_path)

    def _evaluate_optimized(self, media_object: MediaObject) -> None:
        """Decide whether the image needs a separate optimized file.

        Below both the trigger size and the maximum length the optimized
        descriptor simply mirrors the original.
        """
        if not needs_optimized_image(
            self.settings,
            media_object.original_width,
            media_object.original_height,
            media_object.original_size_kb,
        ):
            media_object.copy_original_to_optimized()
            media_object.regenerate_optimized_on_save = False
            return

        if (
            not media_object.optimized_filename
            or media_object.optimized_filename == media_object.original_filename
        ):
            media_object.optimized_filename = self.paths.optimized_file_name(
                media_object.original_filename
            )
            media_object.regenerate_optimized_on_save = True
        elif not self.paths.optimized_path(media_object).exists():
            media_object.regenerate_optimized_on_save = True

    def _create_new(self, file_path: Path, album: Album) -> MediaObject:
        context = self.context
        media_object = self.factory.create(file_path, album)
        try:
            media_object.hash_key = context.hash_keys.get_unique_key(
                file_path, write_back=context.media_path_is_writable
            )
            self._count_flags(media_object)
            self.derivatives.generate(media_object)

            if (
                media_object.is_image
                and self.settings.discard_original_image_during_import
                and context.media_path_is_writable
            ):
                new_path = self.derivatives.discard_original(media_object)
                if new_path is not None:
                    media_object.hash_key = context.hash_keys.get_unique_key(
                        new_path, write_back=True
                    )
                    self.derivatives.generate(media_object)
        except (MediaFileError, OSError):
            if media_object in album.media_objects:
                album.media_objects.remove(media_object)
            raise

        media_object.synchronized = True
        context.media_by_hash[media_object.hash_key] = media_object
        self.repository.save(media_object, context.user_name)
        context.statistics.media_objects_created += 1
        logger.debug("Added %s as media object %s", file_path, media_object.id)
        return media_object

    def reconcile_externals(self, album: Album) -> None:
        """Synchronize the album's external (URL-embedded) media objects.

        They have no file to match, so they are kept as they are and only get a
        new thumbnail when it is missing or overwriting is requested.

        Args:
            album: Album being visited
        """
        context = self.context
        for media_object in list(album.media_objects):
            if not media_object.is_external or self.repository.is_deleted(
                media_object
            ):
                continue

            if (
                context.options.overwrite_thumbnail
                or not media_object.thumbnail_filename
                or not self.paths.thumbnail_path(media_object).exists()
            ):
                media_object.regenerate_thumbnail_on_save = True
            media_object.regenerate_optimized_on_save = False
            if not media_object.thumbnail_filename:
                media_object.thumbnail_filename = self.paths.thumbnail_file_name(
                    f"external_{media_object.id}"
                )

            self._count_flags(media_object)
            self.derivatives.generate(media_object)
            media_object.synchronized = True
            self.repository.save(media_object, context.user_name)

    def _count_flags(self, media_object: MediaObject) -> None:
        statistics = self.context.statistics
        if media_object.regenerate_thumbnail_on_save:
            statistics.thumbnails_flagged += 1
        if media_object.regenerate_optimized_on_save:
            statistics.optimized_flagged += 1
        if media_object.extract_metadata_on_save:
            statistics.metadata_flagged += 1
