"""Factory creating media object records for files found on disk."""

import logging
from pathlib import Path
from typing import Tuple

from gallery_sync.core.exceptions import UnsupportedMediaObjectTypeError
from gallery_sync.database.models import Album, MediaObject, MediaObjectType
from gallery_sync.models import GallerySettings, MimeTypeCategory

from .image_info import file_size_kb, needs_optimized_image, read_image_size
from .mime_types import MimeTypeRegistry
from .paths import GalleryPaths

logger = logging.getLogger(__name__)

CATEGORY_TO_TYPE = {
    MimeTypeCategory.IMAGE: MediaObjectType.IMAGE,
    MimeTypeCategory.VIDEO: MediaObjectType.VIDEO,
    MimeTypeCategory.AUDIO: MediaObjectType.AUDIO,
    MimeTypeCategory.OTHER: MediaObjectType.GENERIC,
}


class MediaObjectFactory:
    """Creates unsaved media objects, classified by MIME category."""

    def __init__(
        self,
        gallery_id: int,
        settings: GallerySettings,
        mime_types: MimeTypeRegistry,
        paths: GalleryPaths,
    ) -> None:
        """Initialize factory.

        Args:
            gallery_id: Gallery the new objects belong to
            settings: Gallery settings
            mime_types: MIME registry deciding which files are allowed
            paths: Path mapping for derived file names
        """
        self.gallery_id = gallery_id
        self.settings = settings
        self.mime_types = mime_types
        self.paths = paths

    def create(self, file_path: Path, album: Album) -> MediaObject:
        """Create a media object for a file, flagged for derivative generation.

        Args:
            file_path: Path to the original file
            album: Album the object belongs to

        Returns:
            New, unsaved MediaObject without a hash key

        Raises:
            UnsupportedMediaObjectTypeError: If the type is unknown or disabled
            CorruptMediaFileError: If an image cannot be read
        """
        mime_type = self.mime_types.get(file_path)
        if mime_type is None:
            raise UnsupportedMediaObjectTypeError(
                file_path, f"Unknown file type '{file_path.suffix}'"
            )
        if not mime_type.enabled:
            raise UnsupportedMediaObjectTypeError(
                file_path, f"File type '{mime_type.full_type}' is disabled"
            )

        media_type = CATEGORY_TO_TYPE[mime_type.category]
        if media_type == MediaObjectType.IMAGE:
            width, height = read_image_size(file_path)
        else:
            width, height = default_dimensions(self.settings, media_type)

        media_object = MediaObject(
            gallery_id=self.gallery_id,
            album=album,
            media_type=media_type.value,
            mime_type=mime_type.full_type,
            title=file_path.name,
            original_filename=file_path.name,
            original_width=width,
            original_height=height,
            original_size_kb=file_size_kb(file_path),
            thumbnail_filename=self.paths.thumbnail_file_name(file_path.name),
            thumbnail_width=0,
            thumbnail_height=0,
            thumbnail_size_kb=0,
            seq=len(album.media_objects),
        )

        if media_type == MediaObjectType.IMAGE:
            if needs_optimized_image(
                self.settings, width, height, media_object.original_size_kb
            ):
                media_object.optimized_filename = self.paths.optimized_file_name(
                    file_path.name
                )
                media_object.optimized_width = 0
                media_object.optimized_height = 0
                media_object.optimized_size_kb = 0
                media_object.regenerate_optimized_on_save = True
            else:
                media_object.copy_original_to_optimized()
        else:
            media_object.optimized_filename = ""
            media_object.optimized_width = 0
            media_object.optimized_height = 0
            media_object.optimized_size_kb = 0

        media_object.regenerate_thumbnail_on_save = True
        media_object.extract_metadata_on_save = True

        logger.debug("Created %s media object for %s", media_type.value, file_path)
        return media_object


def default_dimensions(
    settings: GallerySettings, media_type: MediaObjectType
) -> Tuple[int, int]:
    """Get the configured player/display size for a non-image media type.

    Args:
        settings: Gallery settings
        media_type: Media object type

    Returns:
        Tuple of (width, height)
    """
    if media_type == MediaObjectType.VIDEO:
        return (
            settings.default_video_player_width,
            settings.default_video_player_height,
        )
    if media_type == MediaObjectType.AUDIO:
        return (
            settings.default_audio_player_width,
            settings.default_audio_player_height,
        )
    return (
        settings.default_generic_object_width,
        settings.default_generic_object_height,
    )
