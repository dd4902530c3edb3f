"""Metadata extraction: EXIF tags via Pillow, audio/video properties via mutagen."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import mutagen
from PIL import ExifTags, Image, UnidentifiedImageError

from gallery_sync.database.models import MediaObject, MediaObjectMetadata

from .paths import GalleryPaths

logger = logging.getLogger(__name__)

# Alias for mutagen.File - mutagen doesn't have type stubs
MutagenFile = mutagen.File

# EXIF tag name -> description stored with the item
EXIF_ITEMS: Dict[str, str] = {
    "Make": "Camera Make",
    "Model": "Camera Model",
    "DateTime": "Date Picture Taken",
    "Orientation": "Orientation",
    "ExposureTime": "Exposure Time",
    "FNumber": "F-Stop",
    "ISOSpeedRatings": "ISO Speed",
    "FocalLength": "Focal Length",
    "Artist": "Author",
    "Copyright": "Copyright",
}

AUDIO_TAGS: Dict[str, str] = {
    "title": "Title",
    "artist": "Artist",
    "album": "Album",
    "genre": "Genre",
    "date": "Year",
}


class MetadataExtractor:
    """Extracts metadata items for media objects flagged for extraction."""

    def __init__(self, paths: GalleryPaths) -> None:
        """Initialize extractor.

        Args:
            paths: Path mapping to locate original files
        """
        self.paths = paths

    def extract(self, media_object: MediaObject) -> List[MediaObjectMetadata]:
        """Replace a media object's metadata items with freshly extracted ones.

        Args:
            media_object: Media object whose original file is read

        Returns:
            The new metadata items (already attached to the media object)
        """
        if media_object.is_external:
            values: List[Tuple[str, str, str]] = []
        else:
            file_path = self.paths.original_path(media_object)
            if media_object.is_image:
                values = self._extract_image(file_path)
            else:
                values = self._extract_audio_video(file_path)

        items = [
            MediaObjectMetadata(name=name, description=description, value=value)
            for name, description, value in values
        ]
        media_object.metadata_items = items
        logger.debug(
            "Extracted %d metadata items for %s",
            len(items),
            media_object.original_filename,
        )
        return items

    def _extract_image(self, file_path: Path) -> List[Tuple[str, str, str]]:
        values: List[Tuple[str, str, str]] = []
        try:
            with Image.open(file_path) as img:
                width, height = img.size
                values.append(("Width", "Width", f"{width} pixels"))
                values.append(("Height", "Height", f"{height} pixels"))

                exif = img.getexif()
                tags = {
                    ExifTags.TAGS.get(tag_id, str(tag_id)): v
                    for tag_id, v in exif.items()
                }
                # Camera settings live in the EXIF sub-IFD
                tags.update(
                    {
                        ExifTags.TAGS.get(tag_id, str(tag_id)): v
                        for tag_id, v in exif.get_ifd(ExifTags.IFD.Exif).items()
                    }
                )
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            logger.warning("Failed to read EXIF data from %s: %s", file_path, e)
            return values

        for tag, description in EXIF_ITEMS.items():
            if tag in tags:
                values.append((tag, description, self._format_value(tags[tag])))
        return values

    def _extract_audio_video(self, file_path: Path) -> List[Tuple[str, str, str]]:
        values: List[Tuple[str, str, str]] = []
        try:
            media = MutagenFile(file_path, easy=True)
        except (mutagen.MutagenError, OSError) as e:
            logger.warning("Failed to extract metadata from %s: %s", file_path, e)
            return values

        if not media:
            return values

        length = getattr(media.info, "length", None)
        if length:
            minutes, seconds = divmod(int(round(length)), 60)
            values.append(("Duration", "Duration", f"{minutes}:{seconds:02d}"))
        bitrate = getattr(media.info, "bitrate", None)
        if bitrate:
            values.append(("Bitrate", "Bit Rate", f"{bitrate // 1000} kbps"))

        if getattr(media, "tags", None):
            for tag, description in AUDIO_TAGS.items():
                if tag in media.tags:
                    value = self._format_value(media.tags[tag])
                    values.append((tag.capitalize(), description, value))
        return values

    @staticmethod
    def _format_value(value: Any) -> str:
        if isinstance(value, list):
            value = value[0] if value else ""
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace").strip("\x00 ")
        return str(value)
