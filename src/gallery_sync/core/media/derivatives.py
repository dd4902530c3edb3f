"""Derived file generation (thumbnails and optimized images) using Pillow."""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import Image, ImageDraw, ImageOps, UnidentifiedImageError

from gallery_sync.core.exceptions import CorruptMediaFileError
from gallery_sync.database.models import MediaObject, MediaObjectType
from gallery_sync.models import GallerySettings

from .image_info import file_size_kb
from .metadata import MetadataExtractor
from .paths import GalleryPaths

logger = logging.getLogger(__name__)

# Background colors of placeholder thumbnails for objects without pixels
PLACEHOLDER_COLORS: Dict[str, Tuple[int, int, int]] = {
    MediaObjectType.VIDEO.value: (52, 73, 94),
    MediaObjectType.AUDIO.value: (39, 174, 96),
    MediaObjectType.GENERIC.value: (127, 140, 141),
    MediaObjectType.EXTERNAL.value: (41, 128, 185),
}


class DerivativeGenerator:
    """Produces the derived files a media object is flagged for.

    The synchronization engine only sets the ``regenerate_*_on_save`` and
    ``extract_metadata_on_save`` flags; this collaborator acts on them and
    clears each flag once its artifact exists.
    """

    def __init__(
        self,
        settings: GallerySettings,
        paths: GalleryPaths,
        metadata_extractor: Optional[MetadataExtractor] = None,
    ) -> None:
        """Initialize generator.

        Args:
            settings: Gallery settings with size limits and JPEG quality
            paths: Path mapping for originals and derived files
            metadata_extractor: Extractor used for objects flagged for metadata
        """
        self.settings = settings
        self.paths = paths
        self.metadata_extractor = metadata_extractor or MetadataExtractor(paths)

    def generate(self, media_object: MediaObject) -> None:
        """Create every derived artifact the media object is flagged for.

        Args:
            media_object: Media object with regeneration flags set

        Raises:
            CorruptMediaFileError: If the original image cannot be decoded
        """
        if media_object.regenerate_thumbnail_on_save:
            self._create_thumbnail(media_object)
            media_object.regenerate_thumbnail_on_save = False

        if media_object.regenerate_optimized_on_save:
            if media_object.is_image:
                self._create_optimized(media_object)
            media_object.regenerate_optimized_on_save = False

        if media_object.extract_metadata_on_save:
            self.metadata_extractor.extract(media_object)
            media_object.extract_metadata_on_save = False

    def _create_thumbnail(self, media_object: MediaObject) -> None:
        target = self.paths.thumbnail_path(media_object)
        target.parent.mkdir(parents=True, exist_ok=True)
        max_length = self.settings.max_thumbnail_length

        if media_object.is_image:
            source = self.paths.original_path(media_object)
            size = self._resize_to_jpeg(
                source, target, max_length, self.settings.thumbnail_image_jpeg_quality
            )
        else:
            size = self._write_placeholder(media_object, target, max_length)

        media_object.thumbnail_width, media_object.thumbnail_height = size
        media_object.thumbnail_size_kb = file_size_kb(target)
        logger.debug("Created thumbnail %s", target)

    def _create_optimized(self, media_object: MediaObject) -> None:
        source = self.paths.original_path(media_object)
        target = self.paths.optimized_path(media_object)
        target.parent.mkdir(parents=True, exist_ok=True)

        size = self._resize_to_jpeg(
            source,
            target,
            self.settings.max_optimized_length,
            self.settings.optimized_image_jpeg_quality,
        )
        media_object.optimized_width, media_object.optimized_height = size
        media_object.optimized_size_kb = file_size_kb(target)
        logger.debug("Created optimized image %s", target)

    @staticmethod
    def _resize_to_jpeg(
        source: Path, target: Path, max_length: int, quality: int
    ) -> Tuple[int, int]:
        try:
            with Image.open(source) as img:
                img = ImageOps.exif_transpose(img)
                if img.mode != "RGB":
                    img = img.convert("RGB")
                img.thumbnail((max_length, max_length), Image.Resampling.LANCZOS)
                img.save(target, "JPEG", quality=quality, optimize=True)
                return img.size
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            reason = f"Cannot create {target.name}: {e}"
            raise CorruptMediaFileError(source, reason) from e

    @staticmethod
    def _write_placeholder(
        media_object: MediaObject, target: Path, max_length: int
    ) -> Tuple[int, int]:
        width, height = max_length, max(1, round(max_length * 0.75))
        color = PLACEHOLDER_COLORS.get(media_object.media_type, (127, 140, 141))
        img = Image.new("RGB", (width, height), color)

        label = Path(media_object.original_filename).suffix.lstrip(".").upper()
        if not label:
            label = media_object.media_type.upper()
        ImageDraw.Draw(img).text((8, height // 2 - 6), label, fill=(255, 255, 255))

        img.save(target, "JPEG", quality=90)
        return width, height

    def discard_original(self, media_object: MediaObject) -> Optional[Path]:
        """Replace an image's original with its optimized rendition.

        The optimized file is moved into the original's directory under the
        original's name (with the optimized extension), and the original
        descriptor takes the optimized values.

        Args:
            media_object: Image media object with its optimized file already created

        Returns:
            Path of the new original file, or None if nothing was replaced
        """
        if not media_object.is_image or not media_object.optimized_filename:
            return None
        if media_object.optimized_filename == media_object.original_filename:
            return None

        original_path = self.paths.original_path(media_object)
        optimized_path = self.paths.optimized_path(media_object)
        if not optimized_path.exists():
            logger.warning(
                "Optimized file %s missing, keeping original %s",
                optimized_path,
                original_path,
            )
            return None

        original_path.unlink()
        new_path = original_path
        if original_path.suffix.lower() != optimized_path.suffix.lower():
            new_path = unique_file_path(
                original_path.with_suffix(optimized_path.suffix)
            )
        optimized_path.replace(new_path)

        media_object.original_filename = new_path.name
        media_object.original_width = media_object.optimized_width
        media_object.original_height = media_object.optimized_height
        media_object.original_size_kb = media_object.optimized_size_kb
        media_object.copy_original_to_optimized()
        media_object.extract_metadata_on_save = True

        logger.info("Replaced original with optimized image: %s", new_path)
        return new_path


def unique_file_path(file_path: Path) -> Path:
    """Return ``file_path`` or, if taken, the first free ``name(n).ext`` variant."""
    candidate = file_path
    counter = 1
    while candidate.exists():
        name = f"{file_path.stem}({counter}){file_path.suffix}"
        candidate = file_path.with_name(name)
        counter += 1
    return candidate
