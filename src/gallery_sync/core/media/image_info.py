"""Image inspection helpers built on Pillow."""

import logging
from pathlib import Path
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from gallery_sync.core.exceptions import CorruptMediaFileError
from gallery_sync.models import GallerySettings

logger = logging.getLogger(__name__)


def file_size_kb(file_path: Path) -> int:
    """Get a file's size in whole kilobytes (at least 1).

    Args:
        file_path: Path to the file

    Returns:
        Size in KB, rounded
    """
    return max(1, round(file_path.stat().st_size / 1024))


def read_image_size(file_path: Path) -> Tuple[int, int]:
    """Read the pixel dimensions of an image without decoding it fully.

    Args:
        file_path: Path to the image

    Returns:
        Tuple of (width, height)

    Raises:
        CorruptMediaFileError: If the file is not a readable image
    """
    try:
        with Image.open(file_path) as img:
            return img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise CorruptMediaFileError(file_path, f"Cannot read image: {e}") from e


def needs_optimized_image(
    settings: GallerySettings, width: int, height: int, size_kb: int
) -> bool:
    """Check whether an original is large enough to need an optimized rendition.

    Args:
        settings: Gallery settings holding the trigger size and max length
        width: Original width in pixels
        height: Original height in pixels
        size_kb: Original size in KB

    Returns:
        True if the file size or either dimension exceeds its limit
    """
    max_length = settings.max_optimized_length
    return (
        size_kb > settings.optimized_image_trigger_size_kb
        or width > max_length
        or height > max_length
    )
