"""MIME type lookup for media files, filtered by the gallery's enabled types."""

import mimetypes
from pathlib import Path
from typing import Dict, Optional, Union

from gallery_sync.models import GallerySettings, MimeType, MimeTypeCategory

# Types the platform registry may not know about or reports inconsistently
KNOWN_MIME_TYPES: Dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".webp": "image/webp",
    ".mp4": "video/mp4",
    ".m4v": "video/x-m4v",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".wmv": "video/x-ms-wmv",
    ".mpg": "video/mpeg",
    ".mpeg": "video/mpeg",
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".wav": "audio/wav",
    ".flac": "audio/flac",
    ".ogg": "audio/ogg",
    ".wma": "audio/x-ms-wma",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".zip": "application/zip",
}


class MimeTypeRegistry:
    """Resolves file names to MIME types and tells which ones are enabled."""

    def __init__(self, settings: GallerySettings) -> None:
        """Initialize registry.

        Args:
            settings: Gallery settings holding the enabled extensions
        """
        self.enabled_extensions = set(settings.enabled_file_extensions)

    def get(self, file_name: Union[str, Path]) -> Optional[MimeType]:
        """Look up the MIME type of a file.

        Args:
            file_name: File name or path

        Returns:
            MimeType (with its enabled flag set) or None if the extension is unknown
        """
        extension = Path(file_name).suffix.lower()
        if not extension:
            return None

        full_type = KNOWN_MIME_TYPES.get(extension)
        if full_type is None:
            full_type, _ = mimetypes.guess_type(f"file{extension}")
        if full_type is None:
            return None

        return MimeType(
            extension=extension,
            full_type=full_type,
            enabled=extension in self.enabled_extensions,
        )

    def is_authorized(self, file_name: Union[str, Path]) -> bool:
        """Check whether a file may become a media object in this gallery."""
        mime_type = self.get(file_name)
        return mime_type is not None and mime_type.enabled

    def category(self, file_name: Union[str, Path]) -> MimeTypeCategory:
        """Get the MIME category of a file (OTHER when unknown)."""
        mime_type = self.get(file_name)
        return mime_type.category if mime_type else MimeTypeCategory.OTHER
