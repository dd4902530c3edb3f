"""Value models for gallery configuration and MIME type handling."""

from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_ENABLED_EXTENSIONS = [
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".bmp",
    ".tif",
    ".tiff",
    ".webp",
    ".mp4",
    ".m4v",
    ".mov",
    ".avi",
    ".wmv",
    ".mpg",
    ".mpeg",
    ".mp3",
    ".m4a",
    ".wav",
    ".flac",
    ".ogg",
    ".wma",
    ".pdf",
    ".txt",
    ".zip",
]


class MimeTypeCategory(str, Enum):
    """Broad category a MIME type belongs to."""

    OTHER = "other"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"


class MimeType(BaseModel):
    """A file extension mapped to a MIME type."""

    extension: str
    full_type: str
    enabled: bool = True

    @property
    def major_type(self) -> str:
        """Get the part of the MIME type before the slash."""
        return self.full_type.split("/", 1)[0].lower()

    @property
    def category(self) -> MimeTypeCategory:
        """Get the category derived from the major type."""
        try:
            return MimeTypeCategory(self.major_type)
        except ValueError:
            return MimeTypeCategory.OTHER

    @field_validator("extension", mode="before")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Normalize extension to lower case with a leading dot."""
        v = v.strip().lower()
        return v if v.startswith(".") else f".{v}"


class GallerySettings(BaseModel):
    """Per-gallery settings consumed by the synchronization engine.

    Empty thumbnail/optimized paths mean the derived files live next to the
    originals in the media object directory.
    """

    media_object_path: Path
    thumbnail_path: Optional[Path] = None
    optimized_path: Optional[Path] = None
    thumbnail_file_name_prefix: str = "zThumb_"
    optimized_file_name_prefix: str = "zOpt_"
    optimized_image_trigger_size_kb: int = 50
    max_optimized_length: int = 640
    max_thumbnail_length: int = 115
    optimized_image_jpeg_quality: int = 70
    thumbnail_image_jpeg_quality: int = 70
    default_video_player_width: int = 640
    default_video_player_height: int = 480
    default_audio_player_width: int = 600
    default_audio_player_height: int = 60
    default_generic_object_width: int = 640
    default_generic_object_height: int = 480
    discard_original_image_during_import: bool = False
    media_object_path_is_read_only: bool = False
    enabled_file_extensions: List[str] = DEFAULT_ENABLED_EXTENSIONS

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("media_object_path", mode="before")
    @classmethod
    def validate_media_object_path(cls, v: Union[str, Path]) -> str:
        """Expand input to an absolute path string.

        A string is returned so stored settings also validate in JSON mode,
        which only accepts strings for ``Path`` fields.
        """
        return str(Path(v).expanduser().absolute())

    @field_validator("thumbnail_path", "optimized_path", mode="before")
    @classmethod
    def validate_alternate_path(cls, v: Union[str, Path, None]) -> Optional[str]:
        """Expand input to an absolute path string, treating blanks as unset."""
        if v is None or str(v).strip() == "":
            return None
        return str(Path(v).expanduser().absolute())

    @field_validator("enabled_file_extensions", mode="before")
    @classmethod
    def validate_extensions(cls, v: List[str]) -> List[str]:
        """Normalize extensions to lower case with a leading dot."""
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized

    @property
    def full_thumbnail_path(self) -> Path:
        """Get the thumbnail root, falling back to the media path."""
        return self.thumbnail_path or self.media_object_path

    @property
    def full_optimized_path(self) -> Path:
        """Get the optimized root, falling back to the media path."""
        return self.optimized_path or self.media_object_path

    @property
    def thumbnails_share_media_directory(self) -> bool:
        """Check whether thumbnails are stored beside the originals."""
        return self.full_thumbnail_path == self.media_object_path

    @property
    def optimized_share_media_directory(self) -> bool:
        """Check whether optimized images are stored beside the originals."""
        return self.full_optimized_path == self.media_object_path
