"""Configuration management for the gallery synchronization application."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .models import GallerySettings

# Load .env file from config directory or project root
config_env = Path(__file__).parent.parent.parent / "config" / ".env"
if config_env.exists():
    load_dotenv(config_env)
else:
    load_dotenv()


class Config:
    """Application configuration."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Database settings
        default_db_path = str(Path.home() / ".gallery-sync" / "gallery.db")
        self.database_path = Path(
            os.getenv("GALLERY_SYNC_DATABASE_PATH", default_db_path)
        )

        # Media directories
        self.media_path: Optional[Path] = self._optional_path("GALLERY_SYNC_MEDIA_PATH")
        self.thumbnail_path = self._optional_path("GALLERY_SYNC_THUMBNAIL_PATH")
        self.optimized_path = self._optional_path("GALLERY_SYNC_OPTIMIZED_PATH")

        # Derived file naming
        self.thumbnail_prefix = os.getenv("GALLERY_SYNC_THUMBNAIL_PREFIX", "zThumb_")
        self.optimized_prefix = os.getenv("GALLERY_SYNC_OPTIMIZED_PREFIX", "zOpt_")

        # Optimized image triggers
        self.optimized_trigger_size_kb = int(
            os.getenv("GALLERY_SYNC_OPTIMIZED_TRIGGER_SIZE_KB", "50")
        )
        self.max_optimized_length = int(
            os.getenv("GALLERY_SYNC_MAX_OPTIMIZED_LENGTH", "640")
        )
        self.max_thumbnail_length = int(
            os.getenv("GALLERY_SYNC_MAX_THUMBNAIL_LENGTH", "115")
        )

        # Synchronization settings
        self.checkpoint_interval = int(
            os.getenv("GALLERY_SYNC_CHECKPOINT_INTERVAL", "100")
        )

        self._ensure_directories()

    @staticmethod
    def _optional_path(env_name: str) -> Optional[Path]:
        value = os.getenv(env_name, "").strip()
        return Path(value).expanduser() if value else None

    def _ensure_directories(self) -> None:
        """Ensure required directories exist."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)

    def build_gallery_settings(
        self,
        media_path: Optional[Path] = None,
        thumbnail_path: Optional[Path] = None,
        optimized_path: Optional[Path] = None,
    ) -> GallerySettings:
        """Build gallery settings from the environment and explicit overrides.

        Args:
            media_path: Media object root, overrides GALLERY_SYNC_MEDIA_PATH
            thumbnail_path: Thumbnail root, overrides GALLERY_SYNC_THUMBNAIL_PATH
            optimized_path: Optimized root, overrides GALLERY_SYNC_OPTIMIZED_PATH

        Returns:
            Validated GallerySettings

        Raises:
            ValueError: If no media path is configured
        """
        media_root = media_path or self.media_path
        if media_root is None:
            raise ValueError(
                "No media path configured (set GALLERY_SYNC_MEDIA_PATH or pass one)"
            )

        return GallerySettings(
            media_object_path=media_root,
            thumbnail_path=thumbnail_path or self.thumbnail_path,
            optimized_path=optimized_path or self.optimized_path,
            thumbnail_file_name_prefix=self.thumbnail_prefix,
            optimized_file_name_prefix=self.optimized_prefix,
            optimized_image_trigger_size_kb=self.optimized_trigger_size_kb,
            max_optimized_length=self.max_optimized_length,
            max_thumbnail_length=self.max_thumbnail_length,
        )
