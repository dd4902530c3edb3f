"""Physical path mapping for albums, originals and derived files."""

import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING, List

from gallery_sync.models import GallerySettings

if TYPE_CHECKING:
    from gallery_sync.database.models import Album, MediaObject

DERIVED_FILE_EXTENSION = ".jpg"


def is_hidden(entry: os.DirEntry) -> bool:
    """Check whether a directory entry is hidden (dot name or hidden attribute)."""
    if entry.name.startswith("."):
        return True
    attributes = getattr(entry.stat(follow_symlinks=False), "st_file_attributes", 0)
    return bool(attributes & getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0))


class GalleryPaths:
    """Maps albums and media objects to their files on disk."""

    def __init__(self, settings: GallerySettings) -> None:
        """Initialize path mapping.

        Args:
            settings: Gallery settings with the media, thumbnail and optimized roots
        """
        self.settings = settings
        self.media_root = settings.media_object_path

    def album_directory(self, album: "Album") -> Path:
        """Get the directory backing an album.

        The root album maps to the media root; every other album maps to its
        parent's directory joined with its own directory name.
        """
        names: List[str] = []
        node = album
        while node.parent is not None:
            names.append(node.directory_name)
            node = node.parent
        return self.media_root.joinpath(*reversed(names))

    def map_to_alternate(self, directory: Path, alternate_root: Path) -> Path:
        """Map a directory under the media root to the same place under another root.

        Args:
            directory: Directory inside the media root
            alternate_root: Thumbnail or optimized root

        Returns:
            The mapped directory (unchanged when the roots are equal)
        """
        if alternate_root == self.media_root:
            return directory
        return alternate_root / directory.relative_to(self.media_root)

    def thumbnail_directory(self, album: "Album") -> Path:
        """Get the directory holding an album's thumbnails."""
        return self.map_to_alternate(
            self.album_directory(album), self.settings.full_thumbnail_path
        )

    def optimized_directory(self, album: "Album") -> Path:
        """Get the directory holding an album's optimized images."""
        return self.map_to_alternate(
            self.album_directory(album), self.settings.full_optimized_path
        )

    def original_path(self, media_object: "MediaObject") -> Path:
        """Get the path of a media object's original file."""
        directory = self.album_directory(media_object.album)
        return directory / media_object.original_filename

    def thumbnail_path(self, media_object: "MediaObject") -> Path:
        """Get the path of a media object's thumbnail file."""
        return (
            self.thumbnail_directory(media_object.album)
            / media_object.thumbnail_filename
        )

    def optimized_path(self, media_object: "MediaObject") -> Path:
        """Get the path of a media object's optimized file."""
        return (
            self.optimized_directory(media_object.album)
            / media_object.optimized_filename
        )

    def derived_directories(self, album: "Album") -> List[Path]:
        """Directories that may hold an album's derived files, without duplicates."""
        directories: List[Path] = []
        for directory in (
            self.album_directory(album),
            self.thumbnail_directory(album),
            self.optimized_directory(album),
        ):
            if directory not in directories:
                directories.append(directory)
        return directories

    def thumbnail_file_name(self, original_file_name: str) -> str:
        """Build the thumbnail file name for an original file name."""
        prefix = self.settings.thumbnail_file_name_prefix
        return f"{prefix}{Path(original_file_name).stem}{DERIVED_FILE_EXTENSION}"

    def optimized_file_name(self, original_file_name: str) -> str:
        """Build the optimized file name for an original file name."""
        prefix = self.settings.optimized_file_name_prefix
        return f"{prefix}{Path(original_file_name).stem}{DERIVED_FILE_EXTENSION}"

    def is_thumbnail_file_name(self, file_name: str) -> bool:
        """Check whether a file name carries the thumbnail prefix."""
        prefix = self.settings.thumbnail_file_name_prefix
        return bool(prefix) and file_name.lower().startswith(prefix.lower())

    def is_optimized_file_name(self, file_name: str) -> bool:
        """Check whether a file name carries the optimized prefix."""
        prefix = self.settings.optimized_file_name_prefix
        return bool(prefix) and file_name.lower().startswith(prefix.lower())

    def is_derived_file_name(self, file_name: str) -> bool:
        """Check whether a file name carries a thumbnail or optimized prefix."""
        return self.is_thumbnail_file_name(file_name) or self.is_optimized_file_name(
            file_name
        )
