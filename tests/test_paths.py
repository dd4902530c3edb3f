"""Tests for album and media object path mapping."""

import os

from conftest import create_file

from gallery_sync.core.media.paths import GalleryPaths, is_hidden
from gallery_sync.database.models import Album, MediaObject, MediaObjectType
from gallery_sync.models import GallerySettings


def build_tree():
    """Create root -> trip -> day1 albums without a database."""
    root = Album(gallery_id=1, directory_name="", title="All albums")
    trip = Album(gallery_id=1, directory_name="trip", title="trip", parent=root)
    day1 = Album(gallery_id=1, directory_name="day1", title="day1", parent=trip)
    return root, trip, day1


def build_media_object(album):
    """Create an image media object in an album."""
    return MediaObject(
        gallery_id=1,
        album=album,
        media_type=MediaObjectType.IMAGE.value,
        original_filename="photo.png",
        thumbnail_filename="zThumb_photo.jpg",
        optimized_filename="zOpt_photo.jpg",
    )


class TestGalleryPaths:
    """Test GalleryPaths."""

    def test_album_directory(self, settings, media_root):
        """Test albums map to nested directories under the media root."""
        root, trip, day1 = build_tree()
        paths = GalleryPaths(settings)

        assert paths.album_directory(root) == media_root
        assert paths.album_directory(day1) == media_root / "trip" / "day1"

    def test_derived_files_beside_originals(self, settings, media_root):
        """Test derived files default to the album directory."""
        _, trip, _ = build_tree()
        media_object = build_media_object(trip)
        paths = GalleryPaths(settings)

        assert paths.original_path(media_object) == media_root / "trip" / "photo.png"
        assert paths.thumbnail_path(media_object) == (
            media_root / "trip" / "zThumb_photo.jpg"
        )
        assert paths.derived_directories(trip) == [media_root / "trip"]

    def test_alternate_roots(self, temp_dir, media_root):
        """Test derived files map into the configured alternate roots."""
        settings = GallerySettings(
            media_object_path=media_root,
            thumbnail_path=temp_dir / "thumbs",
            optimized_path=temp_dir / "optimized",
        )
        _, trip, day1 = build_tree()
        media_object = build_media_object(day1)
        paths = GalleryPaths(settings)

        assert paths.thumbnail_path(media_object) == (
            temp_dir / "thumbs" / "trip" / "day1" / "zThumb_photo.jpg"
        )
        assert paths.optimized_path(media_object) == (
            temp_dir / "optimized" / "trip" / "day1" / "zOpt_photo.jpg"
        )
        assert paths.derived_directories(trip) == [
            media_root / "trip",
            temp_dir / "thumbs" / "trip",
            temp_dir / "optimized" / "trip",
        ]

    def test_derived_file_names(self, settings):
        """Test derived names use the prefix and a JPEG extension."""
        paths = GalleryPaths(settings)

        assert paths.thumbnail_file_name("holiday.PNG") == "zThumb_holiday.jpg"
        assert paths.optimized_file_name("clip.mp4") == "zOpt_clip.jpg"

    def test_prefix_detection_ignores_case(self, settings):
        """Test prefixed file names are recognized case-insensitively."""
        paths = GalleryPaths(settings)

        assert paths.is_thumbnail_file_name("ZTHUMB_photo.jpg")
        assert paths.is_optimized_file_name("zopt_photo.jpg")
        assert paths.is_derived_file_name("zThumb_x.jpg")
        assert not paths.is_derived_file_name("photo.jpg")


class TestIsHidden:
    """Test hidden entry detection."""

    def test_dot_files_are_hidden(self, temp_dir):
        """Test entries starting with a dot are hidden."""
        create_file(temp_dir / ".DS_Store")
        create_file(temp_dir / "visible.txt")

        with os.scandir(temp_dir) as entries:
            hidden = {entry.name: is_hidden(entry) for entry in entries}

        assert hidden == {".DS_Store": True, "visible.txt": False}
