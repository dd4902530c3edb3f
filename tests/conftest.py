"""Shared fixtures for gallery synchronization tests."""

import os
import tempfile
from pathlib import Path
from typing import Tuple

import pytest
from PIL import Image

from gallery_sync.core.media.hash_keys import HashKeyRegistry
from gallery_sync.core.sync import SyncContext, SyncOptions, SyncStatus
from gallery_sync.database.repository import GalleryRepository
from gallery_sync.database.service import DatabaseService
from gallery_sync.models import GallerySettings


def create_image(
    path: Path,
    size: Tuple[int, int] = (40, 30),
    color: Tuple[int, int, int] = (200, 60, 60),
) -> Path:
    """Create an image file (format taken from the extension)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path)
    return path


def create_file(path: Path, content: str = "test content") -> Path:
    """Create a plain file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def set_mtime(path: Path, timestamp: float) -> None:
    """Set a file's modification time."""
    os.utime(path, (timestamp, timestamp))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db_service(temp_dir):
    """Create a DatabaseService with a temporary database."""
    service = DatabaseService(temp_dir / "test.db")
    yield service
    service.close()


@pytest.fixture
def media_root(temp_dir):
    """Create the gallery's media directory."""
    root = temp_dir / "media"
    root.mkdir()
    return root


@pytest.fixture
def settings(media_root):
    """Default gallery settings for the media directory."""
    return GallerySettings(media_object_path=media_root)


@pytest.fixture
def gallery_id(db_service, settings):
    """Create a gallery with its root album."""
    return db_service.create_gallery("Test Gallery", settings)


def build_context(repository, options=None, hash_keys=None):
    """Create a run context for components tested outside the manager."""
    return SyncContext(
        gallery_id=repository.gallery_id,
        sync_id="test-run",
        user_name="tester",
        options=options or SyncOptions(),
        settings=repository.settings,
        paths=repository.paths,
        status=SyncStatus(gallery_id=repository.gallery_id, sync_id="test-run"),
        hash_keys=hash_keys or HashKeyRegistry(),
    )


@pytest.fixture
def repository(db_service, gallery_id, settings):
    """Repository for the test gallery."""
    repo = GalleryRepository(db_service, gallery_id, settings)
    yield repo
    repo.close()
