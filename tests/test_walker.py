"""Tests for DirectoryWalker."""

import os
from unittest.mock import Mock

import pytest
from conftest import build_context, create_file, create_image

from gallery_sync.core.exceptions import (
    DirectoryAccessError,
    SynchronizationCancelledError,
    UnsupportedMediaObjectTypeError,
)
from gallery_sync.core.sync import DirectoryWalker, SyncOptions
from gallery_sync.core.sync import walker as walker_module
from gallery_sync.database.repository import GalleryRepository
from gallery_sync.models import GallerySettings


def make_walker(repository, options=None):
    """Build a walker whose collaborators are mocks."""
    context = build_context(repository, options)
    album_reconciler = Mock()
    album_reconciler.reconcile.side_effect = lambda directory, parent: Mock(
        name=directory.name
    )
    return DirectoryWalker(repository, context, album_reconciler, Mock(), Mock())


def visited_directories(walker):
    return [call.args[0] for call in walker.album_reconciler.reconcile.call_args_list]


def reconciled_files(walker):
    return [call.args[0] for call in walker.media_reconciler.reconcile.call_args_list]


class TestDirectoryWalker:
    """Test DirectoryWalker."""

    def test_visits_in_name_order(self, repository, media_root):
        """Test directories and files are processed depth-first by name."""
        create_image(media_root / "b.jpg")
        create_image(media_root / "a.jpg")
        create_image(media_root / "sub2" / "y.jpg")
        create_image(media_root / "sub1" / "deep" / "z.jpg")
        create_image(media_root / "sub1" / "x.jpg")
        walker = make_walker(repository)

        walker.walk(media_root, None)

        assert visited_directories(walker) == [
            media_root,
            media_root / "sub1",
            media_root / "sub1" / "deep",
            media_root / "sub2",
        ]
        assert reconciled_files(walker) == [
            media_root / "a.jpg",
            media_root / "b.jpg",
            media_root / "sub1" / "x.jpg",
            media_root / "sub1" / "deep" / "z.jpg",
            media_root / "sub2" / "y.jpg",
        ]
        assert walker.media_reconciler.reconcile_externals.call_count == 4
        assert walker.coordinator.file_processed.call_count == 5

    def test_hidden_entries_are_skipped(self, repository, media_root):
        """Test dot files and dot directories are recorded as skipped."""
        create_image(media_root / ".secret.jpg")
        create_image(media_root / ".cache" / "x.jpg")
        walker = make_walker(repository)

        walker.walk(media_root, None)

        assert reconciled_files(walker) == []
        assert visited_directories(walker) == [media_root]
        skipped = walker.context.status.snapshot().skipped_items
        assert [item.reason for item in skipped] == ["Hidden file or directory"] * 2

    def test_non_recursive(self, repository, media_root):
        """Test subdirectories are ignored without recursion."""
        create_image(media_root / "a.jpg")
        create_image(media_root / "sub" / "b.jpg")
        walker = make_walker(repository, SyncOptions(recursive=False))

        walker.walk(media_root, None)

        assert visited_directories(walker) == [media_root]
        assert reconciled_files(walker) == [media_root / "a.jpg"]

    def test_derived_files_beside_originals_are_ignored(
        self, repository, media_root
    ):
        """Test prefixed files in the media directory are not media objects."""
        create_image(media_root / "zThumb_a.jpg")
        create_image(media_root / "zOpt_a.jpg")
        walker = make_walker(repository)

        walker.walk(media_root, None)

        assert reconciled_files(walker) == []
        walker.coordinator.file_processed.assert_not_called()
        assert (media_root / "zThumb_a.jpg").exists()

    def test_stale_derived_files_are_deleted(self, db_service, media_root, temp_dir):
        """Test prefixed files left behind after moving thumbnails elsewhere."""
        settings = GallerySettings(
            media_object_path=media_root, thumbnail_path=temp_dir / "thumbs"
        )
        create_image(media_root / "zThumb_a.jpg")
        create_image(media_root / "zOpt_a.jpg")

        with GalleryRepository(db_service, 1, settings) as repository:
            walker = make_walker(repository)
            walker.walk(media_root, None)

        assert not (media_root / "zThumb_a.jpg").exists()
        assert (media_root / "zOpt_a.jpg").exists()
        assert walker.context.statistics.derived_files_deleted == 1
        walker.coordinator.file_processed.assert_called_once()

    def test_per_file_errors_are_skipped(self, repository, media_root):
        """Test a failing file is recorded and the walk continues."""
        bad = create_file(media_root / "a.xyz")
        create_image(media_root / "b.jpg")
        walker = make_walker(repository)
        walker.media_reconciler.reconcile.side_effect = [
            UnsupportedMediaObjectTypeError(bad, "File type is not enabled"),
            Mock(),
        ]

        walker.walk(media_root, None)

        skipped = walker.context.status.snapshot().skipped_items
        assert [(item.path, item.reason) for item in skipped] == [
            (str(bad), "File type is not enabled")
        ]
        assert walker.coordinator.file_processed.call_count == 2

    def test_missing_start_directory_fails(self, repository, media_root):
        """Test the walk refuses to start from a directory it cannot list."""
        walker = make_walker(repository)

        with pytest.raises(DirectoryAccessError):
            walker.walk(media_root / "missing", None)

    def test_cancellation_propagates(self, repository, media_root):
        """Test the coordinator's cancellation signal stops the walk."""
        create_image(media_root / "a.jpg")
        create_image(media_root / "b.jpg")
        walker = make_walker(repository)
        walker.coordinator.file_processed.side_effect = SynchronizationCancelledError(
            "cancelled"
        )

        with pytest.raises(SynchronizationCancelledError):
            walker.walk(media_root, None)

        assert reconciled_files(walker) == [media_root / "a.jpg"]

    def test_broken_link_does_not_abort_its_directory(self, repository, media_root):
        """Test a dangling link is handed on as a file, not a directory failure."""
        create_image(media_root / "trip" / "a.jpg")
        os.symlink(media_root / "gone.jpg", media_root / "trip" / "link.jpg")
        walker = make_walker(repository)

        walker.walk(media_root, None)

        assert visited_directories(walker) == [media_root, media_root / "trip"]
        assert reconciled_files(walker) == [
            media_root / "trip" / "a.jpg",
            media_root / "trip" / "link.jpg",
        ]
        assert walker.context.status.snapshot().skipped_items == ()

    def test_broken_link_in_start_directory(self, repository, media_root):
        """Test a dangling link beside the originals does not fail the walk."""
        create_image(media_root / "a.jpg")
        os.symlink(media_root / "gone.jpg", media_root / "link.jpg")
        walker = make_walker(repository)

        walker.walk(media_root, None)

        assert reconciled_files(walker) == [
            media_root / "a.jpg",
            media_root / "link.jpg",
        ]

    def test_directory_links_are_not_followed(self, repository, media_root):
        """Test a link back up the tree is skipped instead of walked."""
        create_image(media_root / "trip" / "a.jpg")
        os.symlink(media_root, media_root / "trip" / "loop")
        walker = make_walker(repository)

        walker.walk(media_root, None)

        assert visited_directories(walker) == [media_root, media_root / "trip"]
        assert reconciled_files(walker) == [media_root / "trip" / "a.jpg"]
        skipped = walker.context.status.snapshot().skipped_items
        assert [(item.path, item.reason) for item in skipped] == [
            (str(media_root / "trip" / "loop"), "Symbolic link to a directory")
        ]

    def test_unreadable_file_is_skipped(self, repository, media_root):
        """Test a file vanishing mid-run is recorded and the walk continues."""
        create_image(media_root / "a.jpg")
        create_image(media_root / "b.jpg")
        walker = make_walker(repository)
        walker.media_reconciler.reconcile.side_effect = [
            FileNotFoundError(2, "No such file or directory"),
            Mock(),
        ]

        walker.walk(media_root, None)

        skipped = walker.context.status.snapshot().skipped_items
        assert len(skipped) == 1
        assert skipped[0].path == str(media_root / "a.jpg")
        assert skipped[0].reason.startswith("File cannot be read")
        assert walker.coordinator.file_processed.call_count == 2

    def test_entry_stat_error_skips_only_that_entry(
        self, repository, media_root, monkeypatch
    ):
        """Test an entry whose attributes cannot be read is skipped alone."""
        create_image(media_root / "a.jpg")
        create_image(media_root / "b.jpg")

        def fake_is_hidden(entry):
            if entry.name == "a.jpg":
                raise PermissionError("Permission denied")
            return False

        monkeypatch.setattr(walker_module, "is_hidden", fake_is_hidden)
        walker = make_walker(repository)

        walker.walk(media_root, None)

        assert reconciled_files(walker) == [media_root / "b.jpg"]
        skipped = walker.context.status.snapshot().skipped_items
        assert [item.path for item in skipped] == [str(media_root / "a.jpg")]
        assert skipped[0].reason.startswith("File cannot be read")
