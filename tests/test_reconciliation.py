"""Tests for loading, album reconciliation and transaction coordination."""

import os
from unittest.mock import Mock

import pytest
from conftest import build_context, create_image

from gallery_sync.core.exceptions import (
    NotWritableError,
    SynchronizationCancelledError,
)
from gallery_sync.core.sync import (
    AlbumReconciler,
    ReconciliationStateBuilder,
    SyncOptions,
    TransactionCoordinator,
)
from gallery_sync.database.models import Album, MediaObject, SyncState
from gallery_sync.database.repository import GalleryRepository


def add_album(repository, parent, name, is_private=False):
    album = Album(
        gallery_id=repository.gallery_id,
        parent=parent,
        directory_name=name,
        title=name,
        is_private=is_private,
    )
    repository.save(album, "tester")
    return album


def add_media_object(repository, album, name, hash_key):
    media_object = MediaObject(
        gallery_id=repository.gallery_id,
        album=album,
        media_type="image",
        mime_type="image/jpeg",
        title=name,
        original_filename=name,
        original_width=10,
        original_height=10,
        original_size_kb=1,
        optimized_filename=name,
        optimized_width=10,
        optimized_height=10,
        optimized_size_kb=1,
        thumbnail_filename=f"zThumb_{name}",
        thumbnail_width=10,
        thumbnail_height=10,
        thumbnail_size_kb=1,
        hash_key=hash_key,
    )
    repository.save(media_object, "tester")
    return media_object


class TestReconciliationStateBuilder:
    """Test ReconciliationStateBuilder."""

    def test_build_maps_albums_and_media_objects(self, repository, media_root):
        """Test loaded nodes are keyed and reset for the run."""
        root = repository.load_root_album()
        child = add_album(repository, root, "trip")
        media_object = add_media_object(repository, child, "a.jpg", "key-a")
        media_object.synchronized = True
        context = build_context(
            repository, SyncOptions(overwrite_thumbnail=False, regenerate_metadata=True)
        )

        ReconciliationStateBuilder(repository, context).build(root)

        assert context.albums_by_path == {media_root: root, media_root / "trip": child}
        assert context.media_by_hash == {"key-a": media_object}
        assert media_object.synchronized is False
        assert media_object.regenerate_thumbnail_on_save is False
        assert media_object.regenerate_optimized_on_save is True
        assert media_object.extract_metadata_on_save is True

    def test_non_recursive_build_loads_one_album(self, repository, media_root):
        """Test child albums stay out of the maps without recursion."""
        root = repository.load_root_album()
        add_album(repository, root, "trip")
        context = build_context(repository, SyncOptions(recursive=False))

        ReconciliationStateBuilder(repository, context).build(root)

        assert list(context.albums_by_path) == [media_root]

    def test_duplicate_hash_keys_are_set_aside(self, repository):
        """Test a second record with a known hash key becomes a duplicate."""
        root = repository.load_root_album()
        first = add_media_object(repository, root, "a.jpg", "same")
        second = add_media_object(repository, root, "b.jpg", "other")
        assert len(root.media_objects) == 2
        # The unique constraint keeps such rows out of new stores, so the
        # collision is only made in memory
        second.hash_key = "same"
        context = build_context(repository, SyncOptions(recursive=False))

        ReconciliationStateBuilder(repository, context).build(root)

        assert context.media_by_hash["same"] is first
        assert context.duplicates == [second]
        assert context.is_duplicate(second)

    def test_foreign_album_is_rejected(self, repository, db_service, gallery_id):
        """Test nodes from another session cannot be loaded into a run."""
        context = build_context(repository)
        with GalleryRepository(db_service, gallery_id) as other:
            with pytest.raises(NotWritableError):
                ReconciliationStateBuilder(repository, context).build(
                    other.load_root_album()
                )

    def test_count_files(self, repository, media_root):
        """Test hidden entries and derived files are not counted."""
        create_image(media_root / "a.jpg")
        create_image(media_root / "zThumb_a.jpg")
        create_image(media_root / ".hidden.jpg")
        create_image(media_root / "sub" / "b.jpg")
        create_image(media_root / ".cache" / "c.jpg")
        builder = ReconciliationStateBuilder(repository, build_context(repository))

        assert builder.count_files(media_root) == 2
        assert builder.count_files(media_root / "missing") == 0

    def test_count_files_does_not_follow_directory_links(
        self, repository, media_root
    ):
        """Test linked directories are not counted and dangling links are."""
        create_image(media_root / "sub" / "b.jpg")
        os.symlink(media_root, media_root / "sub" / "loop")
        os.symlink(media_root / "gone.jpg", media_root / "link.jpg")
        builder = ReconciliationStateBuilder(repository, build_context(repository))

        assert builder.count_files(media_root) == 2


class TestAlbumReconciler:
    """Test AlbumReconciler."""

    def make_reconciler(self, repository, options=None):
        context = build_context(repository, options)
        coordinator = TransactionCoordinator(repository, context)
        return AlbumReconciler(repository, context, coordinator)

    def test_new_directory_creates_album(self, repository, media_root):
        """Test an unknown directory becomes a saved album."""
        root = repository.load_root_album()
        root.is_private = True
        reconciler = self.make_reconciler(repository)

        album = reconciler.reconcile(media_root / "trip", root)

        assert album.id is not None
        assert album.parent is root
        assert album.title == "trip"
        assert album.is_private is True
        assert album.synchronized is True
        assert reconciler.context.albums_by_path[media_root / "trip"] is album
        assert reconciler.context.statistics.albums_created == 1

    def test_known_directory_reuses_album(self, repository, media_root):
        """Test a mapped album is synchronized and inherits privacy."""
        root = repository.load_root_album()
        child = add_album(repository, root, "trip")
        root.is_private = True
        reconciler = self.make_reconciler(repository)
        reconciler.context.albums_by_path[media_root / "trip"] = child

        album = reconciler.reconcile(media_root / "trip", root)

        assert album is child
        assert album.is_private is True
        assert reconciler.context.statistics.albums_synchronized == 1

    def test_private_album_stays_private(self, repository, media_root):
        """Test a public parent never makes a private album public."""
        root = repository.load_root_album()
        child = add_album(repository, root, "secret", is_private=True)
        reconciler = self.make_reconciler(repository)
        reconciler.context.albums_by_path[media_root / "secret"] = child

        assert reconciler.reconcile(media_root / "secret", root).is_private is True

    def test_assign_thumbnails_borrows_from_children(self, repository):
        """Test an album without media objects uses a child's thumbnail."""
        root = repository.load_root_album()
        child = add_album(repository, root, "trip")
        media_object = add_media_object(repository, child, "a.jpg", "key-a")
        reconciler = self.make_reconciler(repository)

        reconciler.assign_thumbnails(root)

        assert child.thumbnail_media_object_id == media_object.id
        assert root.thumbnail_media_object_id == media_object.id


class TestTransactionCoordinator:
    """Test TransactionCoordinator."""

    def test_checkpoint_every_interval(self, repository):
        """Test album saves trigger commits at the configured interval."""
        repo = Mock(wraps=repository)
        context = build_context(repository, SyncOptions(checkpoint_interval=2))
        coordinator = TransactionCoordinator(repo, context)

        for _ in range(5):
            coordinator.record_album_save()

        assert repo.commit.call_count == 2
        assert context.statistics.checkpoints == 2

    def test_file_processed_updates_status(self, repository, media_root):
        """Test progress fields follow the processed file."""
        context = build_context(repository)
        coordinator = TransactionCoordinator(repository, context)
        coordinator.start_scanning(2)

        coordinator.file_processed(media_root / "a.jpg")

        snapshot = context.status.snapshot()
        assert snapshot.state == SyncState.SCANNING
        assert snapshot.current_file_index == 1
        assert snapshot.current_file_name == "a.jpg"
        assert snapshot.percent_complete == 50

    def test_file_processed_honors_cancellation(self, repository, media_root):
        """Test a pending cancellation request stops the run."""
        context = build_context(repository)
        coordinator = TransactionCoordinator(repository, context)
        context.status.request_cancel()

        with pytest.raises(SynchronizationCancelledError):
            coordinator.file_processed(media_root / "a.jpg")
