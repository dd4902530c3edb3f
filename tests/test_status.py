"""Tests for synchronization status and the run registry."""

import threading

import pytest

from gallery_sync.core.exceptions import SynchronizationInProgressError
from gallery_sync.core.sync.status import (
    MAX_SKIPPED_TO_DISPLAY,
    SyncStatus,
    SyncStatusRegistry,
)
from gallery_sync.database.models import SyncState


class TestSyncStatus:
    """Test SyncStatus."""

    def test_update_sets_fields(self):
        """Test several fields change in one call."""
        status = SyncStatus(gallery_id=1, sync_id="run")

        status.update(state=SyncState.SCANNING, total_file_count=4)

        snapshot = status.snapshot()
        assert snapshot.state == SyncState.SCANNING
        assert snapshot.total_file_count == 4

    def test_update_rejects_unknown_fields(self):
        """Test unknown and private fields cannot be set."""
        status = SyncStatus(gallery_id=1, sync_id="run")

        with pytest.raises(AttributeError):
            status.update(bogus=1)
        with pytest.raises(AttributeError):
            status.update(_cancel_requested=True)

    def test_percent_complete(self):
        """Test progress while scanning and after it."""
        status = SyncStatus(gallery_id=1, sync_id="run")
        assert status.snapshot().percent_complete == 0

        status.update(
            state=SyncState.SCANNING, total_file_count=4, current_file_index=1
        )
        assert status.snapshot().percent_complete == 25

        status.update(total_file_count=0)
        assert status.snapshot().percent_complete == 0

        status.update(state=SyncState.PERSISTING_TO_DATA_STORE)
        assert status.snapshot().percent_complete == 100

    def test_skipped_items_are_capped_in_snapshot(self):
        """Test snapshots expose a bounded list but the full count."""
        status = SyncStatus(gallery_id=1, sync_id="run")
        for i in range(MAX_SKIPPED_TO_DISPLAY + 5):
            status.add_skipped(f"/media/{i}.xyz", "Unsupported")

        snapshot = status.snapshot()

        assert len(snapshot.skipped_items) == MAX_SKIPPED_TO_DISPLAY
        assert snapshot.skipped_count == MAX_SKIPPED_TO_DISPLAY + 5
        assert snapshot.skipped_items[0].path == "/media/0.xyz"

    def test_request_cancel(self):
        """Test cancellation is visible to readers."""
        status = SyncStatus(gallery_id=1, sync_id="run")
        assert status.cancel_requested is False

        status.request_cancel()

        assert status.cancel_requested is True
        assert status.snapshot().cancel_requested is True

    def test_to_record(self):
        """Test the persisted record columns."""
        status = SyncStatus(gallery_id=1, sync_id="run")
        status.update(state=SyncState.COMPLETE, total_file_count=3)
        status.add_skipped("/media/a.xyz", "Unsupported")

        record = status.to_record()

        assert record["sync_id"] == "run"
        assert record["state"] == "complete"
        assert record["total_files"] == 3
        assert record["skipped_count"] == 1

    def test_concurrent_updates(self):
        """Test skipped items from several threads are all kept."""
        status = SyncStatus(gallery_id=1, sync_id="run")

        def add_many():
            for i in range(200):
                status.add_skipped(str(i), "reason")

        threads = [threading.Thread(target=add_many) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert status.snapshot().skipped_count == 800


class TestSyncStatusRegistry:
    """Test SyncStatusRegistry."""

    def test_one_run_per_gallery(self):
        """Test a second start for the same gallery is refused."""
        registry = SyncStatusRegistry()
        registry.start(1, "first")

        with pytest.raises(SynchronizationInProgressError):
            registry.start(1, "second")

        # Other galleries are independent
        assert registry.start(2, "other").gallery_id == 2

    def test_finish_releases_gallery(self):
        """Test a finished run frees the gallery and stays pollable."""
        registry = SyncStatusRegistry()
        status = registry.start(1, "first")
        assert registry.is_running(1)

        status.update(state=SyncState.COMPLETE)
        registry.finish(status)

        assert not registry.is_running(1)
        assert registry.get_status(1).state == SyncState.COMPLETE
        registry.start(1, "second")

    def test_get_status_unknown_gallery(self):
        """Test galleries that never ran have no status."""
        assert SyncStatusRegistry().get_status(99) is None

    def test_cancel(self):
        """Test cancellation through the registry."""
        registry = SyncStatusRegistry()
        status = registry.start(1, "run")

        assert registry.cancel(1, sync_id="other") is False
        assert status.cancel_requested is False
        assert registry.cancel(1) is True
        assert status.cancel_requested is True
        assert registry.cancel(2) is False
