"""Tests for progress tracker."""

import time
from unittest.mock import MagicMock, Mock, patch

from gallery_sync.database.progress_tracker import (
    ConsoleProgressReporter,
    ProgressPhase,
    ProgressTracker,
    ProgressUpdate,
    TqdmProgressReporter,
)


class TestProgressUpdate:
    """Test ProgressUpdate dataclass."""

    def test_initialization(self):
        """Test ProgressUpdate initialization with defaults."""
        update = ProgressUpdate(phase=ProgressPhase.SCANNING, current=5, total=10)
        assert update.phase == ProgressPhase.SCANNING
        assert update.message == ""
        assert update.metadata == {}
        assert update.elapsed_time == 0.0
        assert update.estimated_remaining is None

    def test_percentage_calculation(self):
        """Test percentage property calculation."""
        update = ProgressUpdate(phase=ProgressPhase.SCANNING, current=5, total=10)
        assert update.percentage == 50.0

    def test_percentage_zero_total(self):
        """Test percentage with zero total."""
        update = ProgressUpdate(phase=ProgressPhase.SCANNING, current=5, total=0)
        assert update.percentage == 0.0

    def test_is_complete(self):
        """Test is_complete around the total."""
        assert ProgressUpdate(ProgressPhase.SCANNING, 10, 10).is_complete is True
        assert ProgressUpdate(ProgressPhase.SCANNING, 11, 10).is_complete is True
        assert ProgressUpdate(ProgressPhase.SCANNING, 5, 10).is_complete is False

    def test_str(self):
        """Test string representation."""
        update = ProgressUpdate(
            phase=ProgressPhase.SCANNING,
            current=5,
            total=10,
            message="photo.jpg",
            estimated_remaining=5.5,
        )
        result = str(update)
        assert "[scanning]" in result
        assert "5/10" in result
        assert "50.0%" in result
        assert "photo.jpg" in result
        assert "5.5s remaining" in result


class TestProgressTracker:
    """Test ProgressTracker class."""

    def test_initialization_with_defaults(self):
        """Test ProgressTracker initialization with defaults."""
        tracker = ProgressTracker()
        assert tracker.callback is None
        assert tracker.update_interval == 0.5
        assert tracker.current_phase is None

    def test_start_phase(self):
        """Test starting a new phase."""
        callback = Mock()
        tracker = ProgressTracker(callback=callback)

        tracker.start(ProgressPhase.SCANNING, total=10, message="Scanning files")

        assert tracker.current_phase == ProgressPhase.SCANNING
        callback.assert_called_once()
        update = callback.call_args[0][0]
        assert update.phase == ProgressPhase.SCANNING
        assert update.current == 0
        assert update.total == 10
        assert update.message == "Scanning files"

    def test_start_first_phase_sets_start_time(self):
        """Test that only the first phase sets the overall start time."""
        tracker = ProgressTracker()
        tracker.start(ProgressPhase.LOADING, total=0)
        start_time = tracker._start_time
        assert start_time > 0

        time.sleep(0.01)
        tracker.start(ProgressPhase.SCANNING, total=10)
        assert tracker._start_time == start_time

    def test_update_increment(self):
        """Test updating progress by incrementing."""
        callback = Mock()
        tracker = ProgressTracker(callback=callback, update_interval=0.0)
        tracker.start(ProgressPhase.SCANNING, total=10)

        tracker.update(message="a.jpg")
        tracker.update(message="b.jpg")

        assert tracker._current == 2
        assert callback.call_args[0][0].message == "b.jpg"

    def test_update_with_explicit_current_and_metadata(self):
        """Test updating progress with an explicit value and metadata."""
        callback = Mock()
        tracker = ProgressTracker(callback=callback, update_interval=0.0)
        tracker.start(ProgressPhase.SCANNING, total=10)

        tracker.update(current=5, metadata={"album": "trip"})

        update = callback.call_args[0][0]
        assert update.current == 5
        assert update.metadata == {"album": "trip"}

    def test_update_throttling(self):
        """Test that rapid updates are throttled."""
        callback = Mock()
        tracker = ProgressTracker(callback=callback, update_interval=1.0)
        tracker.start(ProgressPhase.SCANNING, total=10)
        callback.reset_mock()

        tracker.update(current=1)
        tracker.update(current=2)

        assert callback.call_count == 0
        assert tracker._current == 2

    def test_complete_marks_phase_complete(self):
        """Test completing a phase."""
        callback = Mock()
        tracker = ProgressTracker(callback=callback)
        tracker.start(ProgressPhase.SCANNING, total=10)
        time.sleep(0.01)

        tracker.complete(message="Synchronization complete")

        update = callback.call_args[0][0]
        assert update.current == 10
        assert update.is_complete is True
        assert tracker._phase_history[ProgressPhase.SCANNING] > 0

    def test_cancelled(self):
        """Test cancellation switches to the cancelled phase."""
        callback = Mock()
        tracker = ProgressTracker(callback=callback)
        tracker.start(ProgressPhase.SCANNING, total=10)

        tracker.cancelled("Synchronization cancelled")

        assert tracker.current_phase == ProgressPhase.CANCELLED
        assert callback.call_args[0][0].phase == ProgressPhase.CANCELLED
        assert ProgressPhase.SCANNING in tracker._phase_history

    def test_error_reports_error_phase(self):
        """Test error reporting."""
        callback = Mock()
        tracker = ProgressTracker(callback=callback)
        tracker.start(ProgressPhase.PERSISTING, total=0)
        callback.reset_mock()

        tracker.error("disk full")

        update = callback.call_args[0][0]
        assert update.phase == ProgressPhase.ERROR
        assert update.message == "disk full"

    def test_error_before_start_is_silent(self):
        """Test errors before any phase do not notify."""
        callback = Mock()
        ProgressTracker(callback=callback).error("boom")
        callback.assert_not_called()

    def test_callback_exception_is_logged(self):
        """Test that callback exceptions do not escape."""
        callback = Mock(side_effect=Exception("Callback error"))
        tracker = ProgressTracker(callback=callback)

        tracker.start(ProgressPhase.SCANNING, total=10)

        callback.assert_called_once()

    def test_estimated_remaining_time(self):
        """Test estimated remaining time calculation."""
        callback = Mock()
        tracker = ProgressTracker(callback=callback, update_interval=0.0)
        tracker.start(ProgressPhase.SCANNING, total=10)

        tracker._start_time = time.time() - 2.0
        tracker.update(current=5)

        update = callback.call_args[0][0]
        assert 1.5 < update.estimated_remaining < 2.5

    def test_get_summary(self):
        """Test getting progress summary."""
        tracker = ProgressTracker()
        tracker.start(ProgressPhase.SCANNING, total=10)
        tracker.update(current=5)
        time.sleep(0.01)
        tracker.complete()

        summary = tracker.get_summary()

        assert summary["total_time"] > 0
        assert "scanning" in summary["phase_history"]
        assert summary["current_phase"] == "scanning"
        assert summary["progress"] == "10/10"
        assert summary["percentage"] == 100.0

    def test_get_summary_not_started(self):
        """Test getting summary when tracker hasn't started."""
        summary = ProgressTracker().get_summary()

        assert summary["total_time"] == 0
        assert summary["current_phase"] is None
        assert summary["percentage"] == 0


class TestConsoleProgressReporter:
    """Test ConsoleProgressReporter class."""

    def test_call_prints_phase_change(self, capsys):
        """Test that phase changes are printed once."""
        reporter = ConsoleProgressReporter(verbose=True)

        reporter(ProgressUpdate(phase=ProgressPhase.SCANNING, current=1, total=10))
        captured = capsys.readouterr()
        assert "SCANNING" in captured.out

        reporter(ProgressUpdate(phase=ProgressPhase.SCANNING, current=2, total=10))
        captured = capsys.readouterr()
        assert "Phase:" not in captured.out
        assert "2/10" in captured.out

    def test_not_verbose_only_prints_complete(self, capsys):
        """Test non-verbose mode only prints finished phases."""
        reporter = ConsoleProgressReporter(verbose=False)
        reporter._last_phase = ProgressPhase.SCANNING

        reporter(ProgressUpdate(phase=ProgressPhase.SCANNING, current=5, total=10))
        assert "5/10" not in capsys.readouterr().out

        reporter(ProgressUpdate(phase=ProgressPhase.SCANNING, current=10, total=10))
        assert "10/10" in capsys.readouterr().out


class TestTqdmProgressReporter:
    """Test TqdmProgressReporter class."""

    def test_call_creates_and_updates_bar(self):
        """Test one bar is created per phase and then updated."""
        mock_bar = MagicMock()
        with patch(
            "gallery_sync.database.progress_tracker.tqdm", return_value=mock_bar
        ) as mock_tqdm:
            reporter = TqdmProgressReporter()

            reporter(ProgressUpdate(phase=ProgressPhase.SCANNING, current=5, total=10))
            reporter(ProgressUpdate(phase=ProgressPhase.SCANNING, current=7, total=10))

        mock_tqdm.assert_called_once_with(total=10, desc="scanning", unit="file")
        assert mock_bar.n == 7
        assert ProgressPhase.SCANNING in reporter._bars

    def test_terminal_phase_closes_bars(self):
        """Test bars are closed once the run ends."""
        mock_bar = MagicMock(disable=False)
        with patch(
            "gallery_sync.database.progress_tracker.tqdm", return_value=mock_bar
        ):
            reporter = TqdmProgressReporter()
            reporter(ProgressUpdate(phase=ProgressPhase.SCANNING, current=5, total=10))

            reporter(ProgressUpdate(phase=ProgressPhase.ERROR, current=5, total=10))

        mock_bar.close.assert_called_once()
        assert reporter._bars == {}
