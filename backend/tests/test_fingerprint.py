"""
Tests for Fingerprint Store and Change Detector.

Requires Python 3.11+.
"""

import os
from pathlib import Path

import pytest

from fingerprint.change_detector import ChangeDetector
from fingerprint.fingerprint_store import FingerprintStore
from scanner.tree_scanner import TreeScanner


class TestFingerprintStore:
    """Test cases for FingerprintStore."""

    @pytest.fixture
    def store(self) -> FingerprintStore:
        """Create a fingerprint store instance."""
        return FingerprintStore()

    def test_fingerprint_is_mtime_ns(self, store: FingerprintStore, tmp_path: Path):
        """Test that the fingerprint is the nanosecond modification time."""
        path = tmp_path / "a.php"
        path.write_text("a")
        os.utime(path, ns=(1_700_000_000_123_456_789, 1_700_000_000_123_456_789))

        assert store.fingerprint_file(str(path)) == 1_700_000_000_123_456_789

    def test_sub_second_edits_are_distinguished(self, store: FingerprintStore, tmp_path: Path):
        """Test that two writes within the same second give different fingerprints."""
        path = tmp_path / "a.php"
        path.write_text("a")
        os.utime(path, ns=(1_700_000_000_000_000_000, 1_700_000_000_000_000_000))
        first = store.fingerprint_file(str(path))

        os.utime(path, ns=(1_700_000_000_005_000_000, 1_700_000_000_005_000_000))
        second = store.fingerprint_file(str(path))

        assert first != second

    def test_one_entry_per_path(self, store: FingerprintStore, src_only_project):
        """Test that the map holds exactly the watched paths, in sorted order."""
        project, config = src_only_project
        files = TreeScanner(config).scan_all()

        fingerprints = store.fingerprint(files)

        assert set(fingerprints) == files
        assert list(fingerprints) == sorted(files)

    def test_missing_file_raises(self, store: FingerprintStore, tmp_path: Path):
        """Test that a vanished file is an error, not a skipped entry."""
        existing = tmp_path / "a.php"
        existing.write_text("a")

        with pytest.raises(FileNotFoundError) as exc_info:
            store.fingerprint([str(existing), str(tmp_path / "gone.php")])

        assert exc_info.value.filename == str(tmp_path / "gone.php")


class TestChangeDetector:
    """Test cases for ChangeDetector."""

    @pytest.fixture
    def detector(self) -> ChangeDetector:
        """Create a change detector instance."""
        return ChangeDetector()

    @pytest.fixture
    def baseline(self) -> dict[str, int]:
        """A small fingerprint map."""
        return {"/p/src/a.php": 100, "/p/src/b.php": 200, "/p/src/c.php": 300}

    def test_reflexive(self, detector: ChangeDetector, baseline: dict[str, int]):
        """Test that a map never differs from itself."""
        assert detector.changed(baseline, baseline) is False
        assert detector.changed({}, {}) is False

    def test_equal_copies(self, detector: ChangeDetector, baseline: dict[str, int]):
        """Test that equal maps built separately compare equal."""
        assert detector.changed(baseline, dict(reversed(list(baseline.items())))) is False

    @pytest.mark.parametrize(
        "other",
        [
            {"/p/src/a.php": 100, "/p/src/b.php": 200, "/p/src/c.php": 300, "/p/src/d.php": 1},
            {"/p/src/a.php": 100, "/p/src/b.php": 200},
            {"/p/src/a.php": 100, "/p/src/b.php": 201, "/p/src/c.php": 300},
            {"/p/src/a.php": 100, "/p/src/b.php": 200, "/p/src/x.php": 300},
            {},
        ],
        ids=["added", "removed", "modified", "renamed", "emptied"],
    )
    def test_single_difference_detected(self, detector: ChangeDetector, baseline: dict[str, int], other: dict[str, int]):
        """Test that any single difference is a change, in both directions."""
        assert detector.changed(baseline, other) is True
        assert detector.changed(other, baseline) is True

    def test_compare(self, detector: ChangeDetector):
        """Test the change report."""
        old = {"a": 1, "b": 2, "c": 3}
        new = {"a": 1, "b": 20, "d": 4}

        changes = detector.compare(old, new)

        assert changes.added == {"d"}
        assert changes.removed == {"c"}
        assert changes.modified == {"b"}
        assert changes.total_changes == 3

    def test_compare_no_changes(self, detector: ChangeDetector, baseline: dict[str, int]):
        """Test that identical maps produce an empty report."""
        changes = detector.compare(baseline, dict(baseline))

        assert changes.total_changes == 0


class TestTreeChanges:
    """Test cases for detecting changes on a real tree."""

    @pytest.fixture
    def snapshot(self, src_only_project):
        """Return a function taking a fresh fingerprint map of the project."""
        project, config = src_only_project
        scanner = TreeScanner(config)
        store = FingerprintStore()
        return lambda: store.fingerprint(scanner.scan_all())

    def test_untouched_tree(self, snapshot):
        """Test that two scans of an unchanged tree compare equal."""
        assert ChangeDetector().changed(snapshot(), snapshot()) is False

    def test_touched_file(self, snapshot, src_only_project, bump_mtime):
        """Test that updating one modification time is a change."""
        project, _ = src_only_project
        before = snapshot()
        bump_mtime(project / "src" / "b.php")

        assert ChangeDetector().changed(before, snapshot()) is True

    def test_added_file(self, snapshot, src_only_project):
        """Test that a new file is a change."""
        project, _ = src_only_project
        before = snapshot()
        (project / "src" / "sub" / "d.php").write_text("d")

        assert ChangeDetector().changed(before, snapshot()) is True

    def test_removed_file(self, snapshot, src_only_project):
        """Test that a deleted file is a change."""
        project, _ = src_only_project
        before = snapshot()
        (project / "src" / "a.php").unlink()

        assert ChangeDetector().changed(before, snapshot()) is True
