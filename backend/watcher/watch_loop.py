"""
CacheWarmer Watch Loop.

Polls the project tree and runs the rebuild action on change.
Requires Python 3.11+.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from fingerprint.change_detector import ChangeDetector
from fingerprint.fingerprint_store import FingerprintMap, FingerprintStore
from scanner.tree_scanner import TreeScanner
from utils.config import WatchConfiguration
from utils.errors import NothingToWatchError, RebuildError
from utils.logger import LoggerMixin

# Runs the rebuild and returns its output; raises RebuildError on failure
RebuildAction = Callable[[], str]


class WatchState(str, Enum):
    """Where the loop currently is within a cycle."""

    IDLE = "idle"
    SCANNING = "scanning"
    COMPARING = "comparing"
    TRIGGERING = "triggering"


@dataclass(slots=True)
class CycleResult:
    """Outcome of one poll cycle."""

    changed: bool
    watched_count: int
    rebuild_seconds: float | None = None
    rebuild_succeeded: bool | None = None
    output: str = ""


class WatchLoop(LoggerMixin):
    """
    Single-threaded polling loop.

    The first scan only sets the baseline. Every following cycle rescans
    the whole tree and compares it with the baseline; on change the
    rebuild action runs synchronously and the new map becomes the
    baseline whether the rebuild succeeded or not. Without change the
    loop sleeps for the poll interval.
    """

    def __init__(
        self,
        config: WatchConfiguration,
        rebuild: RebuildAction,
        scanner: TreeScanner | None = None,
        store: FingerprintStore | None = None,
        detector: ChangeDetector | None = None,
        stop_event: threading.Event | None = None,
    ) -> None:
        """
        Initialize the watch loop.

        Args:
            config: Watch configuration
            rebuild: Action run when a change is detected
            scanner: Tree scanner (built from config when omitted)
            store: Fingerprint store
            detector: Change detector
            stop_event: Event that stops the loop when set, also used for sleeping
        """
        self._config = config
        self._rebuild = rebuild
        self._scanner = scanner or TreeScanner(config)
        self._store = store or FingerprintStore()
        self._detector = detector or ChangeDetector()
        self._stop_event = stop_event or threading.Event()

        self._baseline: FingerprintMap | None = None
        self._state = WatchState.IDLE
        self._running = False
        self._last_error: str | None = None

    @property
    def baseline(self) -> FingerprintMap | None:
        return self._baseline

    @property
    def watched_count(self) -> int:
        """Number of files in the current baseline."""
        return len(self._baseline) if self._baseline is not None else 0

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def is_running(self) -> bool:
        """Check if the loop is running."""
        return self._running

    def snapshot(self) -> FingerprintMap:
        """
        Scan the tree and fingerprint every watched file.

        Raises:
            OSError: If traversal or stat fails
        """
        self._state = WatchState.SCANNING
        files = self._scanner.scan_all()
        return self._store.fingerprint(files)

    def initialize(self) -> int:
        """
        Take the first snapshot and adopt it as baseline.

        Never triggers a rebuild.

        Returns:
            Number of watched files

        Raises:
            NothingToWatchError: If the scan found no file
            OSError: If a scan root is missing or unreadable
        """
        try:
            fingerprints = self.snapshot()
        finally:
            self._state = WatchState.IDLE

        if not fingerprints:
            raise NothingToWatchError(f"no file to watch found in {self._config.project_dir}")

        self._baseline = fingerprints
        self.log.debug("baseline_initialized", files=len(fingerprints))
        return len(fingerprints)

    def run_cycle(self) -> CycleResult:
        """
        Run one poll cycle without sleeping.

        Returns:
            CycleResult describing what happened

        Raises:
            OSError: If the scan failed; the baseline is left untouched
        """
        if self._baseline is None:
            raise RuntimeError("initialize() must be called before run_cycle()")

        try:
            current = self.snapshot()

            self._state = WatchState.COMPARING
            if not self._detector.changed(self._baseline, current):
                return CycleResult(changed=False, watched_count=len(current))

            self._state = WatchState.TRIGGERING
            result = self._trigger(current)
            self._baseline = current
            return result
        finally:
            self._state = WatchState.IDLE

    def _trigger(self, current: FingerprintMap) -> CycleResult:
        """Run the rebuild action for a detected change."""
        assert self._baseline is not None
        changes = self._detector.compare(self._baseline, current)
        self.log.info(
            "update_detected",
            added=len(changes.added),
            removed=len(changes.removed),
            modified=len(changes.modified),
            total=changes.total_changes,
        )
        self.log.debug(
            "changed_paths",
            added=sorted(changes.added),
            removed=sorted(changes.removed),
            modified=sorted(changes.modified),
        )

        start = time.perf_counter()
        try:
            output = self._rebuild()
            succeeded = True
        except RebuildError as e:
            output = getattr(e, "output", "")
            succeeded = False
            self.log.error("rebuild_failed", error=str(e), output=output.strip())
        elapsed = time.perf_counter() - start

        if succeeded:
            self.log.info("cache_refreshed", elapsed_seconds=round(elapsed, 2))
            if output:
                self.log.debug("rebuild_output", output=output.strip())

        self.log.info(
            "files_watched",
            count=len(current),
            project_dir=str(self._config.project_dir),
        )

        return CycleResult(
            changed=True,
            watched_count=len(current),
            rebuild_seconds=elapsed,
            rebuild_succeeded=succeeded,
            output=output,
        )

    def _report_cycle_error(self, error: OSError) -> None:
        # Same error on consecutive cycles is only logged once at warning level
        message = str(error)
        if message != self._last_error:
            self.log.warning("cycle_failed", error=message, path=error.filename)
        else:
            self.log.debug("cycle_failed", error=message, path=error.filename)
        self._last_error = message

    def run(self) -> None:
        """
        Poll until stop() is called.

        Initializes the baseline first if needed. Scan errors end the
        current cycle only; the loop sleeps and tries again.
        """
        if self._baseline is None:
            self.initialize()

        self._running = True
        self.log.info(
            "watch_loop_started",
            files=self.watched_count,
            poll_interval_ms=round(self._config.poll_interval * 1000),
        )

        try:
            while not self._stop_event.is_set():
                try:
                    result = self.run_cycle()
                except OSError as e:
                    self._report_cycle_error(e)
                    self._stop_event.wait(self._config.poll_interval)
                    continue

                if self._last_error is not None:
                    self.log.info("cycle_recovered")
                    self._last_error = None

                if not result.changed:
                    self._stop_event.wait(self._config.poll_interval)
        finally:
            self._running = False
            self.log.info("watch_loop_stopped")

    def stop(self) -> None:
        """Ask the loop to stop; takes effect at the next check of the stop event."""
        self._stop_event.set()
