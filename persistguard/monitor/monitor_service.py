"""
monitor/monitor_service.py

Watches persistence directories and re-captures the item set after
filesystem activity settles. Each new capture is diffed against a
rolling baseline which then advances to the new snapshot.

Scanning is delegated to an injected callable; this module never
enumerates persistence mechanisms itself.
"""

import os
import threading
import time
from typing import Callable, Iterable, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from persistguard.config.settings import MonitorSettings
from persistguard.dynamic.comparison_service import compare_snapshots
from persistguard.dynamic.errors import ComparisonError, SnapshotNotFoundError, SnapshotStoreError
from persistguard.dynamic.models import PersistenceItem, SnapshotDiff, SnapshotTrigger
from persistguard.dynamic.snapshot_service import SnapshotStore
from persistguard.utils.logger import guardian_logger


Scanner = Callable[[], Iterable[PersistenceItem]]


class PersistenceChangeHandler(FileSystemEventHandler):
    """Remembers when the last relevant filesystem event happened."""

    def __init__(self):
        super().__init__()
        self._lock = threading.Lock()
        self._last_event_at: Optional[float] = None

    def on_created(self, event):
        self._process_event(event)

    def on_modified(self, event):
        self._process_event(event)

    def on_deleted(self, event):
        self._process_event(event)

    def on_moved(self, event):
        self._process_event(event)

    def _process_event(self, event):
        if event.is_directory:
            return
        path = getattr(event, 'dest_path', None) or event.src_path
        guardian_logger.logger.debug(f"[Monitor] {event.event_type}: {path}")
        with self._lock:
            self._last_event_at = time.monotonic()

    def take_pending(self, debounce_sec: float, now: Optional[float] = None) -> bool:
        """
        True (and clears the pending mark) once `debounce_sec` has passed
        since the last event.
        """
        now = time.monotonic() if now is None else now
        with self._lock:
            if self._last_event_at is None:
                return False
            if now - self._last_event_at < debounce_sec:
                return False
            self._last_event_at = None
            return True


class PersistenceMonitor:
    def __init__(
        self,
        scanner: Scanner,
        store: SnapshotStore,
        settings: Optional[MonitorSettings] = None,
        on_diff: Optional[Callable[[SnapshotDiff], None]] = None,
        observer=None,
    ):
        self.scanner = scanner
        self.store = store
        self.settings = settings or MonitorSettings.from_env()
        self.on_diff = on_diff
        self.handler = PersistenceChangeHandler()
        self.observer = observer if observer is not None else Observer()
        self.baseline_id: Optional[str] = None
        self._running = False

    # ── Lifecycle ────────────────────────────────────────────────────────── #

    def start(self) -> None:
        for path in self.settings.watch_paths:
            if os.path.isdir(path):
                self.observer.schedule(self.handler, path, recursive=False)
                guardian_logger.logger.info(f"[Monitor] Watching: {path}")
            else:
                guardian_logger.logger.warning(f"[Monitor] Path not found: {path}")

        if self.baseline_id is None:
            self.capture_baseline()

        self.observer.start()
        self._running = True

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self.observer.stop()
        self.observer.join()
        guardian_logger.logger.info("[Monitor] Stopped.")

    def run_forever(self) -> None:
        """Blocking loop; returns after stop() is called from another thread."""
        while self._running:
            try:
                self.poll()
            except Exception as e:
                guardian_logger.logger.error(f"[Monitor] Poll error: {e}")
            time.sleep(self.settings.poll_interval_sec)

    # ── Baseline & checks ────────────────────────────────────────────────── #

    def capture_baseline(self, trigger: SnapshotTrigger = SnapshotTrigger.STARTUP) -> str:
        snapshot = self.store.create_snapshot(self.scanner(), trigger=trigger, note="baseline")
        self.baseline_id = snapshot.id
        guardian_logger.log_event("baseline_captured", {
            "snapshot_id": snapshot.id,
            "item_count": snapshot.item_count,
        })
        return snapshot.id

    def poll(self, now: Optional[float] = None) -> Optional[SnapshotDiff]:
        """Runs a check if filesystem activity has settled; otherwise does nothing."""
        if not self.handler.take_pending(self.settings.debounce_sec, now):
            return None
        return self.check_for_changes()

    def check_for_changes(self) -> Optional[SnapshotDiff]:
        """
        Captures a change-detected snapshot and diffs it against the baseline.
        Returns None when the capture or comparison failed; the baseline is
        left untouched in that case, unless the baseline snapshot itself was
        deleted, in which case the new capture replaces it.
        """
        if self.baseline_id is None:
            self.capture_baseline()
            return None

        try:
            current = self.store.create_snapshot(
                self.scanner(), trigger=SnapshotTrigger.CHANGE_DETECTED
            )
        except SnapshotStoreError as e:
            guardian_logger.logger.error(f"[Monitor] Could not capture snapshot: {e}")
            return None

        try:
            diff = compare_snapshots(self.store, self.baseline_id, current.id)
        except ComparisonError as e:
            if isinstance(e.cause, SnapshotNotFoundError) and e.snapshot_id == self.baseline_id:
                # baseline was deleted; the fresh capture becomes the new one
                guardian_logger.logger.warning(
                    f"[Monitor] Baseline {self.baseline_id[:8]} is gone, rebasing on {current.short_id}"
                )
                self.baseline_id = current.id
                return None
            guardian_logger.logger.error(f"[Monitor] Comparison failed: {e}")
            return None

        guardian_logger.log_event("snapshot_diff", {
            "from": diff.from_snapshot.id,
            "to": diff.to_snapshot.id,
            "summary": diff.summary,
        })
        if diff.has_changes and self.on_diff is not None:
            self.on_diff(diff)

        self.baseline_id = current.id
        return diff
