"""
ui/compare_worker.py

Snapshot capture and comparison workers for the desktop views.
Each worker is moved onto its own QThread so the UI never freezes;
results come back through signals. A failed comparison is reported
on `error`, never as an empty diff on `finished`.
"""

from PyQt5.QtCore import QObject, pyqtSignal

from persistguard.dynamic.comparison_service import compare_snapshots
from persistguard.dynamic.errors import ComparisonError
from persistguard.dynamic.models import SnapshotTrigger


# ─────────────────────────────────────────────────────────────────────────────
# Background Workers
# ─────────────────────────────────────────────────────────────────────────────

class CaptureWorker(QObject):
    """Runs the scanner and seals the result into a snapshot."""
    finished = pyqtSignal(str)          # snapshot_id
    error    = pyqtSignal(str)

    def __init__(self, scanner, store, trigger=SnapshotTrigger.MANUAL, note=None):
        super().__init__()
        self._scanner = scanner
        self._store   = store
        self._trigger = trigger
        self._note    = note

    def run(self):
        try:
            snapshot = self._store.create_snapshot(
                self._scanner(), trigger=self._trigger, note=self._note
            )
        except Exception as e:
            self.error.emit(str(e))
            return
        self.finished.emit(snapshot.id)


class CompareWorker(QObject):
    """Loads two snapshots and runs the comparator."""
    finished = pyqtSignal(object)       # SnapshotDiff
    error    = pyqtSignal(str)

    def __init__(self, store, from_id: str, to_id: str):
        super().__init__()
        self._store   = store
        self._from_id = from_id
        self._to_id   = to_id

    def run(self):
        try:
            diff = compare_snapshots(self._store, self._from_id, self._to_id)
        except ComparisonError as e:
            self.error.emit(str(e))
            return
        self.finished.emit(diff)
