"""
dynamic/comparison_service.py

Loads two snapshots from the store and runs the comparator on them.
Any retrieval failure aborts the comparison with ComparisonError; the
comparator is only reached once both sides are fully in memory.
"""

from persistguard.utils.logger import guardian_logger
from .comparator import compute_diff
from .errors import ComparisonError, SnapshotNotFoundError, SnapshotStoreError
from .models import SnapshotDiff
from .snapshot_service import SnapshotStore


def _load(store: SnapshotStore, snapshot_id: str):
    try:
        return store.get_snapshot(snapshot_id), store.get_items(snapshot_id)
    except SnapshotNotFoundError as e:
        raise ComparisonError(str(e), snapshot_id=snapshot_id, cause=e) from e
    except SnapshotStoreError as e:
        raise ComparisonError(
            f"Could not load snapshot {snapshot_id}: {e}", snapshot_id=snapshot_id, cause=e
        ) from e


def compare_snapshots(store: SnapshotStore, from_id: str, to_id: str) -> SnapshotDiff:
    """
    Compares snapshot `from_id` (older) against `to_id` (newer).

    Raises:
        ComparisonError: either snapshot is missing or unreadable.
    """
    from_snapshot, from_items = _load(store, from_id)
    to_snapshot, to_items = _load(store, to_id)

    diff = compute_diff(from_items, to_items, from_snapshot, to_snapshot)
    guardian_logger.logger.info(
        f"[Comparison] {from_snapshot.short_id} → {to_snapshot.short_id}: {diff.summary}"
    )
    return diff


def compare_with_latest(store: SnapshotStore, baseline_id: str) -> SnapshotDiff:
    """Compares a baseline snapshot against the newest snapshot in the store."""
    try:
        latest = store.get_latest_snapshot()
    except SnapshotStoreError as e:
        raise ComparisonError(f"Could not list snapshots: {e}", cause=e) from e
    if latest is None:
        raise ComparisonError("No snapshots available to compare against")
    return compare_snapshots(store, baseline_id, latest.id)
