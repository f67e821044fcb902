"""
dynamic/comparator.py

Deterministic persistence snapshot comparator.
Accepts already-loaded item collections. No SQLite dependency.
No threading, no UI, no hidden state: the same inputs always give
the same SnapshotDiff.
"""

from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

from .models import (
    ChangeDetail,
    ChangeType,
    ItemChange,
    PersistenceItem,
    Snapshot,
    SnapshotDiff,
)


ABSENT = "None"


# ─────────────────────────────────────────────────────────────────────────────
# Identity resolution
# ─────────────────────────────────────────────────────────────────────────────

class IdentitySets(NamedTuple):
    only_in_from: List[str]
    only_in_to: List[str]
    in_both: List[str]
    from_index: Dict[str, PersistenceItem]
    to_index: Dict[str, PersistenceItem]


def _index_items(items: Iterable[PersistenceItem]) -> Dict[str, PersistenceItem]:
    """Map identifier -> item. The first item seen for an identifier wins."""
    index: Dict[str, PersistenceItem] = {}
    for item in items:
        index.setdefault(item.identifier, item)
    return index


def resolve_identities(
    from_items: Iterable[PersistenceItem],
    to_items: Iterable[PersistenceItem],
) -> IdentitySets:
    """
    Partition identifiers into only-in-from, only-in-to and in-both.

    Each list follows the insertion order of its index (first appearance
    in the corresponding input), so the result is independent of hash
    ordering.
    """
    from_index = _index_items(from_items)
    to_index = _index_items(to_items)

    only_in_from = [key for key in from_index if key not in to_index]
    only_in_to = [key for key in to_index if key not in from_index]
    in_both = [key for key in to_index if key in from_index]

    return IdentitySets(only_in_from, only_in_to, in_both, from_index, to_index)


# ─────────────────────────────────────────────────────────────────────────────
# Field change detection
# ─────────────────────────────────────────────────────────────────────────────

def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _path_or_absent(path: Optional[str]) -> str:
    return ABSENT if path is None else str(path)


# (label, extractor, renderer). Order is the order of reported details;
# new tracked fields go at the end.
TRACKED_FIELDS: List[Tuple[str, Callable[[PersistenceItem], object], Callable[[object], str]]] = [
    ("Enabled",     lambda item: item.is_enabled,      _yes_no),
    ("Trust Level", lambda item: item.trust_level,     lambda level: level.display_name),
    ("Executable",  lambda item: item.executable_path, _path_or_absent),
]


def detect_field_changes(old: PersistenceItem, new: PersistenceItem) -> List[ChangeDetail]:
    """
    Compare two instances of the same logical item.

    Only the fields in TRACKED_FIELDS are considered; anything else
    (name, category, risk score, timestamps) may differ without producing
    a detail.
    """
    details: List[ChangeDetail] = []
    for label, extract, render in TRACKED_FIELDS:
        old_value = extract(old)
        new_value = extract(new)
        if old_value != new_value:
            details.append(ChangeDetail(label, render(old_value), render(new_value)))
    return details


# ─────────────────────────────────────────────────────────────────────────────
# Diff engine
# ─────────────────────────────────────────────────────────────────────────────

def compute_diff(
    from_items: Iterable[PersistenceItem],
    to_items: Iterable[PersistenceItem],
    from_snapshot: Snapshot,
    to_snapshot: Snapshot,
) -> SnapshotDiff:
    """
    Compares the items of an older snapshot against a newer one.

    Args:
        from_items:    Items of the older snapshot, in capture order.
        to_items:      Items of the newer snapshot, in capture order.
        from_snapshot: Descriptor of the older snapshot (kept for context).
        to_snapshot:   Descriptor of the newer snapshot (kept for context).

    Returns:
        SnapshotDiff with:
            added_items   – items whose identifier exists only in to_items
            removed_items – items whose identifier exists only in from_items
            changed_items – MODIFIED changes for identifiers in both whose
                            tracked fields differ
    """
    sets = resolve_identities(from_items, to_items)

    added_items = tuple(sets.to_index[key] for key in sets.only_in_to)
    removed_items = tuple(sets.from_index[key] for key in sets.only_in_from)

    changed_items: List[ItemChange] = []
    for key in sets.in_both:
        old_item = sets.from_index[key]
        new_item = sets.to_index[key]
        details = detect_field_changes(old_item, new_item)
        if details:
            changed_items.append(ItemChange(new_item, ChangeType.MODIFIED, tuple(details)))

    return SnapshotDiff(
        from_snapshot=from_snapshot,
        to_snapshot=to_snapshot,
        added_items=added_items,
        removed_items=removed_items,
        changed_items=tuple(changed_items),
    )


class DiffEngine:
    """Object wrapper around compute_diff for callers that inject an engine."""

    def compute(
        self,
        from_items: Iterable[PersistenceItem],
        to_items: Iterable[PersistenceItem],
        from_snapshot: Snapshot,
        to_snapshot: Snapshot,
    ) -> SnapshotDiff:
        return compute_diff(from_items, to_items, from_snapshot, to_snapshot)
