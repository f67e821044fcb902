"""
dynamic/models.py

Persistence item, snapshot and diff result types.
Plain immutable data: no SQLite, no UI, no scanning.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# ─────────────────────────────────────────────────────────────────────────────
# Enumerations
# ─────────────────────────────────────────────────────────────────────────────

class TrustLevel(str, Enum):
    """Provenance classification assigned by the external trust classifier."""

    APPLE = "apple"
    KNOWN_VENDOR = "known_vendor"
    SIGNED = "signed"
    UNKNOWN = "unknown"
    SUSPICIOUS = "suspicious"
    UNSIGNED = "unsigned"

    @property
    def display_name(self) -> str:
        return _TRUST_LABELS[self]

    @property
    def sort_order(self) -> int:
        """Lower is more suspicious."""
        return _TRUST_ORDER.index(self)


_TRUST_LABELS = {
    TrustLevel.APPLE:        "Apple",
    TrustLevel.KNOWN_VENDOR: "Known Vendor",
    TrustLevel.SIGNED:       "Signed",
    TrustLevel.UNKNOWN:      "Unknown",
    TrustLevel.SUSPICIOUS:   "Suspicious",
    TrustLevel.UNSIGNED:     "Unsigned",
}

_TRUST_ORDER = [
    TrustLevel.UNSIGNED,
    TrustLevel.SUSPICIOUS,
    TrustLevel.UNKNOWN,
    TrustLevel.SIGNED,
    TrustLevel.KNOWN_VENDOR,
    TrustLevel.APPLE,
]


class SnapshotTrigger(str, Enum):
    """What caused a snapshot to be captured."""

    MANUAL = "manual"
    SCHEDULED = "scheduled"
    CHANGE_DETECTED = "change_detected"
    STARTUP = "startup"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class ChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    # Refinements of MODIFIED; derived for display, never emitted by the engine
    ENABLED = "enabled"
    DISABLED = "disabled"
    TRUST_LEVEL_CHANGED = "trust_level_changed"

    @property
    def display_name(self) -> str:
        if self is ChangeType.TRUST_LEVEL_CHANGED:
            return "Trust Changed"
        return self.value.title()


# ─────────────────────────────────────────────────────────────────────────────
# Captured entities
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PersistenceItem:
    """
    One auto-start mechanism as it existed at capture time.

    `identifier` is the only key used to match items across snapshots.
    `category`, `risk_score` and `discovered_at` are descriptive and are
    never compared.
    """

    identifier: str
    name: str
    is_enabled: bool = True
    trust_level: TrustLevel = TrustLevel.UNSIGNED
    executable_path: Optional[str] = None
    category: str = ""
    risk_score: Optional[int] = None
    discovered_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identifier":      self.identifier,
            "name":            self.name,
            "is_enabled":      self.is_enabled,
            "trust_level":     self.trust_level.value,
            "executable_path": self.executable_path,
            "category":        self.category,
            "risk_score":      self.risk_score,
            "discovered_at":   self.discovered_at.isoformat() if self.discovered_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersistenceItem":
        discovered = data.get("discovered_at")
        return cls(
            identifier=data["identifier"],
            name=data.get("name", "") or "",
            is_enabled=bool(data.get("is_enabled", True)),
            trust_level=TrustLevel(data.get("trust_level", TrustLevel.UNSIGNED.value)),
            executable_path=data.get("executable_path"),
            category=data.get("category", "") or "",
            risk_score=data.get("risk_score"),
            discovered_at=datetime.fromisoformat(discovered) if discovered else None,
        )


@dataclass(frozen=True)
class Snapshot:
    """Descriptor of a sealed capture. Items are stored separately."""

    id: str
    captured_at: datetime
    trigger: SnapshotTrigger
    item_count: int = 0
    note: Optional[str] = None

    @property
    def short_id(self) -> str:
        return self.id[:8]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id":          self.id,
            "captured_at": self.captured_at.isoformat(),
            "trigger":     self.trigger.value,
            "item_count":  self.item_count,
            "note":        self.note,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Diff result
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ChangeDetail:
    field: str
    old_value: str
    new_value: str

    @property
    def short_description(self) -> str:
        return f"{self.field}: {self.old_value} → {self.new_value}"


@dataclass(frozen=True)
class ItemChange:
    """An item together with how it differs between two snapshots."""

    item: PersistenceItem
    change_type: ChangeType
    details: Tuple[ChangeDetail, ...] = ()

    @property
    def summary(self) -> str:
        if not self.details:
            return self.change_type.display_name
        return ", ".join(d.short_description for d in self.details)


@dataclass(frozen=True)
class DiffGroup:
    title: str
    entries: Tuple[ItemChange, ...]


@dataclass(frozen=True)
class SnapshotDiff:
    """
    Comparison of two snapshots.

    added_items and removed_items keep the order of their source collection;
    changed_items follows the order of the newer collection. The three are
    disjoint by identifier.
    """

    from_snapshot: Snapshot
    to_snapshot: Snapshot
    added_items: Tuple[PersistenceItem, ...] = field(default_factory=tuple)
    removed_items: Tuple[PersistenceItem, ...] = field(default_factory=tuple)
    changed_items: Tuple[ItemChange, ...] = field(default_factory=tuple)

    @property
    def has_changes(self) -> bool:
        return bool(self.added_items or self.removed_items or self.changed_items)

    @property
    def total_changes(self) -> int:
        return len(self.added_items) + len(self.removed_items) + len(self.changed_items)

    @property
    def summary(self) -> str:
        parts: List[str] = []
        if self.added_items:
            parts.append(f"{len(self.added_items)} added")
        if self.removed_items:
            parts.append(f"{len(self.removed_items)} removed")
        if self.changed_items:
            parts.append(f"{len(self.changed_items)} modified")
        return ", ".join(parts) if parts else "No changes"

    @property
    def grouped_changes(self) -> List[DiffGroup]:
        groups: List[DiffGroup] = []
        if self.added_items:
            groups.append(DiffGroup(
                "Added",
                tuple(ItemChange(item, ChangeType.ADDED) for item in self.added_items),
            ))
        if self.removed_items:
            groups.append(DiffGroup(
                "Removed",
                tuple(ItemChange(item, ChangeType.REMOVED) for item in self.removed_items),
            ))
        if self.changed_items:
            groups.append(DiffGroup("Modified", tuple(self.changed_items)))
        return groups

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_snapshot": self.from_snapshot.to_dict(),
            "to_snapshot":   self.to_snapshot.to_dict(),
            "summary":       self.summary,
            "added":         [item.to_dict() for item in self.added_items],
            "removed":       [item.to_dict() for item in self.removed_items],
            "modified": [
                {
                    "item": change.item.to_dict(),
                    "details": [
                        {"field": d.field, "old": d.old_value, "new": d.new_value}
                        for d in change.details
                    ],
                }
                for change in self.changed_items
            ],
        }
