"""
ui/diff_formatter.py

Text rendering of snapshot diffs and the change-type → style mapping
used by the views. Pure functions; no Qt imports.
"""

from persistguard.dynamic.comparator import ABSENT
from persistguard.dynamic.errors import ComparisonError
from persistguard.dynamic.models import ChangeType, ItemChange, SnapshotDiff


POSITIVE = "green"
NEGATIVE = "red"
CAUTION = "orange"

# change type -> (icon, colour)
CHANGE_STYLES = {
    ChangeType.ADDED:               ("+", POSITIVE),
    ChangeType.REMOVED:             ("-", NEGATIVE),
    ChangeType.MODIFIED:            ("~", CAUTION),
    ChangeType.ENABLED:             ("✔", CAUTION),
    ChangeType.DISABLED:            ("✘", CAUTION),
    ChangeType.TRUST_LEVEL_CHANGED: ("⚑", CAUTION),
}


def refine_change_type(change: ItemChange) -> ChangeType:
    """
    Narrows a MODIFIED change to ENABLED / DISABLED / TRUST_LEVEL_CHANGED
    when its only detail is that field. Anything else is returned as is.
    """
    if change.change_type is not ChangeType.MODIFIED or len(change.details) != 1:
        return change.change_type

    detail = change.details[0]
    if detail.field == "Enabled":
        return ChangeType.ENABLED if detail.new_value == "Yes" else ChangeType.DISABLED
    if detail.field == "Trust Level":
        return ChangeType.TRUST_LEVEL_CHANGED
    return change.change_type


def _item_line(change: ItemChange) -> str:
    item = change.item
    icon, _ = CHANGE_STYLES[refine_change_type(change)]
    exe = item.executable_path if item.executable_path is not None else ABSENT
    return (f"  {icon} {item.name}  [{item.identifier}]  "
            f"{item.trust_level.display_name}  {exe}")


def format_diff(diff: SnapshotDiff) -> str:
    """Convert a SnapshotDiff to a human-readable report."""
    lines = [
        "=== Snapshot Comparison Result ===",
        f"From: {diff.from_snapshot.short_id}  "
        f"({diff.from_snapshot.trigger.display_name}, "
        f"{diff.from_snapshot.captured_at:%Y-%m-%d %H:%M})",
        f"To:   {diff.to_snapshot.short_id}  "
        f"({diff.to_snapshot.trigger.display_name}, "
        f"{diff.to_snapshot.captured_at:%Y-%m-%d %H:%M})",
        f"Summary: {diff.summary}",
        "",
    ]

    if not diff.has_changes:
        lines.append("✔  No differences between the two snapshots.")
        return "\n".join(lines)

    for group in diff.grouped_changes:
        lines.append(f"{group.title} ({len(group.entries)}):")
        for change in group.entries:
            lines.append(_item_line(change))
            for detail in change.details:
                lines.append(f"      {detail.short_description}")
        lines.append("")

    return "\n".join(lines).rstrip("\n")


def format_comparison_error(error: ComparisonError) -> str:
    return f"✗  Comparison failed: {error}"
