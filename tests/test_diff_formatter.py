from persistguard.dynamic.comparator import compute_diff
from persistguard.dynamic.errors import ComparisonError
from persistguard.dynamic.models import ChangeDetail, ChangeType, ItemChange, TrustLevel
from persistguard.ui.diff_formatter import (
    CHANGE_STYLES,
    NEGATIVE,
    POSITIVE,
    format_comparison_error,
    format_diff,
    refine_change_type,
)


def _modified(item, *details):
    return ItemChange(item, ChangeType.MODIFIED, tuple(details))


def test_every_change_type_has_a_style():
    assert set(CHANGE_STYLES) == set(ChangeType)
    assert CHANGE_STYLES[ChangeType.ADDED][1] == POSITIVE
    assert CHANGE_STYLES[ChangeType.REMOVED][1] == NEGATIVE


def test_refine_single_field_changes(item_factory):
    item = item_factory("x")
    assert refine_change_type(_modified(item, ChangeDetail("Enabled", "No", "Yes"))) is ChangeType.ENABLED
    assert refine_change_type(_modified(item, ChangeDetail("Enabled", "Yes", "No"))) is ChangeType.DISABLED
    assert refine_change_type(
        _modified(item, ChangeDetail("Trust Level", "Apple", "Unsigned"))
    ) is ChangeType.TRUST_LEVEL_CHANGED


def test_refine_leaves_other_changes_alone(item_factory):
    item = item_factory("x")
    assert refine_change_type(_modified(item, ChangeDetail("Executable", "/a", "/b"))) is ChangeType.MODIFIED
    assert refine_change_type(_modified(
        item, ChangeDetail("Enabled", "No", "Yes"), ChangeDetail("Executable", "/a", "/b"),
    )) is ChangeType.MODIFIED
    assert refine_change_type(ItemChange(item, ChangeType.ADDED)) is ChangeType.ADDED


def test_format_diff_lists_groups(item_factory, snapshots):
    diff = compute_diff(
        [item_factory("com.old.helper"), item_factory("com.vendor.sync", trust_level=TrustLevel.SIGNED)],
        [item_factory("com.vendor.sync", trust_level=TrustLevel.UNSIGNED),
         item_factory("com.new.agent", executable_path=None)],
        *snapshots,
    )

    text = format_diff(diff)

    assert "Summary: 1 added, 1 removed, 1 modified" in text
    assert text.index("Added (1):") < text.index("Removed (1):") < text.index("Modified (1):")
    assert "[com.new.agent]" in text and "None" in text
    assert "Trust Level: Signed → Unsigned" in text


def test_format_diff_without_changes(item_factory, snapshots):
    text = format_diff(compute_diff([item_factory("x")], [item_factory("x")], *snapshots))
    assert "No differences" in text
    assert "Added" not in text


def test_failed_comparison_is_rendered_differently():
    text = format_comparison_error(ComparisonError("Snapshot not found: abc"))
    assert text.startswith("✗  Comparison failed")
    assert "No differences" not in text
