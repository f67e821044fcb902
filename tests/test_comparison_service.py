import pytest

from persistguard.dynamic.comparison_service import compare_snapshots, compare_with_latest
from persistguard.dynamic.errors import ComparisonError, SnapshotStoreError
from persistguard.dynamic.models import TrustLevel


def test_compare_stored_snapshots(store, item_factory):
    before = store.create_snapshot([
        item_factory("com.vendor.updater"),
        item_factory("com.old.helper"),
    ])
    after = store.create_snapshot([
        item_factory("com.vendor.updater", trust_level=TrustLevel.SUSPICIOUS),
        item_factory("com.new.agent"),
    ])

    diff = compare_snapshots(store, before.id, after.id)

    assert diff.from_snapshot.id == before.id
    assert diff.to_snapshot.id == after.id
    assert diff.summary == "1 added, 1 removed, 1 modified"
    assert diff.changed_items[0].details[0].new_value == "Suspicious"


def test_unchanged_snapshots_give_empty_diff(store, item_factory):
    a = store.create_snapshot([item_factory("x")])
    b = store.create_snapshot([item_factory("x")])
    assert compare_snapshots(store, a.id, b.id).has_changes is False


def test_missing_snapshot_fails_instead_of_diffing(store, item_factory):
    existing = store.create_snapshot([item_factory("x")])

    with pytest.raises(ComparisonError) as excinfo:
        compare_snapshots(store, "missing-id", existing.id)
    assert excinfo.value.snapshot_id == "missing-id"

    with pytest.raises(ComparisonError):
        compare_snapshots(store, existing.id, "missing-id")


def test_storage_failure_is_wrapped(store, item_factory, monkeypatch):
    a = store.create_snapshot([item_factory("x")])
    b = store.create_snapshot([item_factory("y")])

    def broken(snapshot_id):
        raise SnapshotStoreError("disk unreadable")

    monkeypatch.setattr(store, "get_items", broken)

    with pytest.raises(ComparisonError) as excinfo:
        compare_snapshots(store, a.id, b.id)
    assert isinstance(excinfo.value.cause, SnapshotStoreError)


def test_compare_with_latest(store, item_factory):
    baseline = store.create_snapshot([item_factory("x")])
    store.create_snapshot([item_factory("x"), item_factory("y")])

    diff = compare_with_latest(store, baseline.id)
    assert [i.identifier for i in diff.added_items] == ["y"]


def test_compare_with_latest_on_empty_store(store):
    with pytest.raises(ComparisonError):
        compare_with_latest(store, "anything")
