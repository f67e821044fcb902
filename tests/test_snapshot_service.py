import sqlite3

import pytest

from persistguard.dynamic.errors import SnapshotNotFoundError, SnapshotStoreError
from persistguard.dynamic.models import SnapshotTrigger, TrustLevel
from persistguard.dynamic.snapshot_service import SnapshotStore


def test_create_and_read_back_in_capture_order(store, item_factory):
    items = [
        item_factory("z.last"),
        item_factory("a.first", executable_path=None, trust_level=TrustLevel.UNKNOWN),
        item_factory("m.middle", is_enabled=False),
    ]
    snap = store.create_snapshot(items, trigger=SnapshotTrigger.SCHEDULED, note="nightly")

    assert snap.item_count == 3
    assert store.get_items(snap.id) == items

    loaded = store.get_snapshot(snap.id)
    assert loaded.trigger is SnapshotTrigger.SCHEDULED
    assert loaded.note == "nightly"
    assert loaded.item_count == 3


def test_empty_snapshot_is_not_missing(store):
    snap = store.create_snapshot([])
    assert store.get_items(snap.id) == []

    with pytest.raises(SnapshotNotFoundError) as excinfo:
        store.get_items("does-not-exist")
    assert excinfo.value.snapshot_id == "does-not-exist"


def test_list_newest_first_and_latest(store, item_factory):
    first = store.create_snapshot([item_factory("a")])
    second = store.create_snapshot([item_factory("b")], trigger=SnapshotTrigger.CHANGE_DETECTED)

    assert [s.id for s in store.list_snapshots()] == [second.id, first.id]
    assert store.get_latest_snapshot().id == second.id


def test_latest_of_empty_store(store):
    assert store.list_snapshots() == []
    assert store.get_latest_snapshot() is None


def test_delete_removes_items(store, item_factory):
    snap = store.create_snapshot([item_factory("a"), item_factory("b")])
    keep = store.create_snapshot([item_factory("c")])

    store.delete_snapshot(snap.id)

    with pytest.raises(SnapshotNotFoundError):
        store.get_snapshot(snap.id)
    conn = sqlite3.connect(store.db_path)
    try:
        remaining = conn.execute("SELECT snapshot_id FROM snapshot_items").fetchall()
    finally:
        conn.close()
    assert remaining == [(keep.id,)]


def test_delete_unknown_snapshot(store):
    with pytest.raises(SnapshotNotFoundError):
        store.delete_snapshot("nope")


def test_corrupt_item_record(store, item_factory):
    snap = store.create_snapshot([item_factory("a")])
    conn = sqlite3.connect(store.db_path)
    conn.execute("UPDATE snapshot_items SET item_json = '{not json' WHERE snapshot_id = ?", (snap.id,))
    conn.commit()
    conn.close()

    with pytest.raises(SnapshotStoreError):
        store.get_items(snap.id)


def test_unopenable_database(tmp_path):
    # a directory cannot be opened as a database file
    with pytest.raises(SnapshotStoreError):
        SnapshotStore(str(tmp_path))
