import os
import tempfile
from datetime import datetime

import pytest

# Keep the global logger's database and log file out of the working tree.
_TMP = tempfile.mkdtemp(prefix="persistguard-tests-")
os.environ.setdefault("PERSISTGUARD_DB", os.path.join(_TMP, "events.db"))
os.environ.setdefault("PERSISTGUARD_LOG", os.path.join(_TMP, "persistguard.log"))

from persistguard.dynamic.models import (  # noqa: E402
    PersistenceItem,
    Snapshot,
    SnapshotTrigger,
    TrustLevel,
)
from persistguard.dynamic.snapshot_service import SnapshotStore  # noqa: E402


def make_item(identifier, **overrides):
    fields = {
        "name": identifier.rsplit(".", 1)[-1],
        "is_enabled": True,
        "trust_level": TrustLevel.APPLE,
        "executable_path": f"/usr/libexec/{identifier}",
    }
    fields.update(overrides)
    return PersistenceItem(identifier=identifier, **fields)


def make_snapshot(snapshot_id, trigger=SnapshotTrigger.MANUAL, item_count=0):
    return Snapshot(
        id=snapshot_id,
        captured_at=datetime(2026, 10, 1, 12, 0),
        trigger=trigger,
        item_count=item_count,
    )


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def snapshots():
    return make_snapshot("from-snapshot-0001"), make_snapshot("to-snapshot-0002")


@pytest.fixture
def store(tmp_path):
    return SnapshotStore(str(tmp_path / "snapshots.db"))
