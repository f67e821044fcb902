"""
dynamic/snapshot_service.py

SQLite-backed snapshot store. Seals item collections into snapshots and
hands them back in capture order. Never compares anything itself.
"""

import sqlite3
import datetime
import socket
import json
import os
import uuid
from contextlib import contextmanager
from typing import Iterable, List, Optional

from persistguard.config.settings import DB_PATH
from persistguard.utils.logger import guardian_logger
from .errors import SnapshotNotFoundError, SnapshotStoreError
from .models import PersistenceItem, Snapshot, SnapshotTrigger


class SnapshotStore:
    def __init__(self, db_path: str = DB_PATH):
        self.db_path = db_path
        self.init_db()

    # ── Connection handling ──────────────────────────────────────────────── #

    @contextmanager
    def _connect(self):
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise SnapshotStoreError(f"Cannot open snapshot database {self.db_path}: {e}") from e
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise SnapshotStoreError(f"Snapshot database error: {e}") from e
        finally:
            conn.close()

    def init_db(self) -> None:
        os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
        with self._connect() as conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS snapshots (
                    id          TEXT PRIMARY KEY,
                    captured_at TEXT NOT NULL,
                    trigger     TEXT NOT NULL,
                    note        TEXT,
                    item_count  INTEGER NOT NULL,
                    device_id   TEXT
                )
            ''')
            conn.execute('''
                CREATE TABLE IF NOT EXISTS snapshot_items (
                    snapshot_id TEXT NOT NULL REFERENCES snapshots(id) ON DELETE CASCADE,
                    position    INTEGER NOT NULL,
                    identifier  TEXT NOT NULL,
                    item_json   TEXT NOT NULL,
                    PRIMARY KEY (snapshot_id, position)
                )
            ''')
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_snapshot_items_identifier "
                "ON snapshot_items (identifier)"
            )

    # ── Writes ───────────────────────────────────────────────────────────── #

    def create_snapshot(
        self,
        items: Iterable[PersistenceItem],
        trigger: SnapshotTrigger = SnapshotTrigger.MANUAL,
        note: Optional[str] = None,
    ) -> Snapshot:
        """
        Seals the given items into a new snapshot.
        Returns the snapshot descriptor.
        """
        items = list(items)
        snapshot = Snapshot(
            id=str(uuid.uuid4()),
            captured_at=datetime.datetime.now(),
            trigger=trigger,
            item_count=len(items),
            note=note,
        )

        with self._connect() as conn:
            conn.execute('''
                INSERT INTO snapshots (id, captured_at, trigger, note, item_count, device_id)
                VALUES (?, ?, ?, ?, ?, ?)
            ''', (snapshot.id, snapshot.captured_at.isoformat(), trigger.value,
                  note, snapshot.item_count, socket.gethostname()))
            conn.executemany('''
                INSERT INTO snapshot_items (snapshot_id, position, identifier, item_json)
                VALUES (?, ?, ?, ?)
            ''', [
                (snapshot.id, position, item.identifier, json.dumps(item.to_dict()))
                for position, item in enumerate(items)
            ])

        guardian_logger.logger.info(
            f"[Snapshot Service] Captured '{trigger.value}' snapshot {snapshot.short_id} "
            f"with {snapshot.item_count} items"
        )
        return snapshot

    def delete_snapshot(self, snapshot_id: str) -> None:
        """Deletes a snapshot and all of its items."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM snapshots WHERE id = ?", (snapshot_id,))
            if cursor.rowcount == 0:
                raise SnapshotNotFoundError(snapshot_id)
        guardian_logger.logger.info(f"[Snapshot Service] Deleted snapshot {snapshot_id[:8]}")

    # ── Reads ────────────────────────────────────────────────────────────── #

    @staticmethod
    def _row_to_snapshot(row) -> Snapshot:
        return Snapshot(
            id=row[0],
            captured_at=datetime.datetime.fromisoformat(row[1]),
            trigger=SnapshotTrigger(row[2]),
            note=row[3],
            item_count=row[4],
        )

    def get_snapshot(self, snapshot_id: str) -> Snapshot:
        with self._connect() as conn:
            row = conn.execute('''
                SELECT id, captured_at, trigger, note, item_count
                FROM snapshots WHERE id = ?
            ''', (snapshot_id,)).fetchone()
        if row is None:
            raise SnapshotNotFoundError(snapshot_id)
        return self._row_to_snapshot(row)

    def get_items(self, snapshot_id: str) -> List[PersistenceItem]:
        """
        Returns the items of a snapshot in capture order.
        Raises SnapshotNotFoundError for unknown ids, so an empty snapshot
        is never confused with a missing one.
        """
        with self._connect() as conn:
            exists = conn.execute(
                "SELECT 1 FROM snapshots WHERE id = ?", (snapshot_id,)
            ).fetchone()
            if exists is None:
                raise SnapshotNotFoundError(snapshot_id)
            rows = conn.execute('''
                SELECT item_json FROM snapshot_items
                WHERE snapshot_id = ?
                ORDER BY position
            ''', (snapshot_id,)).fetchall()

        try:
            return [PersistenceItem.from_dict(json.loads(row[0])) for row in rows]
        except (ValueError, KeyError) as e:
            raise SnapshotStoreError(f"Corrupt item record in snapshot {snapshot_id}: {e}") from e

    def list_snapshots(self) -> List[Snapshot]:
        """All snapshots, newest first."""
        with self._connect() as conn:
            rows = conn.execute('''
                SELECT id, captured_at, trigger, note, item_count
                FROM snapshots
                ORDER BY captured_at DESC, rowid DESC
            ''').fetchall()
        return [self._row_to_snapshot(row) for row in rows]

    def get_latest_snapshot(self) -> Optional[Snapshot]:
        """
        Returns most recent snapshot descriptor.
        """
        with self._connect() as conn:
            row = conn.execute('''
                SELECT id, captured_at, trigger, note, item_count
                FROM snapshots
                ORDER BY captured_at DESC, rowid DESC LIMIT 1
            ''').fetchone()
        return self._row_to_snapshot(row) if row else None
