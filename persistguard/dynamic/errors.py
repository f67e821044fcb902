"""Exceptions raised by the snapshot store and the comparison service."""

from typing import Optional


class PersistGuardError(Exception):
    pass


class SnapshotStoreError(PersistGuardError):
    """The snapshot database could not be read or written."""


class SnapshotNotFoundError(SnapshotStoreError):
    def __init__(self, snapshot_id: str):
        super().__init__(f"Snapshot not found: {snapshot_id}")
        self.snapshot_id = snapshot_id


class ComparisonError(PersistGuardError):
    """
    Raised instead of producing a diff when either side could not be loaded.

    A failed comparison must never be reported as "no changes".
    """

    def __init__(self, message: str, snapshot_id: Optional[str] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message)
        self.snapshot_id = snapshot_id
        self.cause = cause
