"""SQLAlchemy adapter package for contactsync."""

from __future__ import annotations

from .mappings import create_all_tables, metadata, snapshot_table
from .snapshot_store import SnapshotStoreError, SqlAlchemySnapshotStore, create_snapshot_engine

__all__ = [
    "SnapshotStoreError",
    "SqlAlchemySnapshotStore",
    "create_all_tables",
    "create_snapshot_engine",
    "metadata",
    "snapshot_table",
]
