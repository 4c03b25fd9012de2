"""SQLAlchemy-backed :class:`SnapshotStore`."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy import create_engine, delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from contactsync.config.storage import DEFAULT_SNAPSHOT_KEY, get_database_config
from contactsync.domain.ports.persistence import SnapshotStore

from .mappings import SNAPSHOT_FORMAT_VERSION, create_all_tables, snapshot_table
from .schema import dump_snapshot, load_snapshot

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from contactsync.domain.model import ReconciliationSnapshot

log = getLogger(__name__)


class SnapshotStoreError(RuntimeError):
    """Raised when the snapshot database cannot be read."""


def create_snapshot_engine(database_uri: str | None = None) -> Engine:
    """Create an engine usable from worker threads.

    In-memory SQLite gets a single shared connection; otherwise every thread
    would see its own empty database.
    """

    uri = database_uri or get_database_config().uri
    if uri.startswith("sqlite") and (":memory:" in uri or uri.rstrip("/").endswith("sqlite:")):
        return create_engine(
            uri,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(uri, future=True)


class SqlAlchemySnapshotStore:
    """Keeps one snapshot row per cache key; every write replaces the row in one transaction."""

    def __init__(
        self,
        engine: Engine | None = None,
        *,
        database_uri: str | None = None,
        cache_key: str = DEFAULT_SNAPSHOT_KEY,
    ) -> None:
        self.engine = engine or create_snapshot_engine(database_uri)
        self.cache_key = cache_key
        create_all_tables(self.engine)

    async def read_snapshot(self) -> ReconciliationSnapshot | None:
        return await asyncio.to_thread(self._read)

    async def write_snapshot(self, snapshot: ReconciliationSnapshot) -> bool:
        return await asyncio.to_thread(self._write, snapshot)

    async def delete_snapshot(self) -> bool:
        return await asyncio.to_thread(self._delete)

    def dispose(self) -> None:
        self.engine.dispose()

    def _read(self) -> ReconciliationSnapshot | None:
        stmt = select(
            snapshot_table.c.synced_at,
            snapshot_table.c.format_version,
            snapshot_table.c.payload,
        ).where(snapshot_table.c.cache_key == self.cache_key)
        try:
            with self.engine.connect() as connection:
                row = connection.execute(stmt).one_or_none()
        except SQLAlchemyError as exc:
            raise SnapshotStoreError(f"Reading snapshot {self.cache_key!r} failed") from exc

        if row is None:
            return None
        if row.format_version != SNAPSHOT_FORMAT_VERSION:
            log.warning(
                "Ignoring snapshot %s with unsupported format version %s",
                self.cache_key,
                row.format_version,
            )
            return None
        try:
            return load_snapshot(row.payload, synced_at=row.synced_at)
        except (ValidationError, ValueError):
            log.warning("Ignoring corrupt snapshot %s", self.cache_key, exc_info=True)
            return None

    def _write(self, snapshot: ReconciliationSnapshot) -> bool:
        payload = dump_snapshot(snapshot)
        try:
            with self.engine.begin() as connection:
                connection.execute(
                    delete(snapshot_table).where(snapshot_table.c.cache_key == self.cache_key)
                )
                connection.execute(
                    insert(snapshot_table).values(
                        cache_key=self.cache_key,
                        synced_at=snapshot.synced_at,
                        format_version=SNAPSHOT_FORMAT_VERSION,
                        payload=payload,
                    )
                )
        except SQLAlchemyError:
            log.exception("Writing snapshot %s failed", self.cache_key)
            return False
        return True

    def _delete(self) -> bool:
        try:
            with self.engine.begin() as connection:
                connection.execute(
                    delete(snapshot_table).where(snapshot_table.c.cache_key == self.cache_key)
                )
        except SQLAlchemyError:
            log.exception("Deleting snapshot %s failed", self.cache_key)
            return False
        return True


if TYPE_CHECKING:
    _store_check: SnapshotStore = SqlAlchemySnapshotStore()
