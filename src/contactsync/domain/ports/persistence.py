"""Ports for persisting reconciliation snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contactsync.domain.model import ReconciliationSnapshot


@runtime_checkable
class SnapshotStore(Protocol):
    """Whole-object store for the latest reconciliation snapshot.

    Writes replace the previous snapshot atomically; readers never observe a
    partially written one.
    """

    async def read_snapshot(self) -> ReconciliationSnapshot | None: ...

    async def write_snapshot(self, snapshot: ReconciliationSnapshot) -> bool: ...

    async def delete_snapshot(self) -> bool: ...
