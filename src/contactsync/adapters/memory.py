"""In-process adapters, mainly for tests and embedding."""

from __future__ import annotations

from typing import TYPE_CHECKING

from contactsync.domain.ports.persistence import SnapshotStore

if TYPE_CHECKING:
    from contactsync.domain.model import ReconciliationSnapshot


class InMemorySnapshotStore:
    """Holds the latest snapshot in a single attribute; replacement is atomic."""

    def __init__(self, snapshot: ReconciliationSnapshot | None = None) -> None:
        self._snapshot = snapshot

    async def read_snapshot(self) -> ReconciliationSnapshot | None:
        return self._snapshot

    async def write_snapshot(self, snapshot: ReconciliationSnapshot) -> bool:
        self._snapshot = snapshot
        return True

    async def delete_snapshot(self) -> bool:
        self._snapshot = None
        return True


if TYPE_CHECKING:
    _store_check: SnapshotStore = InMemorySnapshotStore()
