"""Cached, single-flight reconciliation of device contacts with the user directory.

A :class:`ContactSyncCoordinator` is either idle or running exactly one
reconciliation pass. Callers arriving while a pass is in flight await that
same pass instead of starting another, so the address book and the directory
are read at most once at a time per coordinator.

Every public operation degrades to an empty result instead of raising; contact
reconciliation is an enrichment layer and must never take the caller down.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from contactsync.config.sync import DEFAULT_STALENESS_SECONDS

from .model import ReconciliationSnapshot
from .reconciliation import known_users, merge_contacts, search_contacts, unique_phones

if TYPE_CHECKING:
    from collections.abc import Callable

    from .contact_reader import DeviceContactReader
    from .directory_matcher import DirectoryMatcher
    from .model import ReconciledContact
    from .ports.persistence import SnapshotStore

log = getLogger(__name__)

DEFAULT_STALENESS = timedelta(seconds=DEFAULT_STALENESS_SECONDS)


class SyncState(StrEnum):
    IDLE = "idle"
    SYNCING = "syncing"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ContactSyncCoordinator:
    def __init__(
        self,
        *,
        reader: DeviceContactReader,
        matcher: DirectoryMatcher,
        store: SnapshotStore,
        staleness: timedelta = DEFAULT_STALENESS,
        now_provider: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.reader = reader
        self.matcher = matcher
        self.store = store
        self.staleness = staleness
        self._now = now_provider
        self._in_flight: asyncio.Task[list[ReconciledContact]] | None = None

    @property
    def state(self) -> SyncState:
        return SyncState.IDLE if self._in_flight is None else SyncState.SYNCING

    async def get_contacts(self) -> list[ReconciledContact]:
        return await self.request(force_sync=False)

    async def refresh(self) -> list[ReconciledContact]:
        return await self.request(force_sync=True)

    async def get_app_user_contacts(self) -> list[ReconciledContact]:
        return known_users(await self.get_contacts())

    async def search_local(self, query: str) -> list[ReconciledContact]:
        return search_contacts(await self.get_contacts(), query)

    async def clear_cache(self) -> bool:
        """Delete the persisted snapshot. A pass already in flight is left alone."""

        try:
            deleted = await self.store.delete_snapshot()
        except Exception:
            log.exception("Clearing the contacts cache failed")
            return False
        if deleted:
            log.info("Contacts cache cleared")
        return bool(deleted)

    async def request(self, *, force_sync: bool = False) -> list[ReconciledContact]:
        """Return reconciled contacts, from the cache when fresh unless forced."""

        if self._in_flight is not None:
            log.info("Contact sync already in progress, waiting for completion")
            return await self._attach(self._in_flight)

        if not force_sync:
            snapshot = await self._read_snapshot()
            # Reading the cache suspends; a pass may have started meanwhile.
            if self._in_flight is not None:
                return await self._attach(self._in_flight)
            if snapshot is not None and snapshot.is_fresh(self._now(), self.staleness):
                log.debug("Using cached contacts from %s", snapshot.synced_at.isoformat())
                return merge_contacts(snapshot.contacts, snapshot.matches)

        log.info("Starting contact sync%s", " (forced)" if force_sync else "")
        return await self._attach(self._start_pass())

    def _start_pass(self) -> asyncio.Task[list[ReconciledContact]]:
        # No await between creating and publishing the task.
        task = asyncio.create_task(self._run_pass(), name="contactsync-pass")
        self._in_flight = task
        return task

    async def _attach(
        self,
        task: asyncio.Task[list[ReconciledContact]],
    ) -> list[ReconciledContact]:
        # Shielded so a cancelled caller cannot abort the pass for the others.
        return list(await asyncio.shield(task))

    async def _run_pass(self) -> list[ReconciledContact]:
        try:
            return await self._perform_pass()
        except Exception:
            log.exception("Contact sync failed")
            return []
        finally:
            if self._in_flight is asyncio.current_task():
                self._in_flight = None

    async def _perform_pass(self) -> list[ReconciledContact]:
        contacts = await self.reader.read_all()
        if not contacts:
            log.info("No device contacts found")
            return []

        matches = await self.matcher.find_by_phones(unique_phones(contacts))
        snapshot = ReconciliationSnapshot(
            synced_at=self._now(),
            contacts=tuple(contacts),
            matches=matches,
        )
        await self._write_snapshot(snapshot)

        log.info(
            "Contact sync completed: contacts=%s, app_users=%s", len(contacts), len(matches)
        )
        return merge_contacts(snapshot.contacts, snapshot.matches)

    async def _read_snapshot(self) -> ReconciliationSnapshot | None:
        try:
            return await self.store.read_snapshot()
        except Exception:
            log.exception("Reading cached contacts failed; treating as cache miss")
            return None

    async def _write_snapshot(self, snapshot: ReconciliationSnapshot) -> None:
        try:
            written = await self.store.write_snapshot(snapshot)
        except Exception:
            log.exception("Caching contacts failed")
            return
        if not written:
            log.warning("Contacts cache was not updated; next request will resync")
