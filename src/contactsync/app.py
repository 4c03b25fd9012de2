"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from contactsync.adapters.contacts_file import JsonFileContactSource
from contactsync.adapters.directory import HttpUserDirectory
from contactsync.adapters.sqlalchemy import SqlAlchemySnapshotStore
from contactsync.config import get_database_config, get_directory_config, get_storage_config
from contactsync.config.sync import get_sync_config
from contactsync.domain.contact_reader import DeviceContactReader
from contactsync.domain.directory_matcher import DirectoryMatcher
from contactsync.domain.reconciliation import known_users, search_contacts
from contactsync.domain.sync import ContactSyncCoordinator

if TYPE_CHECKING:
    from pathlib import Path

    from contactsync.config.sync import SyncConfig
    from contactsync.domain.model import ReconciledContact
    from contactsync.domain.ports import DeviceContactSource, SnapshotStore, UserDirectory

log = getLogger(__name__)


def build_snapshot_store() -> SqlAlchemySnapshotStore:
    storage = get_storage_config()
    database = get_database_config(storage=storage)
    return SqlAlchemySnapshotStore(database_uri=database.uri, cache_key=storage.snapshot_key)


def build_coordinator(
    *,
    source: DeviceContactSource,
    directory: UserDirectory | None = None,
    store: SnapshotStore | None = None,
    config: SyncConfig | None = None,
) -> ContactSyncCoordinator:
    """Wire a coordinator from configuration, defaulting to the HTTP and SQL adapters."""

    effective_config = config or get_sync_config()
    effective_directory = directory or HttpUserDirectory(config=get_directory_config())
    effective_store = store or build_snapshot_store()
    log.debug(
        "Building coordinator: country_code=%s, staleness=%ss, batch_size=%s",
        effective_config.default_country_code,
        effective_config.staleness_seconds,
        effective_config.directory_batch_size,
    )
    return ContactSyncCoordinator(
        reader=DeviceContactReader(
            source=source,
            default_country_code=effective_config.default_country_code,
        ),
        matcher=DirectoryMatcher(
            directory=effective_directory,
            batch_size=effective_config.directory_batch_size,
            default_country_code=effective_config.default_country_code,
        ),
        store=effective_store,
        staleness=effective_config.staleness,
    )


async def _reconcile(
    coordinator: ContactSyncCoordinator,
    *,
    force: bool,
    known_only: bool,
    search: str | None,
) -> list[ReconciledContact]:
    contacts = await (coordinator.refresh() if force else coordinator.get_contacts())
    if search:
        contacts = search_contacts(contacts, search)
    if known_only:
        contacts = known_users(contacts)
    return contacts


async def sync_contacts_file(
    contacts_path: Path,
    *,
    force: bool = False,
    known_only: bool = False,
    search: str | None = None,
    coordinator: ContactSyncCoordinator | None = None,
) -> list[ReconciledContact]:
    """Reconcile an exported address book against the directory."""

    if coordinator is not None:
        contacts = await _reconcile(coordinator, force=force, known_only=known_only, search=search)
    else:
        async with HttpUserDirectory(config=get_directory_config()) as directory:
            built = build_coordinator(
                source=JsonFileContactSource(contacts_path), directory=directory
            )
            contacts = await _reconcile(built, force=force, known_only=known_only, search=search)
    log.info("Reconciled %s contacts from %s", len(contacts), contacts_path)
    return contacts


async def clear_contacts_cache(*, store: SnapshotStore | None = None) -> bool:
    effective = store or build_snapshot_store()
    return await effective.delete_snapshot()
