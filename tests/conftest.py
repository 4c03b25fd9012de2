from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from contactsync.config.sync import SyncConfig
from contactsync.domain.contact_reader import DeviceContactReader
from contactsync.domain.directory_matcher import DirectoryMatcher
from contactsync.domain.sync import ContactSyncCoordinator
from tests.helpers.fakes import (
    FakeClock,
    FakeContactSource,
    FakeDirectory,
    RecordingSnapshotStore,
    directory_user,
    raw_contact,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "CONTACTSYNC_DEFAULT_COUNTRY_CODE",
        "CONTACTSYNC_STALENESS_SECONDS",
        "CONTACTSYNC_DIRECTORY_BATCH_SIZE",
        "CONTACTSYNC_DIRECTORY_URL",
        "CONTACTSYNC_DIRECTORY_API_KEY",
        "CONTACTSYNC_DIRECTORY_COLLECTION",
        "CONTACTSYNC_DIRECTORY_PHONE_FIELD",
        "CONTACTSYNC_DATA_DIR",
        "CONTACTSYNC_SNAPSHOT_KEY",
        "CONTACTSYNC_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def sync_config() -> SyncConfig:
    return SyncConfig()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def contact_source() -> FakeContactSource:
    return FakeContactSource(
        [
            raw_contact("1", "+973 3600 1111", "3600 2222", name="Amina"),
            raw_contact("2", "00973 3900 3333", name="Yusuf"),
            raw_contact("3", "3300 4444", name="Layla"),
            raw_contact("4", name="No Phone"),
        ]
    )


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory(
        [
            directory_user("u-amina", "97336002222", username="amina", is_online=True),
            directory_user(
                "u-yusuf", "+97339003333", username="yusuf", last_seen_epoch=1_735_732_800
            ),
        ]
    )


@pytest.fixture
def snapshot_store() -> RecordingSnapshotStore:
    return RecordingSnapshotStore()


@pytest.fixture
def coordinator(
    contact_source: FakeContactSource,
    directory: FakeDirectory,
    snapshot_store: RecordingSnapshotStore,
    clock: FakeClock,
    sync_config: SyncConfig,
) -> ContactSyncCoordinator:
    return ContactSyncCoordinator(
        reader=DeviceContactReader(
            source=contact_source,
            default_country_code=sync_config.default_country_code,
        ),
        matcher=DirectoryMatcher(
            directory=directory,
            batch_size=sync_config.directory_batch_size,
            default_country_code=sync_config.default_country_code,
        ),
        store=snapshot_store,
        staleness=sync_config.staleness,
        now_provider=clock,
    )
