"""In-memory stand-ins for the reconciliation ports."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from contactsync.adapters.memory import InMemorySnapshotStore
from contactsync.domain.model import DeviceContact, DirectoryUserRecord
from contactsync.domain.ports.contacts import RawDeviceContact

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from contactsync.domain.model import ReconciliationSnapshot


def raw_contact(
    contact_id: str,
    *phones: str,
    name: str | None = None,
    given: str | None = None,
    family: str | None = None,
) -> RawDeviceContact:
    return RawDeviceContact(
        id=contact_id,
        display_name=name if name is not None else f"Contact {contact_id}",
        given_name=given,
        family_name=family,
        phone_numbers=tuple(phones),
    )


def device_contact(contact_id: str, *normalized: str, name: str | None = None) -> DeviceContact:
    return DeviceContact(
        id=contact_id,
        name=name or f"Contact {contact_id}",
        phone_numbers=tuple(normalized),
        normalized_phones=tuple(normalized),
    )


def directory_user(
    user_id: str,
    phone: str | None,
    *,
    username: str | None = None,
    is_online: bool = False,
    last_seen_epoch: float | None = None,
) -> DirectoryUserRecord:
    return DirectoryUserRecord(
        user_id=user_id,
        phone=phone,
        username=username or user_id,
        is_online=is_online,
        last_seen_epoch=last_seen_epoch,
    )


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeContactSource:
    def __init__(
        self,
        contacts: Iterable[RawDeviceContact] = (),
        *,
        granted: bool = True,
        permission_error: Exception | None = None,
        list_error: Exception | None = None,
    ) -> None:
        self.contacts = list(contacts)
        self.granted = granted
        self.permission_error = permission_error
        self.list_error = list_error
        self.gate: asyncio.Event | None = None
        self.permission_calls = 0
        self.list_calls = 0

    async def request_permission(self) -> bool:
        self.permission_calls += 1
        if self.permission_error is not None:
            raise self.permission_error
        return self.granted

    async def list_contacts(self) -> Sequence[RawDeviceContact]:
        self.list_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if self.list_error is not None:
            raise self.list_error
        return list(self.contacts)


class FakeDirectory:
    """Matches stored phones exactly, like an ``in`` query on the phone field."""

    def __init__(
        self,
        users: Iterable[DirectoryUserRecord] = (),
        *,
        fail_when: Callable[[Sequence[str]], bool] | None = None,
    ) -> None:
        self.users = list(users)
        self.fail_when = fail_when
        self.calls: list[tuple[str, ...]] = []

    async def query_by_phone_batch(
        self,
        phones: Sequence[str],
        max_batch_size: int,
    ) -> list[DirectoryUserRecord]:
        assert len(phones) <= max_batch_size
        self.calls.append(tuple(phones))
        await asyncio.sleep(0)
        if self.fail_when is not None and self.fail_when(phones):
            raise RuntimeError("directory unavailable")
        wanted = {value for phone in phones for value in (phone, phone.lstrip("+"))}
        return [user for user in self.users if user.phone in wanted]


class RecordingSnapshotStore(InMemorySnapshotStore):
    def __init__(self) -> None:
        super().__init__()
        self.read_error: Exception | None = None
        self.write_error: Exception | None = None
        self.write_result = True
        self.reads = 0
        self.writes: list[ReconciliationSnapshot] = []
        self.deletes = 0

    async def read_snapshot(self) -> ReconciliationSnapshot | None:
        self.reads += 1
        await asyncio.sleep(0)
        if self.read_error is not None:
            raise self.read_error
        return await super().read_snapshot()

    async def write_snapshot(self, snapshot: ReconciliationSnapshot) -> bool:
        self.writes.append(snapshot)
        if self.write_error is not None:
            raise self.write_error
        if not self.write_result:
            return False
        return await super().write_snapshot(snapshot)

    async def delete_snapshot(self) -> bool:
        self.deletes += 1
        return await super().delete_snapshot()
