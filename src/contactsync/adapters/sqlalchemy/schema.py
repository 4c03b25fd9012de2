"""Serialized form of a reconciliation snapshot."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field

from contactsync.domain.model import DeviceContact, DirectoryUserRecord, ReconciliationSnapshot


class SnapshotBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class StoredContact(SnapshotBaseModel):
    id: str
    name: str
    phone_numbers: list[str]
    normalized_phones: list[str] = Field(min_length=1)
    first_name: str | None = None
    last_name: str | None = None
    image_uri: str | None = None


class StoredUser(SnapshotBaseModel):
    user_id: str
    phone: str | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    profile_picture: str | None = None
    is_online: bool = False
    last_seen_epoch: float | None = None


class StoredSnapshot(SnapshotBaseModel):
    contacts: list[StoredContact] = Field(default_factory=list)
    matches: dict[str, StoredUser] = Field(default_factory=dict)


def dump_snapshot(snapshot: ReconciliationSnapshot) -> str:
    stored = StoredSnapshot(
        contacts=[
            StoredContact(
                id=contact.id,
                name=contact.name,
                phone_numbers=list(contact.phone_numbers),
                normalized_phones=list(contact.normalized_phones),
                first_name=contact.first_name,
                last_name=contact.last_name,
                image_uri=contact.image_uri,
            )
            for contact in snapshot.contacts
        ],
        matches={
            phone: StoredUser(
                user_id=user.user_id,
                phone=user.phone,
                username=user.username,
                first_name=user.first_name,
                last_name=user.last_name,
                email=user.email,
                profile_picture=user.profile_picture,
                is_online=user.is_online,
                last_seen_epoch=user.last_seen_epoch,
            )
            for phone, user in snapshot.matches.items()
        },
    )
    return stored.model_dump_json()


def load_snapshot(payload: str, *, synced_at: datetime) -> ReconciliationSnapshot:
    """Rebuild a snapshot; raises ``pydantic.ValidationError`` on corrupt payloads."""

    stored = StoredSnapshot.model_validate_json(payload)
    return ReconciliationSnapshot(
        synced_at=synced_at,
        contacts=tuple(
            DeviceContact(
                id=contact.id,
                name=contact.name,
                phone_numbers=tuple(contact.phone_numbers),
                normalized_phones=tuple(contact.normalized_phones),
                first_name=contact.first_name,
                last_name=contact.last_name,
                image_uri=contact.image_uri,
            )
            for contact in stored.contacts
        ),
        matches={
            phone: DirectoryUserRecord(**user.model_dump())
            for phone, user in stored.matches.items()
        },
    )
