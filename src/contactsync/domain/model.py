"""Domain records for contact reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

type CanonicalPhone = str
"""A ``+<country code><national number>`` string produced by ``phone.normalize``."""


@dataclass(frozen=True, slots=True)
class NormalizedPhone:
    """Structured normalization result.

    ``normalized`` holds digits only. ``country_code`` and ``national_number`` are
    empty when no country could be identified.
    """

    original: str
    normalized: str
    country_code: str = ""
    national_number: str = ""

    @property
    def has_country(self) -> bool:
        return bool(self.country_code and self.national_number)


@dataclass(frozen=True, slots=True, kw_only=True)
class DeviceContact:
    """One address-book entry with at least one normalized phone number."""

    id: str
    name: str
    phone_numbers: tuple[str, ...]
    normalized_phones: tuple[CanonicalPhone, ...]
    first_name: str | None = None
    last_name: str | None = None
    image_uri: str | None = None

    def __post_init__(self) -> None:
        if not self.normalized_phones:
            raise ValueError(f"Device contact {self.id!r} has no normalized phone numbers")


@dataclass(frozen=True, slots=True, kw_only=True)
class DirectoryUserRecord:
    """A user profile as known to the remote directory.

    Only ``user_id`` is guaranteed. A record without ``phone`` can never be
    matched.
    """

    user_id: str
    phone: str | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    profile_picture: str | None = None
    is_online: bool = False
    last_seen_epoch: float | None = None

    @property
    def last_seen(self) -> datetime | None:
        if self.last_seen_epoch is None:
            return None
        return datetime.fromtimestamp(self.last_seen_epoch, tz=UTC)

    @property
    def display_name(self) -> str:
        full_name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full_name or self.username or self.user_id


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciledContact:
    """A device contact merged with the directory user it resolved to (if any)."""

    contact: DeviceContact
    user: DirectoryUserRecord | None = None
    is_online: bool | None = None
    last_seen: datetime | None = None

    @property
    def is_known_user(self) -> bool:
        return self.user is not None

    @property
    def id(self) -> str:
        return self.contact.id

    @property
    def name(self) -> str:
        return self.contact.name

    @property
    def phone_numbers(self) -> tuple[str, ...]:
        return self.contact.phone_numbers

    @property
    def normalized_phones(self) -> tuple[CanonicalPhone, ...]:
        return self.contact.normalized_phones


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationSnapshot:
    """Persisted outcome of one reconciliation pass, replaced as a whole."""

    synced_at: datetime
    contacts: tuple[DeviceContact, ...] = ()
    matches: Mapping[CanonicalPhone, DirectoryUserRecord] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.synced_at.tzinfo is None:
            object.__setattr__(self, "synced_at", self.synced_at.replace(tzinfo=UTC))

    def age(self, now: datetime) -> timedelta:
        return now - self.synced_at

    def is_fresh(self, now: datetime, staleness: timedelta) -> bool:
        """A snapshot dated in the future (clock skew, restored database) is stale."""

        age = self.age(now)
        return timedelta(0) <= age < staleness
