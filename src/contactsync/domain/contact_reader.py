"""Read the device address book into normalized contacts."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from contactsync.config.sync import DEFAULT_COUNTRY_CODE

from . import phone
from .model import DeviceContact

if TYPE_CHECKING:
    from .model import CanonicalPhone
    from .ports.contacts import DeviceContactSource, RawDeviceContact

log = getLogger(__name__)


@dataclass(slots=True)
class DeviceContactReader:
    """Snapshot reader over a :class:`DeviceContactSource`.

    Contacts without a single normalizable phone number are dropped, since they
    can never be matched against the directory.
    """

    source: DeviceContactSource
    default_country_code: str = DEFAULT_COUNTRY_CODE

    async def request_permission(self) -> bool:
        try:
            granted = await self.source.request_permission()
        except Exception:
            log.exception("Requesting contacts permission failed")
            return False
        return bool(granted)

    async def read_all(self) -> list[DeviceContact]:
        if not await self.request_permission():
            log.info("Contacts permission not granted")
            return []

        try:
            raw_contacts = await self.source.list_contacts()
        except Exception:
            log.exception("Reading device contacts failed")
            return []

        log.info("Found %s device contacts", len(raw_contacts))
        contacts: list[DeviceContact] = []
        for raw in raw_contacts:
            contact = self.to_device_contact(raw)
            if contact is not None:
                contacts.append(contact)
        log.info("Kept %s contacts with usable phone numbers", len(contacts))
        return contacts

    def to_device_contact(self, raw: RawDeviceContact) -> DeviceContact | None:
        phone_numbers = tuple(number for number in raw.phone_numbers if number and number.strip())
        if not phone_numbers:
            return None

        normalized = self._normalize_all(phone_numbers)
        if not normalized:
            log.debug("Dropping contact %s: no phone number could be normalized", raw.id)
            return None

        return DeviceContact(
            id=raw.id,
            name=_display_name(raw),
            first_name=raw.given_name,
            last_name=raw.family_name,
            phone_numbers=phone_numbers,
            normalized_phones=normalized,
            image_uri=raw.avatar_uri,
        )

    def _normalize_all(self, numbers: tuple[str, ...]) -> tuple[CanonicalPhone, ...]:
        seen: set[CanonicalPhone] = set()
        ordered: list[CanonicalPhone] = []
        for number in numbers:
            canonical = phone.normalize(number, self.default_country_code)
            if canonical and canonical not in seen:
                seen.add(canonical)
                ordered.append(canonical)
        return tuple(ordered)


def _display_name(raw: RawDeviceContact) -> str:
    if raw.display_name and raw.display_name.strip():
        return raw.display_name.strip()
    return f"{raw.given_name or ''} {raw.family_name or ''}".strip()
