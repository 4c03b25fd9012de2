"""Merge device contacts with directory matches and filter the merged view."""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import phone
from .model import ReconciledContact

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .model import CanonicalPhone, DeviceContact, DirectoryUserRecord


def unique_phones(contacts: Iterable[DeviceContact]) -> list[CanonicalPhone]:
    """Every normalized phone across ``contacts`` once, in first-seen order."""

    seen: set[CanonicalPhone] = set()
    ordered: list[CanonicalPhone] = []
    for contact in contacts:
        for number in contact.normalized_phones:
            if number not in seen:
                seen.add(number)
                ordered.append(number)
    return ordered


def link_contact(
    contact: DeviceContact,
    matches: Mapping[CanonicalPhone, DirectoryUserRecord],
) -> ReconciledContact:
    """Attach the directory user of the first matching phone (first match wins)."""

    for number in contact.normalized_phones:
        user = matches.get(number)
        if user is not None:
            return ReconciledContact(
                contact=contact,
                user=user,
                is_online=user.is_online,
                last_seen=user.last_seen,
            )
    return ReconciledContact(contact=contact)


def merge_contacts(
    contacts: Iterable[DeviceContact],
    matches: Mapping[CanonicalPhone, DirectoryUserRecord],
) -> list[ReconciledContact]:
    return [link_contact(contact, matches) for contact in contacts]


def known_users(contacts: Iterable[ReconciledContact]) -> list[ReconciledContact]:
    return [contact for contact in contacts if contact.is_known_user]


def matches_query(contact: ReconciledContact, query: str) -> bool:
    """Case-insensitive substring match on name, username and raw phone numbers."""

    needle = query.strip().lower()
    if needle in contact.name.lower():
        return True

    username = contact.user.username if contact.user else None
    if username and needle in username.lower():
        return True

    if any(needle in number.lower() for number in contact.phone_numbers):
        return True

    # "1234 5678" should find "+973-1234-5678".
    if any(char.isalpha() for char in needle):
        return False
    digits = phone.clean(needle)
    return bool(digits) and any(digits in phone.clean(number) for number in contact.phone_numbers)


def search_contacts(contacts: Iterable[ReconciledContact], query: str) -> list[ReconciledContact]:
    return [contact for contact in contacts if matches_query(contact, query)]
