"""Ports for reading the device address book."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True, kw_only=True)
class RawDeviceContact:
    """An address-book entry exactly as the platform reports it."""

    id: str
    display_name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    phone_numbers: tuple[str, ...] = field(default_factory=tuple)
    avatar_uri: str | None = None


@runtime_checkable
class DeviceContactSource(Protocol):
    """Platform address book."""

    async def request_permission(self) -> bool: ...

    async def list_contacts(self) -> Sequence[RawDeviceContact]: ...
