"""Device contacts read from an exported address-book JSON file.

The file holds a list of entries shaped like the mobile contacts API returns
them::

    [{"id": "42", "name": "Ali", "firstName": "Ali", "lastName": null,
      "phoneNumbers": [{"number": "+973 3600 1234", "label": "mobile"}],
      "image": {"uri": "file:///avatar.png"}}]

Phone numbers may also be given as plain strings.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, cast

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from contactsync.domain.ports.contacts import DeviceContactSource, RawDeviceContact

if TYPE_CHECKING:
    from collections.abc import Sequence

log = getLogger(__name__)


class ContactsFileError(RuntimeError):
    """Raised when the exported contacts file cannot be parsed."""


class _ContactsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ImagePayload(_ContactsBaseModel):
    uri: str | None = None


class ContactPayload(_ContactsBaseModel):
    id: str
    name: str | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    phone_numbers: list[str] = Field(default_factory=list, alias="phoneNumbers")
    image: ImagePayload | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("phone_numbers", mode="before")
    @classmethod
    def _flatten_numbers(cls, value: object) -> object:
        if value is None:
            return []
        if not isinstance(value, list):
            return value
        numbers: list[object] = []
        for item in cast(list[object], value):
            if isinstance(item, Mapping):
                number = cast(Mapping[str, object], item).get("number")
                numbers.append(number if isinstance(number, str) else "")
            else:
                numbers.append(item)
        return numbers

    def to_raw(self) -> RawDeviceContact:
        return RawDeviceContact(
            id=self.id,
            display_name=self.name,
            given_name=self.first_name,
            family_name=self.last_name,
            phone_numbers=tuple(self.phone_numbers),
            avatar_uri=self.image.uri if self.image else None,
        )


_CONTACT_LIST = TypeAdapter(list[ContactPayload])


class JsonFileContactSource:
    """:class:`DeviceContactSource` over an exported contacts file.

    Permission is granted iff the file exists.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    async def request_permission(self) -> bool:
        return await asyncio.to_thread(self.path.is_file)

    async def list_contacts(self) -> Sequence[RawDeviceContact]:
        return await asyncio.to_thread(self._load)

    def _load(self) -> list[RawDeviceContact]:
        try:
            content = self.path.read_bytes()
        except OSError as exc:
            raise ContactsFileError(f"Cannot read contacts file {self.path}") from exc
        try:
            payloads = _CONTACT_LIST.validate_json(content)
        except ValidationError as exc:
            raise ContactsFileError(f"Invalid contacts file {self.path}: {exc}") from exc
        log.debug("Loaded %s contacts from %s", len(payloads), self.path)
        return [payload.to_raw() for payload in payloads]


if TYPE_CHECKING:
    _source_check: DeviceContactSource = JsonFileContactSource("contacts.json")
