"""Translate directory payloads into domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from contactsync.domain.model import DirectoryUserRecord

from .schema import UserDocument

if TYPE_CHECKING:
    from collections.abc import Mapping


def parse_user_record(document: UserDocument | Mapping[str, object]) -> DirectoryUserRecord:
    validated = (
        document if isinstance(document, UserDocument) else UserDocument.model_validate(document)
    )
    data = validated.data
    return DirectoryUserRecord(
        user_id=validated.id,
        phone=data.phone,
        username=data.username,
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        profile_picture=data.profile_picture,
        is_online=data.is_online,
        last_seen_epoch=data.last_seen,
    )
