"""Ports for looking up users in the remote directory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from contactsync.domain.model import DirectoryUserRecord


@runtime_checkable
class UserDirectory(Protocol):
    """Remote user directory queried by phone number.

    ``phones`` never holds more than ``max_batch_size`` values; implementations
    may raise on backend failure.
    """

    async def query_by_phone_batch(
        self,
        phones: Sequence[str],
        max_batch_size: int,
    ) -> Sequence[DirectoryUserRecord]: ...
