"""Resolve canonical phone numbers to directory users in bounded batches."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from contactsync.config.sync import DEFAULT_COUNTRY_CODE, DEFAULT_DIRECTORY_BATCH_SIZE

from . import phone

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .model import CanonicalPhone, DirectoryUserRecord
    from .ports.directory import UserDirectory

log = getLogger(__name__)


def batched[T](items: Sequence[T], size: int) -> list[tuple[T, ...]]:
    """Split ``items`` into consecutive chunks of at most ``size`` elements."""

    if size < 1:
        raise ValueError("Batch size must be positive")
    return [tuple(items[start : start + size]) for start in range(0, len(items), size)]


@dataclass(slots=True)
class DirectoryMatcher:
    """Match phone numbers against a :class:`UserDirectory`.

    Batches run concurrently and fail independently: a batch that raises is
    logged and contributes no matches.
    """

    directory: UserDirectory
    batch_size: int = DEFAULT_DIRECTORY_BATCH_SIZE
    default_country_code: str = DEFAULT_COUNTRY_CODE

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("Batch size must be positive")

    async def find_by_phones(
        self,
        phones: Iterable[str],
    ) -> dict[CanonicalPhone, DirectoryUserRecord]:
        requested = self._canonical_set(phones)
        if not requested:
            return {}

        batches = batched(sorted(requested), self.batch_size)
        log.info(
            "Looking up %s phone numbers in %s directory batches", len(requested), len(batches)
        )
        results = await asyncio.gather(
            *(self._query_batch(index, batch) for index, batch in enumerate(batches))
        )

        matches: dict[CanonicalPhone, DirectoryUserRecord] = {}
        for records in results:
            for record in records:
                key = self._record_key(record)
                if key is None or key not in requested:
                    continue
                existing = matches.setdefault(key, record)
                if existing is not record and existing.user_id != record.user_id:
                    log.warning(
                        "Phone %s maps to several users (%s, %s); keeping the first",
                        key,
                        existing.user_id,
                        record.user_id,
                    )

        log.info("Matched %s of %s phone numbers to directory users", len(matches), len(requested))
        return matches

    async def _query_batch(
        self,
        index: int,
        batch: tuple[CanonicalPhone, ...],
    ) -> Sequence[DirectoryUserRecord]:
        try:
            return await self.directory.query_by_phone_batch(batch, self.batch_size)
        except Exception:
            log.exception("Directory batch %s (%s numbers) failed", index, len(batch))
            return ()

    def _canonical_set(self, phones: Iterable[str]) -> set[CanonicalPhone]:
        canonical: set[CanonicalPhone] = set()
        for value in phones:
            normalized = phone.normalize(value, self.default_country_code)
            if normalized:
                canonical.add(normalized)
        return canonical

    def _record_key(self, record: DirectoryUserRecord) -> CanonicalPhone | None:
        if not record.phone:
            log.debug("Directory user %s has no phone; skipping", record.user_id)
            return None
        normalized = phone.normalize(record.phone, self.default_country_code)
        return normalized or None
