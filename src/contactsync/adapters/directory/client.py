"""HTTP client for the remote user directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from contactsync.adapters.http_resilience import ResilientClient
from contactsync.config.directory import DirectoryConfig, get_directory_config
from contactsync.domain.directory_matcher import batched
from contactsync.domain.ports.directory import UserDirectory

from .schema import ErrorResponse, QueryRequest, QueryResponse
from .translator import parse_user_record

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import TracebackType

    from contactsync.config.http_resilience import ResilienceConfig
    from contactsync.domain.model import DirectoryUserRecord

log = getLogger(__name__)

QUERY_PATH = "/query"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def stored_phone_formats(phones: Sequence[str]) -> list[str]:
    """Each phone with and without its leading ``+``, duplicates removed."""

    values: list[str] = []
    for phone in phones:
        bare = phone.lstrip("+")
        for candidate in (f"+{bare}", bare):
            if bare and candidate not in values:
                values.append(candidate)
    return values


class DirectoryAPIError(RuntimeError):
    """Raised when the directory rejects a query or answers with garbage."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class HttpUserDirectory:
    """:class:`UserDirectory` backed by the directory's structured query endpoint.

    The directory may have stored a number with or without the leading ``+``, so
    both forms are queried. The doubled value list is split again so that no
    single request exceeds ``max_batch_size`` values.

    All requests go through one lazily created client, so the configured rate
    limit holds across concurrent batches. Close it with :meth:`aclose` or use
    the directory as an async context manager.
    """

    config: DirectoryConfig = field(default_factory=get_directory_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> HttpUserDirectory:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    def _get_client(self) -> ResilientClient:
        # One client per directory so every batch shares its limiter and pool.
        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        return self._client

    async def query_by_phone_batch(
        self,
        phones: Sequence[str],
        max_batch_size: int,
    ) -> list[DirectoryUserRecord]:
        values = stored_phone_formats(phones)
        if not values:
            return []

        records: dict[str, DirectoryUserRecord] = {}
        client = self._get_client()
        for chunk in batched(values, max_batch_size):
            for record in await self._query(client, chunk):
                records.setdefault(record.user_id, record)
        return list(records.values())

    async def _query(
        self,
        client: ResilientClient,
        values: Sequence[str],
    ) -> list[DirectoryUserRecord]:
        body = QueryRequest(
            collection=self.config.collection,
            field=self.config.phone_field,
            values=list(values),
        )
        response = await client.post(
            f"{self.config.base_url}{QUERY_PATH}",
            json=body.model_dump(exclude_none=True),
            headers={"Authorization": f"Bearer {self.config.api_key}"},
        )
        payload = self._decode(response)
        try:
            parsed = QueryResponse.model_validate(payload)
        except ValidationError as exc:
            raise DirectoryAPIError(
                "Unexpected directory response payload", status_code=response.status_code
            ) from exc

        records: list[DirectoryUserRecord] = []
        for document in parsed.documents:
            records.append(parse_user_record(document))
        log.debug("Directory returned %s users for %s values", len(records), len(values))
        return records

    def _decode(self, response: httpx.Response) -> object:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict) and "error" in payload:
            try:
                error_payload = ErrorResponse.model_validate(payload)
            except ValidationError:
                error_payload = None
            if error_payload is not None:
                log.error(
                    f"Directory API error {error_payload.error.code}: {error_payload.error.message}"
                )
                raise DirectoryAPIError(
                    error_payload.error.message, status_code=response.status_code
                )

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DirectoryAPIError(
                f"Directory query failed with HTTP {response.status_code}",
                status_code=response.status_code,
            ) from exc

        if payload is None:
            raise DirectoryAPIError(
                "Directory response was not JSON", status_code=response.status_code
            )
        return payload


if TYPE_CHECKING:
    _directory_check: UserDirectory = HttpUserDirectory()
