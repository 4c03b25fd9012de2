"""Pydantic models describing the user directory query payloads."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Literal, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class DirectoryBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class UserPayload(DirectoryBaseModel):
    """A stored user document. Only the document id is guaranteed."""

    phone: str | None = None
    username: str | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    email: str | None = None
    profile_picture: str | None = Field(default=None, alias="profilePicture")
    is_online: bool = Field(default=False, alias="isOnline")
    last_seen: float | None = Field(default=None, alias="lastSeen")

    _normalize_blanks = field_validator(
        "phone", "username", "first_name", "last_name", "email", "profile_picture", mode="before"
    )(_blank_to_none)

    @field_validator("phone", mode="before")
    @classmethod
    def _coerce_phone(cls, value: object) -> object:
        # Some clients persisted the number as an integer.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("is_online", mode="before")
    @classmethod
    def _null_is_offline(cls, value: object) -> object:
        return False if value is None else value

    @field_validator("last_seen", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: object) -> object:
        """Accept epoch seconds, ISO-8601 strings or ``{"seconds": ..}`` objects."""

        if value is None or isinstance(value, int | float):
            return value
        if isinstance(value, Mapping):
            mapping_value = cast(Mapping[str, object], value)
            seconds = mapping_value.get("seconds", mapping_value.get("_seconds"))
            nanos = mapping_value.get("nanoseconds", mapping_value.get("_nanoseconds", 0))
            if isinstance(seconds, int | float) and isinstance(nanos, int | float):
                return float(seconds) + float(nanos) / 1e9
            return None
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return None
            if stripped.endswith("Z"):
                stripped = stripped[:-1] + "+00:00"
            return datetime.fromisoformat(stripped).timestamp()
        return value


class UserDocument(DirectoryBaseModel):
    id: str
    data: UserPayload = Field(default_factory=UserPayload)


class QueryRequest(DirectoryBaseModel):
    collection: str
    field: str
    op: Literal["in"] = "in"
    values: list[str]


class QueryResponse(DirectoryBaseModel):
    documents: list[UserDocument] = Field(default_factory=list)


class ErrorDetail(DirectoryBaseModel):
    code: int
    message: str


class ErrorResponse(DirectoryBaseModel):
    error: ErrorDetail
