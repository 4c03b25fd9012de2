"""Public interface for the user directory adapter."""

from __future__ import annotations

from .client import DirectoryAPIError, HttpUserDirectory, stored_phone_formats
from .schema import QueryRequest, QueryResponse, UserDocument, UserPayload
from .translator import parse_user_record

__all__ = [
    "DirectoryAPIError",
    "HttpUserDirectory",
    "QueryRequest",
    "QueryResponse",
    "UserDocument",
    "UserPayload",
    "parse_user_record",
    "stored_phone_formats",
]
