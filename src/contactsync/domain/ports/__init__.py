"""Domain port definitions for adapters."""

from __future__ import annotations

from .contacts import DeviceContactSource, RawDeviceContact
from .directory import UserDirectory
from .persistence import SnapshotStore

__all__ = [
    "DeviceContactSource",
    "RawDeviceContact",
    "SnapshotStore",
    "UserDirectory",
]
