"""Where the reconciliation snapshot database lives."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var
from .errors import ConfigurationError

APP_DIR_NAME: Final[str] = "contactsync"
DEFAULT_DB_FILENAME: Final[str] = "contactsync.db"
DEFAULT_SNAPSHOT_KEY: Final[str] = "contacts_cache"
MAX_SNAPSHOT_KEY_LENGTH: Final[int] = 128


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Local data directory plus the row key the snapshot is stored under."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME
    snapshot_key: str = DEFAULT_SNAPSHOT_KEY

    def __post_init__(self) -> None:
        if not self.snapshot_key or len(self.snapshot_key) > MAX_SNAPSHOT_KEY_LENGTH:
            raise ConfigurationError(
                f"Snapshot key must be 1-{MAX_SNAPSHOT_KEY_LENGTH} characters long"
            )

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def database_path(self, *, ensure: bool = True) -> Path:
        data_dir = self.resolve_data_dir()
        if ensure:
            data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _platform_data_home() -> Path:
    if sys.platform == "win32":
        local_app_data = os.getenv("LOCALAPPDATA")
        return Path(local_app_data) if local_app_data else Path.home() / "AppData" / "Local"
    xdg_data_home = os.getenv("XDG_DATA_HOME")
    return Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    env_dir = optional_env_var("CONTACTSYNC_DATA_DIR")
    return StorageConfig(
        data_dir=Path(env_dir) if env_dir else _platform_data_home() / APP_DIR_NAME,
        snapshot_key=optional_env_var("CONTACTSYNC_SNAPSHOT_KEY") or DEFAULT_SNAPSHOT_KEY,
    )


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file in the data directory."""

    env_uri = optional_env_var("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())
