"""Reconciliation defaults: country code, cache staleness and directory fan-out."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import env_float, env_int, optional_env_var
from .errors import ConfigurationError

DEFAULT_COUNTRY_CODE = "973"
DEFAULT_STALENESS_SECONDS = 5 * 60.0
DEFAULT_DIRECTORY_BATCH_SIZE = 10


@dataclass(frozen=True, slots=True)
class SyncConfig:
    default_country_code: str = DEFAULT_COUNTRY_CODE
    staleness_seconds: float = DEFAULT_STALENESS_SECONDS
    directory_batch_size: int = DEFAULT_DIRECTORY_BATCH_SIZE

    def __post_init__(self) -> None:
        if not self.default_country_code.isdigit():
            raise ConfigurationError(
                f"Default country code must be digits only, got {self.default_country_code!r}"
            )
        if self.directory_batch_size < 1:
            raise ConfigurationError("Directory batch size must be positive")
        if self.staleness_seconds < 0:
            raise ConfigurationError("Staleness threshold must be non-negative")

    @property
    def staleness(self) -> timedelta:
        return timedelta(seconds=self.staleness_seconds)


def get_sync_config() -> SyncConfig:
    country_code = optional_env_var("CONTACTSYNC_DEFAULT_COUNTRY_CODE")
    return SyncConfig(
        default_country_code=(country_code or DEFAULT_COUNTRY_CODE).lstrip("+"),
        staleness_seconds=env_float("CONTACTSYNC_STALENESS_SECONDS", DEFAULT_STALENESS_SECONDS),
        directory_batch_size=env_int(
            "CONTACTSYNC_DIRECTORY_BATCH_SIZE", DEFAULT_DIRECTORY_BATCH_SIZE
        ),
    )
