"""User directory service configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

DIRECTORY_TIMEOUT_SECONDS = 10.0
DEFAULT_COLLECTION = "users"
DEFAULT_PHONE_FIELD = "phone"


@dataclass(frozen=True)
class DirectoryConfig:
    """Holds user directory API configuration values."""

    base_url: str
    api_key: str
    resilience: ResilienceConfig
    collection: str = DEFAULT_COLLECTION
    phone_field: str = DEFAULT_PHONE_FIELD


def get_directory_config(*, resilience: ResilienceConfig | None = None) -> DirectoryConfig:
    values = require_env_vars(("CONTACTSYNC_DIRECTORY_URL", "CONTACTSYNC_DIRECTORY_API_KEY"))
    base_url = values["CONTACTSYNC_DIRECTORY_URL"].rstrip("/")
    return DirectoryConfig(
        base_url=base_url,
        api_key=values["CONTACTSYNC_DIRECTORY_API_KEY"],
        collection=optional_env_var("CONTACTSYNC_DIRECTORY_COLLECTION") or DEFAULT_COLLECTION,
        phone_field=optional_env_var("CONTACTSYNC_DIRECTORY_PHONE_FIELD") or DEFAULT_PHONE_FIELD,
        resilience=resilience
        or ResilienceConfig(
            name="directory",
            base_url=base_url,
            timeout_seconds=DIRECTORY_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        ),
    )
