"""Shared logging helpers for contactsync."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import ConfigurationError

LOG_LEVEL_ENV = "CONTACTSYNC_LOG_LEVEL"


def resolve_log_level(level: int | str | None = None) -> int:
    """Translate a level name (or the ``CONTACTSYNC_LOG_LEVEL`` override) into an int."""

    candidate = level if level is not None else optional_env_var(LOG_LEVEL_ENV)
    if candidate is None:
        return logging.INFO
    if isinstance(candidate, int):
        return candidate
    resolved = logging.getLevelNamesMapping().get(candidate.strip().upper())
    if resolved is None:
        raise ConfigurationError(f"Unknown log level: {candidate}")
    return resolved


def configure_logging(*, level: int | str | None = None, force: bool = False) -> None:
    """Initialise the root logger once with a terse CLI format.

    ``level`` accepts an int or a level name; when omitted the
    ``CONTACTSYNC_LOG_LEVEL`` environment variable is consulted before falling
    back to INFO. Pass ``force=True`` to reconfigure during tests.
    """

    logging.basicConfig(
        level=resolve_log_level(level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
