from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path

import pytest

from contactsync.config import (
    ConfigurationError,
    MissingConfigurationError,
    SyncConfig,
    get_database_config,
    get_storage_config,
    get_sync_config,
    require_env_vars,
)
from contactsync.config.logging import resolve_log_level


def test_require_env_vars_reports_all_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRESENT_VAR", "value")
    monkeypatch.setenv("BLANK_VAR", "   ")
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["PRESENT_VAR", "BLANK_VAR", "MISSING_VAR"])

    assert "BLANK_VAR, MISSING_VAR" in str(exc.value)
    assert require_env_vars(["PRESENT_VAR"]) == {"PRESENT_VAR": "value"}


def test_sync_config_defaults() -> None:
    config = get_sync_config()

    assert config.default_country_code == "973"
    assert config.staleness == timedelta(minutes=5)
    assert config.directory_batch_size == 10


def test_sync_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTACTSYNC_DEFAULT_COUNTRY_CODE", "+966")
    monkeypatch.setenv("CONTACTSYNC_STALENESS_SECONDS", "30")
    monkeypatch.setenv("CONTACTSYNC_DIRECTORY_BATCH_SIZE", "25")

    config = get_sync_config()

    assert config.default_country_code == "966"
    assert config.staleness_seconds == 30.0
    assert config.directory_batch_size == 25


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("CONTACTSYNC_DEFAULT_COUNTRY_CODE", "BH"),
        ("CONTACTSYNC_STALENESS_SECONDS", "soon"),
        ("CONTACTSYNC_STALENESS_SECONDS", "-1"),
        ("CONTACTSYNC_DIRECTORY_BATCH_SIZE", "0"),
        ("CONTACTSYNC_DIRECTORY_BATCH_SIZE", "2.5"),
    ],
)
def test_sync_config_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        get_sync_config()


def test_sync_config_validates_direct_construction() -> None:
    with pytest.raises(ConfigurationError):
        SyncConfig(directory_batch_size=0)


def test_storage_config_uses_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CONTACTSYNC_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("CONTACTSYNC_SNAPSHOT_KEY", "phone_cache")
    monkeypatch.delenv("DATABASE_URI", raising=False)

    storage = get_storage_config()
    database = get_database_config(storage=storage)

    assert storage.snapshot_key == "phone_cache"
    assert database.uri == f"sqlite+pysqlite:///{(tmp_path / 'data').resolve() / 'contactsync.db'}"
    assert (tmp_path / "data").is_dir()


def test_database_uri_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://db/contacts")

    assert get_database_config().uri == "postgresql+psycopg://db/contacts"


def test_default_data_dir_follows_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    storage = get_storage_config()

    assert storage.resolve_data_dir() == (tmp_path / "contactsync").resolve()
    assert Path(storage.database_filename).name == "contactsync.db"


def test_log_level_resolution(monkeypatch: pytest.MonkeyPatch) -> None:
    assert resolve_log_level() == logging.INFO
    assert resolve_log_level("debug") == logging.DEBUG

    monkeypatch.setenv("CONTACTSYNC_LOG_LEVEL", "warning")
    assert resolve_log_level() == logging.WARNING

    with pytest.raises(ConfigurationError):
        resolve_log_level("chatty")


def test_snapshot_key_must_fit_the_key_column(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTACTSYNC_SNAPSHOT_KEY", "k" * 129)

    with pytest.raises(ConfigurationError):
        get_storage_config()
