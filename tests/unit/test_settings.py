"""Unit tests for ephemeral_db.settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ephemeral_db import EphemeralDBSettings, get_ephemeral_db_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for key in ("HOST", "PORT", "USER", "PASSWORD", "MAINTENANCE_DATABASE", "POOL_SIZE"):
        monkeypatch.delenv(f"EPHEMERAL_DB_{key}", raising=False)
    # keep a developer's .env out of these tests
    monkeypatch.chdir(tmp_path)
    get_ephemeral_db_settings.cache_clear()
    yield
    get_ephemeral_db_settings.cache_clear()


class TestDefaults:
    def test_defaults(self):
        s = EphemeralDBSettings()
        assert s.host == "localhost"
        assert s.port == 5432
        assert s.password == ""
        assert s.maintenance_database is None
        assert s.name_prefix == "test_"
        assert s.driver == "asyncpg"

    def test_port_range_validated(self):
        with pytest.raises(ValidationError):
            EphemeralDBSettings(port=0)


class TestEnv:
    def test_reads_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("EPHEMERAL_DB_HOST", "db.ci")
        monkeypatch.setenv("EPHEMERAL_DB_PORT", "15432")
        monkeypatch.setenv("EPHEMERAL_DB_MAINTENANCE_DATABASE", "postgres")
        s = EphemeralDBSettings()
        assert s.host == "db.ci"
        assert s.port == 15432
        assert s.maintenance_database == "postgres"

    def test_reads_dotenv(self, tmp_path):
        (tmp_path / ".env").write_text("EPHEMERAL_DB_USER=fromfile\n")
        assert EphemeralDBSettings().user == "fromfile"


class TestCachedAccessor:
    def test_is_cached(self):
        assert get_ephemeral_db_settings() is get_ephemeral_db_settings()

    def test_none_kwargs_fall_back_to_defaults(self):
        s = get_ephemeral_db_settings(host=None, pool_size=2)
        assert s.host == "localhost"
        assert s.pool_size == 2
