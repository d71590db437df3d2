"""
Root conftest.py for ephemeral-db tests.

This file provides:
1. Pytest markers for test categorization
2. A fake server that stands in for the administrative/operational SQL calls
   so the lifecycle state machine can be tested without PostgreSQL

Fixtures are organized by category:
- Settings fixtures
- Fake server fixtures
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

import pytest

from ephemeral_db import DatabaseConnectionError, EphemeralDBSettings


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    # Ensure custom markers are registered even if pyproject.toml isn't picked up in some contexts
    for name, desc in [
        ("integration", "Requires a reachable PostgreSQL server (EPHEMERAL_DB_HOST)"),
    ]:
        config.addinivalue_line("markers", f"{name}: {desc}")


# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture
def settings() -> EphemeralDBSettings:
    """Explicit settings so unit tests never depend on EPHEMERAL_DB_* in the environment."""
    return EphemeralDBSettings(
        host="localhost",
        port=5432,
        user="testuser",
        password="secret",
        maintenance_database=None,
        name_prefix="test_",
        connect_timeout=2.0,
        pool_size=3,
        max_overflow=2,
        pool_timeout=7.0,
    )


# =============================================================================
# FAKE SERVER
# =============================================================================


class FakeServer:
    """Records every SQL-level step the lifecycle manager takes.

    ``fail`` maps a step name ("connect", "create", "migrate", "terminate",
    "drop") to a callable returning the exception to raise, or a predicate
    on the URL for "connect".
    """

    def __init__(self):
        self.calls: list[tuple[Any, ...]] = []
        self.fail: dict[str, Callable[..., Optional[BaseException]]] = {}

    def _maybe_fail(self, step: str, *args: Any) -> None:
        factory = self.fail.get(step)
        if factory is None:
            return
        exc = factory(*args)
        if exc is not None:
            raise exc

    def steps(self) -> list[str]:
        return [c[0] for c in self.calls]

    @asynccontextmanager
    async def aconnect(self, url, *, autocommit=False, connect_timeout=None, driver="asyncpg"):
        self.calls.append(("connect", url, autocommit))
        factory = self.fail.get("connect")
        if factory is not None and factory(url):
            raise DatabaseConnectionError(url, "connection refused")
        yield object()

    async def create_database(self, conn, name):
        self.calls.append(("create", name))
        self._maybe_fail("create", name)

    async def arun_migrations(self, conn, migrations=None):
        self.calls.append(("migrate", migrations))
        self._maybe_fail("migrate")

    async def terminate_backends(self, conn, name):
        self.calls.append(("terminate", name))
        self._maybe_fail("terminate", name)
        return 0

    async def drop_database(self, conn, name):
        self.calls.append(("drop", name))
        self._maybe_fail("drop", name)


@pytest.fixture
def fake_server(monkeypatch) -> FakeServer:
    """Patch the lifecycle module's SQL collaborators with a FakeServer."""
    import ephemeral_db.lifecycle as lifecycle

    server = FakeServer()
    monkeypatch.setattr(lifecycle, "aconnect", server.aconnect)
    monkeypatch.setattr(lifecycle, "create_database", server.create_database)
    monkeypatch.setattr(lifecycle, "arun_migrations", server.arun_migrations)
    monkeypatch.setattr(lifecycle, "terminate_backends", server.terminate_backends)
    monkeypatch.setattr(lifecycle, "drop_database", server.drop_database)
    return server
