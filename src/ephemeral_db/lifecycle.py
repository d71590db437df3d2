from __future__ import annotations

import logging
import warnings
from contextlib import contextmanager
from enum import StrEnum
from typing import Any, Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError

from .admin import create_database, drop_database, terminate_backends
from .bridge import block_on
from .connection import aconnect
from .exceptions import (
    DatabaseConnectionError,
    DatabaseCreationError,
    DatabaseDisposedError,
    EphemeralDBError,
    TeardownError,
)
from .identity import generate_database_name
from .logging import database_logger
from .migrations import MigrationSet, arun_migrations, default_migrations
from .pool import ConnectionPool
from .settings import EphemeralDBSettings, get_ephemeral_db_settings
from .urls import build_database_url, build_server_url, mask_url, to_driver_url

logger = logging.getLogger(__name__)


class DatabaseState(StrEnum):
    UNINITIALIZED = "uninitialized"
    NAMED = "named"
    CREATED = "created"
    MIGRATED = "migrated"
    READY = "ready"
    TORN_DOWN = "torn_down"


class EphemeralDatabase:
    """
    A uniquely named, fully migrated database that lives for one test scope.

    Construction blocks until the database exists and every migration has
    been applied; ``close()`` blocks until every other session on it has been
    terminated and the database has been dropped. Both run their driver calls
    on a private event loop (see ``block_on``), so they are safe to call from
    synchronous tests and from inside running event loops.

    Example:
        with EphemeralDatabase("localhost", 5432, "testuser", "secret") as db:
            pool = db.pool()
            ...

    ``close()`` runs exactly once; calling it again raises DatabaseDisposedError.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str = "",
        *,
        migrations: Optional[MigrationSet] = None,
        settings: Optional[EphemeralDBSettings] = None,
    ):
        self._settings = settings or get_ephemeral_db_settings()
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._migrations = migrations or default_migrations()
        self._state = DatabaseState.UNINITIALIZED

        self._name = generate_database_name(self._settings.name_prefix)
        self._state = DatabaseState.NAMED
        self._log = database_logger(logger, self._name)

        block_on(self._aprovision)
        self._state = DatabaseState.READY
        self._log.info(
            "Test database %s ready on %s",
            self._name,
            mask_url(self.server_url),
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[EphemeralDBSettings] = None,
        *,
        migrations: Optional[MigrationSet] = None,
    ) -> "EphemeralDatabase":
        settings = settings or get_ephemeral_db_settings()
        return cls(
            settings.host,
            settings.port,
            settings.user,
            settings.password,
            migrations=migrations,
            settings=settings,
        )

    # ------------------------------------------------------------------ coordinates

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def user(self) -> str:
        return self._user

    @property
    def password(self) -> str:
        return self._password

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> DatabaseState:
        return self._state

    @property
    def migrations(self) -> MigrationSet:
        return self._migrations

    @property
    def server_url(self) -> str:
        return build_server_url(
            self._host, self._port, self._user, self._password, scheme=self._settings.scheme
        )

    @property
    def url(self) -> str:
        return build_database_url(
            self._host, self._port, self._user, self._password, self._name, scheme=self._settings.scheme
        )

    @property
    def admin_url(self) -> str:
        """Endpoint for CREATE/DROP: the bare server, or the configured maintenance database."""
        maintenance = self._settings.maintenance_database
        if not maintenance:
            return self.server_url
        return build_database_url(
            self._host, self._port, self._user, self._password, maintenance, scheme=self._settings.scheme
        )

    @property
    def async_url(self) -> str:
        return to_driver_url(self.url, self._settings.driver)

    # ------------------------------------------------------------------ lifecycle

    def _connect(self, url: str, *, autocommit: bool = False):
        return aconnect(
            url,
            autocommit=autocommit,
            connect_timeout=self._settings.connect_timeout,
            driver=self._settings.driver,
        )

    async def _aprovision(self) -> None:
        async with self._connect(self.admin_url, autocommit=True) as conn:
            try:
                await create_database(conn, self._name)
            except SQLAlchemyError as exc:
                self._log.error("CREATE DATABASE %s failed: %s", self._name, exc)
                raise DatabaseCreationError(self._name) from exc
        self._state = DatabaseState.CREATED
        self._log.info("Created database %s", self._name)

        try:
            async with self._connect(self.url) as conn:
                await arun_migrations(conn, self._migrations)
        except EphemeralDBError as exc:
            self._log.error("Provisioning of %s failed after creation; dropping it", self._name)
            try:
                await self._adrop()
            except TeardownError as drop_exc:
                self._log.exception("Could not drop half-provisioned database %s", self._name)
                exc.add_note(f"database {self._name!r} was left on the server: {drop_exc}")
            raise
        self._state = DatabaseState.MIGRATED

    async def _adrop(self) -> None:
        step = "connect"
        try:
            async with self._connect(self.admin_url, autocommit=True) as conn:
                step = "terminate backends"
                await terminate_backends(conn, self._name)
                step = "drop database"
                await drop_database(conn, self._name)
        except (DatabaseConnectionError, SQLAlchemyError) as exc:
            self._log.error("Teardown of %s failed at %s: %s", self._name, step, exc)
            raise TeardownError(self._name, step) from exc
        self._state = DatabaseState.TORN_DOWN
        self._log.info("Dropped database %s", self._name)

    def _ensure_ready(self) -> None:
        if self._state is not DatabaseState.READY:
            raise DatabaseDisposedError(f"Test database {self._name!r} is {self._state}, not ready")

    def pool(self, **overrides: Any) -> ConnectionPool:
        """Build a new bounded connection pool on this database."""
        self._ensure_ready()
        return ConnectionPool(self.url, self._settings, **overrides)

    def close(self) -> None:
        """Terminate lingering sessions and drop the database. Runs once."""
        self._ensure_ready()
        block_on(self._adrop)

    def __enter__(self) -> "EphemeralDatabase":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self._log.error(
                "Leaving scope of test database %s with %s: %s", self._name, exc_type.__name__, exc
            )
        self.close()

    def __del__(self, _warn=warnings.warn) -> None:
        if getattr(self, "_state", None) is DatabaseState.READY:
            _warn(f"unclosed {self!r}; test database leaked on the server", ResourceWarning, source=self)

    def __repr__(self) -> str:
        return f"<EphemeralDatabase name={self._name!r} state={self._state}>"


@contextmanager
def ephemeral_database(
    settings: Optional[EphemeralDBSettings] = None,
    *,
    migrations: Optional[MigrationSet] = None,
) -> Iterator[EphemeralDatabase]:
    db = EphemeralDatabase.from_settings(settings, migrations=migrations)
    try:
        yield db
    finally:
        db.close()


__all__ = ["DatabaseState", "EphemeralDatabase", "ephemeral_database"]
