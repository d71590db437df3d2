from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncConnection

from .exceptions import MigrationError

logger = logging.getLogger(__name__)

PACKAGED_SCRIPT_LOCATION = "ephemeral_db:schema"


@dataclass(frozen=True)
class MigrationSet:
    """
    An ordered, versioned set of reversible Alembic migrations.

    ``script_location`` is anything Alembic accepts: a filesystem path or a
    ``package:directory`` resource spec, which keeps the set importable from
    an installed wheel without touching the working directory.
    """

    script_location: str

    def config(self, connection: Optional[Connection] = None) -> Config:
        cfg = Config()
        cfg.set_main_option("script_location", self.script_location)
        cfg.attributes["configure_logger"] = False
        if connection is not None:
            cfg.attributes["connection"] = connection
        return cfg

    def script_directory(self) -> ScriptDirectory:
        return ScriptDirectory.from_config(self.config())

    def revisions(self) -> tuple[str, ...]:
        """Revision ids in application order (base -> head)."""
        walked = [script.revision for script in self.script_directory().walk_revisions()]
        return tuple(reversed(walked))

    def revert_all(self, connection: Connection) -> None:
        command.downgrade(self.config(connection), "base")

    def apply_all(self, connection: Connection) -> None:
        command.upgrade(self.config(connection), "head")


@lru_cache(maxsize=1)
def default_migrations() -> MigrationSet:
    return MigrationSet(PACKAGED_SCRIPT_LOCATION)


def run_migrations(connection: Connection, migrations: MigrationSet) -> None:
    # Revert first: a no-op on a fresh database, but guards against a reused
    # alembic_version table on a recycled database name.
    migrations.revert_all(connection)
    migrations.apply_all(connection)


async def arun_migrations(conn: AsyncConnection, migrations: Optional[MigrationSet] = None) -> None:
    """Revert then re-apply every migration inside a single transaction.

    Any failure aborts the whole run and surfaces as MigrationError chained to
    the underlying error; nothing is repaired.
    """
    migrations = migrations or default_migrations()
    try:
        async with conn.begin():
            await conn.run_sync(run_migrations, migrations)
    except Exception as exc:
        logger.error("Migrations from %s failed: %s", migrations.script_location, exc)
        raise MigrationError(f"Failed to apply migrations from {migrations.script_location}: {exc}") from exc
    logger.info("Applied migrations from %s", migrations.script_location)


__all__ = [
    "MigrationSet",
    "PACKAGED_SCRIPT_LOCATION",
    "arun_migrations",
    "default_migrations",
    "run_migrations",
]
