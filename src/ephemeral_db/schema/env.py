from __future__ import annotations

import asyncio

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import engine_from_config
from sqlalchemy.engine.url import make_url

from ephemeral_db.base import Base
import ephemeral_db.examples.models  # noqa: F401  (registers the sample tables)

config = context.config

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online_async(url: str) -> None:
    from sqlalchemy.ext.asyncio import create_async_engine

    connectable = create_async_engine(url, poolclass=pool.NullPool, future=True)
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


def run_migrations_online() -> None:
    # A caller-owned connection (the lifecycle manager passes one) wins.
    connection = config.attributes.get("connection")
    if connection is not None:
        do_run_migrations(connection)
        return

    url = config.get_main_option("sqlalchemy.url") or ""
    if make_url(url).get_dialect().is_async:
        asyncio.run(run_migrations_online_async(url))
        return

    connectable = engine_from_config(
        config.get_section(config.config_ini_section) or {"sqlalchemy.url": url},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        future=True,
    )
    with connectable.connect() as connection:
        do_run_migrations(connection)
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
