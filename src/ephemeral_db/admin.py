from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from .bridge import block_on
from .connection import aconnect
from .identity import quote_ident

logger = logging.getLogger(__name__)

TERMINATE_BACKENDS_SQL = text(
    "SELECT pg_terminate_backend(pid) FROM pg_stat_activity "
    "WHERE pid <> pg_backend_pid() AND datname = :name"
)
COUNT_BACKENDS_SQL = text(
    "SELECT count(*) FROM pg_stat_activity WHERE pid <> pg_backend_pid() AND datname = :name"
)
DATABASE_EXISTS_SQL = text("SELECT 1 FROM pg_database WHERE datname = :name")


async def create_database(conn: AsyncConnection, name: str) -> None:
    await conn.execute(text(f"CREATE DATABASE {quote_ident(name)}"))


async def terminate_backends(conn: AsyncConnection, name: str) -> int:
    """Kill every session on ``name`` except our own; returns how many were signalled."""
    result = await conn.execute(TERMINATE_BACKENDS_SQL, {"name": name})
    terminated = len(result.fetchall())
    if terminated:
        logger.info("Terminated %d backend(s) connected to %s", terminated, name)
    return terminated


async def drop_database(conn: AsyncConnection, name: str) -> None:
    await conn.execute(text(f"DROP DATABASE {quote_ident(name)}"))


async def adatabase_exists(admin_url: str, name: str, *, connect_timeout: Optional[float] = None) -> bool:
    async with aconnect(admin_url, autocommit=True, connect_timeout=connect_timeout) as conn:
        result = await conn.execute(DATABASE_EXISTS_SQL, {"name": name})
        return result.scalar() is not None


async def acount_backends(admin_url: str, name: str, *, connect_timeout: Optional[float] = None) -> int:
    async with aconnect(admin_url, autocommit=True, connect_timeout=connect_timeout) as conn:
        result = await conn.execute(COUNT_BACKENDS_SQL, {"name": name})
        return int(result.scalar_one())


def database_exists(admin_url: str, name: str, *, connect_timeout: Optional[float] = None) -> bool:
    return block_on(lambda: adatabase_exists(admin_url, name, connect_timeout=connect_timeout))


def count_backends(admin_url: str, name: str, *, connect_timeout: Optional[float] = None) -> int:
    return block_on(lambda: acount_backends(admin_url, name, connect_timeout=connect_timeout))
