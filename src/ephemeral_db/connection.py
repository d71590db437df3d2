from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from asyncpg.exceptions import PostgresError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from .exceptions import DatabaseConnectionError
from .urls import DEFAULT_DRIVER, mask_url, to_driver_url

logger = logging.getLogger(__name__)


def _make_engine(url: str, *, autocommit: bool, connect_timeout: Optional[float], driver: str) -> AsyncEngine:
    engine_kwargs: dict[str, Any] = {"poolclass": NullPool, "future": True}
    if autocommit:
        # CREATE/DROP DATABASE cannot run inside a transaction block
        engine_kwargs["execution_options"] = {"isolation_level": "AUTOCOMMIT"}
    if connect_timeout is not None:
        engine_kwargs["connect_args"] = {"timeout": connect_timeout}
    return create_async_engine(to_driver_url(url, driver), **engine_kwargs)


@asynccontextmanager
async def aconnect(
    url: str,
    *,
    autocommit: bool = False,
    connect_timeout: Optional[float] = None,
    driver: str = DEFAULT_DRIVER,
) -> AsyncIterator[AsyncConnection]:
    """
    Open one direct (non-pooled) connection to ``url``.

    Fails fast: any error while establishing the connection is raised as
    DatabaseConnectionError, with no retry. The backing engine is disposed
    when the block exits.
    """
    safe_url = mask_url(url)
    engine: Optional[AsyncEngine] = None
    try:
        engine = _make_engine(url, autocommit=autocommit, connect_timeout=connect_timeout, driver=driver)
        conn = await engine.connect()
    except (SQLAlchemyError, PostgresError, OSError, asyncio.TimeoutError) as exc:
        if engine is not None:
            await engine.dispose()
        logger.error("Error connecting to %s: %s", safe_url, exc)
        raise DatabaseConnectionError(safe_url, str(exc) or type(exc).__name__) from exc

    logger.debug("Connected to %s (autocommit=%s)", safe_url, autocommit)
    try:
        yield conn
    finally:
        try:
            await conn.close()
        finally:
            await engine.dispose()
