from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .exceptions import PoolConfigurationError
from .settings import EphemeralDBSettings, get_ephemeral_db_settings
from .urls import mask_url, to_driver_url

logger = logging.getLogger(__name__)


class ConnectionPool:
    """Bounded pool of connections to one database, with a session factory.

    Acquiring from an exhausted pool waits up to ``pool_timeout`` seconds
    before raising. Engine options can be overridden per pool, e.g.
    ``ConnectionPool(url, pool_size=1, max_overflow=0)``.
    """

    def __init__(self, url: str, settings: Optional[EphemeralDBSettings] = None, **overrides: Any):
        settings = settings or get_ephemeral_db_settings()
        engine_kwargs: dict[str, Any] = {
            "echo": settings.echo,
            "future": True,
            "pool_pre_ping": True,
            "pool_size": settings.pool_size,
            "max_overflow": settings.max_overflow,
            "pool_timeout": settings.pool_timeout,
            "pool_recycle": settings.pool_recycle or 1800,
        }
        engine_kwargs.update(overrides)

        driver_url = to_driver_url(url, settings.driver)
        if driver_url.startswith("postgresql+asyncpg://"):
            connect_args = engine_kwargs.setdefault("connect_args", {})
            connect_args.setdefault("statement_cache_size", settings.statement_cache_size)
            connect_args.setdefault("timeout", settings.connect_timeout)

        try:
            self._engine: AsyncEngine = create_async_engine(driver_url, **engine_kwargs)
        except (ArgumentError, ImportError, TypeError, ValueError) as exc:
            raise PoolConfigurationError(f"Failed to create pool for {mask_url(url)}: {exc}") from exc

        self._session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self._engine, expire_on_commit=False
        )
        logger.debug(
            "Pool created: url=%s pool_size=%s max_overflow=%s pool_timeout=%s",
            mask_url(self._engine.url),
            engine_kwargs["pool_size"],
            engine_kwargs["max_overflow"],
            engine_kwargs["pool_timeout"],
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[AsyncConnection]:
        async with self._engine.connect() as conn:
            yield conn

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        sess = self._session_factory()
        try:
            yield sess
        finally:
            await sess.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        async with self.session() as sess:
            async with sess.begin():
                yield sess

    async def dispose(self) -> None:
        await self._engine.dispose()
