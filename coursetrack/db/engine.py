"""Async SQLAlchemy storage client.

``Database`` owns one engine and its session factory.  The application
lifespan constructs it, calls ``open()`` on startup and ``close()`` on
shutdown, and hands it to request handlers through ``app.state``; nothing
in the package holds an engine at module level.

Every request that touches PostgreSQL runs inside ``transaction()``, so a
progress upsert and the enrollment recompute that follows it commit or
roll back together.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from coursetrack.core.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all table models."""


class Database:
    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
    ) -> None:
        self._url = url
        self._echo = echo
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Database | None:
        if not settings.database_url:
            return None
        return cls(settings.database_url, echo=settings.is_dev)

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        if self._engine is not None:
            return
        self._engine = create_async_engine(
            self._url,
            echo=self._echo,
            pool_size=self._pool_size,
            max_overflow=self._max_overflow,
            pool_pre_ping=True,
        )
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database engine created: %s", self._engine.url)

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine disposed")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Yield a session inside BEGIN ... COMMIT (ROLLBACK on exception)."""
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        async with self._session_factory() as session:
            async with session.begin():
                yield session

    async def ping(self) -> None:
        if self._engine is None:
            raise RuntimeError("Database is not open")
        async with self._engine.connect() as conn:
            await conn.execute(text("SELECT 1"))


@asynccontextmanager
async def lifespan_db(settings: Settings) -> AsyncIterator[Database | None]:
    """Open the configured database for the lifetime of the app.

    Yields None when DATABASE_URL is unset; callers then fall back to the
    in-memory repositories.
    """
    database = Database.from_settings(settings)
    if database is None:
        logger.info("No DATABASE_URL configured, using in-memory repositories")
        yield None
        return

    await database.open()
    try:
        yield database
    finally:
        await database.close()
