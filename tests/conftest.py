"""Shared fixtures: aiosqlite databases carrying the catalog schema."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterator
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from src.db.engine import build_session_factory
from src.models import Base


def _sqlite_engine(url: str, **kwargs: Any) -> AsyncEngine:
    engine = create_async_engine(url, **kwargs)

    # sqlite drivers need an explicit BEGIN for SAVEPOINT support
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


async def _create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest_asyncio.fixture
async def sqlite_session() -> AsyncIterator[AsyncSession]:
    """One session over an in-memory database, as within a single request."""
    engine = _sqlite_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await _create_schema(engine)
    async with build_session_factory(engine)() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def sqlite_session_factory(tmp_path) -> Iterator[async_sessionmaker[AsyncSession]]:
    """File-backed database; every session opens its own connection."""
    engine = _sqlite_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}", poolclass=NullPool)
    asyncio.run(_create_schema(engine))
    yield build_session_factory(engine)
    asyncio.run(engine.dispose())
