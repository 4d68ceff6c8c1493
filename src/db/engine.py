"""Async database engine, session factory, and lifespan management.

Uses SQLAlchemy 2.0 async with asyncpg driver for PostgreSQL. The engine
(and its bounded connection pool) is built once at application startup
and handed to request handlers through ``app.state``.
"""

from __future__ import annotations

import contextlib
import logging
import ssl
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.config import Settings

logger = logging.getLogger(__name__)


# ── Engine and session factory ───────────────────────────────────────


def _connect_args(settings: Settings) -> dict[str, Any]:
    """asyncpg connect() keyword arguments."""
    args: dict[str, Any] = {"timeout": settings.db.db_connection_timeout}
    if settings.db.use_ssl:
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        args["ssl"] = context
    return args


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine with a fixed-size pool."""
    return create_async_engine(
        settings.db.async_url,
        echo=settings.log_level == "DEBUG",
        pool_size=settings.db.db_pool_size,
        max_overflow=0,
        pool_timeout=settings.db.db_connection_timeout,
        pool_recycle=settings.db.db_idle_timeout,
        pool_pre_ping=True,
        connect_args=_connect_args(settings),
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI — yields an async DB session.

    The whole request runs in one transaction: committed on success,
    rolled back if the handler raises.

    Usage:
        @router.get("/example")
        async def handler(db: AsyncSession = Depends(get_session)):
            ...
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ── Lifespan helpers ─────────────────────────────────────────────────


async def init_db(engine: AsyncEngine, settings: Settings) -> None:
    """Verify connectivity and, outside production, create missing tables.

    In production, tables are created via Alembic migrations.
    """
    # Import here to ensure all models are registered with Base.metadata
    from src.models import Base

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if not settings.is_production:
                await conn.run_sync(Base.metadata.create_all)
    except Exception:
        logger.exception("Database connection failed")
        raise
    logger.info("Database connected")


@contextlib.asynccontextmanager
async def db_lifespan(settings: Settings) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Context manager for database lifecycle.

    Usage in FastAPI lifespan:
        @asynccontextmanager
        async def lifespan(app: FastAPI):
            async with db_lifespan(settings) as session_factory:
                app.state.session_factory = session_factory
                yield
    """
    engine = build_engine(settings)
    try:
        await init_db(engine, settings)
        yield build_session_factory(engine)
    finally:
        await engine.dispose()
        logger.info("Database engine disposed")
