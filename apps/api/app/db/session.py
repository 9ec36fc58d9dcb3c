"""Database engine and session management."""
from __future__ import annotations

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from starlette.requests import HTTPConnection

from ..core.config import Settings
from ..models.base import Base

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database."""

    url = settings.database_async_url
    connect_args: dict[str, object] = {}
    options: dict[str, object] = {"echo": settings.database_echo, "pool_pre_ping": True}

    if url.startswith("sqlite"):
        # In-memory SQLite only survives on a single shared connection.
        connect_args["check_same_thread"] = False
        options["poolclass"] = StaticPool
    elif settings.database_ssl_required:
        connect_args["ssl"] = True

    return create_async_engine(url, connect_args=connect_args, **options)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the database schema if it does not already exist."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")


async def get_session(connection: HTTPConnection) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency to provide an async session from the app's session factory."""

    session_factory: async_sessionmaker[AsyncSession] = connection.app.state.session_factory
    async with session_factory() as session:
        yield session
