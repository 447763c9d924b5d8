"""
Database engine and per-request sessions.

The engine is created once at import from the process settings and disposed
by the application lifespan. Every HTTP request gets its own session from
`get_async_session`.
"""
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import Settings, get_settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the asyncpg-backed engine described by `settings`."""
    return create_async_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


engine = build_engine(get_settings())

# Rows returned by the store are read after commit, so keep them loaded
async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    Yield the session for one MCP request.

    Store calls only flush. The request commits here once the response has
    been produced, and any exception raised while handling it rolls back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
