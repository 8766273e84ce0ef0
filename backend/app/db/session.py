"""Async Session Factory — engine/session helpers for use outside FastAPI.

Invariants:
    - Uses the same session settings as DatabaseSessionManager (expire_on_commit=False)
    - Meant for scripts and test fixtures; the API goes through get_db

Design Decisions:
    - create_schema uses Base.metadata.create_all: throwaway databases (SQLite in tests)
      skip alembic, production schemas only come from migrations
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)

from app.db.base import Base
import app.models  # noqa: F401  (populates Base.metadata)


def create_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, echo=False)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine."""
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
