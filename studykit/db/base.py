"""Declarative base and engine construction.

The engine and session factory are owned by whoever calls init_db(); the
FastAPI lifespan keeps them on app.state and services receive the factory
through their constructors.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from studykit.core.config import get_settings


class Base(DeclarativeBase):
    pass


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(url: str | None = None) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create the engine, create missing tables and return (engine, session_factory)."""
    settings = get_settings()
    engine = create_async_engine(url or settings.database_url, echo=settings.debug, pool_pre_ping=True)

    # Models register themselves on Base.metadata at import
    import studykit.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return engine, make_session_factory(engine)


async def close_db(engine: AsyncEngine) -> None:
    """Dispose of the engine and release all connections."""
    await engine.dispose()
