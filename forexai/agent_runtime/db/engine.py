"""Async SQLAlchemy engine and session factory.

Uses psycopg3, which supports both sync (Alembic) and async (service) access
with the same ``postgresql+psycopg://`` URL.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def create_engine(database_url: str, **kwargs: object) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    The service writes one row per daily plan, so the pool stays small:

    - **pool_size=2** / **max_overflow=3**
    - **pool_pre_ping=True**: survive PG restarts and idle disconnects.
    - **pool_recycle=3600**: recycle connections hourly.

    All defaults can be overridden via *kwargs*.
    """
    defaults = {
        "echo": False,
        "pool_size": 2,
        "max_overflow": 3,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }
    defaults.update(kwargs)  # type: ignore[arg-type]
    return create_async_engine(database_url, **defaults)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to *engine*.

    ``expire_on_commit=False`` keeps returned rows usable after commit
    without implicit IO.
    """
    return async_sessionmaker(engine, expire_on_commit=False)
