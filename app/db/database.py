"""
Database Connection and Session Management.
Uses SQLAlchemy with async SQLite.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from app.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Create declarative base
Base = declarative_base()

# Database engine (will be initialized on startup)
_engine = None
_async_session_factory = None


async def init_db(database_url: Optional[str] = None):
    """Initialize the database connection and create tables."""
    global _engine, _async_session_factory

    database_url = database_url or settings.DATABASE_URL
    url = make_url(database_url)

    engine_kwargs = {"echo": settings.DATABASE_ECHO}
    if url.get_backend_name() == "sqlite":
        # Ensure data directory exists for file databases
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        engine_kwargs["poolclass"] = StaticPool

    _engine = create_async_engine(database_url, **engine_kwargs)

    _async_session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False
    )

    # Import models to register them with Base
    from app.db import models  # noqa

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"Database initialized: {database_url}")


async def close_db():
    """Close database connections."""
    global _engine, _async_session_factory

    if _engine:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        logger.info("Database connections closed")


@asynccontextmanager
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session."""
    if not _async_session_factory:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    session = _async_session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
