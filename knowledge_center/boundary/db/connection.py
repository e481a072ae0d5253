"""
Database connection management.

Provides async SQLAlchemy engine and session factory. Services receive the
session factory through their constructors and open one session per unit of work.

Dependencies: sqlalchemy, asyncpg, knowledge_center.configs
System role: Database connection lifecycle management
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from knowledge_center.boundary.db.base import Base
from knowledge_center.configs import DatabaseSettings, get_settings

logger = logging.getLogger(__name__)


def get_async_engine(db_config: DatabaseSettings | None = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    pool_pre_ping=True verifies connections before use to detect
    stale/broken connections early.

    Args:
        db_config: Database settings (uses application settings if None)

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Usage:
        engine = get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    db_config = db_config or get_settings().database

    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create async session factory for database operations.

    autocommit=False and autoflush=False give explicit transaction control;
    expire_on_commit=False keeps loaded rows usable after commit.

    Args:
        engine: Async engine to bind sessions to

    Returns:
        async_sessionmaker: Async session factory

    Usage:
        SessionFactory = get_async_session_factory(engine)
        async with SessionFactory() as session:
            session.add(obj)
            await session.commit()
    """
    return async_sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


async def create_all_tables(engine: AsyncEngine) -> None:
    """
    Create all tables registered on Base.metadata.

    On PostgreSQL the pgvector extension is enabled first so the chunk
    embedding column can be created. Idempotent.

    Args:
        engine: Async engine to create tables on
    """
    # Import models so they register with Base.metadata
    from knowledge_center.boundary.db.models import ChunkModel, DocumentModel  # noqa: F401

    async with engine.begin() as conn:
        if conn.dialect.name == "postgresql":
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"{__name__}:create_all_tables - Tables created")


async def drop_all_tables(engine: AsyncEngine) -> None:
    """
    Drop all tables registered on Base.metadata.

    WARNING: Irreversible data loss. Only use in development environments.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    logger.info(f"{__name__}:drop_all_tables - Tables dropped")
