"""
Interior Tracker - Database Configuration
Async SQLAlchemy setup for the local provider (SQLite by default, PostgreSQL works too)
"""
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from interior_tracker.config import get_settings

settings = get_settings()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with settings appropriate to the database type."""
    if "sqlite" in database_url:
        # SQLite: local development and tests only (limited concurrency)
        return create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False}
        )

    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=300,
    )


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.database_url, echo=settings.debug)

# Session factory
async_session_maker = build_session_maker(engine)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


async def init_db(bind: AsyncEngine = engine):
    """Initialize database tables."""
    # Register every model on Base.metadata before creating tables
    from interior_tracker import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
