"""
Database configuration and session management
Uses SQLAlchemy with async support
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.pool import NullPool, StaticPool
import logging

from .config import settings
from storefront.models import Base

logger = logging.getLogger(__name__)


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create async engine with parameters suited to the backend"""
    if url.startswith("sqlite"):
        # In-memory SQLite must share one connection across sessions
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            return create_async_engine(
                url,
                echo=echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        # SQLite doesn't support connection pooling parameters
        return create_async_engine(url, echo=echo, poolclass=NullPool)

    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,  # Verify connections before use
        poolclass=None if settings.ENVIRONMENT != "test" else NullPool,
    )


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = build_engine(settings.database_url_async, echo=settings.DATABASE_ECHO)

async def init_db(bind: AsyncEngine = engine) -> None:
    """Initialize database tables"""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")

async def close_db(bind: AsyncEngine = engine) -> None:
    """Close database connections"""
    await bind.dispose()
    logger.info("Database connections closed")
