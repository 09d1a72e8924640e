"""Database Connection and Session Management"""

import re
import ssl

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from typing import AsyncGenerator

from app.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def build_async_url(url: str) -> tuple[str, dict]:
    """
    Convert a postgresql:// URL to postgresql+asyncpg:// and translate sslmode.

    asyncpg takes ssl=SSLContext instead of sslmode, so sslmode is stripped from
    the URL and returned as connect_args.
    """
    database_url = url.replace("postgresql://", "postgresql+asyncpg://")
    connect_args = {}
    if re.search(r"[?&]sslmode=(require|required|verify-full)", database_url, re.I):
        ssl_ctx = ssl.create_default_context()
        ssl_ctx.check_hostname = False
        ssl_ctx.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ssl_ctx
    database_url = re.sub(r"[?&]sslmode=[^&]+", "", database_url, flags=re.I)
    database_url = re.sub(r"\?&", "?", database_url).rstrip("?")
    return database_url, connect_args


database_url, connect_args = build_async_url(settings.DATABASE_URL)

# pool_pre_ping detects stale connections after idle periods
engine = create_async_engine(
    database_url,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
    echo=settings.DEBUG,
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for declarative models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency yielding one session per request.

    The session is a unit of work: everything a request writes (an invoice and
    its school link, a collection and its invoice update) commits together or
    is rolled back together.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except HTTPException as exc:
            # Client errors such as 404
            logger.debug("Rolling back request transaction", extra={"status_code": exc.status_code})
            await session.rollback()
            raise
        except Exception:
            logger.warning("Rolling back request transaction")
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Initialize database tables (for development only)"""
    import app.models  # noqa: F401  registers every mapped table on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections"""
    await engine.dispose()
