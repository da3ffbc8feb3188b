"""
Async engine and session handling.

Building the engine and opening a session do no I/O; connections are only
checked out on the first statement. The startup reachability check with
retries lives in ``wait_for_database`` and runs once from the lifespan.
"""
import asyncio
import logging
from typing import AsyncGenerator, Optional
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
from sqlalchemy.pool import NullPool
from sqlalchemy.exc import SQLAlchemyError
from ..config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class _DBState:
    def __init__(self) -> None:
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None


state = _DBState()


def _build_engine(url: str) -> AsyncEngine:
    if url.startswith("sqlite"):
        if not url.startswith("sqlite+aiosqlite://"):
            url = url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return create_async_engine(
            url,
            poolclass=NullPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(
        url,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        connect_args={"connect_timeout": settings.DB_CONNECT_TIMEOUT},
    )


def get_engine() -> AsyncEngine:
    """Return the process-wide engine, building it from DATABASE_URL on first use."""
    if state.engine is None:
        state.engine = _build_engine(settings.DATABASE_URL)
        state.session_factory = async_sessionmaker(
            state.engine,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("Database engine created for dialect %s", state.engine.dialect.name)
    return state.engine


def get_session_factory() -> async_sessionmaker:
    get_engine()
    return state.session_factory


async def wait_for_database(max_retries: int = 5, wait_seconds: float = 2) -> AsyncEngine:
    """Ping the backend until it answers, e.g. while a managed instance wakes up."""
    engine = get_engine()
    last_exc: Optional[Exception] = None
    for attempt in range(1, max_retries + 1):
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Database reachable on attempt %d", attempt)
            return engine
        except SQLAlchemyError as e:
            last_exc = e
            logger.warning("Database ping %d/%d failed: %s", attempt, max_retries, e)
            if attempt < max_retries:
                await asyncio.sleep(wait_seconds)
    raise last_exc


async def dispose_engine() -> None:
    if state.engine is not None:
        await state.engine.dispose()
    state.engine = None
    state.session_factory = None


# FastAPI dependency
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    session = get_session_factory()()
    try:
        yield session
    finally:
        await session.close()


@asynccontextmanager
async def get_async_db_context():
    session = get_session_factory()()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
