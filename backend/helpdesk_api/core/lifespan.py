import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from ..db.database import Base, dispose_engine, get_async_db_context, wait_for_database
from ..db import models  # noqa: F401 - registers the tables on Base.metadata
from ..services.extension_token_service import ExtensionTokenService
from ..services.sql_stores import SqlExtensionTokenStore, SqlUserDirectory
from ..config import settings


scheduler = AsyncIOScheduler()
logger = logging.getLogger(__name__)

for _logger_name in (
    "apscheduler.executors.default",
    "apscheduler.scheduler",
    "apscheduler.jobstores.default",
):
    logging.getLogger(_logger_name).setLevel(logging.WARNING)


async def purge_expired_extension_tokens():
    """Delete extension tokens whose expiry has passed."""
    try:
        async with get_async_db_context() as db:
            service = ExtensionTokenService(SqlExtensionTokenStore(db), SqlUserDirectory(db))
            count = await service.purge_expired()
            logger.info("Extension token purge completed: %d expired tokens deleted", count)
    except Exception as e:
        logger.error("Error during extension token purge: %s", e, exc_info=True)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifecycle including startup and shutdown events."""
    logger.info("Starting application...")

    try:
        engine = await wait_for_database()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created/verified")

        scheduler.add_job(
            purge_expired_extension_tokens,
            "interval",
            hours=settings.EXTENSION_TOKEN_PURGE_INTERVAL_HOURS,
            id="purge_expired_extension_tokens",
            replace_existing=True
        )
        scheduler.start()
        logger.info("Scheduler started with extension token purge job")

        yield
    except Exception as e:
        logger.error("Error during startup: %s", e, exc_info=True)
        raise
    finally:
        logger.info("Shutting down application...")
        if scheduler.running:
            scheduler.shutdown()
            logger.info("Scheduler stopped.")
        await dispose_engine()
        logger.info("Application shutdown complete.")
