"""Celery tasks."""

import asyncio
import logging
from datetime import timedelta

from llmsgen.config import get_settings
from llmsgen.database import build_engine, build_session_maker
from llmsgen.repositories import PostgresRunRepository
from llmsgen.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


async def delete_expired_runs(database_url: str, ttl_hours: int = 24) -> int:
    """Delete expired runs using a short-lived engine.

    Each task invocation runs in its own event loop, so the engine cannot be
    shared with other invocations.
    """
    engine = build_engine(database_url)
    try:
        session_maker = build_session_maker(engine)
        async with session_maker() as session:
            runs = PostgresRunRepository(session, ttl=timedelta(hours=ttl_hours))
            deleted = await runs.delete_expired()
            await session.commit()
            return deleted
    finally:
        await engine.dispose()


@celery_app.task(soft_time_limit=120, time_limit=150)
def sweep_expired_runs() -> dict:
    """Periodic sweep removing runs past their expiry, paid or not."""
    settings = get_settings()
    deleted = asyncio.run(delete_expired_runs(settings.database_url, settings.run_ttl_hours))
    logger.info(f"Expiry sweep removed {deleted} runs")
    return {"deleted": deleted}
