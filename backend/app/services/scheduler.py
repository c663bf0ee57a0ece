"""Background task scheduler: expires stale tenant invites.

Uses FastAPI's lifespan context to start/stop an asyncio background loop
that marks `pending` invites past their `expires_at` as `expired`.

Usage:
    In main.py:

        from app.services.scheduler import lifespan
        app = FastAPI(lifespan=lifespan, ...)

Configuration:
    INVITE_SWEEP_INTERVAL_MINUTES=60   (0 disables the loop, via .env)
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import settings
from app.database import async_session
from app.services.invites import expire_invites
from app.utils.cache import close_redis

logger = logging.getLogger(__name__)


async def run_invite_sweep() -> int:
    """Expire overdue invites in one transaction. Returns the count."""
    async with async_session() as db:
        try:
            count = await expire_invites(db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
    if count:
        logger.info(f"Expired {count} tenant invite(s)")
    return count


async def _scheduler_loop(interval_seconds: float) -> None:
    while True:
        try:
            await run_invite_sweep()
        except Exception:
            logger.exception("Unhandled error in invite sweep")
        await asyncio.sleep(interval_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan: start the sweep on startup, cancel it and close Redis on shutdown."""
    task = None
    if settings.invite_sweep_interval_minutes > 0:
        task = asyncio.create_task(_scheduler_loop(settings.invite_sweep_interval_minutes * 60))
        logger.info("Invite expiry scheduler started")
    try:
        yield
    finally:
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            logger.info("Invite expiry scheduler stopped")
        await close_redis()
