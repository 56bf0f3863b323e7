from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.core.config import KEEPALIVE_HOUR
from app.core.db import AsyncSessionLocal
from app.services.support.keepalive_service import ping_database
from app.utils.logger import get_logger

logger = get_logger(__name__)

scheduler = AsyncIOScheduler(job_defaults={"coalesce": True, "max_instances": 1})


@scheduler.scheduled_job("cron", id="db_keepalive", hour=KEEPALIVE_HOUR, minute=0)
async def keepalive_job():
    async with AsyncSessionLocal() as db:
        try:
            await ping_database(db)
        except Exception:
            # A missed ping is retried at the next run; the app keeps serving
            logger.exception("Database keep-alive failed")
