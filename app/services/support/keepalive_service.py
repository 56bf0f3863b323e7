# app/services/support/keepalive_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.models.crm.company_models import Company
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def ping_database(db: AsyncSession) -> bool:
    """Cheap read so hosted databases that pause when idle stay awake."""
    await db.scalar(select(Company.id).limit(1))
    logger.info("Database keep-alive ping")
    return True
