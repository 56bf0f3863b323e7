# app/services/support/activity_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc, asc

from app.models.support.activity_models import ActivityLog
from app.schemas.support.activity_schemas import (
    ActivityOut,
    ActivityFilters,
    ActivityListData,
)
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_SORT_FIELDS = {
    "created_at": ActivityLog.created_at,
    "actor": ActivityLog.actor_snapshot,
    "code": ActivityLog.code,
}


def _conditions(filters: ActivityFilters) -> list:
    conditions = []
    if filters.actor:
        conditions.append(ActivityLog.actor_snapshot.ilike(f"%{filters.actor}%"))
    if filters.code:
        conditions.append(ActivityLog.code == filters.code.value)
    if filters.search:
        conditions.append(ActivityLog.message.ilike(f"%{filters.search}%"))
    if filters.created_from:
        conditions.append(ActivityLog.created_at >= filters.created_from)
    if filters.created_to:
        conditions.append(ActivityLog.created_at <= filters.created_to)
    return conditions


async def list_activities(
    *,
    db: AsyncSession,
    filters: ActivityFilters,
) -> ActivityListData:
    """Audit log page, newest first unless asked otherwise. The log is read-only."""
    sort_column = ALLOWED_SORT_FIELDS.get(filters.sort_by)
    if sort_column is None:
        raise AppException(
            400,
            "Invalid sort field",
            ErrorCode.VALIDATION_ERROR,
            details={"allowed": sorted(ALLOWED_SORT_FIELDS)},
        )

    conditions = _conditions(filters)
    order_fn = desc if filters.sort_order == "desc" else asc

    total = await db.scalar(
        select(func.count(ActivityLog.id)).where(*conditions)
    )
    result = await db.execute(
        select(ActivityLog)
        .where(*conditions)
        # id breaks ties between rows written in the same second
        .order_by(order_fn(sort_column), order_fn(ActivityLog.id))
        .offset((filters.page - 1) * filters.page_size)
        .limit(filters.page_size)
    )
    activities = result.scalars().all()

    logger.info(
        "Activities fetched",
        extra={"total": total, "page": filters.page, "page_size": filters.page_size},
    )

    return ActivityListData(
        total=total or 0,
        page=filters.page,
        page_size=filters.page_size,
        items=[ActivityOut.model_validate(a) for a in activities],
    )
