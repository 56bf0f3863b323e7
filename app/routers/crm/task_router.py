# app/routers/crm/task_router.py

from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.crm.task_schemas import TaskOut, TaskType
from app.schemas.crm.communication_schemas import CommunicationOut, CommunicationReschedule
from app.services.crm.task_service import get_upcoming_tasks
from app.services.crm.communication_service import reschedule_communication
from app.utils.get_actor import get_actor
from app.utils.id_params import uuid_path
from app.utils.response import APIResponse, success_response
from app.utils.logger import get_logger

router = APIRouter(prefix="/tasks", tags=["Tasks"])
logger = get_logger(__name__)


@router.get("/upcoming", response_model=APIResponse[List[TaskOut]])
async def upcoming_tasks_api(
    db: AsyncSession = Depends(get_db),
    type: Optional[TaskType] = Query(None),
):
    tasks = await get_upcoming_tasks(db, type=type)
    return success_response("Tasks fetched successfully", tasks)


@router.patch(
    "/communications/{communication_id}/reschedule",
    response_model=APIResponse[CommunicationOut],
)
async def reschedule_communication_api(
    payload: CommunicationReschedule,
    communication_id: str = Depends(uuid_path("communication_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info(
        "Reschedule communication",
        extra={"communication_id": communication_id},
    )
    communication = await reschedule_communication(db, communication_id, payload, actor)
    return success_response("Communication rescheduled successfully", communication)
