# app/routers/crm/communication_router.py

from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.models.enums.communication_type import CommunicationType
from app.schemas.crm.communication_schemas import (
    CommunicationCreate,
    CommunicationUpdate,
    CommunicationOut,
    CommunicationListData,
)
from app.services.crm.communication_service import (
    create_communication,
    get_communication,
    list_communications,
    list_upcoming,
    update_communication,
    delete_communication,
)
from app.utils.get_actor import get_actor
from app.utils.id_params import uuid_path, uuid_query
from app.utils.response import APIResponse, success_response
from app.utils.logger import get_logger

router = APIRouter(prefix="/communications", tags=["Communications"])
logger = get_logger(__name__)


@router.post("/", response_model=APIResponse[CommunicationOut])
async def create_communication_api(
    payload: CommunicationCreate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info(
        "Log communication",
        extra={"company_id": payload.company_id, "type": payload.type.value},
    )
    communication = await create_communication(db, payload, actor)
    return success_response("Communication created successfully", communication)


@router.get("/", response_model=APIResponse[CommunicationListData])
async def list_communications_api(
    db: AsyncSession = Depends(get_db),

    company_id: Optional[str] = Depends(uuid_query("company_id")),
    type: Optional[CommunicationType] = Query(None),
    enquiry_id: Optional[int] = Query(None),

    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    data = await list_communications(
        db,
        company_id=company_id,
        type=type,
        enquiry_id=enquiry_id,
        page=page,
        page_size=page_size,
    )
    return success_response("Communications fetched successfully", data)


@router.get("/upcoming", response_model=APIResponse[List[CommunicationOut]])
async def upcoming_communications_api(
    db: AsyncSession = Depends(get_db),
    limit: int = Query(10, ge=1, le=100),
):
    data = await list_upcoming(db, limit=limit)
    return success_response("Upcoming communications fetched successfully", data)


@router.get("/{communication_id}", response_model=APIResponse[CommunicationOut])
async def get_communication_api(
    communication_id: str = Depends(uuid_path("communication_id")),
    db: AsyncSession = Depends(get_db),
):
    communication = await get_communication(db, communication_id)
    return success_response("Communication fetched successfully", communication)


@router.patch("/{communication_id}", response_model=APIResponse[CommunicationOut])
async def update_communication_api(
    payload: CommunicationUpdate,
    communication_id: str = Depends(uuid_path("communication_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    communication = await update_communication(db, communication_id, payload, actor)
    return success_response("Communication updated successfully", communication)


@router.delete("/{communication_id}", response_model=APIResponse[dict])
async def delete_communication_api(
    communication_id: str = Depends(uuid_path("communication_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Delete communication", extra={"communication_id": communication_id})
    data = await delete_communication(db, communication_id, actor)
    return success_response("Communication deleted successfully", data)
