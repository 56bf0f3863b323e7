# app/routers/crm/enquiry_router.py

from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.models.enums.enquiry_status import EnquiryStatus
from app.schemas.crm.enquiry_schemas import (
    EnquiryCreate,
    EnquiryUpdate,
    EnquiryStatusUpdate,
    EnquiryOut,
    EnquiryListData,
    EnquiryStats,
)
from app.services.crm.enquiry_service import (
    create_enquiry,
    get_enquiry,
    list_enquiries,
    get_enquiry_stats,
    update_enquiry,
    change_enquiry_status,
    delete_enquiry,
)
from app.utils.get_actor import get_actor
from app.utils.id_params import uuid_query
from app.utils.response import APIResponse, success_response
from app.utils.logger import get_logger

router = APIRouter(prefix="/enquiries", tags=["Enquiries"])
logger = get_logger(__name__)


@router.post("/", response_model=APIResponse[EnquiryOut])
async def create_enquiry_api(
    payload: EnquiryCreate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Create enquiry", extra={"company_id": payload.company_id})
    enquiry = await create_enquiry(db, payload, actor)
    return success_response("Enquiry created successfully", enquiry)


@router.get("/", response_model=APIResponse[EnquiryListData])
async def list_enquiries_api(
    db: AsyncSession = Depends(get_db),

    status: Optional[EnquiryStatus] = Query(None),
    company_id: Optional[str] = Depends(uuid_query("company_id")),
    search: Optional[str] = Query(None),

    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    data = await list_enquiries(
        db,
        status=status,
        company_id=company_id,
        search=search,
        page=page,
        page_size=page_size,
    )
    return success_response("Enquiries fetched successfully", data)


@router.get("/stats", response_model=APIResponse[EnquiryStats])
async def enquiry_stats_api(db: AsyncSession = Depends(get_db)):
    stats = await get_enquiry_stats(db)
    return success_response("Enquiry stats fetched successfully", stats)


@router.get("/{enquiry_id}", response_model=APIResponse[EnquiryOut])
async def get_enquiry_api(
    enquiry_id: int,
    db: AsyncSession = Depends(get_db),
):
    enquiry = await get_enquiry(db, enquiry_id)
    return success_response("Enquiry fetched successfully", enquiry)


@router.patch("/{enquiry_id}", response_model=APIResponse[EnquiryOut])
async def update_enquiry_api(
    enquiry_id: int,
    payload: EnquiryUpdate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Update enquiry", extra={"enquiry_id": enquiry_id})
    enquiry = await update_enquiry(db, enquiry_id, payload, actor)
    return success_response("Enquiry updated successfully", enquiry)


@router.patch("/{enquiry_id}/status", response_model=APIResponse[EnquiryOut])
async def update_enquiry_status_api(
    enquiry_id: int,
    payload: EnquiryStatusUpdate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info(
        "Update enquiry status",
        extra={"enquiry_id": enquiry_id, "status": payload.status.value},
    )
    enquiry = await change_enquiry_status(db, enquiry_id, payload, actor)
    return success_response("Enquiry status updated successfully", enquiry)


@router.delete("/{enquiry_id}", response_model=APIResponse[dict])
async def delete_enquiry_api(
    enquiry_id: int,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Delete enquiry", extra={"enquiry_id": enquiry_id})
    data = await delete_enquiry(db, enquiry_id, actor)
    return success_response("Enquiry deleted successfully", data)
