# app/routers/crm/quotation_router.py

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from fastapi.concurrency import run_in_threadpool
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.models.enums.quotation_status import QuotationStatus
from app.schemas.crm.quotation_schemas import (
    QuotationCreate,
    QuotationUpdate,
    QuotationStatusUpdate,
    QuotationNumberCheck,
    QuotationNumberCheckOut,
    QuotationOut,
    QuotationListData,
    QuotationStats,
)
from app.services.crm.quotation_service import (
    create_quotation,
    get_quotation,
    list_quotations,
    get_quotation_stats,
    check_quotation_number,
    update_quotation,
    change_quotation_status,
    delete_quotation,
)
from app.utils.pdf_generators.quotation_pdf import render_quotation_pdf
from app.utils.get_actor import get_actor
from app.utils.id_params import uuid_path
from app.utils.response import APIResponse, success_response
from app.utils.logger import get_logger

router = APIRouter(prefix="/quotations", tags=["Quotations"])
logger = get_logger(__name__)


@router.post("/", response_model=APIResponse[QuotationOut])
async def create_quotation_api(
    payload: QuotationCreate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Create quotation", extra={"enquiry_id": payload.enquiry_id})
    quotation = await create_quotation(db, payload, actor)
    return success_response("Quotation created successfully", quotation)


@router.get("/", response_model=APIResponse[QuotationListData])
async def list_quotations_api(
    db: AsyncSession = Depends(get_db),

    status: Optional[QuotationStatus] = Query(None),
    enquiry_id: Optional[int] = Query(None),

    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    data = await list_quotations(
        db,
        status=status,
        enquiry_id=enquiry_id,
        page=page,
        page_size=page_size,
    )
    return success_response("Quotations fetched successfully", data)


@router.get("/stats", response_model=APIResponse[QuotationStats])
async def quotation_stats_api(db: AsyncSession = Depends(get_db)):
    stats = await get_quotation_stats(db)
    return success_response("Quotation stats fetched successfully", stats)


@router.post("/check-number", response_model=APIResponse[QuotationNumberCheckOut])
async def check_quotation_number_api(
    payload: QuotationNumberCheck,
    db: AsyncSession = Depends(get_db),
):
    data = await check_quotation_number(db, payload.quotation_number)
    return success_response("Quotation number checked", data)


@router.get("/{quotation_id}", response_model=APIResponse[QuotationOut])
async def get_quotation_api(
    quotation_id: str = Depends(uuid_path("quotation_id")),
    db: AsyncSession = Depends(get_db),
):
    quotation = await get_quotation(db, quotation_id)
    return success_response("Quotation fetched successfully", quotation)


@router.put("/{quotation_id}", response_model=APIResponse[QuotationOut])
async def update_quotation_api(
    payload: QuotationUpdate,
    quotation_id: str = Depends(uuid_path("quotation_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Update quotation", extra={"quotation_id": quotation_id})
    quotation = await update_quotation(db, quotation_id, payload, actor)
    return success_response("Quotation updated successfully", quotation)


@router.patch("/{quotation_id}/status", response_model=APIResponse[QuotationOut])
async def update_quotation_status_api(
    payload: QuotationStatusUpdate,
    quotation_id: str = Depends(uuid_path("quotation_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info(
        "Update quotation status",
        extra={"quotation_id": quotation_id, "status": payload.status.value},
    )
    quotation = await change_quotation_status(db, quotation_id, payload, actor)
    return success_response("Quotation status updated successfully", quotation)


@router.delete("/{quotation_id}", response_model=APIResponse[dict])
async def delete_quotation_api(
    quotation_id: str = Depends(uuid_path("quotation_id")),
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    logger.info("Delete quotation", extra={"quotation_id": quotation_id})
    data = await delete_quotation(db, quotation_id, actor)
    return success_response("Quotation deleted successfully", data)


@router.get("/{quotation_id}/pdf")
async def quotation_pdf_api(
    quotation_id: str = Depends(uuid_path("quotation_id")),
    db: AsyncSession = Depends(get_db),
):
    quotation = await get_quotation(db, quotation_id)
    file_path = await run_in_threadpool(render_quotation_pdf, quotation)

    logger.info(
        "Quotation PDF generated",
        extra={"quotation_id": quotation_id, "file_path": file_path},
    )
    return FileResponse(
        file_path,
        media_type="application/pdf",
        filename=f"quotation_{quotation.quotation_number}.pdf",
    )
